"""Tests for JoinedParser, join_parsers, and request_parser_joiner."""

from __future__ import annotations

import itertools
from concurrent.futures import ThreadPoolExecutor

import pytest

from opmatch import (
    JoinedParser,
    ParserError,
    RequestParser,
    first_match,
    join_parsers,
    request_parser_joiner,
)
from opmatch.http import HttpRequest, OperationTable
from opmatch.testing import CountingParser, PathParser


class StaticParser1:
    @staticmethod
    def parse_operation_id(request: HttpRequest) -> str | None:
        match request.path:
            case "/test/t11":
                return "t11"
            case "/test/t12":
                return "t12"
            case _:
                return None


class StaticParser2:
    @staticmethod
    def parse_operation_id(request: HttpRequest) -> str | None:
        match request.path:
            case "/test/t21":
                return "t21"
            case "/test/t22":
                return "t22"
            case _:
                return None


class ExplodingParser:
    def parse_operation_id(self, request: HttpRequest) -> str | None:
        msg = "parser failure"
        raise RuntimeError(msg)


def _uri(path: str) -> HttpRequest:
    return HttpRequest.from_uri("GET", f"https://www.example.org{path}")


class TestJoinedParser:
    def test_joined_scenario(self, parser_a: PathParser, parser_b: PathParser) -> None:
        joined = join_parsers(parser_a, parser_b)
        assert joined.parse_operation_id(_uri("/test/t11")) == "t11"
        assert joined.parse_operation_id(_uri("/test/t22")) == "t22"
        assert joined.parse_operation_id(_uri("/test/t33")) is None

    def test_is_a_request_parser(self, parser_a: PathParser) -> None:
        assert isinstance(join_parsers(parser_a), RequestParser)

    def test_single_constituent(self, parser_a: PathParser) -> None:
        joined = join_parsers(parser_a)
        assert len(joined) == 1
        assert joined.parse_operation_id(_uri("/test/t12")) == "t12"
        assert joined.parse_operation_id(_uri("/test/t21")) is None

    def test_total_no_match(self, parser_a: PathParser, parser_b: PathParser) -> None:
        joined = join_parsers(parser_a, parser_b, PathParser({}))
        assert joined.parse_operation_id(_uri("/nowhere")) is None

    def test_matches_manual_sequential_evaluation(
        self, parser_a: PathParser, parser_b: PathParser
    ) -> None:
        parsers = (parser_a, parser_b, PathParser({"/test/t11": "shadowed", "/x": "x"}))
        joined = JoinedParser(parsers)
        for path in ("/test/t11", "/test/t12", "/test/t21", "/test/t22", "/x", "/y"):
            request = _uri(path)
            expected = None
            for parser in parsers:
                expected = parser.parse_operation_id(request)
                if expected is not None:
                    break
            assert joined.parse_operation_id(request) == expected

    def test_frozen(self, parser_a: PathParser) -> None:
        joined = join_parsers(parser_a)
        with pytest.raises(AttributeError):
            joined.parsers = ()  # type: ignore[misc]


class TestShortCircuit:
    def test_later_parsers_not_invoked_after_hit(
        self, parser_a: PathParser, parser_b: PathParser
    ) -> None:
        first = CountingParser(parser_a)
        second = CountingParser(parser_b)
        joined = join_parsers(first, second)

        assert joined.parse_operation_id(_uri("/test/t11")) == "t11"
        assert first.calls == 1
        assert second.calls == 0

    def test_every_parser_invoked_once_on_miss(
        self, parser_a: PathParser, parser_b: PathParser
    ) -> None:
        counters = [CountingParser(parser_a), CountingParser(parser_b)]
        joined = join_parsers(*counters)

        assert joined.parse_operation_id(_uri("/test/t33")) is None
        assert [c.calls for c in counters] == [1, 1]

    def test_first_match_stops_at_first_hit(self, parser_a: PathParser) -> None:
        after = CountingParser(PathParser({}))
        assert first_match([parser_a, after], _uri("/test/t12")) == "t12"
        assert after.calls == 0

    def test_first_match_empty(self) -> None:
        assert first_match([], _uri("/test/t11")) is None


class TestPrecedence:
    def test_order_not_content_decides(self) -> None:
        m1 = PathParser({"/shared": "from_m1"})
        m2 = PathParser({"/shared": "from_m2"})
        request = _uri("/shared")

        assert join_parsers(m1, m2).parse_operation_id(request) == "from_m1"
        assert join_parsers(m2, m1).parse_operation_id(request) == "from_m2"

    @pytest.mark.parametrize("order", list(itertools.permutations(range(3))))
    def test_first_in_order_wins(self, order: tuple[int, ...]) -> None:
        parsers = [PathParser({"/shared": f"p{i}"}) for i in range(3)]
        joined = JoinedParser(tuple(parsers[i] for i in order))
        assert joined.parse_operation_id(_uri("/shared")) == f"p{order[0]}"


class TestStatelessParserTypes:
    def test_join_parser_types(self) -> None:
        joined = join_parsers(StaticParser1, StaticParser2)
        assert joined.parse_operation_id(_uri("/test/t11")) == "t11"
        assert joined.parse_operation_id(_uri("/test/t22")) == "t22"
        assert joined.parse_operation_id(_uri("/test/t33")) is None

    def test_mixed_types_and_instances(self, parser_b: PathParser) -> None:
        joined = join_parsers(StaticParser1, parser_b)
        assert joined.parse_operation_id(_uri("/test/t21")) == "t21"

    def test_request_parser_joiner_declares_type(self) -> None:
        JoinedReqParser = request_parser_joiner(  # noqa: N806
            "JoinedReqParser", StaticParser1, StaticParser2
        )
        assert isinstance(JoinedReqParser, type)
        assert JoinedReqParser.__name__ == "JoinedReqParser"
        assert JoinedReqParser.parsers == (StaticParser1, StaticParser2)

        assert JoinedReqParser.parse_operation_id(_uri("/test/t11")) == "t11"
        assert JoinedReqParser.parse_operation_id(_uri("/test/t22")) == "t22"
        assert JoinedReqParser.parse_operation_id(_uri("/test/t33")) is None

    def test_joined_type_nests_into_another_joiner(self) -> None:
        inner = request_parser_joiner("Inner", StaticParser1)
        outer = request_parser_joiner("Outer", inner, StaticParser2)
        assert outer.parse_operation_id(_uri("/test/t12")) == "t12"
        assert outer.parse_operation_id(_uri("/test/t21")) == "t21"

    def test_joiner_rejects_bad_type_name(self) -> None:
        with pytest.raises(ParserError, match="identifier"):
            request_parser_joiner("not a name", StaticParser1)


class TestNesting:
    def test_joined_parsers_nest(self, parser_a: PathParser, parser_b: PathParser) -> None:
        inner = join_parsers(parser_a)
        outer = join_parsers(inner, parser_b)
        assert outer.parse_operation_id(_uri("/test/t11")) == "t11"
        assert outer.parse_operation_id(_uri("/test/t22")) == "t22"
        assert outer.parse_operation_id(_uri("/test/t33")) is None


class TestValidation:
    def test_empty_raises_at_construction(self) -> None:
        with pytest.raises(ParserError, match="at least one"):
            join_parsers()

    def test_non_parser_constituent_raises(self, parser_a: PathParser) -> None:
        with pytest.raises(ParserError, match="constituent 1"):
            JoinedParser((parser_a, object()))  # type: ignore[arg-type]

    def test_parser_type_with_instance_method_raises(self) -> None:
        with pytest.raises(ParserError, match="instance method"):
            join_parsers(StaticParser1, PathParser)  # type: ignore[arg-type]

    def test_type_joiner_rejects_instance_method_type(self) -> None:
        with pytest.raises(ParserError, match="constituent 0 is the type OperationTable"):
            request_parser_joiner("Joined", OperationTable)  # type: ignore[arg-type]

    def test_parser_type_with_classmethod_accepted(self) -> None:
        class ClassParser:
            @classmethod
            def parse_operation_id(cls, request: HttpRequest) -> str | None:
                return "cls" if request.path == "/cls" else None

        joined = join_parsers(ClassParser)
        assert joined.parse_operation_id(_uri("/cls")) == "cls"

    def test_constituent_exception_propagates(self, parser_a: PathParser) -> None:
        joined = join_parsers(parser_a, ExplodingParser())
        assert joined.parse_operation_id(_uri("/test/t11")) == "t11"
        with pytest.raises(RuntimeError, match="parser failure"):
            joined.parse_operation_id(_uri("/test/t33"))


class TestConcurrency:
    def test_concurrent_calls_are_independent(
        self, parser_a: PathParser, parser_b: PathParser
    ) -> None:
        joined = join_parsers(parser_a, parser_b)
        paths = ["/test/t11", "/test/t22", "/test/t33", "/test/t12", "/test/t21"] * 200
        expected = [joined.parse_operation_id(_uri(p)) for p in paths]

        with ThreadPoolExecutor(max_workers=8) as pool:
            actual = list(pool.map(lambda p: joined.parse_operation_id(_uri(p)), paths))

        assert actual == expected
