"""Joiner — Compose several RequestParsers into one with first-match-wins.

Constituents are tried strictly in the order they were given:
- The first non-None operation id is returned immediately
- Later constituents are never consulted for that request
- None is returned only when every constituent returns None

Precedence is positional. The joiner does no deduplication and no
ambiguity detection: if two constituents can match the same request, the
earlier one wins silently. Keeping constituents mutually exclusive is the
caller's obligation.
"""

from __future__ import annotations

import inspect
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from opmatch._types import RequestParser

if TYPE_CHECKING:
    from collections.abc import Iterable

    from opmatch._types import OperationId

logger = logging.getLogger(__name__)


class ParserError(Exception):
    """Errors from parser construction and validation."""


def first_match[Req](
    parsers: Iterable[RequestParser[Req]], request: Req
) -> OperationId | None:
    """Evaluate parsers in order and return the first operation id found.

    INV: short-circuit — nothing after the first success is invoked.
    """
    for parser in parsers:
        operation_id = parser.parse_operation_id(request)
        if operation_id is not None:
            return operation_id
    return None


@dataclass(frozen=True, slots=True)
class JoinedParser[Req]:
    """A RequestParser built from an ordered, fixed tuple of parsers.

    Validation runs at construction time. An empty tuple, a constituent
    without ``parse_operation_id``, or a parser type whose
    ``parse_operation_id`` needs an instance raises ParserError.

    Holds nothing mutable, so one instance can serve any number of
    concurrent callers without synchronization.
    """

    parsers: tuple[RequestParser[Req], ...]

    def __post_init__(self) -> None:
        self.validate()

    def parse_operation_id(self, request: Req, /) -> OperationId | None:
        return first_match(self.parsers, request)

    def validate(self) -> None:
        """Check the constituent list.

        Raises:
            ParserError: If there are no constituents, one of them does
                not implement RequestParser, or a parser type would need an
                instance to call parse_operation_id.
        """
        if not self.parsers:
            msg = "a joined parser needs at least one constituent parser"
            raise ParserError(msg)
        for index, parser in enumerate(self.parsers):
            if not isinstance(parser, RequestParser):
                msg = (
                    f"constituent {index} ({_describe(parser)}) "
                    "does not implement parse_operation_id"
                )
                raise ParserError(msg)
            if isinstance(parser, type) and not _is_unbound_callable(parser):
                msg = (
                    f"constituent {index} is the type {parser.__name__}, whose "
                    "parse_operation_id is an instance method; pass an instance "
                    "or declare it as a staticmethod"
                )
                raise ParserError(msg)

    def __len__(self) -> int:
        return len(self.parsers)


def join_parsers[Req](*parsers: RequestParser[Req]) -> JoinedParser[Req]:
    """Join parsers into a single parser, evaluated in argument order.

    >>> from opmatch.http import HttpRequest
    >>> from opmatch.testing import PathParser
    >>> a = PathParser({"/test/t11": "t11"})
    >>> b = PathParser({"/test/t21": "t21"})
    >>> join_parsers(a, b).parse_operation_id(HttpRequest(raw_path="/test/t21"))
    't21'
    """
    joined = JoinedParser(parsers=tuple(parsers))
    if logger.isEnabledFor(logging.DEBUG):
        logger.debug(
            "joined %d parsers: %s",
            len(joined),
            ", ".join(_describe(p) for p in joined.parsers),
        )
    return joined


def request_parser_joiner[Req](name: str, *parsers: RequestParser[Req]) -> type:
    """Declare a new stateless parser type named ``name``.

    The returned class has a staticmethod ``parse_operation_id`` that runs
    the given parsers in order, so it can itself be passed (as a type) to
    another joiner:

        JoinedReqParser = request_parser_joiner("JoinedReqParser", Api1, Api2)
        JoinedReqParser.parse_operation_id(request)
    """
    if not name.isidentifier():
        msg = f"parser type name must be a valid identifier, got {name!r}"
        raise ParserError(msg)
    joined = join_parsers(*parsers)
    constituents = ", ".join(_describe(p) for p in joined.parsers)
    namespace: dict[str, Any] = {
        "__slots__": (),
        "__doc__": f"Joined request parser over: {constituents}.",
        "parsers": joined.parsers,
        "parse_operation_id": staticmethod(joined.parse_operation_id),
    }
    return type(name, (), namespace)


def _describe(parser: Any) -> str:
    if isinstance(parser, type):
        return parser.__name__
    return type(parser).__name__


def _is_unbound_callable(parser_type: type) -> bool:
    """A parser type is usable as-is only through a static or class method."""
    attr = inspect.getattr_static(parser_type, "parse_operation_id")
    return isinstance(attr, (staticmethod, classmethod))
