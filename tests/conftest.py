"""Shared fixtures and the YAML fixture loader for opmatch tests.

Fixture files live in tests/fixtures/. Each YAML document declares one or
more operation tables, the order to join them in, and request cases with
their expected operation id (null for no match).
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any

import pytest
import yaml

from opmatch import (
    JoinedParser,
    ParserRegistryBuilder,
    load_operation_table,
    parse_joiner_config,
    parse_operation_table,
)
from opmatch.http import HttpRequest
from opmatch.testing import PathParser

FIXTURE_DIR = Path(__file__).resolve().parent / "fixtures"


@dataclass
class FixtureCase:
    """A single request case from a fixture document."""

    fixture_name: str
    case_name: str
    parser: JoinedParser[HttpRequest]
    request: HttpRequest
    expect: str | None


# ─── YAML → opmatch type conversion ─────────────────────────────────────────


def build_joined(doc: dict[str, Any]) -> JoinedParser[HttpRequest]:
    """Load every table in a fixture document and join them as declared."""
    builder: ParserRegistryBuilder[HttpRequest] = ParserRegistryBuilder()
    for name, table_spec in doc["tables"].items():
        builder.parser(name, load_operation_table(parse_operation_table(table_spec)))
    registry = builder.build()
    return registry.load_joined(parse_joiner_config({"parsers": doc["join"]}))


def parse_request(spec: dict[str, Any]) -> HttpRequest:
    """Parse a YAML request spec into an HttpRequest."""
    headers = {str(k): str(v) for k, v in spec.get("headers", {}).items()}
    return HttpRequest.from_uri(
        str(spec.get("method", "GET")),
        str(spec.get("uri", "/")),
        headers,
    )


# ─── Fixture loading ────────────────────────────────────────────────────────


def load_fixture_cases() -> list[FixtureCase]:
    """Load all fixture cases, in file then document order."""
    cases: list[FixtureCase] = []
    for yaml_file in sorted(FIXTURE_DIR.glob("*.yaml")):
        cases.extend(_load_file(yaml_file))
    return cases


def _load_file(path: Path) -> list[FixtureCase]:
    """Load a single fixture YAML file (may contain multiple documents)."""
    cases: list[FixtureCase] = []
    with path.open() as f:
        for doc in yaml.safe_load_all(f):
            if doc is None:
                continue
            parser = build_joined(doc)
            for case in doc["cases"]:
                cases.append(
                    FixtureCase(
                        fixture_name=doc["name"],
                        case_name=case["name"],
                        parser=parser,
                        request=parse_request(case["request"]),
                        expect=case["expect"],
                    )
                )
    return cases


def _case_id(case: FixtureCase) -> str:
    return f"{case.fixture_name}::{case.case_name}"


def pytest_generate_tests(metafunc: pytest.Metafunc) -> None:
    if "fixture_case" in metafunc.fixturenames:
        cases = load_fixture_cases()
        metafunc.parametrize("fixture_case", cases, ids=[_case_id(c) for c in cases])


# ─── Parsers for the joiner scenario ────────────────────────────────────────


@pytest.fixture
def parser_a() -> PathParser:
    return PathParser({"/test/t11": "t11", "/test/t12": "t12"})


@pytest.fixture
def parser_b() -> PathParser:
    return PathParser({"/test/t21": "t21", "/test/t22": "t22"})
