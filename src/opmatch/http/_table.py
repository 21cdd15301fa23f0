"""Operation table — a table-driven RequestParser over HttpRequest.

Each OperationRoute pairs an operation id with a method and a path rule.
Routes are evaluated in order (first-match-wins), the same way a generated
per-API parser checks its known operations.

Path rules:
- Exact: literal path equality
- Template: Swagger-style ``/pets/{petId}``, one segment per parameter
- RegularExpression: RE2 pattern anchored to the whole path

Patterns compile at construction time via ``google-re2``, providing
guaranteed linear-time matching on untrusted paths.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Literal

import re2

from opmatch._joiner import ParserError

if TYPE_CHECKING:
    from opmatch._types import OperationId
    from opmatch.http._request import HttpRequest

logger = logging.getLogger(__name__)

type PathType = Literal["Exact", "Template", "RegularExpression"]

# One template parameter matches exactly one non-empty path segment.
_SEGMENT_PATTERN = "[^/]+"


def template_to_pattern(template: str) -> str:
    """Translate a ``{param}`` path template into an anchored RE2 pattern.

    Raises:
        ParserError: On unbalanced braces or an empty/invalid parameter name.
    """
    parts = ["^"]
    pos = 0
    while pos < len(template):
        open_ = template.find("{", pos)
        close = template.find("}", pos)
        if open_ == -1:
            if close != -1:
                msg = f"unbalanced '}}' at offset {close} in path template {template!r}"
                raise ParserError(msg)
            parts.append(re2.escape(template[pos:]))
            break
        if close == -1:
            msg = f"unclosed '{{' at offset {open_} in path template {template!r}"
            raise ParserError(msg)
        if close < open_:
            msg = f"unbalanced '}}' at offset {close} in path template {template!r}"
            raise ParserError(msg)

        name = template[open_ + 1 : close]
        if not name or "{" in name or "/" in name:
            msg = f"invalid parameter name {name!r} in path template {template!r}"
            raise ParserError(msg)

        if open_ > pos:
            parts.append(re2.escape(template[pos:open_]))
        parts.append(_SEGMENT_PATTERN)
        pos = close + 1
    parts.append("$")
    return "".join(parts)


@dataclass(frozen=True, slots=True)
class OperationRoute:
    """One known operation: method + path rule -> operation id.

    ``method=None`` accepts any method. Methods compare case-sensitively,
    as they do on the wire.
    ``method`` and ``path_type`` are keyword-only.

    Raises:
        ParserError: If the path rule does not compile.
    """

    operation_id: str
    path: str
    method: str | None = field(default=None, kw_only=True)
    path_type: PathType = field(default="Exact", kw_only=True)
    _compiled: re2.Pattern[str] | None = field(init=False, repr=False)

    def __post_init__(self) -> None:
        if not self.operation_id:
            msg = f"route for path {self.path!r} has an empty operation id"
            raise ParserError(msg)

        match self.path_type:
            case "Exact":
                compiled = None
            case "Template":
                compiled = _compile(template_to_pattern(self.path), self.path)
            case "RegularExpression":
                compiled = _compile(f"^(?:{self.path})$", self.path)
            case _:
                msg = f"unknown path type: {self.path_type!r}"
                raise ParserError(msg)
        object.__setattr__(self, "_compiled", compiled)

    def matches(self, request: HttpRequest) -> bool:
        if self.method is not None and request.method != self.method:
            return False
        if self._compiled is None:
            return request.path == self.path
        return self._compiled.search(request.path) is not None


@dataclass(frozen=True, slots=True)
class OperationTable:
    """A RequestParser[HttpRequest] over an ordered tuple of routes.

    INV: First-match-wins — routes after the first hit are never consulted.
    """

    routes: tuple[OperationRoute, ...]
    name: str = "operations"

    def parse_operation_id(self, request: HttpRequest, /) -> OperationId | None:
        for route in self.routes:
            if route.matches(request):
                return route.operation_id
        return None

    def operation_ids(self) -> tuple[str, ...]:
        """All operation ids in route order, without duplicates."""
        return tuple(dict.fromkeys(r.operation_id for r in self.routes))

    def __len__(self) -> int:
        return len(self.routes)


def _compile(pattern: str, source: str) -> re2.Pattern[str]:
    try:
        return re2.compile(pattern)
    except re2.error as e:
        msg = f'invalid path pattern "{source}": {e}'
        raise ParserError(msg) from e
