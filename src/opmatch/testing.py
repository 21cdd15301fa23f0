"""Test utilities for opmatch.

Provides small RequestParser implementations for use in tests and examples.
These are NOT real API parsers — they exist to reduce boilerplate when
exercising joiners and middleware.

For real APIs, implement RequestParser for your own request type or load
an OperationTable from config.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Mapping

    from opmatch._types import OperationId, RequestParser


@dataclass(frozen=True, slots=True)
class PathParser:
    """Map exact request paths to operation ids.

    Works with any request exposing a ``path`` attribute.

    >>> from opmatch.http import HttpRequest
    >>> p = PathParser({"/test/t11": "t11"})
    >>> p.parse_operation_id(HttpRequest(raw_path="/test/t11"))
    't11'
    """

    routes: Mapping[str, str]

    def __post_init__(self) -> None:
        object.__setattr__(self, "routes", MappingProxyType(dict(self.routes)))

    def parse_operation_id(self, request: Any, /) -> OperationId | None:
        return self.routes.get(request.path)


@dataclass(slots=True)
class CountingParser:
    """Wrap a parser and count how many times it is invoked."""

    inner: RequestParser[Any]
    calls: int = 0
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    def parse_operation_id(self, request: Any, /) -> OperationId | None:
        with self._lock:
            self.calls += 1
        return self.inner.parse_operation_id(request)
