"""Core protocol and type aliases for opmatch.

- OperationId is the stable string naming one API operation
- RequestParser is the classification port, implemented outside the core
  (generated from an API description, hand-written, or table-driven)
- None is the no-match signal: a unit sentinel with no diagnostic payload
"""

from __future__ import annotations

from typing import Protocol, TypeVar, runtime_checkable

# Identity is exact string equality; there is no further structure.
type OperationId = str

type ParseResult = OperationId | None

Req = TypeVar("Req", contravariant=True)


@runtime_checkable
class RequestParser(Protocol[Req]):
    """Retrieve the operation identifier that matches a request.

    Lets middleware outside the main request handling path (a statistics
    collector, say) classify requests per operation without depending on
    the routing code.

    Implementations borrow the request read-only, have no side effects and
    are safe to call concurrently. A class whose ``parse_operation_id`` is
    a staticmethod satisfies the protocol as well as an instance does.
    """

    def parse_operation_id(self, request: Req, /) -> OperationId | None:
        """Return the operation id for this request, or None if it matches
        no known operation."""
        ...
