"""Per-operation request statistics.

OperationStats classifies each observed request through a RequestParser and
counts it under its operation id. Requests that match no operation are
counted as unclassified; no-match is an expected outcome, not an error.
"""

from __future__ import annotations

import logging
import threading
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from opmatch._types import OperationId, RequestParser

logger = logging.getLogger(__name__)


class OperationStats[Req]:
    """Thread-safe request counters keyed by operation id.

    Only the counters are locked; classification runs outside the lock
    since parsers are stateless.
    """

    def __init__(self, parser: RequestParser[Req]) -> None:
        self.parser = parser
        self._lock = threading.Lock()
        self._counts: dict[str, int] = {}
        self._unclassified = 0

    def observe(self, request: Req) -> OperationId | None:
        """Classify and count one request, returning its operation id."""
        operation_id = self.parser.parse_operation_id(request)
        with self._lock:
            if operation_id is None:
                self._unclassified += 1
            else:
                self._counts[operation_id] = self._counts.get(operation_id, 0) + 1
        if operation_id is None:
            logger.debug("request matched no known operation: %r", request)
        return operation_id

    def count(self, operation_id: str) -> int:
        with self._lock:
            return self._counts.get(operation_id, 0)

    @property
    def unclassified(self) -> int:
        with self._lock:
            return self._unclassified

    @property
    def total(self) -> int:
        with self._lock:
            return sum(self._counts.values()) + self._unclassified

    def snapshot(self) -> dict[str, int]:
        """Copy of the per-operation counts (unclassified excluded)."""
        with self._lock:
            return dict(self._counts)

    def reset(self) -> None:
        with self._lock:
            self._counts.clear()
            self._unclassified = 0
        logger.debug("operation stats reset")
