"""WSGI middleware that tags and counts requests by operation id.

The middleware sits in front of any WSGI app. It classifies each request
before the app sees it, records the result in an OperationStats, and
exposes the operation id (or None) under ``environ["opmatch.operation_id"]``.
It never alters the response.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from opmatch.http._request import HttpRequest

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable

    from opmatch.stats import OperationStats

logger = logging.getLogger(__name__)

ENVIRON_KEY = "opmatch.operation_id"

type WSGIApp = Callable[[dict[str, Any], Callable[..., Any]], Iterable[bytes]]


class OperationStatsMiddleware:
    """Wrap a WSGI app with per-operation request statistics."""

    def __init__(self, app: WSGIApp, stats: OperationStats[HttpRequest]) -> None:
        self.app = app
        self.stats = stats
        logger.debug("operation stats middleware installed around %r", app)

    def __call__(
        self, environ: dict[str, Any], start_response: Callable[..., Any]
    ) -> Iterable[bytes]:
        request = HttpRequest.from_wsgi_environ(environ)
        environ[ENVIRON_KEY] = self.stats.observe(request)
        return self.app(environ, start_response)
