"""opmatch.http — HTTP request domain.

Provides the HttpRequest context, a table-driven operation parser,
and a WSGI middleware that counts requests per operation.
"""

from opmatch.http._request import HttpRequest
from opmatch.http._table import (
    OperationRoute,
    OperationTable,
    PathType,
    template_to_pattern,
)
from opmatch.http._wsgi import ENVIRON_KEY, OperationStatsMiddleware

__all__ = [
    # Context
    "HttpRequest",
    # Table parser
    "OperationRoute",
    "OperationTable",
    "PathType",
    "template_to_pattern",
    # Middleware
    "OperationStatsMiddleware",
    "ENVIRON_KEY",
]
