"""HttpRequest — Simple HTTP request context for operation parsing.

Holds method, path (without query string), headers (case-insensitive),
and query parameters (parsed from the raw path).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any
from urllib.parse import parse_qsl, urlsplit

if TYPE_CHECKING:
    from collections.abc import Mapping


@dataclass(frozen=True, slots=True)
class HttpRequest:
    """HTTP request context for operation parsing.

    The path should be provided as-is from the wire (may include query string).
    Query parameters are automatically parsed and the path is cleaned.

    Headers are stored with lowercased keys for case-insensitive lookup.
    """

    method: str = "GET"
    raw_path: str = "/"
    headers: dict[str, str] = field(default_factory=dict)

    # Computed fields — parsed from raw_path
    _clean_path: str = field(init=False, repr=False)
    _query_params: dict[str, str] = field(init=False, repr=False)
    _lower_headers: dict[str, str] = field(init=False, repr=False)

    def __post_init__(self) -> None:
        if "?" in self.raw_path:
            path, query_string = self.raw_path.split("?", 1)
            # Percent-decoded; a bare key maps to "" and the last repeat wins.
            params = dict(parse_qsl(query_string, keep_blank_values=True))
            object.__setattr__(self, "_clean_path", path or "/")
            object.__setattr__(self, "_query_params", params)
        else:
            object.__setattr__(self, "_clean_path", self.raw_path or "/")
            object.__setattr__(self, "_query_params", {})

        object.__setattr__(
            self,
            "_lower_headers",
            {k.lower(): v for k, v in self.headers.items()},
        )

    @classmethod
    def from_uri(
        cls,
        method: str,
        uri: str,
        headers: Mapping[str, str] | None = None,
    ) -> HttpRequest:
        """Build a request from an absolute or origin-form URI.

        Scheme and authority are dropped; only path and query are kept.
        """
        parts = urlsplit(uri)
        raw_path = parts.path or "/"
        if parts.query:
            raw_path = f"{raw_path}?{parts.query}"
        return cls(method=method, raw_path=raw_path, headers=dict(headers or {}))

    @classmethod
    def from_wsgi_environ(cls, environ: Mapping[str, Any]) -> HttpRequest:
        """Build a request from a WSGI environ (PEP 3333).

        PEP 3333 hands the path over as latin-1 decoded bytes; it is
        re-decoded as UTF-8 so non-ASCII paths compare like from_uri() ones.
        HTTP_* keys become headers, plus CONTENT_TYPE and CONTENT_LENGTH.
        """
        path = _wsgi_decode(
            f"{environ.get('SCRIPT_NAME', '')}{environ.get('PATH_INFO', '')}"
        )
        query = environ.get("QUERY_STRING", "")
        raw_path = f"{path or '/'}?{query}" if query else path or "/"

        headers: dict[str, str] = {}
        for key, value in environ.items():
            if key.startswith("HTTP_"):
                headers[key[5:].replace("_", "-").lower()] = str(value)
            elif key in ("CONTENT_TYPE", "CONTENT_LENGTH") and value:
                headers[key.replace("_", "-").lower()] = str(value)

        return cls(
            method=str(environ.get("REQUEST_METHOD", "GET")),
            raw_path=raw_path,
            headers=headers,
        )

    @property
    def path(self) -> str:
        """Path without query string."""
        return self._clean_path

    @property
    def query_params(self) -> dict[str, str]:
        """Parsed query parameters."""
        return self._query_params

    def header(self, name: str) -> str | None:
        """Get a header value by name (case-insensitive)."""
        return self._lower_headers.get(name.lower())

    def query_param(self, name: str) -> str | None:
        """Get a query parameter by name."""
        return self._query_params.get(name)


def _wsgi_decode(value: str) -> str:
    return value.encode("latin-1", "replace").decode("utf-8", "replace")
