"""Immutable HTTP request.

Frozen metadata only. Resources are read-only, so perch never reads a
request body.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any
from urllib.parse import quote, unquote

from perch.http.headers import Headers


@dataclass(frozen=True, slots=True)
class Request:
    """An immutable HTTP request.

    ``path`` is the percent-decoded path the ASGI server hands over.
    ``raw_path`` is the same path before decoding; path resolution always
    works from it so each segment is decoded on its own.
    """

    method: str
    path: str
    raw_path: str
    headers: Headers
    query_string: bytes = b""
    http_version: str = "1.1"
    server: tuple[str, int] | None = None
    client: tuple[str, int] | None = None

    # -- Computed properties --

    @property
    def accept_encoding(self) -> str | None:
        """All ``Accept-Encoding`` values folded into one."""
        return self.headers.get_joined("accept-encoding")

    @property
    def if_modified_since(self) -> str | None:
        """The ``If-Modified-Since`` header value."""
        return self.headers.get("if-modified-since")

    @property
    def url(self) -> str:
        """Raw request target (path + query string)."""
        if self.query_string:
            return f"{self.raw_path}?{self.query_string.decode('latin-1')}"
        return self.raw_path

    # -- Transformations --

    def with_path(self, raw_path: str) -> Request:
        """Return a new Request for a different raw path.

        Used by path-translating middleware; the decoded ``path`` is kept
        in step with ``raw_path``.
        """
        return replace(self, raw_path=raw_path, path=unquote(raw_path))

    # -- Factory --

    @classmethod
    def from_asgi(cls, scope: dict[str, Any]) -> Request:
        """Create a Request from an ASGI HTTP scope."""
        path: str = scope["path"]
        raw = scope.get("raw_path")
        # raw_path is optional in ASGI; re-encoding keeps "%" and "/" meaningful
        raw_path = raw.decode("latin-1") if raw else quote(path, safe="/")
        if "?" in raw_path:
            raw_path = raw_path.split("?", 1)[0]
        server = scope.get("server")
        client = scope.get("client")
        return cls(
            method=scope["method"],
            path=path,
            raw_path=raw_path,
            headers=Headers(tuple(scope.get("headers", ()))),
            query_string=scope.get("query_string", b""),
            http_version=scope.get("http_version", "1.1"),
            server=tuple(server) if server else None,
            client=tuple(client) if client else None,
        )
