"""Perch exception hierarchy.

Shared across the resource pipeline, the ASGI handler, and middleware so
every module raises and catches the same types.
"""

from dataclasses import dataclass


class PerchError(Exception):
    """Base for all perch-specific errors."""


class ConfigurationError(PerchError):
    """Raised when a mount or app configuration is invalid.

    Raised at construction time, never while serving.
    """


class StorageError(PerchError):
    """An underlying I/O failure that is not "resource absent".

    Permission errors and read failures end up here. The ASGI handler
    answers them with a 500; they are never reported as 404.
    """

    def __init__(self, path: str, message: str = "") -> None:
        self.path = path
        super().__init__(message or f"storage failure reading {path!r}")


@dataclass(frozen=True, slots=True)
class HTTPError(PerchError):
    """An error that maps directly to an HTTP status code.

    Raised by middleware or the terminal handler. The ASGI handler
    catches these and sends a plain-text response with the status.
    """

    status: int
    detail: str = ""
    headers: tuple[tuple[str, str], ...] = ()

    def __str__(self) -> str:
        if self.detail:
            return f"{self.status}: {self.detail}"
        return str(self.status)


class NotFound(HTTPError):  # noqa: N818
    """404: nothing is mounted at, or stored under, the request path."""

    def __init__(self, detail: str = "Not Found") -> None:
        super().__init__(status=404, detail=detail)

