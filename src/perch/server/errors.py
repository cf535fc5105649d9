"""Error handling for perch requests.

Maps HTTPError exceptions and unexpected failures to plain-text
responses. Storage faults are server faults: they become 500, never 404.
"""

import logging

from perch.errors import HTTPError, StorageError
from perch.http.request import Request
from perch.http.response import Response

logger = logging.getLogger("perch.server")


def handle_http_error(exc: HTTPError, request: Request, debug: bool) -> Response:
    """Map an HTTPError to a Response with the error's status and headers."""
    logger.debug("%d %s %s: %s", exc.status, request.method, request.raw_path, exc.detail)

    detail = exc.detail or f"Error {exc.status}"
    if debug and exc.detail:
        detail = f"{exc.status}: {exc.detail}"

    resp = Response(body=detail).with_status(exc.status)
    for name, value in exc.headers:
        resp = resp.with_header(name, value)
    return resp


def handle_internal_error(exc: Exception, request: Request, debug: bool) -> Response:
    """Handle unexpected exceptions (storage faults included) as 500 errors."""
    if isinstance(exc, StorageError):
        logger.error("500 %s %s: storage fault: %s", request.method, request.raw_path, exc)
    else:
        logger.exception("500 %s %s", request.method, request.raw_path)

    body = "Internal Server Error"
    if debug:
        body = f"Internal Server Error: {type(exc).__name__}: {exc}"
    return Response(body=body).with_status(500)
