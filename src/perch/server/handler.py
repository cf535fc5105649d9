"""ASGI handler: translates ASGI scope/messages to perch types.

The only component that touches raw ASGI directly. Converts the scope
into a typed Request, dispatches through the middleware chain, and sends
the response back through ASGI send().
"""

import logging
from collections.abc import Callable
from typing import Any

from perch._internal.asgi import Receive, Scope, Send
from perch._internal.pool import WorkerPool
from perch.errors import HTTPError, NotFound
from perch.http.request import Request
from perch.http.response import FileResponse
from perch.middleware.protocol import AnyResponse, Next
from perch.server.errors import handle_http_error, handle_internal_error
from perch.server.sender import DEFAULT_CHUNK_SIZE, send_file_response, send_response

logger = logging.getLogger("perch.server")


async def not_found(request: Request) -> AnyResponse:
    """Innermost handler: whatever no middleware answered is a 404."""
    raise NotFound


def build_chain(middleware: tuple[Callable[..., Any], ...], terminal: Next = not_found) -> Next:
    """Wrap *terminal* in *middleware*, first entry outermost."""
    handler = terminal
    for mw in reversed(middleware):
        outer = handler
        mw_ref = mw

        async def make_next(req: Request, _mw: Any = mw_ref, _next: Next = outer) -> AnyResponse:
            return await _mw(req, _next)

        handler = make_next
    return handler


async def handle_request(
    scope: Scope,
    receive: Receive,
    send: Send,
    *,
    handler: Next,
    debug: bool = False,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
    pool: WorkerPool | None = None,
) -> None:
    """Process a single HTTP request through the full pipeline.

    Nothing is sent until the pipeline has produced a final response, so
    a rejection or storage fault never follows a partial body.
    """
    if scope["type"] != "http":
        return

    request = Request.from_asgi(scope)

    try:
        response = await handler(request)
    except HTTPError as exc:
        response = handle_http_error(exc, request, debug)
    except Exception as exc:
        response = handle_internal_error(exc, request, debug)

    head = request.method == "HEAD"
    if isinstance(response, FileResponse):
        try:
            await send_file_response(
                response, send, head=head, chunk_size=chunk_size, pool=pool
            )
        except OSError:
            # Headers are already out; the server has to drop the connection
            logger.exception("Body read failed mid-stream: %s %s", request.method, request.raw_path)
            raise
    else:
        await send_response(response, send, head=head)
