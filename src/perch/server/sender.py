"""ASGI response sending: translates perch responses to ASGI messages.

Handles in-memory ``Response`` bodies and ``FileResponse`` bodies streamed
from an open handle.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import anyio

from perch._internal.pool import WorkerPool
from perch.http.response import FileResponse, Response

if TYPE_CHECKING:
    from perch._internal.asgi import Send

DEFAULT_CHUNK_SIZE = 64 * 1024


def _body_allowed(status: int) -> bool:
    """Whether an HTTP status code permits a response body."""
    # RFC: 1xx, 204, and 304 responses do not include a message body.
    return not (100 <= status < 200 or status in {204, 304})


def _raw_headers(
    content_type: str,
    headers: tuple[tuple[str, str], ...],
    *,
    status: int,
) -> list[tuple[bytes, bytes]]:
    raw: list[tuple[bytes, bytes]] = []
    if _body_allowed(status):
        raw.append((b"content-type", content_type.encode("latin-1")))
    for name, value in headers:
        raw.append((name.lower().encode("latin-1"), value.encode("latin-1")))
    return raw


async def send_response(response: Response, send: Send, *, head: bool = False) -> None:
    """Translate a Response into ASGI send() calls."""
    raw_headers = _raw_headers(response.content_type, response.headers, status=response.status)

    body = response.body_bytes if _body_allowed(response.status) else b""
    if _body_allowed(response.status):
        raw_headers.append((b"content-length", str(len(body)).encode("latin-1")))

    await send(
        {
            "type": "http.response.start",
            "status": response.status,
            "headers": raw_headers,
        }
    )
    await send(
        {
            "type": "http.response.body",
            "body": b"" if head else body,
        }
    )


async def send_file_response(
    response: FileResponse,
    send: Send,
    *,
    head: bool = False,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
    pool: WorkerPool | None = None,
) -> None:
    """Stream a FileResponse body from its open handle.

    Reads happen on the worker pool, one ``chunk_size`` block at a time,
    and stop after ``response.length`` bytes: a file that grew since it
    was stat-ed is cut at the announced ``Content-Length``.
    The handle is closed on every path out of this function. If the task
    is cancelled (client gone), the close still runs inside a shielded
    scope so the handle never leaks.
    """
    source = response.source
    pool = pool if pool is not None else WorkerPool()
    try:
        raw_headers = _raw_headers(response.content_type, response.headers, status=response.status)
        raw_headers.append((b"content-length", str(response.length).encode("latin-1")))
        await send(
            {
                "type": "http.response.start",
                "status": response.status,
                "headers": raw_headers,
            }
        )
        if head or not _body_allowed(response.status):
            await send({"type": "http.response.body", "body": b""})
            return

        remaining = response.length
        while remaining > 0:
            chunk = await pool.run(source.read, min(chunk_size, remaining))
            if not chunk:
                break
            remaining -= len(chunk)
            await send({"type": "http.response.body", "body": chunk, "more_body": True})
        await send({"type": "http.response.body", "body": b"", "more_body": False})
    finally:
        with anyio.CancelScope(shield=True):
            await pool.run(source.close)
