"""Response assembly — from negotiated variant to HTTP response.

``assemble`` folds the variant and freshness into an ``Outcome``;
``to_response`` renders any outcome as a ``Response`` or, for a 200, a
``FileResponse`` streaming the already-opened handle.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, BinaryIO

from perch.http.response import FileResponse, Response
from perch.static.conditional import Freshness, format_http_date
from perch.static.outcome import BadRequest, NotFound, NotModified, Ok, Outcome

if TYPE_CHECKING:
    from perch.config import MountConfig
    from perch.static.encoding import Variant


def assemble(variant: Variant, freshness: Freshness) -> Outcome:
    """Combine a negotiated variant with its freshness.

    Missing resources and directories are ``NotFound``; there are no
    index files and no listings.
    """
    meta = variant.metadata
    if not meta.exists:
        return NotFound(f"{variant.path} does not exist")
    if meta.is_directory:
        return NotFound(f"{variant.path} is a directory")
    if freshness is Freshness.FRESH:
        return NotModified(variant)
    return Ok(variant, variant.media_type)


def _representation_headers(variant: Variant, config: MountConfig) -> dict[str, str]:
    headers: dict[str, str] = {}
    if variant.metadata.last_modified is not None:
        headers["Last-Modified"] = format_http_date(variant.metadata.last_modified)
    if config.cache_control:
        headers["Cache-Control"] = config.cache_control
    if config.prefer_gzip:
        headers["Vary"] = "Accept-Encoding"
    return headers


def to_response(
    outcome: Outcome,
    config: MountConfig,
    *,
    source: BinaryIO | None = None,
) -> Response | FileResponse:
    """Render *outcome* as an HTTP response.

    An ``Ok`` outcome needs *source*, the opened handle for its variant.
    """
    match outcome:
        case Ok(variant=variant, media_type=media_type):
            if source is None:
                msg = "An Ok outcome needs an open source to stream"
                raise ValueError(msg)
            response = FileResponse(
                source=source,
                length=variant.metadata.length,
                content_type=media_type,
            ).with_headers(_representation_headers(variant, config))
            if variant.content_encoding is not None:
                response = response.with_header("Content-Encoding", variant.content_encoding)
            return response
        case NotModified(variant=variant):
            return Response(status=304).with_headers(_representation_headers(variant, config))
        case NotFound():
            return Response(body="Not Found", status=404)
        case BadRequest():
            return Response(body="Bad Request", status=400)
        case _:
            msg = f"Cannot render {type(outcome).__name__} as a response"
            raise TypeError(msg)
