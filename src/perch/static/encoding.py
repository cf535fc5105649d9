"""Content-coding negotiation between a resource and its ``.gz`` sibling.

Only pre-compressed siblings are served; nothing is compressed on the fly.
The media type always comes from the original filename, so
``app.js.gz`` is still served as JavaScript.
"""

from __future__ import annotations

import mimetypes
from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING

from perch.static.loader import ResourceMetadata

if TYPE_CHECKING:
    from perch.config import MountConfig
    from perch.static.paths import ResolvedPath

GZIP_SUFFIX = ".gz"
DEFAULT_MEDIA_TYPE = "application/octet-stream"

# Media types for files that are themselves compressed, keyed by mimetypes encoding
_COMPRESSED_MEDIA_TYPES = {
    "gzip": "application/gzip",
    "bzip2": "application/x-bzip2",
    "xz": "application/x-xz",
    "br": "application/x-brotli",
    "compress": "application/x-compress",
}

# Looks up metadata for one path (the service binds loader + worker pool)
type StatFn = Callable[[ResolvedPath], Awaitable[ResourceMetadata]]


class Encoding(StrEnum):
    """Content codings a variant can carry."""

    IDENTITY = "identity"
    GZIP = "gzip"


@dataclass(frozen=True, slots=True)
class Variant:
    """One concrete representation chosen for a request."""

    encoding: Encoding
    path: ResolvedPath
    metadata: ResourceMetadata
    media_type: str

    @property
    def content_encoding(self) -> str | None:
        """Value for the ``Content-Encoding`` header, or None for identity."""
        if self.encoding is Encoding.IDENTITY:
            return None
        return self.encoding.value


def media_type_for(path: ResolvedPath) -> str:
    """Guess the media type from the last path segment.

    A compressed file requested by its own name (``site.css.gz``) is served
    as the archive it is, not as the type it would unpack to.
    """
    media_type, encoding = mimetypes.guess_type(path.filename, strict=False)
    if encoding is not None:
        return _COMPRESSED_MEDIA_TYPES.get(encoding, DEFAULT_MEDIA_TYPE)
    return media_type or DEFAULT_MEDIA_TYPE


def parse_accept_encoding(value: str | None) -> dict[str, float]:
    """Parse an ``Accept-Encoding`` value into ``{coding: qvalue}``.

    Codings are lowercased. A coding with an unparseable ``q`` is
    dropped. When a coding repeats, the last weight wins.

    >>> parse_accept_encoding("gzip;q=0.8, br, *;q=0")
    {'gzip': 0.8, 'br': 1.0, '*': 0.0}
    """
    codings: dict[str, float] = {}
    if not value:
        return codings
    for item in value.split(","):
        token, _, params = item.partition(";")
        coding = token.strip().lower()
        if not coding:
            continue
        quality = 1.0
        for param in params.split(";"):
            name, _, raw = param.partition("=")
            if name.strip().lower() != "q":
                continue
            try:
                quality = float(raw.strip())
            except ValueError:
                quality = -1.0
            break
        if not 0.0 <= quality <= 1.0:
            continue
        codings[coding] = quality
    return codings


def accepts_gzip(codings: Mapping[str, float]) -> bool:
    """True if the client will take a gzip-coded body.

    ``gzip`` and its alias ``x-gzip`` count as one coding with the higher
    of their weights; ``*`` applies only when neither is named.
    """
    named = [codings[name] for name in ("gzip", "x-gzip") if name in codings]
    if named:
        return max(named) > 0
    return codings.get("*", 0.0) > 0


async def negotiate(
    path: ResolvedPath,
    codings: Mapping[str, float],
    config: MountConfig,
    stat: StatFn,
) -> Variant:
    """Pick the gzip sibling or the identity resource for *path*.

    The sibling is only probed when the mount prefers gzip and the client
    accepts it. A sibling that is missing or a directory falls back to
    the identity resource, which is returned even when it doesn't exist;
    the assembler turns that into a 404.
    """
    media_type = media_type_for(path)

    if config.prefer_gzip and accepts_gzip(codings):
        sibling = path.with_suffix(GZIP_SUFFIX)
        meta = await stat(sibling)
        if meta.is_file:
            return Variant(Encoding.GZIP, sibling, meta, media_type)

    meta = await stat(path)
    return Variant(Encoding.IDENTITY, path, meta, media_type)
