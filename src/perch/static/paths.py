"""Request path resolution for resource mounts.

Turns a raw URL path into a ``ResolvedPath`` relative to the loader root,
or refuses it. Every check here is lexical: the filesystem is never asked
to canonicalize anything, so symlinks and on-disk layout cannot widen
what a mount exposes.

Resolution order:

1. Split the raw (undecoded) path on ``/`` and percent-decode each
   segment on its own, so ``%2e%2e`` or ``%2F`` can never join into a
   traversal after decoding.
2. Strip the mount prefix segment by segment. ``/test`` does not match
   ``/testDir/x``.
3. Refuse ``.``, ``..``, empty inner segments (``///etc/passwd``) and
   drive letters outright, even when the result would stay inside the root.
4. An empty remainder names the mount root itself, which is never served.
"""

from __future__ import annotations

import re
from collections.abc import Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING
from urllib.parse import unquote

from perch.errors import PerchError

if TYPE_CHECKING:
    from perch.config import MountConfig

# A "%" that does not start a two-digit hex escape
_BAD_ESCAPE = re.compile(r"%(?![0-9A-Fa-f]{2})")
_DRIVE = re.compile(r"^[A-Za-z]:$")
_DOT_SEGMENTS = frozenset({".", ".."})


class PathRejected(PerchError):
    """The path is malformed or tries to leave the mount root (400)."""

    def __init__(self, reason: str) -> None:
        self.reason = reason
        super().__init__(reason)


class PathNotMounted(PerchError):
    """The path is outside this mount's prefix (404)."""


class RootRequested(PerchError):
    """The path names the mount root itself (404, never a listing)."""


@dataclass(frozen=True, slots=True)
class ResolvedPath:
    """A path known to lie under the loader root.

    Segments are relative to the loader root and already include the
    mount's base path.
    """

    segments: tuple[str, ...]

    @property
    def name(self) -> str:
        """Posix-style relative name, e.g. ``css/site.css``."""
        return "/".join(self.segments)

    @property
    def filename(self) -> str:
        """The last segment; media types are derived from it."""
        return self.segments[-1]

    def with_suffix(self, suffix: str) -> ResolvedPath:
        """Sibling path with *suffix* appended to the last segment."""
        return ResolvedPath((*self.segments[:-1], self.filename + suffix))

    def __str__(self) -> str:
        return self.name


def decode_segments(raw_path: str) -> tuple[str, ...]:
    """Split *raw_path* into percent-decoded segments.

    The leading ``/`` and a single trailing ``/`` are dropped; any other
    empty segment is kept so the caller can refuse it. ``+`` stays a
    literal plus sign.

    Raises:
        PathRejected: On null bytes, malformed escapes, invalid UTF-8, or
            a segment that decodes to contain a separator.
    """
    if not raw_path.startswith("/"):
        raise PathRejected("path must be absolute")
    if "\x00" in raw_path:
        raise PathRejected("null byte in path")
    if _BAD_ESCAPE.search(raw_path):
        raise PathRejected("malformed percent-encoding")

    body = raw_path[1:]
    if body.endswith("/"):
        body = body[:-1]
    if not body:
        return ()

    segments: list[str] = []
    for raw in body.split("/"):
        try:
            segment = unquote(raw, errors="strict")
        except UnicodeDecodeError as exc:
            raise PathRejected("percent-encoding is not valid UTF-8") from exc
        if "\x00" in segment:
            raise PathRejected("null byte in path")
        if "/" in segment or "\\" in segment:
            raise PathRejected("encoded separator in path segment")
        segments.append(segment)
    return tuple(segments)


def strip_prefix(segments: Sequence[str], prefix: Sequence[str]) -> tuple[str, ...]:
    """Remove *prefix* from the front of *segments*, comparing whole segments.

    Raises:
        PathNotMounted: If any prefix segment differs, or the path is
            shorter than the prefix.
    """
    if len(segments) < len(prefix):
        raise PathNotMounted
    for want, got in zip(prefix, segments, strict=False):
        if want != got:
            raise PathNotMounted
    return tuple(segments[len(prefix) :])


def check_segments(segments: Sequence[str]) -> None:
    """Refuse any segment that could move the path or re-root it."""
    for segment in segments:
        if segment == "":
            raise PathRejected("empty segment (absolute path smuggling)")
        if segment in _DOT_SEGMENTS:
            raise PathRejected(f"traversal segment {segment!r}")
        if _DRIVE.match(segment):
            raise PathRejected("drive-qualified segment")


def resolve(raw_path: str, config: MountConfig) -> ResolvedPath:
    """Resolve *raw_path* against *config*.

    Raises:
        PathRejected: The request is malformed or tries to escape.
        PathNotMounted: The mount prefix does not apply.
        RootRequested: Nothing is left once the prefix is stripped.
    """
    segments = decode_segments(raw_path)
    remainder = strip_prefix(segments, config.path_prefix)
    check_segments(remainder)
    if not remainder:
        raise RootRequested
    return ResolvedPath((*config.base_path, *remainder))


def split_config_path(value: str | Sequence[str]) -> tuple[str, ...]:
    """Normalize a configured prefix or base path into segments.

    Accepts ``"/a/b"``, ``"a/b/"`` or ``("a", "b")``. ``"/"`` and ``""``
    mean no segments.

    Raises:
        ValueError: If any segment is empty, ``.``, ``..`` or carries a
            separator.
    """
    if isinstance(value, str):
        stripped = value.strip("/")
        parts: Sequence[str] = stripped.split("/") if stripped else ()
    else:
        parts = value
    for part in parts:
        if part == "" or part in _DOT_SEGMENTS:
            msg = f"segment {part!r} is not allowed"
            raise ValueError(msg)
        if "/" in part or "\\" in part or "\x00" in part:
            msg = f"segment {part!r} contains a separator"
            raise ValueError(msg)
    return tuple(parts)
