"""Conditional GET: ``If-Modified-Since`` against a resource's mtime.

HTTP dates carry whole seconds, so the resource time is truncated before
comparing. A resource is fresh when it was not modified strictly after the
client's date.
"""

from __future__ import annotations

from datetime import UTC, datetime
from email.utils import format_datetime, parsedate_to_datetime
from enum import Enum

from perch.static.loader import ResourceMetadata


class Freshness(Enum):
    """Whether the client's cached copy can be reused."""

    FRESH = "fresh"
    STALE = "stale"


def parse_http_date(value: str | None) -> datetime | None:
    """Parse an HTTP-date into an aware UTC datetime, or None if invalid."""
    if not value:
        return None
    try:
        parsed = parsedate_to_datetime(value.strip())
    except (TypeError, ValueError, IndexError, OverflowError):
        return None
    if parsed is None:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


def format_http_date(moment: datetime) -> str:
    """Render *moment* as an IMF-fixdate, e.g. ``Wed, 21 Oct 2015 07:28:00 GMT``."""
    return format_datetime(moment.astimezone(UTC).replace(microsecond=0), usegmt=True)


def evaluate(metadata: ResourceMetadata, if_modified_since: str | None) -> Freshness:
    """Decide between a full response and 304 Not Modified.

    No header, an unparseable header, or a resource without a known
    modification time all mean ``STALE``.
    """
    since = parse_http_date(if_modified_since)
    if since is None or metadata.last_modified is None:
        return Freshness.STALE
    modified = metadata.last_modified.replace(microsecond=0)
    if modified.tzinfo is None:
        modified = modified.replace(tzinfo=UTC)
    if modified <= since:
        return Freshness.FRESH
    return Freshness.STALE
