"""Terminal outcomes of serving one resource request.

Every request through a ``ResourceService`` ends in exactly one of these.
They are plain frozen values; ``assembler.to_response`` turns them into
HTTP responses.
"""

from dataclasses import dataclass

from perch.static.encoding import Variant


@dataclass(frozen=True, slots=True)
class Ok:
    """Serve the variant's bytes (200)."""

    variant: Variant
    media_type: str


@dataclass(frozen=True, slots=True)
class NotModified:
    """The client's cached copy is current (304)."""

    variant: Variant


@dataclass(frozen=True, slots=True)
class NotFound:
    """No mount match, no resource, or a directory (404)."""

    reason: str = "not found"


@dataclass(frozen=True, slots=True)
class BadRequest:
    """The path is malformed or tries to escape the root (400)."""

    reason: str


type Outcome = Ok | NotModified | NotFound | BadRequest
