"""Static resource serving — path resolution, loaders, negotiation, freshness.

Public surface::

    from perch.static import ResourceService, FileSystemLoader, PackageLoader
"""

from perch.static.loader import (
    FileSystemLoader,
    PackageLoader,
    ResourceLoader,
    ResourceMetadata,
)
from perch.static.outcome import BadRequest, NotFound, NotModified, Ok, Outcome
from perch.static.paths import ResolvedPath
from perch.static.service import ResourceService

__all__ = [
    "BadRequest",
    "FileSystemLoader",
    "NotFound",
    "NotModified",
    "Ok",
    "Outcome",
    "PackageLoader",
    "ResolvedPath",
    "ResourceLoader",
    "ResourceMetadata",
    "ResourceService",
]
