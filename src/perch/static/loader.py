"""Resource loaders — where a mount's bytes live.

A loader is any object with blocking ``stat()`` and ``open()`` methods
taking a ``ResolvedPath``. No base class required::

    class MyLoader:
        def stat(self, path: ResolvedPath) -> ResourceMetadata: ...
        def open(self, path: ResolvedPath) -> BinaryIO | None: ...

A missing resource is reported, not raised: ``stat()`` returns
``ResourceMetadata.missing()`` and ``open()`` returns ``None``. Any other
I/O failure raises ``StorageError``.

Loader calls block, so the pipeline never calls them on the event loop;
``ResourceService`` runs them through a ``WorkerPool``.
"""

from __future__ import annotations

import errno
import os
import stat as stat_module
from dataclasses import dataclass
from datetime import UTC, datetime
from importlib import resources
from importlib.resources.abc import Traversable
from pathlib import Path
from typing import TYPE_CHECKING, BinaryIO, Protocol, runtime_checkable

from perch.errors import StorageError

if TYPE_CHECKING:
    from perch.static.paths import ResolvedPath

# errno values that mean "there is nothing at this path"
_ABSENT = frozenset({errno.ENOENT, errno.ENOTDIR, errno.ENAMETOOLONG})


@dataclass(frozen=True, slots=True)
class ResourceMetadata:
    """What a loader knows about one resource, fetched per request."""

    exists: bool
    is_directory: bool = False
    length: int = 0
    last_modified: datetime | None = None

    @classmethod
    def missing(cls) -> ResourceMetadata:
        return cls(exists=False)

    @property
    def is_file(self) -> bool:
        """True for an existing, non-directory resource."""
        return self.exists and not self.is_directory


@runtime_checkable
class ResourceLoader(Protocol):
    """Protocol for resource sources."""

    def stat(self, path: ResolvedPath) -> ResourceMetadata: ...

    def open(self, path: ResolvedPath) -> BinaryIO | None: ...


def _metadata_from_stat(result: os.stat_result) -> ResourceMetadata:
    return ResourceMetadata(
        exists=True,
        is_directory=stat_module.S_ISDIR(result.st_mode),
        length=result.st_size,
        last_modified=datetime.fromtimestamp(result.st_mtime, tz=UTC),
    )


class FileSystemLoader:
    """Loads resources from a directory on disk.

    Segments are joined under ``root`` as given. Nothing is resolved or
    canonicalized here; containment is the path resolver's job and holds
    before this loader is ever asked.
    """

    __slots__ = ("_root",)

    def __init__(self, root: str | Path) -> None:
        self._root = Path(root)

    @property
    def root(self) -> Path:
        return self._root

    def _full_path(self, path: ResolvedPath) -> Path:
        return self._root.joinpath(*path.segments)

    def stat(self, path: ResolvedPath) -> ResourceMetadata:
        full = self._full_path(path)
        try:
            result = full.stat()
        except OSError as exc:
            if exc.errno in _ABSENT:
                return ResourceMetadata.missing()
            raise StorageError(path.name, f"cannot stat {path.name!r}: {exc}") from exc
        return _metadata_from_stat(result)

    def open(self, path: ResolvedPath) -> BinaryIO | None:
        full = self._full_path(path)
        try:
            return full.open("rb")
        except OSError as exc:
            if exc.errno in _ABSENT or isinstance(exc, IsADirectoryError):
                return None
            raise StorageError(path.name, f"cannot open {path.name!r}: {exc}") from exc

    def __repr__(self) -> str:
        return f"FileSystemLoader({str(self._root)!r})"


class PackageLoader:
    """Loads resources bundled inside an importable package.

    Uses ``importlib.resources`` so zipped and namespace packages work.
    When the package lives on disk, metadata comes from a real ``stat``;
    otherwise the length is measured and no modification time is known.
    """

    __slots__ = ("_package", "_root")

    def __init__(self, package: str) -> None:
        self._package = package
        self._root: Traversable | None = None

    @property
    def package(self) -> str:
        return self._package

    def _traversable(self, path: ResolvedPath) -> Traversable:
        # Resolved lazily so a mount can be configured before the package is importable
        if self._root is None:
            self._root = resources.files(self._package)
        return self._root.joinpath(*path.segments)

    def stat(self, path: ResolvedPath) -> ResourceMetadata:
        node = self._traversable(path)
        try:
            if isinstance(node, Path):
                return _metadata_from_stat(node.stat())
            if node.is_dir():
                return ResourceMetadata(exists=True, is_directory=True)
            if not node.is_file():
                return ResourceMetadata.missing()
            return ResourceMetadata(exists=True, length=len(node.read_bytes()))
        except OSError as exc:
            if exc.errno in _ABSENT or isinstance(exc, FileNotFoundError):
                return ResourceMetadata.missing()
            raise StorageError(path.name, f"cannot stat {path.name!r}: {exc}") from exc

    def open(self, path: ResolvedPath) -> BinaryIO | None:
        node = self._traversable(path)
        try:
            if not node.is_file():
                return None
            return node.open("rb")  # type: ignore[return-value]
        except OSError as exc:
            if exc.errno in _ABSENT or isinstance(exc, FileNotFoundError):
                return None
            raise StorageError(path.name, f"cannot open {path.name!r}: {exc}") from exc

    def __repr__(self) -> str:
        return f"PackageLoader({self._package!r})"
