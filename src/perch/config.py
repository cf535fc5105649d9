"""Application and mount configuration.

Both configs are frozen dataclasses, immutable after creation, safe to share
across concurrent requests, no string-key dict lookups. ``MountConfig`` is
adjusted through ``with_*()`` methods that return new instances.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, replace
from pathlib import Path

from perch.errors import ConfigurationError
from perch.static.loader import FileSystemLoader, PackageLoader, ResourceLoader
from perch.static.paths import split_config_path


@dataclass(frozen=True, slots=True)
class AppConfig:
    """ASGI application configuration. Immutable after creation.

    All fields have sensible defaults. Override what you need::

        config = AppConfig(port=3000, blocking_threads=8)
    """

    # Server
    host: str = "127.0.0.1"
    port: int = 8000
    debug: bool = False
    log_level: str = "info"

    # Blocking resource I/O runs on a bounded worker pool of this size
    blocking_threads: int = 40

    # Bytes read per body chunk when streaming a resource
    chunk_size: int = 64 * 1024

    def __post_init__(self) -> None:
        if self.blocking_threads < 1:
            msg = f"blocking_threads must be at least 1, got {self.blocking_threads}"
            raise ConfigurationError(msg)
        if self.chunk_size < 1:
            msg = f"chunk_size must be at least 1, got {self.chunk_size}"
            raise ConfigurationError(msg)


@dataclass(frozen=True, slots=True)
class MountConfig:
    """Where a resource mount lives and how it answers.

    ``path_prefix`` is the URL segment sequence the mount answers under.
    ``base_path`` is the sub-tree of the loader root that requests resolve
    into and can never escape. ``loader`` is the only resource source the
    mount consults.

    Build once at startup and share::

        static = (
            MountConfig.for_directory("./public")
            .with_path_prefix("/assets")
            .with_prefer_gzip(True)
        )
    """

    loader: ResourceLoader
    path_prefix: tuple[str, ...] = ()
    base_path: tuple[str, ...] = ()
    prefer_gzip: bool = False
    cache_control: str | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "path_prefix", _segments(self.path_prefix, "path_prefix"))
        object.__setattr__(self, "base_path", _segments(self.base_path, "base_path"))

    # -- Constructors --

    @classmethod
    def for_directory(cls, directory: str | Path) -> MountConfig:
        """Mount a filesystem directory."""
        return cls(loader=FileSystemLoader(directory))

    @classmethod
    def for_package(cls, package: str) -> MountConfig:
        """Mount resources bundled inside an importable package."""
        return cls(loader=PackageLoader(package))

    # -- Copy-with-change --

    def with_path_prefix(self, prefix: str | Sequence[str]) -> MountConfig:
        """Return a new MountConfig answering under *prefix*."""
        return replace(self, path_prefix=_segments(prefix, "path_prefix"))

    def with_base_path(self, base: str | Sequence[str]) -> MountConfig:
        """Return a new MountConfig rooted at *base* inside the loader."""
        return replace(self, base_path=_segments(base, "base_path"))

    def with_prefer_gzip(self, prefer: bool) -> MountConfig:
        """Return a new MountConfig that does or doesn't look for ``.gz`` siblings."""
        return replace(self, prefer_gzip=prefer)

    def with_loader(self, loader: ResourceLoader) -> MountConfig:
        """Return a new MountConfig reading through *loader* instead."""
        return replace(self, loader=loader)

    def with_cache_control(self, value: str | None) -> MountConfig:
        """Return a new MountConfig sending *value* as ``Cache-Control``."""
        return replace(self, cache_control=value)


def _segments(value: str | Sequence[str], field_name: str) -> tuple[str, ...]:
    try:
        return split_config_path(value)
    except ValueError as exc:
        msg = f"Invalid {field_name} {value!r}: {exc}"
        raise ConfigurationError(msg) from exc
