"""Tests for perch.static.encoding: Accept-Encoding and .gz siblings."""

import pytest

from perch.config import MountConfig
from perch.static.encoding import (
    DEFAULT_MEDIA_TYPE,
    Encoding,
    accepts_gzip,
    media_type_for,
    negotiate,
    parse_accept_encoding,
)
from perch.static.loader import FileSystemLoader, ResourceMetadata
from perch.static.paths import ResolvedPath


class TestParseAcceptEncoding:
    def test_missing_header(self) -> None:
        assert parse_accept_encoding(None) == {}
        assert parse_accept_encoding("") == {}

    def test_plain_list(self) -> None:
        assert parse_accept_encoding("gzip, deflate, br") == {
            "gzip": 1.0,
            "deflate": 1.0,
            "br": 1.0,
        }

    def test_weights(self) -> None:
        assert parse_accept_encoding("gzip;q=0.5, br;q=1.0") == {"gzip": 0.5, "br": 1.0}

    def test_case_and_whitespace(self) -> None:
        assert parse_accept_encoding("  GZIP ; Q=0.3 ") == {"gzip": 0.3}

    def test_invalid_weight_dropped(self) -> None:
        assert parse_accept_encoding("gzip;q=abc, br") == {"br": 1.0}

    def test_out_of_range_weight_dropped(self) -> None:
        assert parse_accept_encoding("gzip;q=1.5") == {}


class TestAcceptsGzip:
    @pytest.mark.parametrize(
        ("header", "expected"),
        [
            ("gzip", True),
            ("x-gzip", True),
            ("deflate, gzip;q=0.1", True),
            ("*", True),
            ("br", False),
            ("gzip;q=0", False),
            ("gzip;q=0, *", False),
            ("gzip;q=0, x-gzip", True),
            ("x-gzip;q=0, gzip;q=0.2", True),
            ("*;q=0", False),
            ("", False),
        ],
    )
    def test_accepts(self, header: str, expected: bool) -> None:
        assert accepts_gzip(parse_accept_encoding(header)) is expected


class TestMediaType:
    def test_known_extension(self) -> None:
        assert media_type_for(ResolvedPath(("a.txt",))) == "text/plain"

    def test_unknown_extension(self) -> None:
        assert media_type_for(ResolvedPath(("blob.zzqq",))) == DEFAULT_MEDIA_TYPE

    def test_compressed_file_is_not_its_inner_type(self) -> None:
        assert media_type_for(ResolvedPath(("a.txt.gz",))) == "application/gzip"


class TestNegotiate:
    @pytest.fixture
    def stat_log(self, resource_dir):
        loader = FileSystemLoader(resource_dir)
        calls: list[str] = []

        async def stat(path: ResolvedPath) -> ResourceMetadata:
            calls.append(path.name)
            return loader.stat(path)

        return stat, calls

    def _mount(self, resource_dir, *, gzip: bool) -> MountConfig:
        return MountConfig.for_directory(resource_dir).with_prefer_gzip(gzip)

    @pytest.mark.asyncio
    async def test_gzip_sibling_chosen(self, resource_dir, stat_log) -> None:
        stat, calls = stat_log
        variant = await negotiate(
            ResolvedPath(("testresource.txt",)),
            {"gzip": 1.0},
            self._mount(resource_dir, gzip=True),
            stat,
        )
        assert variant.encoding is Encoding.GZIP
        assert variant.path.name == "testresource.txt.gz"
        assert variant.content_encoding == "gzip"
        # Media type of the original, not of the .gz file
        assert variant.media_type == "text/plain"
        assert calls == ["testresource.txt.gz"]

    @pytest.mark.asyncio
    async def test_missing_sibling_falls_back(self, resource_dir, stat_log) -> None:
        stat, calls = stat_log
        variant = await negotiate(
            ResolvedPath(("testresource2.txt",)),
            {"gzip": 1.0},
            self._mount(resource_dir, gzip=True),
            stat,
        )
        assert variant.encoding is Encoding.IDENTITY
        assert variant.content_encoding is None
        assert variant.metadata.is_file
        assert calls == ["testresource2.txt.gz", "testresource2.txt"]

    @pytest.mark.asyncio
    async def test_directory_sibling_ignored(self, resource_dir, stat_log) -> None:
        stat, _ = stat_log
        variant = await negotiate(
            ResolvedPath(("dir-sibling.txt",)),
            {"gzip": 1.0},
            self._mount(resource_dir, gzip=True),
            stat,
        )
        assert variant.encoding is Encoding.IDENTITY

    @pytest.mark.asyncio
    async def test_client_without_gzip(self, resource_dir, stat_log) -> None:
        stat, calls = stat_log
        variant = await negotiate(
            ResolvedPath(("testresource.txt",)),
            {"br": 1.0},
            self._mount(resource_dir, gzip=True),
            stat,
        )
        assert variant.encoding is Encoding.IDENTITY
        assert calls == ["testresource.txt"]

    @pytest.mark.asyncio
    async def test_mount_without_gzip_never_probes(self, resource_dir, stat_log) -> None:
        stat, calls = stat_log
        variant = await negotiate(
            ResolvedPath(("testresource.txt",)),
            {"gzip": 1.0},
            self._mount(resource_dir, gzip=False),
            stat,
        )
        assert variant.encoding is Encoding.IDENTITY
        assert calls == ["testresource.txt"]

    @pytest.mark.asyncio
    async def test_missing_identity_still_returned(self, resource_dir, stat_log) -> None:
        stat, _ = stat_log
        variant = await negotiate(
            ResolvedPath(("nope.txt",)),
            {},
            self._mount(resource_dir, gzip=False),
            stat,
        )
        assert not variant.metadata.exists
