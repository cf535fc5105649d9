"""Tests for perch.static.service: the per-mount pipeline."""

import gzip

import pytest

from conftest import TEXT, CountingLoader, make_request
from perch._internal.pool import WorkerPool
from perch.config import MountConfig
from perch.errors import StorageError
from perch.http.response import FileResponse
from perch.static.loader import FileSystemLoader
from perch.static.outcome import BadRequest, NotFound, NotModified, Ok
from perch.static.service import ResourceService


def _read(response: FileResponse) -> bytes:
    with response.source:
        return response.source.read()


class TestServe:
    @pytest.mark.asyncio
    async def test_ok(self, resource_dir) -> None:
        service = ResourceService(MountConfig.for_directory(resource_dir))
        outcome = await service.serve(make_request("/testresource.txt"))
        assert isinstance(outcome, Ok)
        assert outcome.media_type == "text/plain"
        assert outcome.variant.metadata.length == len(TEXT)

    @pytest.mark.asyncio
    async def test_missing(self, resource_dir) -> None:
        service = ResourceService(MountConfig.for_directory(resource_dir))
        outcome = await service.serve(make_request("/testresource.txtt"))
        assert isinstance(outcome, NotFound)

    @pytest.mark.asyncio
    async def test_traversal_is_bad_request(self, resource_dir) -> None:
        service = ResourceService(MountConfig.for_directory(resource_dir))
        outcome = await service.serve(make_request("/testDir/../testresource.txt"))
        assert isinstance(outcome, BadRequest)
        assert ".." in outcome.reason

    @pytest.mark.asyncio
    async def test_rejection_logged(self, resource_dir, caplog) -> None:
        service = ResourceService(MountConfig.for_directory(resource_dir))
        with caplog.at_level("WARNING", logger="perch.static"):
            await service.serve(make_request("/../etc/passwd"))
        assert "Rejected GET /../etc/passwd" in caplog.text

    @pytest.mark.asyncio
    async def test_root_is_not_found(self, resource_dir) -> None:
        service = ResourceService(MountConfig.for_directory(resource_dir))
        assert isinstance(await service.serve(make_request("/")), NotFound)

    @pytest.mark.asyncio
    async def test_outside_prefix_is_not_found(self, resource_dir) -> None:
        config = MountConfig.for_directory(resource_dir).with_path_prefix("/test")
        service = ResourceService(config)
        outcome = await service.serve(make_request("/testDir/partial-prefix.txt"))
        assert isinstance(outcome, NotFound)

    @pytest.mark.asyncio
    async def test_unserved_method(self, resource_dir) -> None:
        service = ResourceService(MountConfig.for_directory(resource_dir))
        outcome = await service.serve(make_request("/testresource.txt", method="POST"))
        assert isinstance(outcome, NotFound)

    @pytest.mark.asyncio
    async def test_not_modified(self, resource_dir) -> None:
        service = ResourceService(MountConfig.for_directory(resource_dir))
        request = make_request(
            "/testresource.txt",
            headers={"If-Modified-Since": "Fri, 31 Dec 9999 23:59:59 GMT"},
        )
        assert isinstance(await service.serve(request), NotModified)

    @pytest.mark.asyncio
    async def test_storage_fault_propagates(self, resource_dir) -> None:
        class BrokenLoader:
            def stat(self, path):
                raise StorageError(path.name, "disk on fire")

            def open(self, path):
                raise AssertionError("never opened")

        service = ResourceService(MountConfig(loader=BrokenLoader()))
        with pytest.raises(StorageError):
            await service.serve(make_request("/testresource.txt"))


class TestLoaderOverride:
    @pytest.mark.asyncio
    async def test_exactly_one_stat_through_override(self, resource_dir) -> None:
        default = CountingLoader(FileSystemLoader(resource_dir))
        override = CountingLoader(FileSystemLoader(resource_dir))
        config = (
            MountConfig(loader=default)
            .with_path_prefix("/path-prefix")
            .with_loader(override)
        )
        service = ResourceService(config)

        response = await service.respond(make_request("/path-prefix/testresource.txt"))

        assert response.status == 200
        _read(response)
        assert override.stats == ["testresource.txt"]
        assert default.stats == []
        assert default.opens == []


class TestRespond:
    @pytest.mark.asyncio
    async def test_body_bytes(self, resource_dir) -> None:
        service = ResourceService(MountConfig.for_directory(resource_dir))
        response = await service.respond(make_request("/testresource.txt"))
        assert isinstance(response, FileResponse)
        assert _read(response) == TEXT

    @pytest.mark.asyncio
    async def test_gzip_body(self, resource_dir) -> None:
        config = MountConfig.for_directory(resource_dir).with_prefer_gzip(True)
        service = ResourceService(config)
        request = make_request("/testresource.txt", headers={"Accept-Encoding": "gzip"})
        response = await service.respond(request)
        assert response.header("Content-Encoding") == "gzip"
        assert response.content_type == "text/plain"
        assert gzip.decompress(_read(response)) == TEXT

    @pytest.mark.asyncio
    async def test_vanished_between_stat_and_open(self, resource_dir) -> None:
        class VanishingLoader(CountingLoader):
            def open(self, path):
                return None

        config = MountConfig(loader=VanishingLoader(FileSystemLoader(resource_dir)))
        response = await ResourceService(config).respond(make_request("/testresource.txt"))
        assert response.status == 404

    @pytest.mark.asyncio
    async def test_shared_pool(self, resource_dir) -> None:
        pool = WorkerPool(2)
        service = ResourceService(MountConfig.for_directory(resource_dir), pool=pool)
        assert service.pool is pool
        response = await service.respond(make_request("/testresource.txt"))
        _read(response)
        assert pool.limiter.total_tokens == 2
