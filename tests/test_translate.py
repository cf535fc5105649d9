"""Tests for perch.middleware.translate: URI prefix translation."""

import pytest

from conftest import TEXT
from perch.app import App
from perch.config import MountConfig
from perch.errors import ConfigurationError
from perch.http.response import Response
from perch.middleware import StaticResources, TranslateUri
from perch.testing import TestClient


def _translated_app(resource_dir, prefix: str = "/foo") -> App:
    app = App()
    app.add_middleware(TranslateUri(prefix))
    app.add_middleware(StaticResources(MountConfig.for_directory(resource_dir)))
    return app


class TestTranslateUri:
    @pytest.mark.asyncio
    async def test_serves_under_prefix(self, resource_dir) -> None:
        async with TestClient(_translated_app(resource_dir)) as client:
            response = await client.get("/foo/testresource.txt")
            assert response.status == 200
            assert response.body_bytes == TEXT

    @pytest.mark.asyncio
    async def test_unprefixed_is_not_found(self, resource_dir) -> None:
        async with TestClient(_translated_app(resource_dir)) as client:
            response = await client.get("/testresource.txt")
            assert response.status == 404

    @pytest.mark.asyncio
    async def test_partial_segment_is_not_found(self, resource_dir) -> None:
        async with TestClient(_translated_app(resource_dir)) as client:
            response = await client.get("/foobar/testresource.txt")
            assert response.status == 404

    @pytest.mark.asyncio
    async def test_remainder_stays_encoded(self, resource_dir) -> None:
        async with TestClient(_translated_app(resource_dir)) as client:
            response = await client.get("/foo/space+truckin%27.txt")
            assert response.status == 200

    @pytest.mark.asyncio
    async def test_traversal_after_prefix_still_rejected(self, resource_dir) -> None:
        async with TestClient(_translated_app(resource_dir)) as client:
            response = await client.get("/foo/testDir/../testresource.txt")
            assert response.status == 400

    @pytest.mark.asyncio
    async def test_inner_chain_sees_stripped_path(self) -> None:
        seen: list[tuple[str, str]] = []

        async def record(request, next):
            seen.append((request.raw_path, request.path))
            return Response("ok")

        app = App()
        app.add_middleware(TranslateUri("/foo/bar"))
        app.add_middleware(record)
        async with TestClient(app) as client:
            await client.get("/foo/bar/a%20b.txt")
            await client.get("/foo/bar")
        assert seen == [("/a%20b.txt", "/a b.txt"), ("/", "/")]

    @pytest.mark.asyncio
    async def test_empty_prefix_passes_through(self, resource_dir) -> None:
        async with TestClient(_translated_app(resource_dir, prefix="/")) as client:
            response = await client.get("/testresource.txt")
            assert response.status == 200

    def test_prefix_segments(self) -> None:
        assert TranslateUri("/foo/bar/").prefix == ("foo", "bar")

    def test_invalid_prefix(self) -> None:
        with pytest.raises(ConfigurationError):
            TranslateUri("/foo/../bar")
