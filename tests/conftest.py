"""Shared fixtures: an on-disk resource tree and loader doubles."""

import gzip
import os
from datetime import UTC, datetime
from urllib.parse import unquote

import pytest

from perch.http.headers import Headers
from perch.http.request import Request
from perch.static.loader import FileSystemLoader

# Fixed mtime for the resource tree so Last-Modified is predictable
MTIME = datetime(2020, 6, 1, 12, 0, 0, tzinfo=UTC)

TEXT = b"Hello, world!\n"


@pytest.fixture
def resource_dir(tmp_path):
    """Create a resource tree shaped like a typical asset directory."""
    root = tmp_path / "resources"
    root.mkdir()

    (root / "testresource.txt").write_bytes(TEXT)
    (root / "testresource.txt.gz").write_bytes(gzip.compress(TEXT, mtime=0))
    (root / "testresource2.txt").write_bytes(b"no gzip sibling\n")
    (root / "space+truckin'.txt").write_bytes(b"Keep on truckin'\n")
    (root / "app.js").write_bytes(b"console.log('hi');\n")
    (root / "app.js.gz").write_bytes(gzip.compress(b"console.log('hi');\n", mtime=0))

    test_dir = root / "testDir"
    test_dir.mkdir()
    (test_dir / "test.txt").write_bytes(b"inside testDir\n")
    (test_dir / "partial-prefix.txt").write_bytes(b"partial\n")

    # A directory posing as a gzip sibling
    (root / "dir-sibling.txt").write_bytes(b"identity wins\n")
    (root / "dir-sibling.txt.gz").mkdir()

    stamp = MTIME.timestamp()
    for path in root.rglob("*"):
        os.utime(path, (stamp, stamp))
    return root


class CountingLoader:
    """Loader double that counts every stat and open it receives."""

    def __init__(self, inner) -> None:
        self.inner = inner
        self.stats: list[str] = []
        self.opens: list[str] = []

    def stat(self, path):
        self.stats.append(path.name)
        return self.inner.stat(path)

    def open(self, path):
        self.opens.append(path.name)
        return self.inner.open(path)


@pytest.fixture
def counting_loader(resource_dir) -> CountingLoader:
    return CountingLoader(FileSystemLoader(resource_dir))


def make_request(
    raw_path: str,
    *,
    method: str = "GET",
    headers: dict[str, str] | None = None,
) -> Request:
    """Build a Request the way an ASGI server would hand it over."""
    return Request(
        method=method,
        path=unquote(raw_path),
        raw_path=raw_path,
        headers=Headers.from_pairs(headers),
    )
