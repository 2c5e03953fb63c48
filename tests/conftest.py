import shutil
import stat
import sys
from pathlib import Path

import pytest

from bbmp_launcher.exceptions import NetworkError
from bbmp_launcher.models.config import LauncherConfig

posix_only = pytest.mark.skipif(
    sys.platform.startswith("win"), reason="uses POSIX shell scripts"
)

RELEASE_METADATA = {
    "tag_name": "v2.1",
    "assets": [
        {"name": "README.md", "browser_download_url": "https://dl.example/README.md"},
        {"name": "bbmp-2.1.jar", "browser_download_url": "https://dl.example/bbmp-2.1.jar"},
        {"name": "bbmp-2.1-sources.jar", "browser_download_url": "https://dl.example/src.jar"},
    ],
}


class FakeTransport:
    """Serves canned metadata and writes small files instead of downloading."""

    def __init__(self, metadata=None, payload=b"PK\x03\x04jar", source_file=None):
        self.metadata = RELEASE_METADATA if metadata is None else metadata
        self.payload = payload
        self.source_file = source_file
        self.fetches: list[str] = []
        self.downloads: list[tuple[str, str]] = []
        self.fail_downloads = False
        self.closed = False

    async def fetch_json(self, url):
        self.fetches.append(url)
        return self.metadata

    async def download_file(self, url, destination_path, on_progress=None):
        if self.fail_downloads:
            raise NetworkError(f"Request to {url} failed: connection refused")
        destination = Path(destination_path)
        destination.parent.mkdir(parents=True, exist_ok=True)
        if self.source_file is not None:
            shutil.copyfile(self.source_file, destination)
        else:
            destination.write_bytes(self.payload)
        self.downloads.append((url, str(destination)))
        if on_progress:
            on_progress(0.5)
            on_progress(1.0)
        return str(destination)

    async def close(self):
        self.closed = True


@pytest.fixture
def data_dir(tmp_path):
    path = tmp_path / "data"
    path.mkdir()
    return path


@pytest.fixture
def config(data_dir):
    return LauncherConfig(data_dir=str(data_dir))


@pytest.fixture
def fake_transport():
    return FakeTransport()


@pytest.fixture
def write_script(tmp_path):
    """Creates an executable shell script and returns its path as a string."""

    def _write(name: str, body: str) -> str:
        path = tmp_path / name
        path.write_text("#!/bin/sh\n" + body + "\n", encoding="utf-8")
        path.chmod(path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
        return str(path)

    return _write


@pytest.fixture
def fake_java(write_script):
    """A java stand-in that prints a version banner and echoes its arguments."""
    return write_script(
        "java",
        "echo 'openjdk version \"17.0.9\" 2023-10-17' >&2\n"
        'echo "args: $*"\n'
        "exit 0",
    )


def python_child(code: str) -> list[str]:
    return [sys.executable, "-c", code]

