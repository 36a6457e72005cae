"""Shared fixtures: in-memory download cache and tarball builder."""

import io
import os
import shutil
import tarfile
from pathlib import Path
from typing import Dict, List, Optional, Tuple

import pytest

from common.errors import DownloadError


class FakeDownloadCache:
    """Serves URIs from a dict of local files."""

    def __init__(self, files: Dict[str, Path]):
        self.files = files
        self.requests: List[str] = []

    def get(self, uri: str, name: str, version: Optional[str] = None) -> Path:
        self.requests.append(uri)
        if uri not in self.files:
            raise DownloadError(name, version, uri, "HTTP 404")
        return self.files[uri]


class FakeApplicationCache:
    """Stand-in for ApplicationCache with the same download surface."""

    def __init__(self, files: Optional[Dict[str, Path]] = None):
        self.download_cache = FakeDownloadCache(files if files is not None else {})
        self.downloads: List[Tuple[str, Optional[str], str]] = []

    @property
    def files(self) -> Dict[str, Path]:
        return self.download_cache.files

    def download(self, description, version, uri):
        self.downloads.append((description, version, uri))
        return self.download_cache.get(uri, description, version)

    def download_jar(self, version, uri, description, jar_name, target_directory):
        source = self.download(description, version, uri)
        target = Path(target_directory) / jar_name
        target.parent.mkdir(parents=True, exist_ok=True)
        shutil.copyfile(source, target)
        return target


@pytest.fixture
def fake_cache():
    return FakeApplicationCache()


def build_tarball(path: Path, members: Dict[str, bytes], top: str = "apache-tomcat-7.0.42") -> Path:
    """Write a gzip tarball whose entries all sit below ``top``."""
    with tarfile.open(path, "w:gz") as tar:
        for name, data in members.items():
            info = tarfile.TarInfo(f"{top}/{name}" if top else name)
            info.size = len(data)
            info.mode = 0o755 if name.endswith(".sh") else 0o644
            info.mtime = 1700000000
            tar.addfile(info, io.BytesIO(data))
    return path


@pytest.fixture
def tomcat_tarball(tmp_path):
    """A small Tomcat-shaped distribution including paths the overlay owns."""
    return build_tarball(tmp_path / "tomcat.tar.gz", {
        "bin/catalina.sh": b"#!/bin/sh\necho catalina\n",
        "conf/server.xml": b"<Server upstream='true'/>",
        "conf/context.xml": b"<Context upstream='true'/>",
        "conf/web.xml": b"<web-app/>",
        "lib/catalina.jar": b"jar-bytes",
        "webapps/ROOT/index.html": b"<html>upstream</html>",
        "webapps/docs/index.html": b"<html>docs</html>",
    })


def snapshot(root: Path) -> Dict[str, object]:
    """Map every relative path under ``root`` to its bytes, link target or dir marker."""
    result = {}
    for path in sorted(root.rglob("*")):
        relative = path.relative_to(root).as_posix()
        if path.is_symlink():
            result[relative] = ("link", os.readlink(path))
        elif path.is_dir():
            result[relative] = "dir"
        else:
            result[relative] = path.read_bytes()
    return result
