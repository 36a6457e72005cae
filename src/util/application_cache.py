"""On-disk artifact cache shared by every download in a provisioning run.

Artifacts are keyed by URI. A cached copy is revalidated with its ETag and
Last-Modified validators; when revalidation is impossible (network down,
server error) the cached copy is served instead of failing the run.
"""
from __future__ import annotations

import hashlib
import logging
import os
import shutil
from pathlib import Path
from typing import Dict, Optional, Union

from constants import Constants
from common.errors import DownloadError, FilesystemError
from common.http_client import robust_download
from common.logging_utils import Timer, extra_context, safe_url
from util.format_duration import format_duration

logger = logging.getLogger(__name__)


class DownloadCache:
    """Deduplicating download cache rooted at ``cache_root``.

    Each URI maps to ``<sha256>.cached`` plus optional ``.etag`` and
    ``.last_modified`` sidecar files holding the HTTP validators.
    """

    def __init__(self, cache_root: Union[str, os.PathLike]):
        self.cache_root = Path(cache_root).expanduser()

    def _paths(self, uri: str) -> Dict[str, Path]:
        key = hashlib.sha256(uri.encode("utf-8")).hexdigest()
        return {
            "cached": self.cache_root / f"{key}.cached",
            "etag": self.cache_root / f"{key}.etag",
            "last_modified": self.cache_root / f"{key}.last_modified",
        }

    @staticmethod
    def _read(path: Path) -> Optional[str]:
        try:
            return path.read_text(encoding="utf-8").strip() or None
        except FileNotFoundError:
            return None

    @staticmethod
    def _write_validator(path: Path, value: Optional[str]) -> None:
        if value:
            path.write_text(value, encoding="utf-8")
        elif path.exists():
            path.unlink()

    def get(self, uri: str, name: str, version: Optional[str] = None) -> Path:
        """Return a local path holding the content of ``uri``.

        Raises:
            DownloadError: The artifact could not be fetched and nothing is cached.
            FilesystemError: The cache directory could not be written.
        """
        paths = self._paths(uri)
        cached = paths["cached"]
        headers = {}
        if cached.exists():
            etag = self._read(paths["etag"])
            last_modified = self._read(paths["last_modified"])
            if etag:
                headers["If-None-Match"] = etag
            if last_modified:
                headers["If-Modified-Since"] = last_modified

        try:
            self.cache_root.mkdir(parents=True, exist_ok=True)
            status, response_headers, error = robust_download(uri, cached, headers=headers)
            if status == 200:
                self._write_validator(paths["etag"], response_headers.get("ETag"))
                self._write_validator(paths["last_modified"], response_headers.get("Last-Modified"))
        except OSError as exc:
            raise FilesystemError(self.cache_root, f"cannot write download cache: {exc}") from exc

        if status == 200:
            return cached
        if status == 304 and cached.exists():
            logger.debug("Cache hit for %s", safe_url(uri), extra=extra_context(
                event="cache_hit", component="download_cache", target=safe_url(uri)))
            return cached

        reason = error or f"HTTP {status}"
        if cached.exists():
            logger.warning("Unable to revalidate %s (%s), using cached copy", safe_url(uri), reason)
            return cached
        raise DownloadError(name, version, uri, reason)


class ApplicationCache:
    """Logs and times downloads on top of a ``DownloadCache``."""

    def __init__(self, cache_root: Union[str, os.PathLike, None] = None):
        if cache_root is None:
            cache_root = os.environ.get(Constants.ENV_CACHE_DIR) or Constants.DEFAULT_CACHE_DIR
        self.download_cache = DownloadCache(cache_root)

    def download(self, description: str, version: Optional[str], uri: str) -> Path:
        """Fetch ``uri`` through the cache and return the local file."""
        with Timer() as t:
            path = self.download_cache.get(uri, description, version)
        logger.info(
            "Downloading %s %s from %s (%s)",
            description,
            version or "",
            safe_url(uri),
            format_duration(t.duration()),
        )
        return path

    def download_jar(
        self,
        version: str,
        uri: str,
        description: str,
        jar_name: str,
        target_directory: Union[str, os.PathLike],
    ) -> Path:
        """Fetch a JAR and copy it to ``target_directory/jar_name``."""
        source = self.download(description, version, uri)
        target = Path(target_directory) / jar_name
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            shutil.copyfile(source, target)
        except OSError as exc:
            raise FilesystemError(target, f"cannot install {description}: {exc}") from exc
        return target
