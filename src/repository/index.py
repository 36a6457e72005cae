"""Repository index: the version -> artifact URI listing published beside artifacts."""
from __future__ import annotations

import logging
import os
import platform
import sys
from typing import Dict, Optional

import yaml

from constants import Constants
from common.errors import ResolutionError
from util.application_cache import ApplicationCache

logger = logging.getLogger(__name__)

OS_RELEASE = "/etc/os-release"


def _os_release_field(path: str, *names: str) -> Optional[str]:
    try:
        with open(path, encoding="utf-8") as fh:
            fields = dict(
                line.rstrip("\n").split("=", 1) for line in fh if "=" in line
            )
    except OSError:
        return None
    for name in names:
        value = fields.get(name, "").strip().strip('"')
        if value:
            return value
    return None


def current_platform() -> str:
    """OS codename (e.g. "jammy"), else OS id, else ``sys.platform``."""
    return _os_release_field(OS_RELEASE, "VERSION_CODENAME", "ID") or sys.platform


def current_architecture() -> str:
    return platform.machine() or "unknown"


def expand_repository_root(template: str) -> str:
    """Substitute ``{platform}`` and ``{architecture}`` in a repository root."""
    expanded = template.replace("{platform}", current_platform())
    expanded = expanded.replace("{architecture}", current_architecture())
    return expanded.rstrip("/")


class RepositoryIndex:
    """Loads ``<repository_root>/index.yml`` through the application cache."""

    def __init__(self, repository_root: str, cache: ApplicationCache):
        self.repository_root = expand_repository_root(repository_root)
        self.cache = cache

    @property
    def uri(self) -> str:
        return f"{self.repository_root}/{Constants.INDEX_FILE}"

    def load(self) -> Dict[str, str]:
        """Return the index as a mapping of version string to URI.

        BaseLoader keeps every scalar a string so "1.10" never becomes 1.1.

        Raises:
            DownloadError: The index could not be fetched.
            ResolutionError: The index is not a flat mapping.
        """
        path = self.cache.download_cache.get(self.uri, "repository index")
        try:
            with open(path, encoding="utf-8") as fh:
                data = yaml.load(fh, Loader=yaml.BaseLoader)
        except yaml.YAMLError as exc:
            raise ResolutionError(f"malformed repository index {self.uri}: {exc}") from exc

        if data is None:
            data = {}
        if not isinstance(data, dict) or not all(isinstance(v, str) for v in data.values()):
            raise ResolutionError(f"malformed repository index {self.uri}: expected a version to URI mapping")

        logger.debug("Loaded %d version(s) from %s", len(data), self.uri)
        return data
