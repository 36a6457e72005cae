"""Materialize downloaded artifacts into the container's home directory."""
from __future__ import annotations

import logging
import os
import posixpath
import tarfile
from pathlib import Path
from typing import Iterable, Optional, Sequence, Union

from common.errors import FilesystemError
from common.logging_utils import Timer
from util.application_cache import ApplicationCache
from util.file_utils import reset_directory
from util.format_duration import format_duration
from util.resource_utils import copy_resources
from versioning.models import ResolvedVersion

logger = logging.getLogger(__name__)

# Python releases with extraction filters warn unless one is chosen.
_EXTRACT_KWARGS = {"filter": "data"} if hasattr(tarfile, "data_filter") else {}


def _strip(name: str, components: int) -> Optional[str]:
    """Drop the leading ``components`` path elements; None if nothing remains."""
    parts = [part for part in name.split("/") if part not in ("", ".")]
    if len(parts) <= components:
        return None
    return "/".join(parts[components:])


def _is_excluded(relative: str, excludes: Iterable[str]) -> bool:
    return any(relative == exclude or relative.startswith(exclude + "/") for exclude in excludes)


def _check_inside(relative: str, archive: Path) -> None:
    if posixpath.isabs(relative) or ".." in relative.split("/"):
        raise FilesystemError(archive, f"archive member '{relative}' escapes the target directory")


def extract_tarball(
    archive: Union[str, os.PathLike],
    target_dir: Union[str, os.PathLike],
    *,
    strip_components: int = 1,
    excludes: Sequence[str] = (),
) -> int:
    """Extract a (compressed) tarball like ``tar x --strip N --exclude ...``.

    Exclusions are matched against the stripped path and cover everything
    below an excluded directory.

    Returns:
        Number of members extracted.

    Raises:
        FilesystemError: Unreadable archive, unsafe member, or write failure.
    """
    archive = Path(archive)
    target_dir = Path(target_dir)
    extracted = 0
    try:
        with tarfile.open(archive, "r:*") as tar:
            for member in tar:
                relative = _strip(member.name, strip_components)
                if relative is None or _is_excluded(relative, excludes):
                    continue
                _check_inside(relative, archive)
                if member.islnk():
                    link_target = _strip(member.linkname, strip_components)
                    if link_target is None or _is_excluded(link_target, excludes):
                        continue
                    _check_inside(link_target, archive)
                    member.linkname = link_target
                member.name = relative
                tar.extract(member, target_dir, **_EXTRACT_KWARGS)
                extracted += 1
    except tarfile.TarError as exc:
        raise FilesystemError(archive, f"cannot extract archive: {exc}") from exc
    except OSError as exc:
        raise FilesystemError(exc.filename or target_dir, f"cannot extract archive: {exc.strerror or exc}") from exc
    return extracted


class ArtifactStager:
    """Download an archive and lay it out as a fresh directory tree.

    Args:
        cache: Download collaborator.
        description: Logical artifact name used in logs and errors.
        excludes: Stripped archive paths never extracted.
        strip_components: Leading path elements removed from every member.
    """

    def __init__(
        self,
        cache: ApplicationCache,
        description: str,
        excludes: Sequence[str] = (),
        strip_components: int = 1,
    ):
        self.cache = cache
        self.description = description
        self.excludes = tuple(excludes)
        self.strip_components = strip_components

    def stage(
        self,
        resolved: ResolvedVersion,
        target_dir: Union[str, os.PathLike],
        resource_set: Optional[str] = None,
    ) -> Path:
        """Replace ``target_dir`` with the contents of the resolved archive.

        Steps run in order: download, remove, recreate, extract, overlay.
        Any failure propagates and leaves the run aborted.
        """
        archive = self.cache.download(self.description, resolved.version, resolved.uri)
        target_dir = Path(target_dir)

        with Timer() as t:
            reset_directory(target_dir)
            count = extract_tarball(
                archive,
                target_dir,
                strip_components=self.strip_components,
                excludes=self.excludes,
            )
            if resource_set:
                copy_resources(resource_set, target_dir)

        logger.info(
            "Expanding %s to %s (%s)",
            self.description,
            target_dir.name,
            format_duration(t.duration()),
        )
        logger.debug("Extracted %d member(s) from %s", count, archive)
        return target_dir


class SupportLibraryInstaller:
    """Place a single support JAR in the container's library directory."""

    def __init__(self, cache: ApplicationCache, description: str, jar_prefix: str):
        self.cache = cache
        self.description = description
        self.jar_prefix = jar_prefix

    def jar_name(self, resolved: ResolvedVersion) -> str:
        return f"{self.jar_prefix}-{resolved.version}.jar"

    def install(self, resolved: ResolvedVersion, lib_dir: Union[str, os.PathLike]) -> Path:
        return self.cache.download_jar(
            resolved.version,
            resolved.uri,
            self.description,
            self.jar_name(resolved),
            lib_dir,
        )
