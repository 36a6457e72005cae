"""Copy bundled template files over a staged directory tree."""
from __future__ import annotations

import logging
import os
import shutil
from pathlib import Path
from typing import List, Union

import resources
from common.errors import FilesystemError

logger = logging.getLogger(__name__)

RESOURCES_DIRECTORY = Path(resources.__file__).resolve().parent


def resource_path(*parts: str) -> Path:
    """Path of a bundled resource, e.g. ``resource_path("config", "tomcat.yml")``."""
    return RESOURCES_DIRECTORY.joinpath(*parts)


def copy_resources(resource_set: str, target: Union[str, os.PathLike]) -> List[Path]:
    """Copy every file under ``resources/<resource_set>`` into ``target``.

    Files at the same relative path are overwritten; everything else in
    ``target`` is left alone.

    Returns:
        The relative paths that were copied, sorted.
    """
    source_root = resource_path(resource_set)
    if not source_root.is_dir():
        raise FilesystemError(source_root, f"unknown resource set '{resource_set}'")

    target = Path(target)
    copied = []
    for source in sorted(source_root.rglob("*")):
        if not source.is_file():
            continue
        relative = source.relative_to(source_root)
        destination = target / relative
        try:
            destination.parent.mkdir(parents=True, exist_ok=True)
            if destination.is_symlink() or destination.is_dir():
                raise FilesystemError(destination, "expected a regular file for resource overlay")
            shutil.copyfile(source, destination)
        except OSError as exc:
            raise FilesystemError(destination, f"cannot copy resource: {exc}") from exc
        copied.append(relative)

    logger.debug("Copied %d %s resource(s) into %s", len(copied), resource_set, target)
    return copied
