"""Filesystem primitives used while staging: remove, reset, symlink.

``OSError`` is re-raised as ``FilesystemError`` naming the offending path.
"""
from __future__ import annotations

import logging
import os
import shutil
from pathlib import Path
from typing import Union

from common.errors import FilesystemError

logger = logging.getLogger(__name__)

PathLike = Union[str, os.PathLike]


def remove_path(path: PathLike) -> bool:
    """Remove ``path`` whether it is a file, a directory or a (dangling) symlink.

    Returns:
        True if something was removed.
    """
    path = Path(path)
    try:
        if path.is_symlink() or path.is_file():
            path.unlink()
        elif path.is_dir():
            shutil.rmtree(path)
        elif os.path.lexists(path):
            path.unlink()
        else:
            return False
    except OSError as exc:
        raise FilesystemError(path, f"cannot remove: {exc.strerror or exc}") from exc
    return True


def reset_directory(path: PathLike) -> Path:
    """Replace ``path`` with a fresh empty directory."""
    path = Path(path)
    remove_path(path)
    make_directory(path)
    return path


def make_directory(path: PathLike) -> Path:
    """Create ``path`` and its parents; an existing directory is kept as is."""
    path = Path(path)
    try:
        path.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise FilesystemError(path, f"cannot create directory: {exc.strerror or exc}") from exc
    return path


def relative_symlink(target: PathLike, link: PathLike, start: PathLike) -> Path:
    """Create ``link`` pointing at ``target`` through a path relative to ``start``.

    An existing symlink at ``link`` is replaced; anything else there is an error.
    """
    link = Path(link)
    relative = os.path.relpath(os.fspath(target), os.fspath(start))
    try:
        if link.is_symlink():
            link.unlink()
        os.symlink(relative, link)
    except OSError as exc:
        raise FilesystemError(link, f"cannot create symlink to {relative}: {exc.strerror or exc}") from exc
    logger.debug("Linked %s -> %s", link, relative)
    return link
