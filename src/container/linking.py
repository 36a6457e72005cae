"""Expose the application and its extra libraries inside the container by symlink."""
from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import List, Optional, Union

from constants import Constants
from container.container_utils import libs
from common.errors import FilesystemError
from util.file_utils import make_directory, relative_symlink, remove_path

logger = logging.getLogger(__name__)

PathLike = Union[str, os.PathLike]


class ApplicationLinker:
    """Deploy the application root as the container's only context."""

    def __init__(self, context_name: str = Constants.ROOT_CONTEXT):
        self.context_name = context_name

    def link(self, app_dir: PathLike, deployment_root: PathLike) -> Path:
        """Make ``deployment_root/ROOT`` a relative symlink to ``app_dir``.

        Whatever was in ``deployment_root`` before is removed, so exactly one
        deployed unit remains.
        """
        deployment_root = Path(deployment_root)
        root = deployment_root / self.context_name

        remove_path(root)
        make_directory(deployment_root)
        try:
            stale = list(deployment_root.iterdir())
        except OSError as exc:
            raise FilesystemError(deployment_root, f"cannot list deployments: {exc.strerror or exc}") from exc
        for entry in stale:
            logger.debug("Removing stale deployment %s", entry.name)
            remove_path(entry)

        return relative_symlink(
            os.path.realpath(app_dir),
            root,
            start=os.path.realpath(deployment_root),
        )


class LibraryLinker:
    """Symlink the application's extra libraries into ``WEB-INF/lib``.

    Additive: regular files already in ``WEB-INF/lib`` belong to the
    application and are never touched. Symlinks left by an earlier run that
    point into the library directory at JARs no longer there are removed.
    """

    def link(
        self,
        app_dir: PathLike,
        lib_directory: Optional[PathLike],
        web_inf_lib: PathLike,
    ) -> List[Path]:
        """Link every library; a no-op when there are none.

        Returns:
            The links created.
        """
        if lib_directory is not None and not Path(lib_directory).is_absolute():
            lib_directory = Path(app_dir) / lib_directory
        libraries = libs(lib_directory)
        if not libraries:
            return []

        web_inf_lib = make_directory(web_inf_lib)
        real_lib_directory = os.path.realpath(lib_directory)
        real_web_inf_lib = os.path.realpath(web_inf_lib)
        self._remove_stale(web_inf_lib, real_lib_directory, {lib.name for lib in libraries})

        links = []
        for library in libraries:
            link = web_inf_lib / library.name
            if os.path.lexists(link) and not link.is_symlink():
                logger.warning(
                    "Not linking %s: %s already exists in the application", library.name, link
                )
                continue
            links.append(
                relative_symlink(
                    os.path.join(real_lib_directory, library.name), link, start=real_web_inf_lib
                )
            )
        logger.debug("Linked %d library file(s) into %s", len(links), web_inf_lib)
        return links

    @staticmethod
    def _remove_stale(web_inf_lib: Path, real_lib_directory: str, current: set) -> None:
        try:
            entries = list(web_inf_lib.iterdir())
        except OSError as exc:
            raise FilesystemError(web_inf_lib, f"cannot list libraries: {exc.strerror or exc}") from exc
        for entry in entries:
            if not entry.is_symlink():
                continue
            # resolve the directory part only; library entries may themselves be symlinks
            target = os.path.join(os.path.dirname(entry), os.readlink(entry))
            directory = os.path.realpath(os.path.dirname(target))
            if directory == real_lib_directory and os.path.basename(target) not in current:
                logger.debug("Removing stale library link %s", entry.name)
                remove_path(entry)
