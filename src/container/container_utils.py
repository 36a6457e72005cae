"""Small helpers shared by containers: library listing and command formatting."""
from __future__ import annotations

import os
from pathlib import Path
from typing import Iterable, List, Optional, Union

LIBRARY_SUFFIX = ".jar"


def libs(lib_directory: Optional[Union[str, os.PathLike]]) -> List[Path]:
    """Return the JAR files directly inside ``lib_directory``, sorted by name.

    A missing or unset directory yields an empty list.
    """
    if lib_directory is None:
        return []
    lib_directory = Path(lib_directory)
    if not lib_directory.is_dir():
        return []
    return sorted(
        entry for entry in lib_directory.iterdir()
        if entry.suffix == LIBRARY_SUFFIX and entry.is_file()
    )


def to_java_opts_s(java_opts: Iterable[str]) -> str:
    """Join Java options into a single space-separated string."""
    return " ".join(opt for opt in java_opts if opt)


def space(value: str) -> str:
    """Prefix ``value`` with a space unless it is empty."""
    return f" {value}" if value else ""
