"""
Locate the NDK root inside an extracted tree.

An NDK root is recognized structurally: it contains a `toolchains`
directory alongside `build`, `prebuilt` and `sources` directories. Archives
nest the root at different depths (disk images deepest), and some layouts
carry nested decoys, so the shallowest match wins.
"""

import logging
import os
from pathlib import Path
from typing import List, Optional

logger = logging.getLogger(__name__)

TOOLCHAIN_DIR = "toolchains"
SIBLING_DIRS = frozenset({"build", "prebuilt", "sources"})


def _subdirectories(directory: Path) -> List[str]:
    try:
        with os.scandir(directory) as it:
            return [e.name for e in it if e.is_dir(follow_symlinks=False)]
    except OSError as e:
        logger.debug(f"Cannot list {directory}: {e}")
        return []


def is_kit_root(directory: Path) -> bool:
    """Check whether directory has the NDK root layout."""
    names = set(_subdirectories(directory))
    return TOOLCHAIN_DIR in names and SIBLING_DIRS <= names


def locate_kit_root(search_dir: Path, max_depth: int) -> Optional[Path]:
    """
    Find the NDK root directory under search_dir.

    Args:
        search_dir: Directory to search (depth 0)
        max_depth: Deepest level, relative to search_dir, at which a root
            directory is accepted

    Returns:
        The matching directory with the shortest full path (lexically
        smallest on ties), or None if there is no match

    Example:
        >>> locate_kit_root(Path("staging/Linux64-28"), 3)
        PosixPath('staging/Linux64-28/android-ndk-r28c')
    """
    search_dir = Path(search_dir)
    if not search_dir.is_dir():
        return None

    matches: List[Path] = []
    level = [search_dir]
    for depth in range(max_depth + 1):
        next_level: List[Path] = []
        for directory in level:
            if is_kit_root(directory):
                matches.append(directory)
            if depth < max_depth:
                next_level.extend(directory / name for name in _subdirectories(directory))
        level = next_level

    if not matches:
        logger.debug(f"No NDK root under {search_dir} within depth {max_depth}")
        return None

    best = min(matches, key=lambda p: (len(str(p)), str(p)))
    if len(matches) > 1:
        logger.debug(f"Found {len(matches)} candidate roots; using {best}")
    return best


__all__ = ["locate_kit_root", "is_kit_root", "TOOLCHAIN_DIR", "SIBLING_DIRS"]
