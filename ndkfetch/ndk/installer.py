"""
Promote a located NDK root into its installation directory.
"""

import logging
from pathlib import Path

from ndkfetch.core.filesystem import (
    directory_size,
    move_directory_contents,
    purge_directory,
)
from ndkfetch.ndk.locator import locate_kit_root

logger = logging.getLogger(__name__)


def is_installed(dest_dir: Path) -> bool:
    """
    Check whether dest_dir already holds a valid NDK root.

    The root must be dest_dir itself; an NDK nested one level down is a
    leftover from an interrupted install, not a valid installation.
    """
    dest_dir = Path(dest_dir)
    if not dest_dir.is_dir():
        return False
    return locate_kit_root(dest_dir, 1) == dest_dir


def prepare_destination(dest_dir: Path) -> None:
    """Purge an existing destination that does not hold a valid root."""
    dest_dir = Path(dest_dir)
    if dest_dir.is_dir() and any(dest_dir.iterdir()):
        logger.info(f"Removing incomplete installation at {dest_dir}")
        purge_directory(dest_dir)


def install(root_dir: Path, dest_dir: Path) -> bool:
    """
    Move every entry of root_dir into dest_dir, overwriting.

    Returns:
        True if dest_dir holds a valid root afterwards

    Raises:
        FilesystemError: If an entry cannot be moved
    """
    dest_dir = Path(dest_dir)
    move_directory_contents(Path(root_dir), dest_dir)

    if logger.isEnabledFor(logging.DEBUG):
        size_mb = directory_size(dest_dir) / (1024 * 1024)
        logger.debug(f"Installed {size_mb:.1f} MB into {dest_dir}")
    return is_installed(dest_dir)


__all__ = ["is_installed", "prepare_destination", "install"]
