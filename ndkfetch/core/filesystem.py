"""
Filesystem utilities for ndkfetch.

Provides safe deletion, archive member validation and the directory
moves used to promote an extracted NDK root into place.
"""

import logging
import os
import shutil
from pathlib import Path
from typing import Optional, Union

from ndkfetch.core.exceptions import FilesystemError, InsecureArchiveError

logger = logging.getLogger(__name__)

IS_WINDOWS = os.name == "nt"


# ============================================================================
# Path Utilities
# ============================================================================


def is_relative_to(path: Path, parent: Path) -> bool:
    """
    Check if path is under parent directory.

    Example:
        >>> is_relative_to(Path("/home/user/ndk/Linux64"), Path("/home/user"))
        True
    """
    try:
        path.relative_to(parent)
        return True
    except ValueError:
        return False


def validate_archive_member(member: str, destination: Path) -> None:
    """
    Validate that an archive member path stays inside the destination.

    Raises:
        InsecureArchiveError: If the member attempts directory traversal
    """
    member_path = (destination / member).resolve()
    if not is_relative_to(member_path, destination.resolve()):
        raise InsecureArchiveError(
            f"Archive member '{member}' attempts directory traversal. "
            "This is a security risk and extraction has been blocked."
        )


# ============================================================================
# Safe File Operations
# ============================================================================


def _handle_remove_readonly(func, path, exc):
    """Error handler for read-only files on Windows."""
    if not os.access(path, os.W_OK):
        os.chmod(path, 0o777)
        func(path)
    else:
        raise


def safe_rmtree(
    path: Union[str, Path], require_prefix: Optional[Union[str, Path]] = None
) -> None:
    """
    Remove a directory tree with safeguards.

    Args:
        path: Directory to remove
        require_prefix: If specified, path must be under this directory

    Raises:
        ValueError: If path is not under require_prefix
        FilesystemError: If deletion fails
    """
    path = Path(path).resolve()

    if require_prefix is not None:
        require_prefix = Path(require_prefix).resolve()
        if not is_relative_to(path, require_prefix):
            raise ValueError(
                f"Refusing to delete '{path}': not under required prefix '{require_prefix}'"
            )

    if not path.exists():
        return

    if not path.is_dir():
        raise FilesystemError(f"Path is not a directory: {path}")

    try:
        if IS_WINDOWS:
            shutil.rmtree(path, onerror=_handle_remove_readonly)
        else:
            shutil.rmtree(path)
    except Exception as e:
        raise FilesystemError(f"Failed to remove directory '{path}': {e}")


def remove_path(path: Path) -> None:
    """Remove a file, symlink or directory tree."""
    if path.is_symlink() or path.is_file():
        path.unlink()
    elif path.is_dir():
        safe_rmtree(path)


def purge_directory(path: Path) -> None:
    """
    Delete everything inside a directory, keeping the directory itself.

    Example:
        >>> purge_directory(Path("~/.ndkfetch/ndk/Linux64/25"))
    """
    if not path.is_dir():
        return
    for entry in path.iterdir():
        remove_path(entry)


def move_directory_contents(source: Path, destination: Path) -> None:
    """
    Move every entry directly under source into destination, overwriting.

    Args:
        source: Directory whose entries are moved
        destination: Target directory (created if missing)

    Raises:
        FilesystemError: If an entry cannot be moved
    """
    destination.mkdir(parents=True, exist_ok=True)
    for entry in source.iterdir():
        target = destination / entry.name
        if target.exists() or target.is_symlink():
            remove_path(target)
        try:
            shutil.move(str(entry), str(target))
        except (OSError, shutil.Error) as e:
            raise FilesystemError(f"Failed to move {entry} to {target}: {e}")


def directory_size(path: Path) -> int:
    """Calculate total size of regular files under a directory in bytes."""
    return sum(f.stat().st_size for f in path.rglob("*") if f.is_file())


__all__ = [
    "IS_WINDOWS",
    "is_relative_to",
    "validate_archive_member",
    "safe_rmtree",
    "remove_path",
    "purge_directory",
    "move_directory_contents",
    "directory_size",
]
