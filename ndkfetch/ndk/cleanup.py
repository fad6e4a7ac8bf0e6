"""
End-of-run cleanup of staging directories and downloaded archives.

Paths are scheduled while pairs are processed and removed once, after all
pairs, so an archive shared by several platform tags survives until every
tag that needs it has been installed.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import List

from ndkfetch.core.exceptions import FilesystemError
from ndkfetch.core.filesystem import remove_path

logger = logging.getLogger(__name__)


@dataclass
class CleanupResult:
    """Result of a cleanup pass."""

    removed: List[Path] = field(default_factory=list)
    failed: List[Path] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)


class CleanupCoordinator:
    """
    Collects temporary paths and deletes them at the end of a run.

    Example:
        >>> cleanup = CleanupCoordinator()
        >>> cleanup.schedule(staging_dir)
        >>> cleanup.run()
    """

    def __init__(self):
        self._pending: List[Path] = []

    @property
    def pending(self) -> List[Path]:
        return list(self._pending)

    def schedule(self, path: Path) -> None:
        """Schedule a file or directory for deletion (duplicates ignored)."""
        path = Path(path)
        if path not in self._pending:
            self._pending.append(path)

    def run(self) -> CleanupResult:
        """
        Delete every scheduled path that still exists.

        Failures are logged as warnings and reported in the result; they do
        not stop the remaining deletions.
        """
        result = CleanupResult()
        while self._pending:
            path = self._pending.pop(0)
            if not (path.exists() or path.is_symlink()):
                continue
            try:
                remove_path(path)
            except (OSError, FilesystemError) as e:
                logger.warning(f"Could not remove {path}: {e}")
                result.failed.append(path)
                result.errors.append(f"{path}: {e}")
                continue
            logger.debug(f"Removed {path}")
            result.removed.append(path)
        return result


__all__ = ["CleanupCoordinator", "CleanupResult"]
