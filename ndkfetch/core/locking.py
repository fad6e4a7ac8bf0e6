"""
Cross-process locking for NDK installations.

Runs are sequential within a process, but two ndkfetch processes may target
the same install root. A file lock per (platform, version) destination makes
the check-existing-install / install sequence atomic across processes.

Usage:
    from ndkfetch.core.locking import LockManager

    lock_manager = LockManager(base_dir / "lock")
    with lock_manager.install_lock("Linux64", 28):
        ...
"""

import logging
from contextlib import contextmanager
from pathlib import Path

from filelock import FileLock, Timeout as LockTimeout

from ndkfetch.core.exceptions import InstallLockTimeout

logger = logging.getLogger(__name__)


class LockManager:
    """
    Manages installation locks.

    Attributes:
        lock_dir: Directory where lock files are stored
    """

    def __init__(self, lock_dir: Path):
        self.lock_dir = Path(lock_dir)
        self.lock_dir.mkdir(parents=True, exist_ok=True)

    def lock_path(self, platform: str, version: int) -> Path:
        return self.lock_dir / f"install-{platform}-{version}.lock"

    @contextmanager
    def install_lock(self, platform: str, version: int, timeout: int = 600):
        """
        Acquire the lock for one installation destination.

        Args:
            platform: Platform tag
            version: NDK release number
            timeout: Maximum wait time in seconds

        Raises:
            InstallLockTimeout: If the lock can't be acquired within timeout
        """
        lock_path = self.lock_path(platform, version)
        lock = FileLock(lock_path, timeout=timeout)

        try:
            with lock:
                logger.debug(f"Acquired install lock: {lock_path}")
                yield
                logger.debug(f"Released install lock: {lock_path}")
        except LockTimeout as e:
            raise InstallLockTimeout(
                f"Could not acquire install lock for r{version}/{platform} "
                f"after {timeout}s. Another ndkfetch process may be installing it."
            ) from e


__all__ = ["LockManager", "LockTimeout"]
