"""
External archiver providers.

Disk images, self-extracting installers and compressed tarballs are unpacked
by an external archiver. Providers implement the Archiver interface; the
ArchiverLocator looks for an installed provider once per run and caches
the result, including a negative result.
"""

import logging
import os
import shutil
import subprocess
import sys
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from ndkfetch.core.exceptions import ArchiveExtractionError

logger = logging.getLogger(__name__)

SEVEN_ZIP_NAMES = ("7z", "7zz", "7za")

SEVEN_ZIP_SUFFIXES = (
    ".zip",
    ".tar.gz",
    ".tgz",
    ".tar.xz",
    ".tar.bz2",
    ".tar",
    ".gz",
    ".xz",
    ".bz2",
    ".dmg",
    ".bin",
    ".exe",
)

# Ordered well-known install locations per OS family
SEVEN_ZIP_WELL_KNOWN_PATHS: Dict[str, Tuple[str, ...]] = {
    "win32": (
        r"C:\Program Files\7-Zip\7z.exe",
        r"C:\Program Files (x86)\7-Zip\7z.exe",
    ),
    "darwin": (
        "/opt/homebrew/bin/7zz",
        "/opt/homebrew/bin/7z",
        "/usr/local/bin/7zz",
        "/usr/local/bin/7z",
        "/opt/local/bin/7z",
    ),
    "linux": (
        "/usr/bin/7z",
        "/usr/bin/7zz",
        "/usr/bin/7za",
        "/usr/local/bin/7z",
        "/usr/lib/p7zip/7z",
        "/snap/bin/7z",
    ),
}


class Archiver(ABC):
    """
    Interface for external extraction tools.

    Implementations report which archives they can unpack and perform a
    full extraction into an output directory.
    """

    name: str = "archiver"

    @abstractmethod
    def can_extract(self, archive_path: Path) -> bool:
        """
        Check if this archiver handles the archive's format.

        Args:
            archive_path: Archive to check (only the file name is inspected)

        Returns:
            True if the format is supported
        """
        pass

    @abstractmethod
    def extract(self, archive_path: Path, destination: Path) -> None:
        """
        Extract every member of the archive into destination.

        Existing files are overwritten and symbolic links are not written
        out as separate files.

        Raises:
            ArchiveExtractionError: If the tool reports failure
        """
        pass


class SevenZipArchiver(Archiver):
    """7-Zip command line provider (7z, 7zz or 7za)."""

    name = "7-Zip"

    def __init__(self, executable: Path):
        self.executable = Path(executable)

    def can_extract(self, archive_path: Path) -> bool:
        return Path(archive_path).name.lower().endswith(SEVEN_ZIP_SUFFIXES)

    def build_command(self, archive_path: Path, destination: Path) -> List[str]:
        # x: full paths, -y: overwrite, -snl-: do not store links as files
        return [
            str(self.executable),
            "x",
            "-y",
            "-snl-",
            f"-o{destination}",
            str(archive_path),
        ]

    def extract(self, archive_path: Path, destination: Path) -> None:
        destination.mkdir(parents=True, exist_ok=True)
        cmd = self.build_command(archive_path, destination)
        logger.debug(f"Running: {' '.join(cmd)}")
        try:
            result = subprocess.run(cmd, capture_output=True, text=True)
        except OSError as e:
            raise ArchiveExtractionError(
                f"Failed to run {self.executable}: {e}"
            ) from e

        if result.returncode != 0:
            raise ArchiveExtractionError(
                f"7-Zip extraction of {archive_path.name} failed "
                f"(exit {result.returncode}): {result.stderr.strip()}"
            )

    def __repr__(self) -> str:
        return f"SevenZipArchiver({self.executable})"


def _os_family() -> str:
    if sys.platform.startswith("win"):
        return "win32"
    if sys.platform == "darwin":
        return "darwin"
    return "linux"


class ArchiverLocator:
    """
    Discovers an installed archiver and caches the result for the run.

    Names resolvable on PATH are preferred over well-known install paths.

    Example:
        >>> locator = ArchiverLocator()
        >>> archiver = locator.find()
        >>> archiver.can_extract(Path("android-ndk-r28c-darwin.dmg")) if archiver else False
        True
    """

    def __init__(
        self,
        names: Tuple[str, ...] = SEVEN_ZIP_NAMES,
        well_known_paths: Optional[Tuple[str, ...]] = None,
    ):
        self.names = names
        self.well_known_paths = (
            well_known_paths
            if well_known_paths is not None
            else SEVEN_ZIP_WELL_KNOWN_PATHS.get(_os_family(), ())
        )
        self._searched = False
        self._archiver: Optional[Archiver] = None

    def _discover(self) -> Optional[Path]:
        for name in self.names:
            found = shutil.which(name)
            if found:
                return Path(found)

        for candidate in self.well_known_paths:
            path = Path(candidate)
            if path.is_file() and os.access(path, os.X_OK):
                return path

        return None

    def find(self) -> Optional[Archiver]:
        """Return the archiver, searching only on the first call."""
        if not self._searched:
            executable = self._discover()
            self._searched = True
            if executable:
                self._archiver = SevenZipArchiver(executable)
                logger.debug(f"Using archiver: {executable}")
            else:
                logger.debug("No external archiver found")
        return self._archiver


__all__ = [
    "Archiver",
    "SevenZipArchiver",
    "ArchiverLocator",
    "SEVEN_ZIP_NAMES",
    "SEVEN_ZIP_WELL_KNOWN_PATHS",
]
