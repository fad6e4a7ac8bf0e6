"""
Archive extraction for NDK downloads.

Extraction strategy is chosen purely from the archive's file name:

    Format                      Strategy          Archiver      Depth hint
    .dmg .bin .exe              external only     required      5
    .zip                        external/zipfile  optional      3
    .tar.gz .tar.xz .tar.bz2    two-stage         required      3

A missing archiver for a "required" format raises ToolUnavailableError,
which stops the whole run: there is no in-process way to unpack these and
skipping them silently would report a partial run as a success. Zip
archives fall back to the zipfile module instead.
"""

import logging
import os
import stat
import zipfile
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional, Tuple

from ndkfetch.core.exceptions import (
    ArchiveExtractionError,
    ToolUnavailableError,
    UnsupportedArchiveFormat,
)
from ndkfetch.core.filesystem import (
    IS_WINDOWS,
    is_relative_to,
    safe_rmtree,
    validate_archive_member,
)
from ndkfetch.ndk.archivers import Archiver, ArchiverLocator

logger = logging.getLogger(__name__)

OUTER_STAGE_DIR = ".outer"


class Strategy(Enum):
    IMAGE = "image"
    ZIP = "zip"
    TWO_STAGE_TAR = "two-stage-tar"


@dataclass(frozen=True)
class FormatPolicy:
    """How one family of archive suffixes is extracted."""

    suffixes: Tuple[str, ...]
    strategy: Strategy
    requires_archiver: bool
    depth_hint: int


FORMAT_POLICIES = (
    FormatPolicy((".dmg", ".bin", ".exe"), Strategy.IMAGE, True, 5),
    FormatPolicy((".zip",), Strategy.ZIP, False, 3),
    FormatPolicy((".tar.gz", ".tar.xz", ".tar.bz2"), Strategy.TWO_STAGE_TAR, True, 3),
)


def policy_for(archive_path: Path) -> FormatPolicy:
    """
    Select the extraction policy for an archive.

    Raises:
        UnsupportedArchiveFormat: If no policy matches the file name
    """
    name = Path(archive_path).name.lower()
    for policy in FORMAT_POLICIES:
        if name.endswith(policy.suffixes):
            return policy
    supported = ", ".join(s for p in FORMAT_POLICIES for s in p.suffixes)
    raise UnsupportedArchiveFormat(
        f"Unsupported archive format: {Path(archive_path).name}. Supported: {supported}"
    )


class ArchiveExtractor:
    """
    Extracts NDK archives into a staging directory.

    Example:
        >>> extractor = ArchiveExtractor(ArchiverLocator())
        >>> depth = extractor.extract(Path("android-ndk-r28c-linux.zip"), staging)
        >>> depth
        3
    """

    def __init__(self, locator: Optional[ArchiverLocator] = None):
        self.locator = locator or ArchiverLocator()

    def extract(self, archive_path: Path, staging_dir: Path) -> int:
        """
        Extract an archive.

        Args:
            archive_path: Archive to extract
            staging_dir: Fresh directory to extract into (created if missing)

        Returns:
            Depth hint for the root directory search

        Raises:
            ToolUnavailableError: If the format requires an archiver and none
                is installed
            UnsupportedArchiveFormat: If the file name has no known suffix
            ArchiveExtractionError: If extraction fails
        """
        archive_path = Path(archive_path)
        if not archive_path.is_file():
            raise ArchiveExtractionError(f"Archive not found: {archive_path}")

        policy = policy_for(archive_path)
        archiver = self.locator.find()
        if archiver is not None and not archiver.can_extract(archive_path):
            logger.debug(f"{archiver.name} cannot extract {archive_path.name}")
            archiver = None
        if archiver is None and policy.requires_archiver:
            raise ToolUnavailableError(archive_path.name)

        staging_dir.mkdir(parents=True, exist_ok=True)
        logger.info(f"Extracting {archive_path.name} to {staging_dir}")

        if policy.strategy is Strategy.TWO_STAGE_TAR:
            self._extract_two_stage(archiver, archive_path, staging_dir)
        elif archiver is not None:
            archiver.extract(archive_path, staging_dir)
        else:
            logger.info("No external archiver found; using built-in zip support")
            extract_zip(archive_path, staging_dir)

        return policy.depth_hint

    def _extract_two_stage(
        self, archiver: Archiver, archive_path: Path, staging_dir: Path
    ) -> None:
        outer_dir = staging_dir / OUTER_STAGE_DIR
        archiver.extract(archive_path, outer_dir)
        try:
            inner = _find_inner_tar(outer_dir)
            archiver.extract(inner, staging_dir)
        finally:
            safe_rmtree(outer_dir, require_prefix=staging_dir)


def _find_inner_tar(outer_dir: Path) -> Path:
    files = [p for p in outer_dir.iterdir() if p.is_file()]
    tars = [p for p in files if p.name.lower().endswith(".tar")]
    if len(tars) == 1:
        return tars[0]
    if len(files) == 1:
        return files[0]
    raise ArchiveExtractionError(
        f"Expected a single tar member after decompression in {outer_dir}, "
        f"found: {', '.join(sorted(p.name for p in files)) or 'nothing'}"
    )


def extract_zip(archive_path: Path, destination: Path) -> None:
    """
    Extract a zip archive with the zipfile module.

    Unix permission bits recorded in the archive are applied so that NDK
    tools stay executable, and symbolic links are recreated as links when
    their target stays inside the destination.

    Raises:
        InsecureArchiveError: If a member attempts directory traversal
        ArchiveExtractionError: If the archive is corrupt
    """
    destination.mkdir(parents=True, exist_ok=True)
    try:
        with zipfile.ZipFile(archive_path, "r") as zf:
            members = zf.infolist()
            for info in members:
                validate_archive_member(info.filename, destination)

            for info in members:
                _extract_zip_member(zf, info, destination)
    except zipfile.BadZipFile as e:
        raise ArchiveExtractionError(f"Corrupt zip archive {archive_path}: {e}")


def _extract_zip_member(
    zf: zipfile.ZipFile, info: zipfile.ZipInfo, destination: Path
) -> None:
    mode = info.external_attr >> 16
    target = destination / info.filename

    if stat.S_ISLNK(mode) and not IS_WINDOWS:
        link_target = zf.read(info).decode("utf-8")
        target.parent.mkdir(parents=True, exist_ok=True)
        if target.is_symlink() or target.exists():
            target.unlink()
        os.symlink(link_target, target)
        resolved = (target.parent / link_target).resolve()
        if not is_relative_to(resolved, destination.resolve()):
            target.unlink()
            logger.warning(f"Skipped symlink escaping archive: {info.filename}")
        return

    zf.extract(info, destination)
    if not IS_WINDOWS and mode and not info.is_dir():
        os.chmod(target, 0o755 if mode & stat.S_IXUSR else 0o644)


__all__ = [
    "ArchiveExtractor",
    "FormatPolicy",
    "FORMAT_POLICIES",
    "Strategy",
    "policy_for",
    "extract_zip",
]
