"""
NDK installation pipeline.

Each (version, platform) pair runs through:

    lookup -> check existing install -> fetch -> verify -> extract
           -> locate root -> install

and produces a PairResult. A failing pair never stops the run, with one
exception: ToolUnavailableError, raised when an archive needs an external
archiver that is not installed, propagates out of NdkPipeline.run.
Cleanup of staging directories and downloaded archives happens once, after
all pairs, even when the run is aborted.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Iterable, List, Optional

from ndkfetch.config import RunConfig
from ndkfetch.core.directory import get_install_dir, get_staging_dir
from ndkfetch.core.download import Fetcher, filename_from_url
from ndkfetch.core.exceptions import (
    ConfigurationMiss,
    ExtractionError,
    FilesystemError,
    InstallLockTimeout,
    IntegrityError,
    RootNotFoundError,
    StructuralError,
    TransportError,
    UnknownVersionError,
    UnsupportedPlatformError,
)
from ndkfetch.core.filesystem import safe_rmtree
from ndkfetch.core.locking import LockManager
from ndkfetch.core.platform import resolve_platforms
from ndkfetch.core.verification import IntegrityVerifier
from ndkfetch.ndk.cleanup import CleanupCoordinator
from ndkfetch.ndk.extractor import ArchiveExtractor
from ndkfetch.ndk.installer import install, is_installed, prepare_destination
from ndkfetch.ndk.locator import locate_kit_root
from ndkfetch.ndk.registry import PlatformEntry, VersionRegistry

logger = logging.getLogger(__name__)

# Errors that abort only the current pair
PAIR_ERRORS = (
    TransportError,
    IntegrityError,
    ExtractionError,
    StructuralError,
    FilesystemError,
    InstallLockTimeout,
    OSError,
)


class PairStatus(Enum):
    INSTALLED = "installed"
    ALREADY_INSTALLED = "already-installed"
    DOWNLOADED = "downloaded"
    SKIPPED = "skipped"
    FAILED = "failed"


SUCCESS_STATUSES = frozenset(
    {PairStatus.INSTALLED, PairStatus.ALREADY_INSTALLED, PairStatus.DOWNLOADED}
)


@dataclass
class PairResult:
    """Outcome of processing one (version, platform) pair."""

    version: int
    platform: str
    status: PairStatus
    message: str = ""
    path: Optional[Path] = None
    """Install directory, or the archive for DOWNLOADED"""

    @property
    def ok(self) -> bool:
        return self.status in SUCCESS_STATUSES

    @property
    def label(self) -> str:
        return f"r{self.version}/{self.platform}"


@dataclass
class RunSummary:
    """Results of a complete run."""

    results: List[PairResult] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return all(r.ok for r in self.results)

    @property
    def exit_code(self) -> int:
        return 0 if self.ok else 1

    def count(self, status: PairStatus) -> int:
        return sum(1 for r in self.results if r.status is status)


class NdkPipeline:
    """
    Installs NDK releases described by a VersionRegistry.

    Collaborators hold the per-run state (verified paths, downloaded
    archives, discovered archiver, cleanup list) and may be injected.

    Example:
        >>> pipeline = NdkPipeline(load_registry(), RunConfig())
        >>> summary = pipeline.run([27], ["Linux64"])
        >>> summary.results[0].status
        <PairStatus.INSTALLED: 'installed'>
    """

    def __init__(
        self,
        registry: VersionRegistry,
        config: RunConfig,
        fetcher: Optional[Fetcher] = None,
        verifier: Optional[IntegrityVerifier] = None,
        extractor: Optional[ArchiveExtractor] = None,
        cleanup: Optional[CleanupCoordinator] = None,
        lock_manager: Optional[LockManager] = None,
    ):
        self.registry = registry
        self.config = config
        self.fetcher = fetcher or Fetcher()
        self.verifier = verifier or IntegrityVerifier()
        self.extractor = extractor or ArchiveExtractor()
        self.cleanup = cleanup or CleanupCoordinator()
        self.lock_manager = lock_manager or LockManager(config.lock_dir)

    def run(
        self,
        versions: Optional[Iterable[int]] = None,
        platforms: Optional[Iterable[str]] = None,
    ) -> RunSummary:
        """
        Process every requested pair, then clean up.

        Args:
            versions: Release numbers (default: config.versions, or the
                newest release if that is empty)
            platforms: Platform tags (default: resolved from config.platform)

        Raises:
            ToolUnavailableError: If a required archiver is missing
        """
        versions = list(versions or self.config.versions or [self.registry.latest()])
        platforms = list(platforms or resolve_platforms(self.config.platform))
        logger.debug(f"Versions: {versions}, platforms: {platforms}")

        summary = RunSummary()
        try:
            for version in versions:
                for platform in platforms:
                    summary.results.append(self.process_pair(version, platform))
        finally:
            self._finish()
        return summary

    def process_pair(self, version: int, platform: str) -> PairResult:
        """
        Run the pipeline for one pair.

        Returns:
            PairResult; recoverable failures are reported as SKIPPED or
            FAILED rather than raised
        """
        label = f"r{version}/{platform}"
        try:
            entry = self._lookup(version, platform)
        except ConfigurationMiss as e:
            logger.warning(f"{label}: {e}; skipping")
            return PairResult(version, platform, PairStatus.SKIPPED, str(e))

        try:
            with self.lock_manager.install_lock(platform, version):
                return self._process_entry(version, platform, entry)
        except PAIR_ERRORS as e:
            logger.error(f"{label}: {e}")
            return PairResult(version, platform, PairStatus.FAILED, str(e))

    def _lookup(self, version: int, platform: str) -> PlatformEntry:
        if version not in self.registry:
            raise UnknownVersionError(version)
        entry = self.registry.lookup(version, platform)
        if entry is None:
            raise UnsupportedPlatformError(version, platform)
        filename_from_url(entry.url)
        return entry

    def _process_entry(
        self, version: int, platform: str, entry: PlatformEntry
    ) -> PairResult:
        label = f"r{version}/{platform}"
        dest_dir = get_install_dir(self.config.install_root, platform, version)

        if is_installed(dest_dir):
            logger.info(f"{label}: already installed at {dest_dir}")
            return PairResult(
                version, platform, PairStatus.ALREADY_INSTALLED, path=dest_dir
            )

        download_dir = Path(self.config.download_dir)
        download_dir.mkdir(parents=True, exist_ok=True)

        artifact = self.fetcher.fetch(entry.url, download_dir)
        self.verifier.require(artifact.path, entry.digest)
        artifact.verified = self.verifier.is_verified(artifact.path)

        if self.config.skip_extract:
            logger.info(f"{label}: downloaded {artifact.path.name}")
            return PairResult(
                version, platform, PairStatus.DOWNLOADED, path=artifact.path
            )

        prepare_destination(dest_dir)
        staging_dir = get_staging_dir(download_dir, platform, version)
        self.cleanup.schedule(staging_dir)
        safe_rmtree(staging_dir, require_prefix=download_dir)

        depth = self.extractor.extract(artifact.path, staging_dir)
        root = locate_kit_root(staging_dir, depth)
        if root is None:
            raise RootNotFoundError(staging_dir, depth)
        logger.debug(f"{label}: NDK root at {root}")

        if not install(root, dest_dir):
            raise StructuralError(f"Installed tree at {dest_dir} is not a valid NDK root")

        logger.info(f"{label}: installed to {dest_dir}")
        return PairResult(version, platform, PairStatus.INSTALLED, path=dest_dir)

    def _finish(self) -> None:
        if not self.config.retain_archives:
            for path in self.fetcher.downloaded:
                self.cleanup.schedule(path)
        result = self.cleanup.run()
        if result.failed:
            logger.warning(f"{len(result.failed)} temporary path(s) could not be removed")


__all__ = [
    "NdkPipeline",
    "PairResult",
    "PairStatus",
    "RunSummary",
    "SUCCESS_STATUSES",
]
