"""
NDK release registry.

This module provides the table of known NDK releases with per-platform
download URLs and digests. The table is loaded once from the bundled
releases.json into immutable objects and passed explicitly to the
components that need it.
"""

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional, Union, overload

from ndkfetch.core.download import filename_from_url
from ndkfetch.core.exceptions import MissingFilenameError, RegistryError
from ndkfetch.core.platform import ALL_PLATFORMS
from ndkfetch.core.verification import algorithm_for_digest

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PlatformEntry:
    """Download information for one release on one platform."""

    url: str
    """Download URL for the NDK archive"""

    digest: str
    """Hex digest of the archive; its length selects the hash algorithm"""

    @property
    def filename(self) -> str:
        """Last path component of the URL, or '' if it has none."""
        try:
            return filename_from_url(self.url)
        except MissingFilenameError:
            return ""


@dataclass(frozen=True)
class Release:
    """A numbered NDK release (e.g. 27 for r27c)."""

    number: int
    name: str
    platforms: Mapping[str, PlatformEntry]


class VersionRegistry:
    """
    Immutable table of NDK releases.

    Example:
        >>> registry = load_registry()
        >>> entry = registry.lookup(27, "Win64")
        >>> entry.filename
        'android-ndk-r27c-windows.zip'
    """

    def __init__(self, releases: Mapping[int, Release]):
        self._releases = MappingProxyType(dict(releases))

    @overload
    def lookup(self, version: int) -> Optional[Mapping[str, PlatformEntry]]: ...

    @overload
    def lookup(self, version: int, platform: str) -> Optional[PlatformEntry]: ...

    def lookup(
        self, version: int, platform: Optional[str] = None
    ) -> Union[Mapping[str, PlatformEntry], PlatformEntry, None]:
        """
        Look up a release, or one platform entry of a release.

        Args:
            version: Release number
            platform: Optional platform tag

        Returns:
            The release's platform mapping when platform is None, otherwise
            the PlatformEntry; None if the version or platform is absent
        """
        release = self._releases.get(version)
        if release is None:
            return None
        if platform is None:
            return release.platforms
        return release.platforms.get(platform)

    def release(self, version: int) -> Optional[Release]:
        return self._releases.get(version)

    def versions(self) -> List[int]:
        """All release numbers in ascending order."""
        return sorted(self._releases)

    def latest(self) -> int:
        """Newest release number."""
        if not self._releases:
            raise RegistryError("Registry contains no releases")
        return max(self._releases)

    def __contains__(self, version: object) -> bool:
        return version in self._releases

    def __len__(self) -> int:
        return len(self._releases)


def _default_registry_path() -> Path:
    return Path(__file__).parent.parent / "data" / "releases.json"


def _parse_entry(version: int, platform: str, raw: Any, source: Path) -> PlatformEntry:
    if platform not in ALL_PLATFORMS:
        raise RegistryError(
            f"Unknown platform '{platform}' for release {version} in {source}"
        )
    if not isinstance(raw, dict):
        raise RegistryError(f"Invalid entry for {version}/{platform} in {source}")

    url = str(raw.get("url") or "").strip()
    digest = str(raw.get("digest") or "").strip().lower()
    if not url:
        raise RegistryError(f"Missing URL for {version}/{platform} in {source}")
    if not digest:
        raise RegistryError(f"Missing digest for {version}/{platform} in {source}")
    if any(c not in "0123456789abcdef" for c in digest):
        raise RegistryError(
            f"Digest for {version}/{platform} is not hexadecimal in {source}"
        )
    if algorithm_for_digest(digest) is None:
        logger.debug(
            f"Digest for {version}/{platform} has unrecognized length {len(digest)}"
        )
    return PlatformEntry(url=url, digest=digest)


def parse_registry(data: Dict[str, Any], source: Path) -> VersionRegistry:
    """
    Build a registry from parsed releases.json content.

    Raises:
        RegistryError: If the structure or any entry is invalid
    """
    if not isinstance(data, dict) or "releases" not in data:
        raise RegistryError(
            f"Invalid registry structure: missing 'releases' key\nFile: {source}"
        )

    releases: Dict[int, Release] = {}
    for key, raw_release in data["releases"].items():
        try:
            number = int(key)
        except (TypeError, ValueError):
            raise RegistryError(f"Release key '{key}' is not an integer in {source}")
        if number <= 0:
            raise RegistryError(f"Release number must be positive: {number}")

        raw_platforms = raw_release.get("platforms", {})
        platforms = {
            tag: _parse_entry(number, tag, raw, source)
            for tag, raw in raw_platforms.items()
        }
        releases[number] = Release(
            number=number,
            name=str(raw_release.get("name") or f"r{number}"),
            platforms=MappingProxyType(platforms),
        )

    return VersionRegistry(releases)


def load_registry(path: Optional[Path] = None) -> VersionRegistry:
    """
    Load the release registry.

    Args:
        path: Optional path to a releases JSON file.
              If None, uses the bundled data/releases.json

    Raises:
        RegistryError: If the file cannot be loaded or parsed
    """
    path = Path(path) if path else _default_registry_path()
    if not path.exists():
        raise RegistryError(f"Registry file not found: {path}")

    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise RegistryError(f"Invalid JSON in registry file: {e}\nFile: {path}") from e

    registry = parse_registry(data, path)
    logger.debug(f"Loaded registry with {len(registry)} releases from {path}")
    return registry


__all__ = [
    "PlatformEntry",
    "Release",
    "VersionRegistry",
    "load_registry",
    "parse_registry",
]
