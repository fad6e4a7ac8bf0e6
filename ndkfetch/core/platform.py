"""
Host platform detection for ndkfetch.

NDK releases are published per host platform. This module maps the current
operating system and CPU architecture to one of the fixed platform tags used
as registry keys and installation directory names.

Usage:
    from ndkfetch.core.platform import resolve_platforms

    resolve_platforms()          # detected host tags, e.g. ['Linux64']
    resolve_platforms("all")     # every known tag
    resolve_platforms("win32")   # ['Win32']
"""

import logging
import platform
from dataclasses import dataclass
from typing import List, Optional

logger = logging.getLogger(__name__)

WIN64 = "Win64"
WIN32 = "Win32"
LINUX64 = "Linux64"
LINUX32 = "Linux32"
MAC64 = "Mac64"
MAC32 = "Mac32"
MAC_ARM64 = "MacArm64"

ALL_PLATFORMS = (WIN64, WIN32, LINUX64, LINUX32, MAC64, MAC32, MAC_ARM64)

# First Windows 11 build; ARM64 Windows before it cannot emulate x64 binaries.
WINDOWS_X64_EMULATION_BUILD = 22000

_TAGS_BY_OS = {
    "windows": {"x64": WIN64, "arm64": WIN64, "x86": WIN32},
    "linux": {"x64": LINUX64, "arm64": LINUX64, "x86": LINUX32},
    "macos": {"x64": MAC64, "arm64": MAC_ARM64, "x86": MAC32},
}


@dataclass(frozen=True)
class HostInfo:
    """
    Detected host information.

    Attributes:
        os: 'windows', 'linux', 'macos' or the raw lowercase system name
        arch: 'x64', 'arm64', 'x86' or the raw lowercase machine name
        os_version: OS version string as reported by the platform module
    """

    os: str
    arch: str
    os_version: str

    def __str__(self) -> str:
        return f"{self.os}-{self.arch} v{self.os_version}"


def detect_host() -> HostInfo:
    """Detect the operating system family, architecture and OS version."""
    system = platform.system().lower()
    if system == "darwin":
        os_name = "macos"
        os_version = platform.mac_ver()[0] or "unknown"
    elif system == "windows":
        os_name = "windows"
        os_version = platform.version()
    else:
        os_name = system
        os_version = platform.release()

    return HostInfo(
        os=os_name, arch=_normalize_arch(platform.machine()), os_version=os_version
    )


def _normalize_arch(machine: str) -> str:
    machine = machine.lower()
    if machine in ("x86_64", "amd64", "x64"):
        return "x64"
    if machine in ("aarch64", "arm64", "armv8l"):
        return "arm64"
    if machine in ("i386", "i486", "i586", "i686", "x86"):
        return "x86"
    return machine


def _windows_build(os_version: str) -> Optional[int]:
    """Extract the build number from a version like '10.0.19041'."""
    parts = os_version.split(".")
    if len(parts) < 3:
        return None
    try:
        return int(parts[2])
    except ValueError:
        return None


def platforms_for_host(info: HostInfo) -> List[str]:
    """
    Map host information to platform tags.

    Unsupported operating systems or architectures resolve to every known
    tag, meaning "could not determine, try everything".

    Args:
        info: Host information to map

    Returns:
        List of platform tags
    """
    tags = _TAGS_BY_OS.get(info.os)
    if tags is None or info.arch not in tags:
        logger.warning(
            f"Could not determine NDK platform for host {info}; "
            f"trying all platforms: {', '.join(ALL_PLATFORMS)}"
        )
        return list(ALL_PLATFORMS)

    if info.os == "windows" and info.arch == "arm64":
        build = _windows_build(info.os_version)
        if build is None or build < WINDOWS_X64_EMULATION_BUILD:
            logger.info(
                "Windows on ARM64 before Windows 11 cannot run x64 binaries; "
                f"using {WIN32}"
            )
            return [WIN32]

    return [tags[info.arch]]


def resolve_platforms(override: Optional[str] = None) -> List[str]:
    """
    Resolve the platform tags to process.

    Args:
        override: None or 'auto' to detect the host, 'all' for every tag,
                  or a tag name (case-insensitive)

    Returns:
        List of platform tags

    Raises:
        ValueError: If override is not a known tag

    Example:
        >>> resolve_platforms("linux64")
        ['Linux64']
    """
    if override is None or override.lower() == "auto":
        return platforms_for_host(detect_host())

    if override.lower() == "all":
        return list(ALL_PLATFORMS)

    return [normalize_platform(override)]


def normalize_platform(name: str) -> str:
    """Return the canonical spelling of a platform tag."""
    for tag in ALL_PLATFORMS:
        if tag.lower() == name.lower():
            return tag
    raise ValueError(
        f"Unknown platform: {name}. "
        f"Expected one of: auto, all, {', '.join(ALL_PLATFORMS)}"
    )


__all__ = [
    "WIN64",
    "WIN32",
    "LINUX64",
    "LINUX32",
    "MAC64",
    "MAC32",
    "MAC_ARM64",
    "ALL_PLATFORMS",
    "HostInfo",
    "detect_host",
    "platforms_for_host",
    "resolve_platforms",
    "normalize_platform",
]
