"""
Directory layout for ndkfetch.

Base Directory (~/.ndkfetch/ or %USERPROFILE%\\.ndkfetch\\, or $NDKFETCH_HOME):
    - ndk/<platform>/<version>/ : Installed NDK roots
    - downloads/                : Downloaded archives
    - downloads/staging/        : Per-pair extraction workspaces (ephemeral)
    - lock/                     : Installation lock files
"""

import os
from pathlib import Path

from ndkfetch.core.exceptions import ConfigError

HOME_ENV_VAR = "NDKFETCH_HOME"


def get_base_dir() -> Path:
    """
    Get the platform-specific ndkfetch base directory.

    Returns:
        $NDKFETCH_HOME if set, otherwise ~/.ndkfetch
        (%USERPROFILE%\\.ndkfetch on Windows)

    Raises:
        ConfigError: If the home directory cannot be determined on Windows
    """
    override = os.environ.get(HOME_ENV_VAR)
    if override:
        return Path(override).expanduser()

    if os.name == "nt":
        user_profile = os.environ.get("USERPROFILE")
        if not user_profile:
            raise ConfigError(
                "USERPROFILE environment variable is not set. "
                f"Set {HOME_ENV_VAR} to choose a base directory."
            )
        return Path(user_profile) / ".ndkfetch"
    return Path.home() / ".ndkfetch"


def get_default_install_root() -> Path:
    """Default root under which NDKs are installed."""
    return get_base_dir() / "ndk"


def get_default_download_dir() -> Path:
    """Default directory for downloaded archives."""
    return get_base_dir() / "downloads"


def get_install_dir(install_root: Path, platform: str, version: int) -> Path:
    """
    Get the installation directory for a (platform, version) pair.

    Example:
        >>> get_install_dir(Path("/opt/ndk"), "Win64", 28)
        PosixPath('/opt/ndk/Win64/28')
    """
    return Path(install_root) / platform / str(version)


def get_staging_dir(download_dir: Path, platform: str, version: int) -> Path:
    """Get the extraction workspace for a (platform, version) pair."""
    return Path(download_dir) / "staging" / f"{platform}-{version}"


__all__ = [
    "HOME_ENV_VAR",
    "get_base_dir",
    "get_default_install_root",
    "get_default_download_dir",
    "get_install_dir",
    "get_staging_dir",
]
