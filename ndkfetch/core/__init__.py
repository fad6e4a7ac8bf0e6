"""
Core functionality for ndkfetch.

This package contains the host-facing building blocks the NDK pipeline
depends on: platform detection, downloads, verification, filesystem
helpers, directory layout and locking.
"""

from .directory import (
    get_base_dir,
    get_default_download_dir,
    get_default_install_root,
    get_install_dir,
    get_staging_dir,
)
from .download import DownloadArtifact, Fetcher, download_file
from .locking import LockManager
from .platform import ALL_PLATFORMS, detect_host, resolve_platforms
from .verification import IntegrityVerifier, compute_file_hash

__all__ = [
    "get_base_dir",
    "get_default_download_dir",
    "get_default_install_root",
    "get_install_dir",
    "get_staging_dir",
    "DownloadArtifact",
    "Fetcher",
    "download_file",
    "LockManager",
    "ALL_PLATFORMS",
    "detect_host",
    "resolve_platforms",
    "IntegrityVerifier",
    "compute_file_hash",
]
