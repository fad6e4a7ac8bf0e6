"""
Centralized exception hierarchy for ndkfetch.

Failures are grouped by how far they propagate: configuration misses,
transport, integrity, extraction and structural failures abort a single
(version, platform) pair, while ToolUnavailableError terminates the run.
"""


# ============================================================================
# Base Exceptions
# ============================================================================


class NdkFetchError(Exception):
    """Base exception for all ndkfetch errors."""

    pass


# ============================================================================
# Registry / Configuration Exceptions
# ============================================================================


class RegistryError(NdkFetchError):
    """Raised when the release registry data cannot be loaded."""

    pass


class ConfigError(NdkFetchError):
    """Raised when the run configuration is invalid."""

    pass


class ConfigurationMiss(NdkFetchError):
    """Base exception for a pair the registry cannot satisfy."""

    pass


class UnknownVersionError(ConfigurationMiss):
    """Requested release is not in the registry."""

    def __init__(self, version: int):
        self.version = version
        super().__init__(f"Unknown NDK version: r{version}")


class UnsupportedPlatformError(ConfigurationMiss):
    """Release exists but is not published for the platform."""

    def __init__(self, version: int, platform: str):
        self.version = version
        self.platform = platform
        super().__init__(f"NDK r{version} is not available for {platform}")


class MissingFilenameError(ConfigurationMiss):
    """Registry entry URL has no file name component."""

    def __init__(self, url: str):
        self.url = url
        super().__init__(f"Cannot determine archive file name from URL: {url}")


# ============================================================================
# Pipeline Exceptions
# ============================================================================


class TransportError(NdkFetchError):
    """Base exception for network transfer failures."""

    pass


class DownloadError(TransportError):
    """Raised when a download fails after all retries."""

    pass


class IntegrityError(NdkFetchError):
    """Base exception for integrity verification failures."""

    pass


class ChecksumMismatchError(IntegrityError):
    """Downloaded artifact does not match the recorded digest."""

    def __init__(self, path, expected: str, actual: str):
        self.path = path
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Checksum mismatch for {path}: expected {expected}, got {actual}"
        )


class ExtractionError(NdkFetchError):
    """Base exception for archive extraction failures."""

    pass


class ArchiveExtractionError(ExtractionError):
    """Failed to extract an archive."""

    pass


class UnsupportedArchiveFormat(ExtractionError):
    """Archive suffix is not one of the supported formats."""

    pass


class InsecureArchiveError(ExtractionError):
    """Archive contains insecure paths (directory traversal attempt)."""

    pass


class ToolUnavailableError(NdkFetchError):
    """
    Required external archiver is not installed.

    Raised only for formats without an in-process fallback; the run stops.
    """

    def __init__(self, archive_name: str):
        self.archive_name = archive_name
        super().__init__(
            f"Extracting {archive_name} requires 7-Zip, which was not found. "
            "Install it (https://www.7-zip.org/, 'apt install 7zip', "
            "'brew install sevenzip') and make sure it is on PATH."
        )


class StructuralError(NdkFetchError):
    """Base exception for unexpected extracted-tree layouts."""

    pass


class RootNotFoundError(StructuralError):
    """No NDK root directory found in the extracted tree."""

    def __init__(self, search_dir, max_depth: int):
        self.search_dir = search_dir
        self.max_depth = max_depth
        super().__init__(
            f"No NDK root found under {search_dir} (searched {max_depth} levels)"
        )


class FilesystemError(NdkFetchError):
    """Base exception for filesystem operations."""

    pass


class InstallLockTimeout(NdkFetchError):
    """Raised when an installation lock cannot be acquired within timeout."""

    pass
