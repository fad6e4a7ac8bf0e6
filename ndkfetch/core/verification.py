"""
Hash verification for downloaded NDK archives.

The registry records a bare hex digest for each archive; the hash algorithm
is inferred from the digest length. Digests of an unrecognized length
disable verification for that archive with a warning rather than failing,
since the recorded values for some old releases are unreliable.
"""

import hashlib
import logging
import secrets
from pathlib import Path
from typing import Dict, Optional, Set

from ndkfetch.core.exceptions import ChecksumMismatchError

logger = logging.getLogger(__name__)

# Hex digest length -> hashlib algorithm name
DIGEST_ALGORITHMS: Dict[int, str] = {
    32: "md5",
    40: "sha1",
    64: "sha256",
    96: "sha384",
    128: "sha512",
}

_HEX_CHARS = frozenset("0123456789abcdef")


def algorithm_for_digest(digest: str) -> Optional[str]:
    """
    Infer the hash algorithm from a hex digest.

    Args:
        digest: Hex digest string (any case)

    Returns:
        Algorithm name, or None if the length is not recognized or the
        string is not hexadecimal

    Example:
        >>> algorithm_for_digest("a" * 40)
        'sha1'
    """
    digest = digest.strip().lower()
    if not digest or not set(digest) <= _HEX_CHARS:
        return None
    return DIGEST_ALGORITHMS.get(len(digest))


def compute_file_hash(file_path: Path, algorithm: str = "sha256") -> str:
    """
    Compute the hex digest of a file.

    Args:
        file_path: Path to file
        algorithm: hashlib algorithm name

    Returns:
        Lowercase hex digest

    Raises:
        FileNotFoundError: If file doesn't exist
        ValueError: If algorithm is not supported
    """
    if not file_path.exists():
        raise FileNotFoundError(f"File not found: {file_path}")

    try:
        hasher = hashlib.new(algorithm)
    except ValueError:
        raise ValueError(f"Unsupported hash algorithm: {algorithm}")

    with open(file_path, "rb") as f:
        while chunk := f.read(1024 * 1024):
            hasher.update(chunk)

    return hasher.hexdigest()


def _constant_time_compare(a: str, b: str) -> bool:
    return secrets.compare_digest(a.encode("utf-8"), b.encode("utf-8"))


class IntegrityVerifier:
    """
    Verifies archives against recorded digests, once per path per run.

    Several platform tags of recent releases share one universal archive, so
    a successfully verified path is remembered and later requests for the
    same path return immediately.

    Example:
        >>> verifier = IntegrityVerifier()
        >>> verifier.verify(Path("android-ndk-r28c-windows.zip"), expected_sha1)
        True
    """

    def __init__(self):
        self._verified: Set[Path] = set()

    def is_verified(self, path: Path) -> bool:
        """Check whether path was already verified during this run."""
        return Path(path).resolve() in self._verified

    def verify(self, path: Path, expected_digest: str) -> bool:
        """
        Verify a file against an expected digest.

        Args:
            path: File to verify
            expected_digest: Hex digest; its length selects the algorithm

        Returns:
            True if the digest matches, was verified earlier in this run, or
            has an unrecognized length; False on mismatch

        Raises:
            FileNotFoundError: If the file doesn't exist
        """
        try:
            self.require(path, expected_digest)
        except ChecksumMismatchError as e:
            logger.error(str(e))
            return False
        return True

    def require(self, path: Path, expected_digest: str) -> None:
        """
        Verify a file, raising on mismatch.

        Raises:
            ChecksumMismatchError: If the digest does not match
            FileNotFoundError: If the file doesn't exist
        """
        path = Path(path)
        key = path.resolve()
        if key in self._verified:
            logger.debug(f"Already verified this run: {path.name}")
            return

        expected = expected_digest.strip().lower()
        algorithm = algorithm_for_digest(expected)
        if algorithm is None:
            logger.warning(
                f"Unrecognized digest '{expected_digest}' (length {len(expected)}) "
                f"for {path.name}; skipping verification"
            )
            return

        logger.info(f"Verifying {algorithm.upper()} of {path.name}")
        actual = compute_file_hash(path, algorithm)
        if not _constant_time_compare(actual, expected):
            raise ChecksumMismatchError(path.name, expected, actual)

        self._verified.add(key)


__all__ = [
    "DIGEST_ALGORITHMS",
    "algorithm_for_digest",
    "compute_file_hash",
    "IntegrityVerifier",
]
