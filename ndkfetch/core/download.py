"""
Network download manager for NDK archives.

This module provides:
- Streaming HTTP/HTTPS downloads with TLS verification
- Resume of partial downloads (using Range headers)
- Progress reporting (bytes, percentage, speed, ETA)
- Retry logic with exponential backoff
- A Fetcher that reuses archives already present in the download directory
  and records which files it downloaded itself
"""

import logging
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, List, Optional
from urllib.parse import unquote, urlparse

import requests
from requests.exceptions import RequestException

from ndkfetch.core.exceptions import DownloadError, MissingFilenameError

logger = logging.getLogger(__name__)

CHUNK_SIZE = 64 * 1024


@dataclass
class DownloadProgress:
    """Progress information for a download."""

    bytes_downloaded: int
    total_bytes: int
    percentage: float
    speed_bps: float  # bytes per second
    eta_seconds: float

    def __str__(self) -> str:
        return format_progress(self)


@dataclass
class DownloadArtifact:
    """A local archive obtained for a registry URL."""

    path: Path
    url: str
    fresh: bool
    """Whether this run downloaded the file (False if it was already present)"""

    verified: bool = False
    """Whether the file passed integrity verification during this run"""


def filename_from_url(url: str) -> str:
    """
    Return the last path component of a URL.

    Raises:
        MissingFilenameError: If the URL path has no file name

    Example:
        >>> filename_from_url("https://dl.google.com/android/repository/android-ndk-r28c-linux.zip")
        'android-ndk-r28c-linux.zip'
    """
    name = unquote(urlparse(url).path).rsplit("/", 1)[-1]
    if not name:
        raise MissingFilenameError(url)
    return name


def download_file(
    url: str,
    destination: Path,
    progress_callback: Optional[Callable[[DownloadProgress], None]] = None,
    resume: bool = True,
    timeout: int = 30,
    max_retries: int = 3,
) -> Path:
    """
    Download a file with retries.

    Data is written to '<destination>.part' and renamed on completion, so a
    file at destination is always complete.

    Args:
        url: URL to download from
        destination: Local path to save file
        progress_callback: Optional callback for progress updates
        resume: Whether to resume a partial '.part' file
        timeout: Request timeout in seconds
        max_retries: Maximum number of attempts

    Returns:
        Path to downloaded file

    Raises:
        DownloadError: If download fails after retries
        ValueError: If URL or destination is empty
    """
    if not url:
        raise ValueError("URL cannot be empty")
    if not destination:
        raise ValueError("Destination path cannot be empty")

    destination = Path(destination)
    destination.parent.mkdir(parents=True, exist_ok=True)
    partial = destination.with_name(destination.name + ".part")

    for attempt in range(max_retries):
        resume_from = partial.stat().st_size if resume and partial.exists() else 0
        try:
            _download_with_progress(
                url, partial, resume_from, progress_callback, timeout
            )
            partial.replace(destination)
            logger.info(f"Download complete: {destination}")
            return destination
        except RequestException as e:
            if attempt == max_retries - 1:
                partial.unlink(missing_ok=True)
                raise DownloadError(
                    f"Download of {url} failed after {max_retries} attempts: {e}"
                ) from e

            backoff_seconds = 2**attempt
            logger.warning(
                f"Download attempt {attempt + 1} failed: {e}. "
                f"Retrying in {backoff_seconds}s..."
            )
            time.sleep(backoff_seconds)

    raise DownloadError(f"Download of {url} failed for unknown reason")


def _download_with_progress(
    url: str,
    partial: Path,
    resume_from: int,
    progress_callback: Optional[Callable[[DownloadProgress], None]],
    timeout: int,
) -> None:
    headers = {}
    if resume_from > 0:
        headers["Range"] = f"bytes={resume_from}-"
        logger.info(f"Resuming download from byte {resume_from}")

    logger.info(f"Downloading from {url}")
    with requests.get(
        url, headers=headers, stream=True, timeout=timeout, allow_redirects=True
    ) as response:
        response.raise_for_status()

        # Server ignored the Range header; start over.
        if resume_from > 0 and response.status_code != 206:
            resume_from = 0

        content_length = response.headers.get("content-length")
        total_size = int(content_length) + resume_from if content_length else 0

        mode = "ab" if resume_from > 0 else "wb"
        downloaded = resume_from
        start_time = time.time()
        last_progress_time = start_time

        with open(partial, mode) as f:
            for chunk in response.iter_content(chunk_size=CHUNK_SIZE):
                if not chunk:
                    continue
                f.write(chunk)
                downloaded += len(chunk)

                current_time = time.time()
                if progress_callback and (
                    current_time - last_progress_time >= 0.5
                    or downloaded == total_size
                ):
                    elapsed = current_time - start_time
                    speed = (downloaded - resume_from) / elapsed if elapsed > 0 else 0
                    remaining = total_size - downloaded if total_size > 0 else 0
                    progress_callback(
                        DownloadProgress(
                            bytes_downloaded=downloaded,
                            total_bytes=total_size if total_size > 0 else downloaded,
                            percentage=(downloaded / total_size * 100)
                            if total_size > 0
                            else 0,
                            speed_bps=speed,
                            eta_seconds=remaining / speed if speed > 0 else 0,
                        )
                    )
                    last_progress_time = current_time


def format_progress(progress: DownloadProgress) -> str:
    """
    Format progress for display.

    Example:
        >>> progress = DownloadProgress(52428800, 104857600, 50.0, 1048576, 50)
        >>> print(format_progress(progress))
        50.0/100.0 MB (50.0%) at 1.0 MB/s ETA: 50s
    """
    mb_downloaded = progress.bytes_downloaded / 1024 / 1024
    mb_total = progress.total_bytes / 1024 / 1024
    speed_mbps = progress.speed_bps / 1024 / 1024

    if progress.percentage > 0:
        return (
            f"{mb_downloaded:.1f}/{mb_total:.1f} MB "
            f"({progress.percentage:.1f}%) "
            f"at {speed_mbps:.1f} MB/s "
            f"ETA: {progress.eta_seconds:.0f}s"
        )
    return f"{mb_downloaded:.1f} MB at {speed_mbps:.1f} MB/s"


class Fetcher:
    """
    Obtains archives into a download directory.

    An archive whose file name already exists in the directory is reused
    without network access and is never scheduled for deletion. Archives
    downloaded by this run are appended to `downloaded` so the cleanup pass
    can remove them.

    Example:
        >>> fetcher = Fetcher()
        >>> artifact = fetcher.fetch(entry.url, Path("~/.ndkfetch/downloads"))
        >>> artifact.fresh
        True
    """

    def __init__(
        self,
        progress_callback: Optional[Callable[[DownloadProgress], None]] = None,
        timeout: int = 30,
        max_retries: int = 3,
    ):
        self.progress_callback = progress_callback
        self.timeout = timeout
        self.max_retries = max_retries
        self.downloaded: List[Path] = []

    def fetch(self, url: str, dest_dir: Path) -> DownloadArtifact:
        """
        Return a local copy of url inside dest_dir.

        Raises:
            MissingFilenameError: If the URL has no file name
            DownloadError: If the transfer fails
        """
        local_path = Path(dest_dir) / filename_from_url(url)
        if local_path.is_file():
            logger.info(f"Using existing archive: {local_path}")
            return DownloadArtifact(path=local_path, url=url, fresh=False)

        download_file(
            url,
            local_path,
            progress_callback=self.progress_callback,
            timeout=self.timeout,
            max_retries=self.max_retries,
        )
        self.downloaded.append(local_path)
        return DownloadArtifact(path=local_path, url=url, fresh=True)


__all__ = [
    "DownloadProgress",
    "DownloadArtifact",
    "Fetcher",
    "download_file",
    "filename_from_url",
    "format_progress",
]
