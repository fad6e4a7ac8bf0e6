"""
Shared utilities for CLI commands.

Provides configuration loading and console output helpers used by the
command modules.
"""

import logging
import sys
from typing import Callable, Optional

from ndkfetch.config import RunConfig, apply_cli_overrides, load_config
from ndkfetch.core.download import DownloadProgress, format_progress
from ndkfetch.ndk.pipeline import PairStatus, RunSummary

logger = logging.getLogger(__name__)


# ============================================================================
# Configuration Management
# ============================================================================


def resolve_run_config(args) -> RunConfig:
    """
    Build the effective configuration for a command.

    Raises:
        ConfigError: If the configuration file is missing or invalid
    """
    config = load_config(getattr(args, "config", None))
    return apply_cli_overrides(config, args)


# ============================================================================
# User Interface / Output Formatting
# ============================================================================


def print_error(message: str, details: Optional[str] = None):
    """
    Print error message to stderr in consistent format.

    Args:
        message: Main error message
        details: Optional additional details
    """
    print(f"ERROR: {message}", file=sys.stderr)
    if details:
        print(f"  {details}", file=sys.stderr)


def make_progress_printer(quiet: bool = False) -> Optional[Callable[[DownloadProgress], None]]:
    """Return a download progress callback writing to stderr, or None if quiet."""
    if quiet or not sys.stderr.isatty():
        return None

    def _print_progress(progress: DownloadProgress) -> None:
        end = "\n" if progress.bytes_downloaded >= progress.total_bytes else ""
        print(f"\r  {format_progress(progress)}", end=end, file=sys.stderr, flush=True)

    return _print_progress


_STATUS_LABELS = {
    PairStatus.INSTALLED: "installed",
    PairStatus.ALREADY_INSTALLED: "already installed",
    PairStatus.DOWNLOADED: "downloaded",
    PairStatus.SKIPPED: "skipped",
    PairStatus.FAILED: "FAILED",
}


def format_summary(summary: RunSummary) -> str:
    """
    Format a run summary, one line per pair.

    Example:
        >>> print(format_summary(summary))
        r28/Linux64: installed (/home/user/.ndkfetch/ndk/Linux64/28)
        r99/Linux64: skipped (Unknown NDK version: r99)
    """
    lines = []
    for result in summary.results:
        detail = str(result.path) if result.ok and result.path else result.message
        line = f"{result.label}: {_STATUS_LABELS[result.status]}"
        if detail:
            line += f" ({detail})"
        lines.append(line)
    return "\n".join(lines)
