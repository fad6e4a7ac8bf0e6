"""
Install command implementation.

Downloads, verifies and installs the requested NDK releases.
"""

import logging

from ndkfetch.cli.utils import format_summary, make_progress_printer, resolve_run_config
from ndkfetch.core.download import Fetcher
from ndkfetch.ndk.pipeline import NdkPipeline
from ndkfetch.ndk.registry import load_registry

logger = logging.getLogger(__name__)


def run(args) -> int:
    """
    Run the install command.

    Args:
        args: Parsed command-line arguments

    Returns:
        0 if every pair succeeded, 1 if any pair was skipped or failed

    Raises:
        ToolUnavailableError: If a required archiver is missing
        ConfigError: If the configuration is invalid
    """
    config = resolve_run_config(args)
    registry = load_registry()
    fetcher = Fetcher(progress_callback=make_progress_printer(args.quiet))

    logger.debug(f"Configuration: {config}")
    pipeline = NdkPipeline(registry, config, fetcher=fetcher)
    summary = pipeline.run()

    if summary.results and not args.quiet:
        print(format_summary(summary))
    return summary.exit_code
