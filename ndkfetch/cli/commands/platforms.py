"""
Platforms command implementation.

Shows the host information and the platform tags selected for it.
"""

import logging

from ndkfetch.core.platform import detect_host, platforms_for_host

logger = logging.getLogger(__name__)


def run(args) -> int:
    """
    Run the platforms command.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code (0 for success)
    """
    host = detect_host()
    print(f"Host: {host}")
    for tag in platforms_for_host(host):
        print(f"  {tag}")
    return 0
