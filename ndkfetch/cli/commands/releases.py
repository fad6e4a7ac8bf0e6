"""
List command implementation.

Shows known NDK releases and the platforms each is published for.
"""

import logging

from ndkfetch.core.platform import normalize_platform
from ndkfetch.ndk.registry import load_registry

logger = logging.getLogger(__name__)


def run(args) -> int:
    """
    Run the list command.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code (0 for success)
    """
    registry = load_registry()
    platform = normalize_platform(args.platform) if args.platform else None

    for number in registry.versions():
        release = registry.release(number)
        tags = sorted(release.platforms)
        if platform:
            if platform not in release.platforms:
                continue
            tags = [platform]
        print(f"{number:>3}  {release.name:<6}  {', '.join(tags)}")

    return 0
