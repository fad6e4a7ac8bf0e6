"""
ndkfetch CLI argument parser.

This module implements the command-line interface for ndkfetch using argparse.
"""

import argparse
import importlib
import logging
import sys
from importlib.metadata import PackageNotFoundError, version
from pathlib import Path
from typing import List, Optional

from ndkfetch.cli.utils import print_error
from ndkfetch.core.exceptions import ConfigError, RegistryError, ToolUnavailableError
from ndkfetch.core.platform import ALL_PLATFORMS

try:
    __version__ = version("ndkfetch")
except PackageNotFoundError:
    __version__ = "0.1.0"

logger = logging.getLogger(__name__)

# Exit codes
EXIT_OK = 0
EXIT_PAIR_FAILURES = 1
EXIT_FATAL = 2


class CLI:
    """ndkfetch command-line interface."""

    def __init__(self):
        """Initialize CLI with argument parser."""
        self.parser = self._create_parser()

    def _create_parser(self) -> argparse.ArgumentParser:
        """
        Create argument parser with all subcommands.

        Returns:
            Configured ArgumentParser instance
        """
        parser = argparse.ArgumentParser(
            prog="ndkfetch",
            description="ndkfetch - Download, verify and install Android NDK releases",
            epilog='Use "ndkfetch COMMAND --help" for command-specific help',
            formatter_class=argparse.RawDescriptionHelpFormatter,
        )

        # Global options
        parser.add_argument(
            "--version", action="version", version=f"ndkfetch {__version__}"
        )
        parser.add_argument(
            "--verbose", "-v", action="store_true", help="Enable verbose output"
        )
        parser.add_argument(
            "--quiet",
            "-q",
            action="store_true",
            help="Enable minimal output (errors only)",
        )
        parser.add_argument(
            "--config",
            type=Path,
            metavar="PATH",
            help="Path to configuration file (default: ./ndkfetch.yaml)",
        )

        # Subcommands
        subparsers = parser.add_subparsers(
            dest="command", help="Available commands", metavar="COMMAND"
        )

        self._add_install_command(subparsers)
        self._add_list_command(subparsers)
        self._add_platforms_command(subparsers)

        return parser

    def _add_install_command(self, subparsers):
        """Add 'install' subcommand."""
        parser = subparsers.add_parser(
            "install",
            help="Download and install NDK releases",
            description=(
                "Download, verify and install NDK releases into "
                "<install-root>/<platform>/<version>/"
            ),
        )
        parser.add_argument(
            "versions",
            nargs="*",
            metavar="VERSION",
            help="NDK release numbers, e.g. 28 or r28c (default: newest)",
        )
        parser.add_argument(
            "--platform",
            metavar="TAG",
            help=(
                f"Target platform: {', '.join(ALL_PLATFORMS)}, 'all', "
                "or 'auto' (default: detect host)"
            ),
        )
        parser.add_argument(
            "--install-root",
            type=Path,
            metavar="DIR",
            help="Installation root (default: ~/.ndkfetch/ndk)",
        )
        parser.add_argument(
            "--download-dir",
            type=Path,
            metavar="DIR",
            help="Directory for downloaded archives (default: ~/.ndkfetch/downloads)",
        )
        parser.add_argument(
            "--keep-archives",
            action="store_true",
            help="Keep downloaded archives after installation",
        )
        parser.add_argument(
            "--skip-extract",
            action="store_true",
            help="Only download and verify archives (implies --keep-archives)",
        )

    def _add_list_command(self, subparsers):
        """Add 'list' subcommand."""
        parser = subparsers.add_parser(
            "list",
            help="List known NDK releases",
            description="List NDK releases and the platforms they are published for",
        )
        parser.add_argument(
            "--platform",
            metavar="TAG",
            help="Only list releases available for this platform",
        )

    def _add_platforms_command(self, subparsers):
        """Add 'platforms' subcommand."""
        subparsers.add_parser(
            "platforms",
            help="Show detected host platform tags",
            description="Show the platform tags ndkfetch selects for this host",
        )

    def parse_args(self, args: Optional[List[str]] = None):
        """
        Parse command-line arguments.

        Args:
            args: Arguments to parse (uses sys.argv if None)

        Returns:
            Parsed arguments namespace
        """
        return self.parser.parse_args(args)

    def run(self, args: Optional[List[str]] = None) -> int:
        """
        Run CLI with given arguments.

        Args:
            args: Arguments to parse (uses sys.argv if None)

        Returns:
            Exit code: 0 on success, 1 if any pair was skipped or failed,
            2 on a run-fatal error
        """
        parsed_args = self.parse_args(args)

        # Configure logging
        self._configure_logging(parsed_args)

        # Check if command specified
        if not parsed_args.command:
            self.parser.print_help()
            return EXIT_PAIR_FAILURES

        try:
            return self._dispatch_command(parsed_args)
        except KeyboardInterrupt:
            logger.info("Operation cancelled by user")
            return 130  # Standard exit code for SIGINT
        except ToolUnavailableError as e:
            print_error(str(e))
            return EXIT_FATAL
        except (ConfigError, RegistryError, ValueError) as e:
            print_error("Configuration error", str(e))
            return EXIT_FATAL

    def _configure_logging(self, args):
        """
        Configure logging based on verbose/quiet flags.

        Args:
            args: Parsed arguments with verbose/quiet flags
        """
        if args.verbose:
            level = logging.DEBUG
            format_str = "%(levelname)s [%(name)s] %(message)s"
        elif args.quiet:
            level = logging.ERROR
            format_str = "%(levelname)s: %(message)s"
        else:
            level = logging.INFO
            format_str = "%(message)s"

        logging.basicConfig(
            level=level,
            format=format_str,
            force=True,  # Reconfigure if already configured
        )

    def _dispatch_command(self, args) -> int:
        """
        Dispatch to appropriate command handler.

        Args:
            args: Parsed arguments with command field

        Returns:
            Exit code from command handler
        """
        command_map = {
            "install": "ndkfetch.cli.commands.install",
            "list": "ndkfetch.cli.commands.releases",
            "platforms": "ndkfetch.cli.commands.platforms",
        }

        module_name = command_map.get(args.command)
        if not module_name:
            logger.error(f"Unknown command: {args.command}")
            return EXIT_PAIR_FAILURES

        module = importlib.import_module(module_name)
        return module.run(args)


def main():
    """Main entry point for CLI."""
    cli = CLI()
    sys.exit(cli.run())


if __name__ == "__main__":
    main()
