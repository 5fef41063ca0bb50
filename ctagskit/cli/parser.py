"""
ctagskit CLI argument parser.

This module implements the command-line interface for ctagskit using argparse.
Running without a command performs the install, so the console script can be
used directly as a postinstall hook.
"""

import argparse
import importlib
import logging
import sys
from pathlib import Path
from typing import List, Optional

from ctagskit.core.exceptions import CtagsKitError

# Get version from package
try:
    from importlib.metadata import version

    __version__ = version("ctagskit")
except Exception:
    __version__ = "0.1.0"

logger = logging.getLogger(__name__)

DEFAULT_COMMAND = "install"


class CLI:
    """ctagskit command-line interface."""

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
            prog="ctagskit",
            description="ctagskit - Universal Ctags binary installer",
            epilog='Use "ctagskit COMMAND --help" for command-specific help',
            formatter_class=argparse.RawDescriptionHelpFormatter,
        )

        # Global options
        parser.add_argument(
            "--version", action="version", version=f"ctagskit {__version__}"
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
            help="Path to a YAML file with installer settings",
        )
        parser.add_argument(
            "--install-dir",
            type=Path,
            metavar="PATH",
            help="Directory to install ctags into (default: CTAGSKIT_INSTALL_DIR "
            "or the package's bin/ directory)",
        )

        # Subcommands
        subparsers = parser.add_subparsers(
            dest="command", help="Available commands", metavar="COMMAND"
        )

        self._add_install_command(subparsers)
        self._add_path_command(subparsers)
        self._add_verify_command(subparsers)

        return parser

    def _add_install_command(self, subparsers):
        """Add 'install' subcommand."""
        parser = subparsers.add_parser(
            "install",
            help="Download and install ctags (default)",
            description="Download the latest Universal Ctags release for this "
            "platform and install it",
        )
        parser.add_argument(
            "--no-skip",
            action="store_true",
            help="Install even if SKIP_POSTINSTALL is set",
        )

    def _add_path_command(self, subparsers):
        """Add 'path' subcommand."""
        subparsers.add_parser(
            "path",
            help="Print the installed ctags path",
            description="Print the absolute path of the installed ctags binary",
        )

    def _add_verify_command(self, subparsers):
        """Add 'verify' subcommand."""
        parser = subparsers.add_parser(
            "verify",
            help="Check that the installed ctags runs",
            description="Run 'ctags --version' and check the output",
        )
        parser.add_argument(
            "--timeout",
            type=float,
            default=10.0,
            metavar="SECONDS",
            help="Seconds to wait for ctags (default: 10)",
        )

    def parse_args(self, args: Optional[List[str]] = None):
        """
        Parse command-line arguments.

        Args:
            args: Arguments to parse (uses sys.argv if None)

        Returns:
            Parsed arguments namespace
        """
        parsed = self.parser.parse_args(args)
        if not parsed.command:
            parsed.command = DEFAULT_COMMAND
            parsed.no_skip = False
        return parsed

    def run(self, args: Optional[List[str]] = None) -> int:
        """
        Run CLI with given arguments.

        Args:
            args: Arguments to parse (uses sys.argv if None)

        Returns:
            Exit code (0 for success, non-zero for error)
        """
        parsed_args = self.parse_args(args)

        # Configure logging
        self._configure_logging(parsed_args)

        # Dispatch to command handler
        try:
            return self._dispatch_command(parsed_args)
        except KeyboardInterrupt:
            logger.info("Operation cancelled by user")
            return 130  # Standard exit code for SIGINT
        except CtagsKitError as e:
            logger.error(f"Error: {e}")
            if parsed_args.verbose:
                import traceback

                traceback.print_exc()
            return 1

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
            "install": "ctagskit.cli.commands.install",
            "path": "ctagskit.cli.commands.path",
            "verify": "ctagskit.cli.commands.verify",
        }

        module_name = command_map.get(args.command)
        if not module_name:
            logger.error(f"Unknown command: {args.command}")
            return 1

        module = importlib.import_module(module_name)
        return module.run(args)


def main():
    """Main entry point for CLI."""
    cli = CLI()
    sys.exit(cli.run())


if __name__ == "__main__":
    main()
