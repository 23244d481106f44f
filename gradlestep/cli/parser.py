"""
gradlestep CLI argument parser.

This module implements the command-line interface for gradlestep using argparse.
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

# Get version from package
try:
    from importlib.metadata import version

    __version__ = version("gradlestep")
except Exception:
    __version__ = "0.1.0"

logger = logging.getLogger(__name__)

CACHE_LEVEL_CHOICES = ["all", "only-deps", "only deps", "none"]
COLLECTOR_CHOICES = ["manifest", "envman"]


class CLI:
    """gradlestep command-line interface."""

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
            prog="gradlestep",
            description="gradlestep - Gradle unit test CI step with cache collection",
            epilog='Use "gradlestep COMMAND --help" for command-specific help',
            formatter_class=argparse.RawDescriptionHelpFormatter,
        )

        # Global options
        parser.add_argument(
            "--version", action="version", version=f"gradlestep {__version__}"
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
            help="Path to configuration file (default: ./gradlestep.yaml)",
        )
        parser.add_argument(
            "--project-root",
            type=Path,
            metavar="PATH",
            default=Path.cwd(),
            help="Project root directory (default: current directory)",
        )

        subparsers = parser.add_subparsers(
            dest="command", help="Available commands", metavar="COMMAND"
        )

        self._add_test_command(subparsers)
        self._add_cache_command(subparsers)

        return parser

    def _add_cache_options(self, parser: argparse.ArgumentParser):
        """Add options shared by commands that collect caches."""
        parser.add_argument(
            "--cache-level",
            choices=CACHE_LEVEL_CHOICES,
            metavar="LEVEL",
            help="Caches to collect (all|only-deps|none) [default: only-deps]",
        )
        parser.add_argument(
            "--collector",
            choices=COLLECTOR_CHOICES,
            metavar="NAME",
            help="Where to commit cache paths (manifest|envman) [default: manifest]",
        )
        parser.add_argument(
            "--manifest",
            type=Path,
            metavar="PATH",
            help="Manifest file written by the manifest collector",
        )
        parser.add_argument(
            "--deploy-dir",
            type=Path,
            metavar="DIR",
            help="Deploy directory (default location of the cache manifest)",
        )

    def _add_test_command(self, subparsers):
        """Add 'test' subcommand."""
        parser = subparsers.add_parser(
            "test",
            help="Run unit tests and collect Gradle caches",
            description="Run unit test tasks with the Gradle wrapper, then collect caches",
        )
        parser.add_argument(
            "--gradlew",
            dest="gradlew_path",
            type=Path,
            metavar="PATH",
            help="Path to the Gradle wrapper (gradlew)",
        )
        parser.add_argument(
            "--build-file",
            dest="gradle_file",
            type=Path,
            metavar="PATH",
            help="Build file passed to gradlew with --build-file",
        )
        parser.add_argument(
            "--tasks",
            metavar="TASKS",
            help='Unit test tasks (e.g. "test" or "testDebugUnitTest")',
        )
        parser.add_argument(
            "--flags",
            metavar="FLAGS",
            help='Additional gradle options (e.g. "--stacktrace")',
        )
        self._add_cache_options(parser)

    def _add_cache_command(self, subparsers):
        """Add 'cache' subcommand."""
        parser = subparsers.add_parser(
            "cache",
            help="Collect Gradle caches",
            description="Generate the dependency lockfile and commit cache paths",
        )
        parser.add_argument(
            "--dry-run",
            action="store_true",
            help="Print the cache plan without committing it",
        )
        self._add_cache_options(parser)

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
            Exit code (0 for success, non-zero for error)
        """
        parsed_args = self.parse_args(args)

        self._configure_logging(parsed_args)

        if not parsed_args.command:
            self.parser.print_help()
            return 1

        try:
            return self._dispatch_command(parsed_args)
        except KeyboardInterrupt:
            logger.info("Operation cancelled by user")
            return 130  # Standard exit code for SIGINT
        except Exception as e:
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
            "test": "gradlestep.cli.commands.test",
            "cache": "gradlestep.cli.commands.cache",
        }

        module_name = command_map.get(args.command)
        if not module_name:
            logger.error(f"Unknown command: {args.command}")
            return 1

        import importlib

        module = importlib.import_module(module_name)
        return module.run(args)


def main():
    """Main entry point for CLI."""
    cli = CLI()
    sys.exit(cli.run())


if __name__ == "__main__":
    main()
