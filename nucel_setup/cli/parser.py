"""
nucel-setup CLI argument parser.

This module implements the command-line interface used as the action's
main and post steps.
"""

import argparse
import logging
import os
import sys
from pathlib import Path
from typing import List, Optional

from nucel_setup.cli.actions import ActionsEnvironment, get_input
from nucel_setup.core.config import SetupInputs, load_settings
from nucel_setup.core.exceptions import NucelSetupError
from nucel_setup.install.runner import cleanup, run_setup

try:
    from importlib.metadata import PackageNotFoundError, version

    __version__ = version("nucel-setup")
except PackageNotFoundError:
    __version__ = "0.1.0"

logger = logging.getLogger(__name__)


class CLI:
    """nucel-setup command-line interface."""

    def __init__(self, actions: Optional[ActionsEnvironment] = None):
        """
        Initialize CLI with argument parser.

        Args:
            actions: Runner integration (default: captured from the environment)
        """
        self.parser = self._create_parser()
        self.actions = actions

    def _create_parser(self) -> argparse.ArgumentParser:
        """
        Create argument parser with both phases.

        Returns:
            Configured ArgumentParser instance
        """
        parser = argparse.ArgumentParser(
            prog="nucel-setup",
            description="Install the Nucel CLI on a CI runner",
            epilog="Without a command, runs 'install' (or 'post' when STATE_isPost is set)",
            formatter_class=argparse.RawDescriptionHelpFormatter,
        )

        parser.add_argument(
            "--version", action="version", version=f"nucel-setup {__version__}"
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
            help="YAML file with a 'setup' section overriding tool settings",
        )
        parser.add_argument(
            "--version-spec",
            metavar="VERSION",
            help='"latest" or a semantic version (default: $INPUT_VERSION or latest)',
        )
        parser.add_argument(
            "--token",
            metavar="TOKEN",
            help="Registry auth token for npm (default: $INPUT_TOKEN)",
        )
        parser.add_argument(
            "--install-path",
            metavar="PATH",
            help="npm install prefix (default: $INPUT_INSTALL-PATH)",
        )

        subparsers = parser.add_subparsers(
            dest="command", help="Available commands", metavar="COMMAND"
        )
        self._add_install_command(subparsers)
        self._add_post_command(subparsers)

        return parser

    def _add_install_command(self, subparsers):
        """Add 'install' subcommand."""
        subparsers.add_parser(
            "install",
            help="Install, verify and cache the CLI",
            description="Install the Nucel CLI and publish its version and path",
        )

    def _add_post_command(self, subparsers):
        """Add 'post' subcommand."""
        subparsers.add_parser(
            "post",
            help="Remove temporary files",
            description="Post-step teardown of the cache staging directory",
        )

    def parse_args(self, args: Optional[List[str]] = None) -> argparse.Namespace:
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

        actions = self.actions or ActionsEnvironment.capture()
        command = parsed_args.command
        if command is None:
            command = "post" if actions.is_post else "install"

        try:
            if command == "post":
                return self._run_post(parsed_args)
            return self._run_install(parsed_args, actions)
        except KeyboardInterrupt:
            logger.info("Operation cancelled by user")
            return 130
        except NucelSetupError as e:
            logger.debug("Setup failed", exc_info=parsed_args.verbose)
            actions.set_failed(str(e))
            return 1
        except Exception as e:
            logger.debug("Unexpected error", exc_info=True)
            actions.set_failed(str(e) or type(e).__name__)
            return 1

    def _run_install(self, args: argparse.Namespace, actions: ActionsEnvironment) -> int:
        inputs = self._collect_inputs(args)
        settings = load_settings(args.config)

        result = run_setup(inputs, settings)

        for name, value in result.outputs.items():
            actions.set_output(name, value)
        actions.add_path(result.path.parent)
        actions.save_state("isPost", "true")
        return 0

    def _run_post(self, args: argparse.Namespace) -> int:
        settings = load_settings(args.config)
        cleanup(settings)
        return 0

    def _collect_inputs(self, args: argparse.Namespace) -> SetupInputs:
        """Merge CLI flags with action inputs; flags win."""
        version_spec = args.version_spec
        if version_spec is None:
            version_spec = get_input("version") or "latest"

        token = args.token or get_input("token") or None

        install_path = args.install_path or get_input("install-path")
        install_path = os.path.expanduser(install_path) if install_path else None

        return SetupInputs(version=version_spec, token=token, install_path=install_path)

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
            force=True,
        )


def main():
    """
    Main entry point for CLI.

    This function is called when running 'nucel-setup' from command line
    or 'python -m nucel_setup'.
    """
    cli = CLI()
    sys.exit(cli.run())


__all__ = ["CLI", "main"]
