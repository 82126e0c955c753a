"""CLI utility functions for ofsbuild.

This module provides common utilities used across CLI commands including:
- Logging setup
- Error handling and formatting
- Workspace path validation
"""

import logging
import sys
from pathlib import Path

from ofsbuild.deploy import DeploymentResult
from ofsbuild.errors import OfsError, ToolNotFoundError

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(verbose: bool = False) -> None:
    """Configure the root logger for a CLI run.

    Args:
        verbose: Log debug output (spawned commands, state transitions)
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format=LOG_FORMAT,
        stream=sys.stderr,
    )


class ErrorFormatter:
    """Formats and displays status messages with ANSI color codes."""

    # ANSI color codes
    RED = "\033[1;31m"
    GREEN = "\033[1;32m"
    YELLOW = "\033[1;33m"
    RESET = "\033[0m"

    @staticmethod
    def print_error(title: str, message: str = "") -> None:
        """Print formatted error message.

        Args:
            title: Error title (e.g., "Build failed!")
            message: Error details, usually captured stderr
        """
        print()
        print(f"{ErrorFormatter.RED}✗ {title}{ErrorFormatter.RESET}")
        if message:
            print()
            print(message)
        print()

    @staticmethod
    def print_success(message: str) -> None:
        print()
        print(f"{ErrorFormatter.GREEN}✓ {message}{ErrorFormatter.RESET}")

    @staticmethod
    def print_warning(message: str) -> None:
        print()
        print(f"{ErrorFormatter.YELLOW}✗ {message}{ErrorFormatter.RESET}")

    @staticmethod
    def report_deployment(result: DeploymentResult) -> None:
        """Print the outcome of a deployment with the captured tool output.

        Args:
            result: Deployment result to report
        """
        if result.success:
            ErrorFormatter.print_success(result.message)
            if result.output:
                print(result.output.rstrip())
            print()
        else:
            ErrorFormatter.print_error(result.message, result.output.rstrip())

    @staticmethod
    def handle_ofs_error(error: OfsError) -> None:
        """Handle a local precondition failure and exit.

        Args:
            error: The error to report
        """
        if isinstance(error, ToolNotFoundError):
            ErrorFormatter.print_error("Error: Tool not found", str(error))
            sys.exit(ToolNotFoundError.exit_code)
        ErrorFormatter.print_error("Error", str(error))
        sys.exit(1)

    @staticmethod
    def handle_keyboard_interrupt() -> None:
        """Handle KeyboardInterrupt with standard formatting."""
        ErrorFormatter.print_warning("Interrupted")
        sys.exit(130)  # Standard exit code for SIGINT

    @staticmethod
    def handle_unexpected_error(error: Exception, verbose: bool = False) -> None:
        """Handle unexpected errors with standard formatting.

        Args:
            error: The exception to handle
            verbose: Whether to print traceback
        """
        message = f"{type(error).__name__}: {error}"
        ErrorFormatter.print_error("Unexpected error", message)

        if verbose:
            import traceback

            print("Traceback:")
            print(traceback.format_exc())

        sys.exit(1)


class PathValidator:
    """Validates workspace paths."""

    @staticmethod
    def validate_root(root: Path) -> None:
        """Validate that the workspace root exists and is a directory.

        Raises:
            SystemExit: If path doesn't exist or isn't a directory
        """
        if not root.exists():
            print(f"{ErrorFormatter.RED}✗ Error: Path does not exist: {root}{ErrorFormatter.RESET}")
            sys.exit(2)
        if not root.is_dir():
            print(f"{ErrorFormatter.RED}✗ Error: Path is not a directory: {root}{ErrorFormatter.RESET}")
            sys.exit(2)
