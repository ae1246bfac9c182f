"""CLI utility functions for gox.

This module provides common utilities used by the command line:
- Logging setup
- Error handling and formatting
"""

import logging
import sys

from .dispatcher import AggregateBuildError


def setup_logging(verbose: bool = False) -> None:
    """Configure the root logger for console output."""
    logger = logging.getLogger()
    logger.setLevel(logging.DEBUG if verbose else logging.WARNING)

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(logging.DEBUG if verbose else logging.WARNING)
    console_handler.setFormatter(logging.Formatter("%(levelname)s - %(name)s - %(message)s"))
    logger.addHandler(console_handler)


class ErrorFormatter:
    """Formats and displays error messages with ANSI color codes."""

    # ANSI color codes
    RED = "\033[1;31m"
    YELLOW = "\033[1;33m"
    RESET = "\033[0m"

    @staticmethod
    def print_error(message: str) -> None:
        """Print a one-line error diagnostic to stderr."""
        print(f"{ErrorFormatter.RED}✗ {message}{ErrorFormatter.RESET}", file=sys.stderr)

    @staticmethod
    def print_warning(message: str) -> None:
        print(f"{ErrorFormatter.YELLOW}✗ {message}{ErrorFormatter.RESET}", file=sys.stderr)

    @staticmethod
    def handle_build_errors(error: AggregateBuildError) -> None:
        """Exit after build failures.

        The individual failures have already been listed by the time this
        runs, so only a summary line is added.
        """
        ErrorFormatter.print_error(f"{len(error.errors)} build(s) failed")
        sys.exit(1)

    @staticmethod
    def handle_error(error: Exception) -> None:
        """Print a known gox error and exit."""
        ErrorFormatter.print_error(str(error))
        sys.exit(1)

    @staticmethod
    def handle_keyboard_interrupt() -> None:
        """Handle KeyboardInterrupt with standard formatting."""
        ErrorFormatter.print_warning("Build interrupted")
        sys.exit(130)  # Standard exit code for SIGINT

    @staticmethod
    def handle_unexpected_error(error: Exception, verbose: bool = False) -> None:
        """Handle unexpected errors with standard formatting.

        Args:
            error: The exception to handle
            verbose: Whether to print traceback
        """
        ErrorFormatter.print_error(f"Unexpected error: {type(error).__name__}: {error}")

        if verbose:
            import traceback

            print("Traceback:", file=sys.stderr)
            print(traceback.format_exc(), file=sys.stderr)

        sys.exit(1)
