"""Console output formatting utilities for rolepack."""

from __future__ import annotations

import sys
from typing import Optional


class Console:
    """Centralized console output formatting."""

    def __init__(self, debug: bool = False):
        """
        Initialize console formatter.

        Args:
            debug: If True, show detailed output including stack traces
        """
        self.debug = debug

    def print_context_started(
        self,
        roles_file: str,
        role_count: int,
        package_count: int,
    ) -> None:
        """Print build-context start information."""
        print("\nCONTEXT STARTED")
        print(f"Roles file: {roles_file}")
        print(f"Roles: {role_count}")
        print(f"Packages: {package_count}")
        print()

    def print_base_image(self, base_image: str, residual: int, total: int) -> None:
        """Print the layer-matching decision."""
        print(f"BASE IMAGE: {base_image}")
        print(f"PACKAGES: {residual} to add, {total - residual} reused")

    def print_image_name(self, reference: str) -> None:
        print(f"IMAGE: {reference}")

    def print_context_written(self, path: str) -> None:
        print(f"CONTEXT: {path}")

    def print_error(
        self,
        title: str,
        message: str,
        details: Optional[list[str]] = None,
        suggestion: Optional[str] = None,
    ) -> None:
        """
        Print structured error message.

        Args:
            title: Error title
            message: Main error message
            details: Optional list of detail lines
            suggestion: Optional suggestion for user
        """
        print(f"\nERROR: {title}", file=sys.stderr)
        print(f"{message}", file=sys.stderr)
        if details:
            for detail in details:
                print(f"  {detail}", file=sys.stderr)
        if suggestion:
            print(f"\n{suggestion}", file=sys.stderr)

    def print_exception(self, exc: Exception) -> None:
        """Print exception, with full traceback only in debug mode."""
        if self.debug:
            import traceback
            traceback.print_exception(exc)
        else:
            print(f"Error: {exc}", file=sys.stderr)

    def print_info(self, message: str) -> None:
        """Print informational message."""
        print(message)

    def print_debug(self, message: str) -> None:
        """Print debug message (only if debug mode enabled)."""
        if self.debug:
            print(f"[DEBUG] {message}", file=sys.stderr)


# Global console instance (will be initialized by CLI)
_console: Optional[Console] = None


def get_console() -> Console:
    """Get the global console instance."""
    global _console
    if _console is None:
        _console = Console()
    return _console


def set_console(console: Console) -> None:
    """Set the global console instance."""
    global _console
    _console = console
