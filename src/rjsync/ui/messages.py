"""Simple message printing helpers for rjsync UI."""

from __future__ import annotations

from rich.markup import escape

from rjsync.ui.core import console, err_console


def print_success(message: str) -> None:
    """Print a success message with checkmark.

    Example:
        >>> print_success("Catalog initialized")
          ✓ Catalog initialized
    """
    console.print(f"  [success]✓[/] {escape(message)}")


def print_info(message: str) -> None:
    """Print an info message.

    Example:
        >>> print_info("Found 5 new folders")
          → Found 5 new folders
    """
    console.print(f"  [info]→[/] {escape(message)}")


def print_dry_run(message: str) -> None:
    """Print a dry-run message."""
    console.print(f"  [warning]\\[DRY RUN][/] {escape(message)}")


def fatal_error(message: str, hint: str | None = None) -> None:
    """Print a fatal error (and an optional hint) to stderr.

    Example:
        >>> fatal_error("Root directory not set", "Set RJSYNC_ROOT_DIR or paths.root_dir")
    """
    err_console.print(f"\n[error]Error:[/] {escape(message)}")
    if hint:
        err_console.print(f"[dim]Hint: {escape(hint)}[/]")
