"""Scanning commands.

Commands: scan, init
"""

from __future__ import annotations

from typing import Annotated

import typer

from rjsync.cli._app import SCAN_COMMANDS
from rjsync.cli._context import get_runtime_context


def register_scan_commands(app: typer.Typer) -> None:
    """Register scanning commands on the app."""

    @app.command(rich_help_panel=SCAN_COMMANDS)
    def scan(
        ctx: typer.Context,
        dry_run: Annotated[
            bool,
            typer.Option("--dry-run", help="Report what would change without writing anything."),
        ] = False,
        cleanup_only: Annotated[
            bool,
            typer.Option("--cleanup-only", help="Only remove records whose folder is gone."),
        ] = False,
    ) -> None:
        """Reconcile the catalog with the content root.

        Removes records whose folder disappeared, then adds every new work
        folder with metadata and a cover image.

        [bold]Examples:[/]
          rjsync scan                 [dim]# Full reconciliation[/]
          rjsync scan --dry-run       [dim]# Preview only[/]
          rjsync scan --cleanup-only  [dim]# Skip ingestion[/]
        """
        from rjsync.commands import cmd_scan

        settings = get_runtime_context(ctx).load_settings()
        raise typer.Exit(cmd_scan(settings, dry_run=dry_run, cleanup_only=cleanup_only))

    @app.command(rich_help_panel=SCAN_COMMANDS)
    def init(ctx: typer.Context) -> None:
        """Create the cover directory and catalog schema."""
        from rjsync.commands import cmd_init

        settings = get_runtime_context(ctx).load_settings()
        raise typer.Exit(cmd_init(settings))
