"""Catalog commands.

Commands: works
"""

from __future__ import annotations

from typing import Annotated

import typer

from rjsync.cli._app import CATALOG_COMMANDS
from rjsync.cli._context import get_runtime_context


def register_catalog_commands(app: typer.Typer) -> None:
    """Register catalog commands on the app."""

    @app.command(rich_help_panel=CATALOG_COMMANDS)
    def works(
        ctx: typer.Context,
        json_output: Annotated[
            bool,
            typer.Option("--json", help="Print records as JSON."),
        ] = False,
    ) -> None:
        """List works in the catalog."""
        from rjsync.commands import cmd_works

        settings = get_runtime_context(ctx).load_settings(require_root=False)
        raise typer.Exit(cmd_works(settings, json_output=json_output))
