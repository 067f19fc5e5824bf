"""rjsync CLI built with Typer and Rich.

Commands:
- scan: cleanup then ingestion against the content root
- init: create the cover directory and catalog schema
- works: list catalog records
"""

from __future__ import annotations

from rjsync.cli._app import (
    CATALOG_COMMANDS,
    SCAN_COMMANDS,
    create_main_callback,
    make_app,
)
from rjsync.cli._context import RuntimeContext, get_runtime_context
from rjsync.cli.catalog import register_catalog_commands
from rjsync.cli.scan import register_scan_commands

app = make_app()
create_main_callback(app)
register_scan_commands(app)
register_catalog_commands(app)


def main() -> int:
    """Main entry point for the CLI."""
    try:
        app()
        return 0
    except SystemExit as e:
        return e.code if isinstance(e.code, int) else 0


__all__ = [
    "CATALOG_COMMANDS",
    "SCAN_COMMANDS",
    "RuntimeContext",
    "app",
    "get_runtime_context",
    "main",
]
