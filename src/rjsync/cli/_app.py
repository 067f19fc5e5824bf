"""App factory, main callback and logging setup for the CLI."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Annotated

import typer

from rjsync.cli._context import RuntimeContext
from rjsync.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

# =============================================================================
# Help Panel Names
# =============================================================================

SCAN_COMMANDS = "Scanning"
CATALOG_COMMANDS = "Catalog"


# =============================================================================
# Version Callback
# =============================================================================


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        from rjsync import __version__
        from rjsync.ui import console

        console.print(f"rjsync {__version__}")
        raise typer.Exit()


# =============================================================================
# App Factory
# =============================================================================

MAIN_EPILOG = """
[bold cyan]Quick Start:[/]
  [dim]1.[/] rjsync init              [dim]# Create cover folder and catalog[/]
  [dim]2.[/] rjsync scan --dry-run    [dim]# Preview what would change[/]
  [dim]3.[/] rjsync scan              [dim]# Reconcile the catalog[/]

[bold cyan]Tips:[/]
  - Set [green]RJSYNC_ROOT_DIR[/] or [green]paths.root_dir[/] in config.yaml
  - Global flags like [green]--verbose[/] go [bold]BEFORE[/] the command
"""


def make_app() -> typer.Typer:
    """Create and configure the main Typer application."""
    return typer.Typer(
        name="rjsync",
        help="Keep a voice-work catalog in sync with the folders on disk",
        epilog=MAIN_EPILOG,
        rich_markup_mode="rich",
        pretty_exceptions_enable=True,
        pretty_exceptions_show_locals=False,
        no_args_is_help=True,
        add_completion=False,
        context_settings={"help_option_names": ["-h", "--help"]},
    )


# =============================================================================
# Logging Setup Helper
# =============================================================================


def setup_logging(verbose: bool, config_path: Path | None, log_file: Path | None) -> None:
    """Configure logging from options, falling back to defaults if config is unusable."""
    from rjsync.config import load_settings
    from rjsync.logging_setup import setup_logging as _setup_logging

    log_level = "DEBUG" if verbose else "INFO"
    try:
        settings = load_settings(config_file=config_path, validate=False)
        if not verbose:
            log_level = settings.log_level
        if log_file is None:
            log_file = settings.paths.log_file
    except (FileNotFoundError, ConfigurationError) as e:
        # Reported properly by the command that needs the settings
        logger.debug("Config not loaded for logging setup: %s", e)

    _setup_logging(log_level=log_level, log_file=log_file)


# =============================================================================
# Main Callback Factory
# =============================================================================


def create_main_callback(app: typer.Typer) -> None:
    """Register the main callback on the app."""

    @app.callback()
    def main_callback(
        ctx: typer.Context,
        version: Annotated[
            bool,
            typer.Option(
                "--version",
                "-V",
                callback=version_callback,
                is_eager=True,
                help="Show version and exit.",
            ),
        ] = False,
        verbose: Annotated[
            bool,
            typer.Option("--verbose", "-v", help="Enable verbose (DEBUG) logging."),
        ] = False,
        config: Annotated[
            Path | None,
            typer.Option(
                "--config",
                "-c",
                help="Path to config.yaml (default: ./config.yaml if present).",
                exists=False,
            ),
        ] = None,
        log_file: Annotated[
            Path | None,
            typer.Option("--log-file", help="Write a DEBUG log to this file."),
        ] = None,
    ) -> None:
        """Reconcile a voice-work catalog with the folders on disk.

        [cyan]Cleanup → Discovery → Metadata → Catalog[/]
        """
        ctx.obj = RuntimeContext(config_path=config, verbose=verbose, log_file=log_file)
        setup_logging(verbose, config, log_file)
