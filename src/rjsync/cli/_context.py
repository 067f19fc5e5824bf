"""Runtime context shared by CLI commands via ctx.obj."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

import typer

from rjsync.exceptions import ConfigurationError

if TYPE_CHECKING:
    from rjsync.config import Settings


@dataclass
class RuntimeContext:
    """Global options captured by the main callback.

    Example:
        @app.command()
        def my_command(ctx: typer.Context) -> None:
            runtime: RuntimeContext = ctx.obj
            settings = runtime.load_settings()
    """

    config_path: Path | None = None
    verbose: bool = False
    log_file: Path | None = None

    def load_settings(self, *, require_root: bool = True) -> Settings:
        """Load settings, turning configuration problems into exit code 2."""
        from rjsync.config import load_settings
        from rjsync.ui import fatal_error

        try:
            return load_settings(config_file=self.config_path, validate=require_root)
        except FileNotFoundError as e:
            fatal_error(str(e), hint="Pass --config with an existing config.yaml")
            raise typer.Exit(2) from e
        except ConfigurationError as e:
            fatal_error(str(e), hint="Set RJSYNC_ROOT_DIR or paths.root_dir in config.yaml")
            raise typer.Exit(2) from e


def get_runtime_context(ctx: typer.Context) -> RuntimeContext:
    """Return the RuntimeContext, creating a default one if the callback didn't run."""
    if not isinstance(ctx.obj, RuntimeContext):
        ctx.obj = RuntimeContext()
    return ctx.obj
