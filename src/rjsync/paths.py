"""Cross-platform path handling using platformdirs.

Provides XDG-compliant paths with environment variable overrides for flexibility.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Literal

from platformdirs import user_data_dir, user_log_dir

logger = logging.getLogger(__name__)

APP_NAME = "rjsync"
APPAUTHOR: Literal[False] = False  # Avoid "CompanyName/AppName" nesting on Windows

DATABASE_FILENAME = "catalog.sqlite3"
LOG_FILENAME = "rjsync.log"


def _env_override(env_var: str) -> Path | None:
    """Check for environment variable override.

    Args:
        env_var: Environment variable name to check

    Returns:
        Path from environment variable if set, None otherwise
    """
    v = os.environ.get(env_var)
    return Path(v).expanduser() if v else None


def data_dir(*, ensure: bool = True) -> Path:
    """Get application data directory (catalog database lives here).

    Linux: ~/.local/share/rjsync
    macOS: ~/Library/Application Support/rjsync
    Windows: C:\\Users\\<user>\\AppData\\Local\\rjsync

    Override with RJSYNC_DATA_DIR env var.

    Args:
        ensure: Create directory if it doesn't exist

    Returns:
        Path to data directory
    """
    d = _env_override("RJSYNC_DATA_DIR") or Path(user_data_dir(APP_NAME, APPAUTHOR))
    if ensure:
        d.mkdir(parents=True, exist_ok=True)
    return d


def log_dir(*, ensure: bool = True) -> Path:
    """Get application log directory.

    Linux: ~/.local/state/rjsync/log
    macOS: ~/Library/Logs/rjsync

    Override with RJSYNC_LOG_DIR env var.
    """
    d = _env_override("RJSYNC_LOG_DIR") or Path(user_log_dir(APP_NAME, APPAUTHOR))
    if ensure:
        d.mkdir(parents=True, exist_ok=True)
    return d


def default_database_path() -> Path:
    """Default catalog database location."""
    return data_dir(ensure=False) / DATABASE_FILENAME


def default_log_file() -> Path:
    """Default log file location."""
    return log_dir(ensure=False) / LOG_FILENAME
