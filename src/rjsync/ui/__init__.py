"""rjsync UI - Rich console output components.

Modules:
    core: Console instances and theme
    messages: Simple print helpers (success, info, dry run, fatal error)
    tables: Scan summary and catalog tables
"""

from __future__ import annotations

from rjsync.ui.core import RJSYNC_THEME, console, err_console
from rjsync.ui.messages import (
    fatal_error,
    print_dry_run,
    print_info,
    print_success,
)
from rjsync.ui.tables import print_scan_summary, print_works_table

__all__ = [
    "RJSYNC_THEME",
    "console",
    "err_console",
    "fatal_error",
    "print_dry_run",
    "print_info",
    "print_scan_summary",
    "print_success",
    "print_works_table",
]
