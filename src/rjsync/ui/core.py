"""Core console configuration and theme for rjsync UI.

Rich console instances and theme that the other UI modules build upon.
"""

from __future__ import annotations

from rich.console import Console
from rich.theme import Theme

RJSYNC_THEME = Theme(
    {
        # Status colors
        "info": "cyan",
        "success": "green",
        "warning": "yellow",
        "error": "red bold",
        # Text styles
        "title": "bold white",
        "dim": "dim",
        "highlight": "bold magenta",
        # Domain styles
        "path": "cyan",
        "rjcode": "yellow",
        "circle": "magenta",
        "hint": "dim italic",
    }
)

# Primary console for normal output
console = Console(theme=RJSYNC_THEME, stderr=False)

# Error console for stderr output
err_console = Console(theme=RJSYNC_THEME, stderr=True)
