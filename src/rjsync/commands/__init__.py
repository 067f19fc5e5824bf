"""Command handlers returning process exit codes."""

from rjsync.commands.scan import cmd_init, cmd_scan, cmd_works, run_scan

__all__ = ["cmd_init", "cmd_scan", "cmd_works", "run_scan"]
