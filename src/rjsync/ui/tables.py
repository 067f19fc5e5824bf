"""Table formatting components for rjsync UI."""

from __future__ import annotations

from typing import TYPE_CHECKING

from rich.markup import escape
from rich.table import Table

from rjsync.identifiers import format_work_code
from rjsync.ui.core import console

if TYPE_CHECKING:
    from rjsync.schemas.work import WorkMetadata
    from rjsync.sync.models import ScanSummary


def print_scan_summary(summary: ScanSummary) -> None:
    """Print the end-of-run counts and any folders that failed.

    Example:
        >>> print_scan_summary(summary)
        Summary: 3 added, 12 skipped, 1 removed
    """
    from rjsync.sync.models import FolderOutcome

    ingest = summary.ingest
    parts = []
    if summary.dry_run:
        parts.append(f"[info]{ingest.count(FolderOutcome.DRY_RUN)} to fetch[/]")
    else:
        parts.append(f"[success]{ingest.ingested} added[/]")
    parts.append(f"[dim]{ingest.skipped} skipped[/]")
    if summary.cleanup.removed:
        verb = "to remove" if summary.dry_run else "removed"
        parts.append(f"[warning]{summary.cleanup.removed} {verb}[/]")
    if summary.cleanup.failed:
        parts.append(f"[error]{summary.cleanup.failed} removals failed[/]")

    console.print()
    console.print(f"[title]Summary:[/] {', '.join(parts)}")

    failures = ingest.failures()
    if not failures:
        return

    table = Table(title="Folders not added", show_header=True, header_style="bold")
    table.add_column("Folder", style="path")
    table.add_column("Code", style="rjcode")
    table.add_column("Reason")
    for result in failures:
        table.add_row(
            escape(result.folder),
            format_work_code(result.work_id) if result.work_id is not None else "-",
            escape(result.error or result.outcome.value),
        )
    console.print(table)


def print_works_table(works: list[WorkMetadata], title: str = "Catalog") -> None:
    """Print catalog records as a table."""
    if not works:
        console.print(f"[dim]No works in {title.lower()}[/]")
        return

    table = Table(title=title, show_header=True, header_style="bold")
    table.add_column("Code", style="rjcode")
    table.add_column("Title")
    table.add_column("Circle", style="circle")
    table.add_column("Folder", style="path")

    for work in works:
        table.add_row(
            format_work_code(work.id),
            escape(work.title),
            escape(work.circle.name) if work.circle else "-",
            escape(work.dir or "-"),
        )
    console.print(table)
