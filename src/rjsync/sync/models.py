"""Result types shared by the cleanup pass, ingestion pass and engine."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from enum import Enum


class ScanState(str, Enum):
    """Lifecycle of one reconciliation run."""

    BOOTSTRAPPING = "bootstrapping"
    CLEANING_UP = "cleaning_up"
    INGESTING = "ingesting"
    DONE = "done"
    FAILED = "failed"


class FolderOutcome(str, Enum):
    """What happened to one candidate folder during ingestion."""

    INGESTED = "ingested"  # New record inserted
    PRESENT = "present"  # Already in the catalog
    FAILED = "failed"  # Metadata fetch or insert failed
    INVALID = "invalid"  # Folder name has no usable RJ code
    DRY_RUN = "dry_run"  # Would have been fetched


# Outcomes that count towards the "skipped" total
SKIPPED_OUTCOMES = frozenset({FolderOutcome.PRESENT, FolderOutcome.FAILED, FolderOutcome.INVALID})


@dataclass
class FolderResult:
    """Outcome for a single folder."""

    folder: str
    outcome: FolderOutcome
    work_id: int | None = None
    error: str | None = None


@dataclass
class CleanupResult:
    """Result of a cleanup pass.

    Attributes:
        checked: Records examined
        removed: Records deleted because their folder is gone
        failed: Record deletions that failed (only when failures are isolated)
        cover_failures: Covers that could not be deleted
        removed_ids: Ids of the deleted (or, in dry-run, deletable) records
    """

    checked: int = 0
    removed: int = 0
    failed: int = 0
    cover_failures: int = 0
    removed_ids: list[int] = field(default_factory=list)


@dataclass
class IngestResult:
    """Result of an ingestion pass."""

    folders: list[FolderResult] = field(default_factory=list)

    def count(self, outcome: FolderOutcome) -> int:
        return sum(1 for f in self.folders if f.outcome is outcome)

    @property
    def counts(self) -> Counter[FolderOutcome]:
        return Counter(f.outcome for f in self.folders)

    @property
    def ingested(self) -> int:
        return self.count(FolderOutcome.INGESTED)

    @property
    def skipped(self) -> int:
        """Folders already present or failed."""
        return sum(1 for f in self.folders if f.outcome in SKIPPED_OUTCOMES)

    @property
    def total(self) -> int:
        return len(self.folders)

    def failures(self) -> list[FolderResult]:
        """Folders that failed or had no usable code."""
        return [
            f for f in self.folders if f.outcome in (FolderOutcome.FAILED, FolderOutcome.INVALID)
        ]


@dataclass
class ScanSummary:
    """Final accounting of a completed run."""

    cleanup: CleanupResult
    ingest: IngestResult
    dry_run: bool = False

    @property
    def skipped(self) -> int:
        return self.ingest.skipped

    @property
    def ingested(self) -> int:
        return self.ingest.ingested

    def summary_line(self) -> str:
        """One-line end-of-run summary."""
        if self.dry_run:
            would_fetch = self.ingest.count(FolderOutcome.DRY_RUN)
            return (
                f"Dry run finished. {self.cleanup.removed} record(s) would be removed, "
                f"{would_fetch} new folder(s) would be fetched, skipped {self.skipped} folders."
            )
        return (
            f"Finished scan. Skipped {self.skipped} folders already in database "
            f"or failed, added {self.ingested} new works."
        )
