"""Two-phase catalog reconciliation (cleanup, then ingestion)."""

from rjsync.sync.cleanup import CleanupPass
from rjsync.sync.engine import ReconciliationEngine
from rjsync.sync.ingest import IngestPass
from rjsync.sync.models import (
    CleanupResult,
    FolderOutcome,
    FolderResult,
    IngestResult,
    ScanState,
    ScanSummary,
)
from rjsync.sync.ports import AssetStore, Catalog, MetadataSource

__all__ = [
    "AssetStore",
    "Catalog",
    "CleanupPass",
    "CleanupResult",
    "FolderOutcome",
    "FolderResult",
    "IngestPass",
    "IngestResult",
    "MetadataSource",
    "ReconciliationEngine",
    "ScanState",
    "ScanSummary",
]
