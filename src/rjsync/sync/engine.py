"""
Reconciliation engine.

Drives one full sync run through its states:

    BOOTSTRAPPING -> CLEANING_UP -> INGESTING -> DONE
          \\               \\             \\
           +---------------+-------------+--> FAILED

- BOOTSTRAPPING: create the cover directory and the catalog schema
- CLEANING_UP: run the cleanup pass to completion (barrier: ingestion never
  starts while deletions are in flight, so a folder removed and re-added
  under the same code is re-ingested cleanly)
- INGESTING: list every candidate folder first, then ingest all of them
  concurrently and wait for every folder to settle
- DONE: log the summary, close the catalog, let cover downloads finish

Any error escaping a stage moves the engine to FAILED and is re-raised as
ScanAbortedError. No partial summary is produced in that case.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator, Callable

from rjsync.config import ScanConfig
from rjsync.discovery import iter_work_folders
from rjsync.exceptions import RjsyncError, ScanAbortedError
from rjsync.sync.cleanup import CleanupPass
from rjsync.sync.ingest import IngestPass
from rjsync.sync.models import CleanupResult, IngestResult, ScanState, ScanSummary
from rjsync.sync.ports import AssetStore, Catalog, MetadataSource

logger = logging.getLogger(__name__)


class ReconciliationEngine:
    """Runs cleanup then ingestion against one content root.

    Args:
        config: Per-run configuration
        catalog: Work catalog (closed when the run finishes)
        source: Metadata source
        assets: Cover storage
        list_folders: Optional replacement for folder discovery, returning
            folders relative to ``config.root_dir``

    Example:
        engine = ReconciliationEngine(config, catalog, hvdb, covers)
        summary = await engine.run()
        print(summary.summary_line())
    """

    def __init__(
        self,
        config: ScanConfig,
        catalog: Catalog,
        source: MetadataSource,
        assets: AssetStore,
        *,
        list_folders: Callable[[], AsyncIterator[str]] | None = None,
    ) -> None:
        self.config = config
        self.catalog = catalog
        self.source = source
        self.assets = assets
        self._list_folders = list_folders or self._discover
        self.state = ScanState.BOOTSTRAPPING
        self.ingest_pass = IngestPass(catalog, source, assets, dry_run=config.dry_run)

    def _discover(self) -> AsyncIterator[str]:
        return iter_work_folders(
            self.config.root_dir,
            max_depth=self.config.max_recursion_depth,
            ignore=(self.config.cover_dir_name,),
        )

    def _enter(self, state: ScanState) -> None:
        logger.debug("Scan state: %s -> %s", self.state.value, state.value)
        self.state = state

    def _fail(self, stage: ScanState, error: BaseException) -> ScanAbortedError:
        self._enter(ScanState.FAILED)
        logger.error("ERROR while %s: %s", stage.value.replace("_", " "), error)
        return ScanAbortedError(
            f"Scan aborted during {stage.value}: {error}",
            stage=stage.value,
            details={"error_type": type(error).__name__},
        )

    async def run(self, *, cleanup_only: bool = False) -> ScanSummary:
        """
        Execute a full run.

        Args:
            cleanup_only: Stop after the cleanup pass

        Returns:
            ScanSummary for the completed run

        Raises:
            ScanAbortedError: If bootstrapping, cleanup, or folder listing fails
        """
        self._enter(ScanState.BOOTSTRAPPING)
        try:
            await self.bootstrap()
        except (RjsyncError, OSError) as e:
            raise self._fail(ScanState.BOOTSTRAPPING, e) from e

        self._enter(ScanState.CLEANING_UP)
        try:
            cleanup = await self.cleanup()
        except (RjsyncError, OSError) as e:
            raise self._fail(ScanState.CLEANING_UP, e) from e
        logger.info("Finished cleanup. Starting scan...")

        ingest = IngestResult()
        if self.config.dry_run:
            self.ingest_pass.pending_removal = set(cleanup.removed_ids)
        if not cleanup_only:
            self._enter(ScanState.INGESTING)
            try:
                ingest = await self.ingest()
            except (RjsyncError, OSError) as e:
                raise self._fail(ScanState.INGESTING, e) from e

        summary = ScanSummary(cleanup=cleanup, ingest=ingest, dry_run=self.config.dry_run)
        self._enter(ScanState.DONE)
        logger.info(summary.summary_line())

        await self.catalog.close()
        await self.wait_for_covers()
        return summary

    async def bootstrap(self) -> None:
        """Create the cover directory and catalog schema."""
        self.assets.ensure_root()
        await self.catalog.ensure_schema()

    async def cleanup(self) -> CleanupResult:
        """Run the cleanup pass to completion."""
        cleanup_pass = CleanupPass(
            self.catalog,
            self.assets,
            self.config.root_dir,
            strict=self.config.strict_cleanup,
            dry_run=self.config.dry_run,
        )
        return await cleanup_pass.run()

    async def ingest(self) -> IngestResult:
        """List all candidate folders, then ingest them concurrently."""
        folders = [folder async for folder in self._list_folders()]
        logger.info("Found %d candidate folder(s)", len(folders))
        return await self.ingest_pass.run(folders)

    @property
    def pending_covers(self) -> int:
        """Cover downloads still in flight."""
        return self.ingest_pass.pending_covers

    async def wait_for_covers(self) -> None:
        """Wait for every background cover download to settle."""
        await self.ingest_pass.wait_for_covers()
