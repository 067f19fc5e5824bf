"""Ingestion pass: create catalog records for folders not yet in the catalog.

Each folder runs in its own task and its failures stay inside that task:
a folder without an RJ code, a metadata fetch that fails or an insert that
fails only marks that folder. Cover downloads are launched as background
tasks that the record insert does not wait for; ``wait_for_covers()`` lets
callers settle them.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence
from pathlib import PurePosixPath

from rjsync.exceptions import AssetError, CatalogError, CoverFetchError, IdentifierError
from rjsync.identifiers import format_rjcode, parse_work_id
from rjsync.sync.models import FolderOutcome, FolderResult, IngestResult
from rjsync.sync.ports import AssetStore, Catalog, MetadataSource

logger = logging.getLogger(__name__)


class IngestPass:
    """Fetches metadata and covers for new folders.

    Args:
        catalog: Work catalog
        source: Metadata source
        assets: Cover storage
        dry_run: Stop after the existence check and report new folders

    In a dry run the cleanup pass deletes nothing, so ids it would have
    removed are listed in ``pending_removal`` and treated as absent.
    """

    def __init__(
        self,
        catalog: Catalog,
        source: MetadataSource,
        assets: AssetStore,
        *,
        dry_run: bool = False,
    ) -> None:
        self.catalog = catalog
        self.source = source
        self.assets = assets
        self.dry_run = dry_run
        self.pending_removal: set[int] = set()
        self._cover_tasks: set[asyncio.Task[None]] = set()

    async def run(self, folders: Sequence[str]) -> IngestResult:
        """
        Process all folders concurrently.

        Args:
            folders: Candidate folders relative to the content root

        Returns:
            IngestResult with one FolderResult per folder, in input order

        Raises:
            CatalogError: If an existence check fails (catalog unusable)
        """
        # Join point: the pass is done when every folder has settled
        results = await asyncio.gather(*(self.process_folder(f) for f in folders))
        return IngestResult(folders=list(results))

    async def process_folder(self, folder: str) -> FolderResult:
        """Ingest one folder if it is new."""
        try:
            work_id = parse_work_id(PurePosixPath(folder).name)
        except IdentifierError as e:
            logger.warning("Skipping %s: %s", folder, e)
            return FolderResult(folder, FolderOutcome.INVALID, error=str(e))

        if work_id not in self.pending_removal and await self.catalog.count_by_id(work_id):
            logger.debug("%s already in database, skipping", folder)
            return FolderResult(folder, FolderOutcome.PRESENT, work_id)

        rjcode = format_rjcode(work_id)
        logger.info("Found new folder: %s", folder)

        if self.dry_run:
            return FolderResult(folder, FolderOutcome.DRY_RUN, work_id)

        logger.info("[RJ%s] Fetching metadata...", rjcode)
        try:
            metadata = await self.source.fetch(work_id)
        except Exception as e:
            # Any source failure drops this folder from the run
            logger.warning("[RJ%s] Failed to fetch metadata: %s", rjcode, e)
            return FolderResult(folder, FolderOutcome.FAILED, work_id, error=str(e))

        logger.info("[RJ%s] Fetched metadata! Adding to database...", rjcode)
        self._start_cover_download(rjcode)

        try:
            await self.catalog.insert(metadata.with_dir(folder))
        except CatalogError as e:
            logger.warning("[RJ%s] Failed to add to database: %s", rjcode, e)
            return FolderResult(folder, FolderOutcome.FAILED, work_id, error=str(e))

        logger.info("[RJ%s] Finished adding to the database!", rjcode)
        return FolderResult(folder, FolderOutcome.INGESTED, work_id)

    # === Cover downloads ===

    def _start_cover_download(self, rjcode: str) -> None:
        logger.info("[RJ%s] Downloading cover image...", rjcode)
        task = asyncio.create_task(self._download_cover(rjcode), name=f"cover-RJ{rjcode}")
        self._cover_tasks.add(task)
        task.add_done_callback(self._cover_tasks.discard)

    async def _download_cover(self, rjcode: str) -> None:
        try:
            if await self.assets.download(rjcode):
                logger.info("[RJ%s] Cover image downloaded!", rjcode)
        except (CoverFetchError, AssetError) as e:
            logger.warning("[RJ%s] %s", rjcode, e)

    @property
    def pending_covers(self) -> int:
        """Cover downloads still in flight."""
        return len(self._cover_tasks)

    async def wait_for_covers(self) -> None:
        """Wait until every launched cover download has finished."""
        while self._cover_tasks:
            results = await asyncio.gather(*list(self._cover_tasks), return_exceptions=True)
            for r in results:
                if isinstance(r, Exception):
                    logger.error("Cover download crashed: %s", r)
