"""Cleanup pass: drop catalog records whose folder has disappeared.

Every record is checked in its own task; the pass completes when all of
them have settled. With ``strict=True`` (the default) the first failed
record deletion aborts the pass and therefore the whole run. With
``strict=False`` the failure is logged and counted and the other records
carry on.
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path

from rjsync.exceptions import AssetError, CatalogError
from rjsync.identifiers import format_rjcode
from rjsync.schemas.work import WorkRef
from rjsync.sync.models import CleanupResult
from rjsync.sync.ports import AssetStore, Catalog

logger = logging.getLogger(__name__)


class CleanupPass:
    """Removes stale records and their covers.

    Args:
        catalog: Work catalog
        assets: Cover storage
        root_dir: Content root the record ``dir`` values are relative to
        strict: Abort on the first failed record deletion
        dry_run: Only report what would be removed
    """

    def __init__(
        self,
        catalog: Catalog,
        assets: AssetStore,
        root_dir: Path,
        *,
        strict: bool = True,
        dry_run: bool = False,
    ) -> None:
        self.catalog = catalog
        self.assets = assets
        self.root_dir = root_dir
        self.strict = strict
        self.dry_run = dry_run

    async def run(self) -> CleanupResult:
        """
        Check every record against the filesystem.

        Returns:
            CleanupResult with removal counts

        Raises:
            CatalogError: Listing failed, or (strict mode) a deletion failed
        """
        logger.info("Looking for folders to clean up...")
        works = await self.catalog.list_all()
        result = CleanupResult(checked=len(works))

        # Join point: the pass is done when every record has settled
        await asyncio.gather(*(self._check(work, result) for work in works))

        if result.removed or result.failed:
            logger.info(
                "Cleanup removed %d of %d record(s)%s",
                result.removed,
                result.checked,
                f", {result.failed} failed" if result.failed else "",
            )
        return result

    async def _check(self, work: WorkRef, result: CleanupResult) -> None:
        if (self.root_dir / work.dir).exists():
            return

        if self.dry_run:
            logger.warning("%s is missing from filesystem (dry run, not removing)", work.dir)
            result.removed += 1
            result.removed_ids.append(work.id)
            return

        logger.warning("%s is missing from filesystem. Removing from database...", work.dir)
        try:
            await self.catalog.delete(work.id)
        except CatalogError as e:
            if self.strict:
                raise
            logger.error("Failed to remove %s (id %d) from database: %s", work.dir, work.id, e)
            result.failed += 1
            return

        result.removed += 1
        result.removed_ids.append(work.id)

        rjcode = format_rjcode(work.id)
        try:
            await self.assets.delete(rjcode)
        except (AssetError, OSError) as e:
            logger.warning("[RJ%s] Failed to delete cover image: %s", rjcode, e)
            result.cover_failures += 1
