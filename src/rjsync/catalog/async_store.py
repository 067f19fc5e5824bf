"""Async wrapper around the SQLite catalog.

Each call runs the blocking store method in a worker thread so catalog
queries are suspension points for the event loop.
"""

from __future__ import annotations

import asyncio

from rjsync.catalog.store import CatalogStore
from rjsync.schemas.work import WorkMetadata, WorkRef


class AsyncCatalog:
    """Implements the engine's ``Catalog`` protocol on top of CatalogStore."""

    def __init__(self, store: CatalogStore) -> None:
        self.store = store

    async def ensure_schema(self) -> bool:
        return await asyncio.to_thread(self.store.ensure_schema)

    async def count_by_id(self, work_id: int) -> int:
        return await asyncio.to_thread(self.store.count_by_id, work_id)

    async def insert(self, record: WorkMetadata) -> None:
        await asyncio.to_thread(self.store.insert_work, record)

    async def delete(self, work_id: int) -> bool:
        return await asyncio.to_thread(self.store.remove_work, work_id)

    async def list_all(self) -> list[WorkRef]:
        return await asyncio.to_thread(self.store.list_works)

    async def get(self, work_id: int) -> WorkMetadata | None:
        return await asyncio.to_thread(self.store.get_work, work_id)

    async def close(self) -> None:
        await asyncio.to_thread(self.store.close)
