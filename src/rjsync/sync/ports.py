"""
Interfaces the reconciliation engine depends on.

The engine never touches SQLite, HTTP or cover files directly; it talks to
these protocols. Concrete implementations live in ``rjsync.catalog``,
``rjsync.metadata`` and ``rjsync.covers``. Tests provide in-memory fakes.
"""

from __future__ import annotations

from collections.abc import AsyncIterator, Callable
from pathlib import Path
from typing import Protocol, runtime_checkable

from rjsync.schemas.work import WorkMetadata, WorkRef


@runtime_checkable
class Catalog(Protocol):
    """Async view of the work catalog."""

    async def ensure_schema(self) -> bool: ...

    async def count_by_id(self, work_id: int) -> int: ...

    async def insert(self, record: WorkMetadata) -> None: ...

    async def delete(self, work_id: int) -> bool: ...

    async def list_all(self) -> list[WorkRef]: ...

    async def get(self, work_id: int) -> WorkMetadata | None: ...

    async def close(self) -> None: ...


@runtime_checkable
class MetadataSource(Protocol):
    """Fetches descriptive metadata for one work.

    Implementations raise ``MetadataSourceError`` on any transport or parse
    failure.
    """

    async def fetch(self, work_id: int) -> WorkMetadata: ...


@runtime_checkable
class AssetStore(Protocol):
    """Cover image storage keyed by the zero-padded rjcode."""

    def ensure_root(self) -> Path: ...

    def path_for(self, rjcode: str) -> Path: ...

    async def download(self, rjcode: str) -> bool: ...

    async def delete(self, rjcode: str) -> bool: ...


# Returns the candidate folders under a root, relative to it
FolderLister = Callable[[], AsyncIterator[str]]
