"""Work catalog persistence (SQLite)."""

from rjsync.catalog.async_store import AsyncCatalog
from rjsync.catalog.store import SCHEMA_VERSION, CatalogStore

__all__ = ["SCHEMA_VERSION", "AsyncCatalog", "CatalogStore"]
