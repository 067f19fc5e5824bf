"""Scan, init and works command handlers.

Each handler takes loaded Settings, does its work, and returns a process
exit code. The Typer layer in ``rjsync.cli`` only parses options.
"""

from __future__ import annotations

import asyncio
import json
import logging

import httpx

from rjsync.catalog import AsyncCatalog, CatalogStore
from rjsync.config import ScanConfig, Settings
from rjsync.covers import CoverStore
from rjsync.exceptions import AssetError, CatalogError, ScanAbortedError
from rjsync.metadata.hvdb import USER_AGENT, HvdbClient
from rjsync.sync.engine import ReconciliationEngine
from rjsync.sync.models import ScanSummary
from rjsync.ui import (
    console,
    fatal_error,
    print_dry_run,
    print_info,
    print_scan_summary,
    print_success,
    print_works_table,
)

logger = logging.getLogger(__name__)


def build_http_client(config: ScanConfig) -> httpx.AsyncClient:
    """
    Create the HTTP client shared by the metadata source and the cover store.

    Every new folder requests at once, so on a large first scan requests
    queue for a pool connection. ``timeout_seconds`` bounds each request
    but not the wait for a connection.
    """
    return httpx.AsyncClient(
        timeout=httpx.Timeout(config.timeout_seconds, pool=None),
        follow_redirects=True,
        headers={"User-Agent": USER_AGENT},
    )


async def run_scan(
    settings: Settings,
    *,
    dry_run: bool = False,
    cleanup_only: bool = False,
) -> ScanSummary:
    """
    Wire up the real collaborators and run one reconciliation.

    One HTTP client is shared by the metadata source and the cover store.

    Raises:
        ScanAbortedError: If the run fails
    """
    config = settings.scan_config(dry_run=dry_run)
    store = CatalogStore(settings.paths.database)

    async with build_http_client(config) as client:
        engine = ReconciliationEngine(
            config,
            AsyncCatalog(store),
            HvdbClient(config.metadata_url_template, client=client),
            CoverStore(config.cover_dir, config.cover_url_template, client=client),
        )
        try:
            return await engine.run(cleanup_only=cleanup_only)
        finally:
            store.close()


def cmd_scan(settings: Settings, *, dry_run: bool = False, cleanup_only: bool = False) -> int:
    """Run a full scan (or only the cleanup pass)."""
    if dry_run:
        print_dry_run("No records or covers will be added or removed")

    print_info(f"Scanning {settings.paths.root_dir}")
    try:
        summary = asyncio.run(run_scan(settings, dry_run=dry_run, cleanup_only=cleanup_only))
    except ScanAbortedError as e:
        fatal_error(str(e), hint="Check the log for the failing folder or database error")
        return 1

    print_scan_summary(summary)
    return 0


def cmd_init(settings: Settings) -> int:
    """Create the cover directory and catalog schema."""
    config = settings.scan_config()
    covers = CoverStore(config.cover_dir, config.cover_url_template)
    try:
        cover_dir = covers.ensure_root()
        with CatalogStore(settings.paths.database) as store:
            created = store.ensure_schema()
    except (AssetError, CatalogError) as e:
        fatal_error(str(e))
        return 1
    finally:
        asyncio.run(covers.aclose())

    print_success(f"Cover directory: {cover_dir}")
    if created:
        print_success(f"Created catalog: {settings.paths.database}")
    else:
        print_success(f"Catalog already initialized: {settings.paths.database}")
    return 0


def cmd_works(settings: Settings, *, json_output: bool = False) -> int:
    """List catalog records."""
    try:
        with CatalogStore(settings.paths.database) as store:
            store.ensure_schema()
            works = store.list_records()
    except CatalogError as e:
        fatal_error(str(e), hint="Run 'rjsync init' to create the catalog")
        return 1

    if json_output:
        console.print_json(json.dumps([w.model_dump() for w in works], ensure_ascii=False))
    else:
        print_works_table(works)
    return 0
