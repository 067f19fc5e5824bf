"""Tests for the reconciliation engine."""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator
from pathlib import Path

import httpx
import pytest

from rjsync.catalog import AsyncCatalog, CatalogStore
from rjsync.config import ScanConfig
from rjsync.covers import CoverStore
from rjsync.exceptions import DiscoveryError, ScanAbortedError
from rjsync.sync.engine import ReconciliationEngine
from rjsync.sync.models import FolderOutcome, ScanState, ScanSummary
from tests.conftest import FakeAssets, FakeCatalog, FakeSource, make_work


def make_engine(
    root: Path,
    catalog: FakeCatalog,
    source: FakeSource,
    assets: FakeAssets,
    **config_kwargs,
) -> ReconciliationEngine:
    return ReconciliationEngine(ScanConfig(root_dir=root, **config_kwargs), catalog, source, assets)


def run(engine: ReconciliationEngine, **kwargs) -> ScanSummary:
    return asyncio.run(engine.run(**kwargs))


class TestReconciliationEngine:
    """Tests for ReconciliationEngine.run()."""

    def test_bootstrap_creates_cover_dir_and_schema(self, content_root: Path) -> None:
        catalog = FakeCatalog()
        engine = make_engine(content_root, catalog, FakeSource(), FakeAssets(content_root))

        summary = run(engine)

        assert (content_root / "Images").is_dir()
        assert catalog.schema_ready is True
        assert catalog.closed is True
        assert engine.state is ScanState.DONE
        assert summary.ingest.total == 0

    def test_full_run(self, content_root: Path) -> None:
        """Stale record removed, new folders ingested, present folder skipped."""
        for name in ("RJ000001", "Circle/RJ000002 Title", "Circle/Scans"):
            (content_root / name).mkdir(parents=True)
        catalog = FakeCatalog(
            [make_work(1, folder="RJ000001"), make_work(100001, folder="RJ100001")]
        )
        source = FakeSource([make_work(2)])
        assets = FakeAssets(content_root)

        summary = run(make_engine(content_root, catalog, source, assets))

        assert sorted(catalog.records) == [1, 2]
        assert catalog.records[2].dir == "Circle/RJ000002 Title"
        assert summary.cleanup.removed_ids == [100001]
        assert summary.ingested == 1
        assert summary.skipped == 1
        assert summary.ingest.count(FolderOutcome.INVALID) == 0
        assert summary.summary_line() == (
            "Finished scan. Skipped 1 folders already in database or failed, added 1 new works."
        )
        assert assets.downloaded == ["000002"]

    def test_cleanup_finishes_before_ingestion(self, content_root: Path) -> None:
        """A record whose folder moved is re-ingested under the new path."""
        (content_root / "Moved" / "RJ000005").mkdir(parents=True)
        catalog = FakeCatalog([make_work(5, folder="RJ000005")])
        source = FakeSource([make_work(5)])

        run(make_engine(content_root, catalog, source, FakeAssets(content_root)))

        assert catalog.deleted == [5]
        assert catalog.records[5].dir == "Moved/RJ000005"

    def test_strict_cleanup_failure_aborts_before_ingestion(self, content_root: Path) -> None:
        (content_root / "RJ000009").mkdir()
        catalog = FakeCatalog([make_work(1, folder="RJ000001")], fail_delete={1})
        source = FakeSource([make_work(9)])
        engine = make_engine(content_root, catalog, source, FakeAssets(content_root))

        with pytest.raises(ScanAbortedError) as exc_info:
            run(engine)

        assert exc_info.value.stage == "cleaning_up"
        assert engine.state is ScanState.FAILED
        assert source.calls == []
        assert 9 not in catalog.records

    def test_lenient_cleanup_continues(self, content_root: Path) -> None:
        (content_root / "RJ000009").mkdir()
        catalog = FakeCatalog([make_work(1, folder="RJ000001")], fail_delete={1})
        source = FakeSource([make_work(9)])
        engine = make_engine(
            content_root, catalog, source, FakeAssets(content_root), strict_cleanup=False
        )

        summary = run(engine)

        assert summary.cleanup.failed == 1
        assert 9 in catalog.records
        assert engine.state is ScanState.DONE

    def test_bootstrap_failure(self, tmp_path: Path) -> None:
        root = tmp_path / "library"
        root.mkdir()

        class BrokenAssets(FakeAssets):
            def ensure_root(self) -> Path:
                from rjsync.exceptions import AssetError

                raise AssetError("Cover path exists and is not a directory")

        catalog = FakeCatalog()
        engine = make_engine(root, catalog, FakeSource(), BrokenAssets(root))

        with pytest.raises(ScanAbortedError) as exc_info:
            run(engine)
        assert exc_info.value.stage == "bootstrapping"
        assert catalog.schema_ready is False

    def test_discovery_failure_aborts(self, content_root: Path) -> None:
        async def broken() -> AsyncIterator[str]:
            yield "RJ000001"
            raise DiscoveryError("permission denied", root_dir=content_root)

        catalog = FakeCatalog()
        source = FakeSource([make_work(1)])
        engine = ReconciliationEngine(
            ScanConfig(root_dir=content_root),
            catalog,
            source,
            FakeAssets(content_root),
            list_folders=broken,
        )

        with pytest.raises(ScanAbortedError) as exc_info:
            run(engine)

        assert exc_info.value.stage == "ingesting"
        # Listing is drained before any folder is processed
        assert source.calls == []

    def test_existence_check_failure_aborts(self, content_root: Path) -> None:
        (content_root / "RJ000001").mkdir()
        engine = make_engine(
            content_root, FakeCatalog(fail_count=True), FakeSource(), FakeAssets(content_root)
        )
        with pytest.raises(ScanAbortedError, match="database is locked"):
            run(engine)

    def test_cleanup_only(self, content_root: Path) -> None:
        (content_root / "RJ000002").mkdir()
        catalog = FakeCatalog([make_work(1, folder="RJ000001")])
        source = FakeSource([make_work(2)])

        engine = make_engine(content_root, catalog, source, FakeAssets(content_root))
        summary = run(engine, cleanup_only=True)

        assert catalog.records == {}
        assert source.calls == []
        assert summary.ingest.total == 0

    def test_dry_run(self, content_root: Path) -> None:
        (content_root / "RJ000002").mkdir()
        catalog = FakeCatalog([make_work(1, folder="RJ000001")])
        source = FakeSource([make_work(2)])
        assets = FakeAssets(content_root)

        summary = run(make_engine(content_root, catalog, source, assets, dry_run=True))

        assert list(catalog.records) == [1]
        assert source.calls == []
        assert summary.summary_line().startswith("Dry run finished. 1 record(s) would be removed")
        assert summary.ingest.count(FolderOutcome.DRY_RUN) == 1

    def test_covers_settled_before_run_returns(self, content_root: Path) -> None:
        (content_root / "RJ000003").mkdir()
        assets = FakeAssets(content_root, delay=0.05)
        engine = make_engine(content_root, FakeCatalog(), FakeSource([make_work(3)]), assets)

        run(engine)

        assert assets.downloaded == ["000003"]
        assert engine.pending_covers == 0

    def test_cover_dir_not_treated_as_work(self, content_root: Path) -> None:
        (content_root / "Images" / "RJ000004").mkdir(parents=True)
        source = FakeSource([make_work(4)])
        summary = run(make_engine(content_root, FakeCatalog(), source, FakeAssets(content_root)))
        assert summary.ingest.total == 0

    def test_folders_without_code_not_counted(self, content_root: Path) -> None:
        for name in ("RJ000001", "Some Circle/RJ000002", "Some Circle/Scans", "Misc/Photos"):
            (content_root / name).mkdir(parents=True)
        catalog = FakeCatalog(
            [make_work(1, folder="RJ000001"), make_work(2, folder="Some Circle/RJ000002")]
        )

        summary = run(make_engine(content_root, catalog, FakeSource(), FakeAssets(content_root)))

        assert [(f.folder, f.outcome) for f in summary.ingest.folders] == [
            ("RJ000001", FolderOutcome.PRESENT),
            ("Some Circle/RJ000002", FolderOutcome.PRESENT),
        ]
        assert summary.skipped == 2

    def test_invalid_name_from_lister_counted(self, content_root: Path) -> None:
        async def listing() -> AsyncIterator[str]:
            yield "Circle/Bonus Tracks"
            yield "RJ000001"

        source = FakeSource([make_work(1)])
        engine = ReconciliationEngine(
            ScanConfig(root_dir=content_root),
            FakeCatalog(),
            source,
            FakeAssets(content_root),
            list_folders=listing,
        )

        summary = run(engine)

        assert summary.ingest.count(FolderOutcome.INVALID) == 1
        assert summary.ingested == 1
        assert summary.skipped == 1

    def test_dry_run_moved_folder_would_be_fetched(self, content_root: Path) -> None:
        (content_root / "Moved" / "RJ000005").mkdir(parents=True)
        catalog = FakeCatalog([make_work(5, folder="RJ000005")])
        source = FakeSource([make_work(5)])
        engine = make_engine(
            content_root, catalog, source, FakeAssets(content_root), dry_run=True
        )

        summary = run(engine)

        assert summary.cleanup.removed_ids == [5]
        assert [(f.folder, f.outcome) for f in summary.ingest.folders] == [
            ("Moved/RJ000005", FolderOutcome.DRY_RUN)
        ]
        assert catalog.deleted == []
        assert catalog.records[5].dir == "RJ000005"

    def test_many_new_folders(self, content_root: Path) -> None:
        ids = range(1, 301)
        for work_id in ids:
            (content_root / f"RJ{work_id:06d}").mkdir()
        catalog = FakeCatalog()
        source = FakeSource([make_work(work_id) for work_id in ids])
        assets = FakeAssets(content_root)

        summary = run(make_engine(content_root, catalog, source, assets))

        assert summary.ingested == 300
        assert summary.skipped == 0
        assert len(assets.downloaded) == 300


class TestEndToEnd:
    """Real SQLite catalog and cover store, fake HTTP."""

    @staticmethod
    def scan(root: Path, db: Path, source: FakeSource) -> tuple[ScanSummary, list[str]]:
        requested: list[str] = []

        def handler(request: httpx.Request) -> httpx.Response:
            requested.append(request.url.path)
            return httpx.Response(200, content=b"\xff\xd8jpeg")

        async def scenario() -> ScanSummary:
            store = CatalogStore(db)
            async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as http:
                engine = ReconciliationEngine(
                    ScanConfig(root_dir=root),
                    AsyncCatalog(store),
                    source,
                    CoverStore(root / "Images", client=http),
                )
                try:
                    return await engine.run()
                finally:
                    store.close()

        return asyncio.run(scenario()), requested

    def test_ingest_then_rerun_unchanged(self, content_root: Path, tmp_path: Path) -> None:
        (content_root / "RJ123456").mkdir()
        db = tmp_path / "catalog.sqlite3"
        source = FakeSource([make_work(123456)])

        first, requested = self.scan(content_root, db, source)

        assert first.ingested == 1
        assert requested == ["/WorkImages/RJ123456.jpg"]
        assert (content_root / "Images" / "RJ123456.jpg").exists()
        with CatalogStore(db) as store:
            record = store.get_work(123456)
            assert record is not None
            assert record.dir == "RJ123456"

        second, requested = self.scan(content_root, db, source)

        assert second.ingested == 0
        assert second.skipped == 1
        assert requested == []
        with CatalogStore(db) as store:
            assert [w.id for w in store.list_works()] == [123456]

    def test_stale_record_and_cover_removed(self, content_root: Path, tmp_path: Path) -> None:
        db = tmp_path / "catalog.sqlite3"
        with CatalogStore(db) as store:
            store.ensure_schema()
            store.insert_work(make_work(100001, folder="RJ100001"))
        (content_root / "Images").mkdir()
        (content_root / "Images" / "RJ100001.jpg").write_bytes(b"old")

        summary, _ = self.scan(content_root, db, FakeSource())

        assert summary.cleanup.removed == 1
        assert not (content_root / "Images" / "RJ100001.jpg").exists()
        with CatalogStore(db) as store:
            assert store.count_by_id(100001) == 0


class TestPorts:
    """Concrete implementations satisfy the engine's protocols."""

    def test_protocols(self, tmp_path: Path) -> None:
        from rjsync.metadata import HvdbClient
        from rjsync.sync.ports import AssetStore, Catalog, MetadataSource

        assert isinstance(AsyncCatalog(CatalogStore(tmp_path / "c.sqlite3")), Catalog)
        assert isinstance(HvdbClient(), MetadataSource)
        assert isinstance(CoverStore(tmp_path), AssetStore)
        assert isinstance(FakeCatalog(), Catalog)
