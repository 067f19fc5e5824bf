"""Shared pytest fixtures and in-memory fakes for rjsync tests."""

from __future__ import annotations

import asyncio
from pathlib import Path

import pytest

from rjsync.exceptions import AssetError, CatalogError, MetadataSourceError
from rjsync.schemas.work import Circle, Tag, VoiceActor, WorkMetadata, WorkRef

ENV_VARS = (
    "RJSYNC_ROOT_DIR",
    "RJSYNC_DATABASE",
    "RJSYNC_ENV",
    "RJSYNC_DATA_DIR",
    "RJSYNC_LOG_DIR",
    "LOG_LEVEL",
)


def make_work(work_id: int, title: str | None = None, folder: str | None = None) -> WorkMetadata:
    """Create a WorkMetadata with a circle, one tag and one voice actor.

    Args:
        work_id: Numeric work id.
        title: Title (default: "Work <id>").
        folder: Folder to attach, or None for a freshly fetched record.

    Returns:
        WorkMetadata instance.
    """
    return WorkMetadata(
        id=work_id,
        title=title or f"Work {work_id}",
        circle=Circle(id=1, name="Test Circle"),
        nsfw=False,
        tags=[Tag(id=10, name="ASMR")],
        vas=[VoiceActor(id=20, name="Test VA")],
        dir=folder,
    )


class FakeCatalog:
    """In-memory Catalog.

    Args:
        records: Records present before the run.
        fail_delete: Ids whose deletion raises CatalogError.
        fail_insert: Ids whose insert raises CatalogError.
        fail_count: Make every existence check raise CatalogError.
    """

    def __init__(
        self,
        records: list[WorkMetadata] | None = None,
        *,
        fail_delete: set[int] | None = None,
        fail_insert: set[int] | None = None,
        fail_count: bool = False,
    ) -> None:
        self.records: dict[int, WorkMetadata] = {r.id: r for r in records or []}
        self.fail_delete = fail_delete or set()
        self.fail_insert = fail_insert or set()
        self.fail_count = fail_count
        self.inserted: list[int] = []
        self.deleted: list[int] = []
        self.schema_ready = False
        self.closed = False

    async def ensure_schema(self) -> bool:
        created = not self.schema_ready
        self.schema_ready = True
        return created

    async def count_by_id(self, work_id: int) -> int:
        await asyncio.sleep(0)
        if self.fail_count:
            raise CatalogError("database is locked", work_id=work_id)
        return int(work_id in self.records)

    async def insert(self, record: WorkMetadata) -> None:
        await asyncio.sleep(0)
        if record.id in self.fail_insert or record.id in self.records:
            raise CatalogError(f"insert failed for {record.id}", work_id=record.id)
        self.records[record.id] = record
        self.inserted.append(record.id)

    async def delete(self, work_id: int) -> bool:
        await asyncio.sleep(0)
        if work_id in self.fail_delete:
            raise CatalogError(f"delete failed for {work_id}", work_id=work_id)
        self.deleted.append(work_id)
        return self.records.pop(work_id, None) is not None

    async def list_all(self) -> list[WorkRef]:
        return [
            WorkRef(id=r.id, dir=r.dir or "") for r in sorted(self.records.values(), key=lambda r: r.id)
        ]

    async def get(self, work_id: int) -> WorkMetadata | None:
        return self.records.get(work_id)

    async def close(self) -> None:
        self.closed = True


class FakeSource:
    """In-memory MetadataSource.

    Args:
        works: Works the source knows about (missing ids raise).
        failing: Ids that raise MetadataSourceError.
    """

    def __init__(
        self,
        works: list[WorkMetadata] | None = None,
        *,
        failing: set[int] | None = None,
    ) -> None:
        self.works = {w.id: w for w in works or []}
        self.failing = failing or set()
        self.calls: list[int] = []

    async def fetch(self, work_id: int) -> WorkMetadata:
        self.calls.append(work_id)
        await asyncio.sleep(0)
        if work_id in self.failing or work_id not in self.works:
            raise MetadataSourceError(f"no metadata for {work_id}", work_id=work_id)
        return self.works[work_id]


class FakeAssets:
    """AssetStore writing placeholder covers under ``root/Images``.

    Args:
        root: Content root.
        fail_delete: Rjcodes whose deletion raises AssetError.
        missing: Rjcodes the server has no cover for.
        delay: Seconds each download sleeps before writing.
    """

    def __init__(
        self,
        root: Path,
        *,
        fail_delete: set[str] | None = None,
        missing: set[str] | None = None,
        delay: float = 0.0,
    ) -> None:
        self.cover_dir = root / "Images"
        self.fail_delete = fail_delete or set()
        self.missing = missing or set()
        self.delay = delay
        self.downloaded: list[str] = []
        self.deleted: list[str] = []

    def ensure_root(self) -> Path:
        self.cover_dir.mkdir(parents=True, exist_ok=True)
        return self.cover_dir

    def path_for(self, rjcode: str) -> Path:
        return self.cover_dir / f"RJ{rjcode}.jpg"

    async def download(self, rjcode: str) -> bool:
        await asyncio.sleep(self.delay)
        if rjcode in self.missing:
            return False
        self.path_for(rjcode).write_bytes(b"\xff\xd8cover")
        self.downloaded.append(rjcode)
        return True

    async def delete(self, rjcode: str) -> bool:
        if rjcode in self.fail_delete:
            raise AssetError(f"cannot delete RJ{rjcode}.jpg", path=self.path_for(rjcode))
        self.deleted.append(rjcode)
        path = self.path_for(rjcode)
        if not path.exists():
            return False
        path.unlink()
        return True


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> Path:
    """Isolate tests from the caller's environment, .env and config.yaml.

    Each variable is set then deleted so monkeypatch restores it even if
    python-dotenv writes it during the test.
    """
    for var in ENV_VARS:
        monkeypatch.setenv(var, "")
        monkeypatch.delenv(var)
    monkeypatch.setenv("RJSYNC_DATA_DIR", str(tmp_path / "data"))
    monkeypatch.setenv("RJSYNC_LOG_DIR", str(tmp_path / "logs"))
    monkeypatch.chdir(tmp_path)

    from rjsync.env_settings import clear_env_settings_cache

    clear_env_settings_cache()
    return tmp_path


@pytest.fixture
def content_root(tmp_path: Path) -> Path:
    """Empty content root directory."""
    root = tmp_path / "library"
    root.mkdir()
    return root
