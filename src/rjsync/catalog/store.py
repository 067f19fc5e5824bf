"""SQLite catalog of works.

One row per work folder in ``t_work``, keyed by the numeric RJ id, plus the
circles, tags and voice actors it references. Records are created by the
ingestion pass and removed by the cleanup pass; nothing updates them in place.
"""

from __future__ import annotations

import json
import logging
import sqlite3
import threading
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from rjsync.exceptions import CatalogError
from rjsync.schemas.work import Circle, Tag, VoiceActor, WorkMetadata, WorkRef

logger = logging.getLogger(__name__)

# Current schema version - no migrations, a mismatch is reported only
SCHEMA_VERSION = 1

SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS t_circle (
    id    INTEGER PRIMARY KEY,
    name  TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS t_work (
    id         INTEGER PRIMARY KEY,              -- numeric part of RJxxxxxx
    title      TEXT NOT NULL,
    circle_id  INTEGER REFERENCES t_circle(id),
    nsfw       INTEGER NOT NULL DEFAULT 0,
    dir        TEXT NOT NULL,                    -- folder, relative to root_dir
    extra      TEXT NOT NULL DEFAULT '{}',       -- JSON pass-through fields
    added_at   TEXT NOT NULL
);

CREATE INDEX IF NOT EXISTS idx_work_circle ON t_work(circle_id);

CREATE TABLE IF NOT EXISTS t_tag (
    id    INTEGER PRIMARY KEY,
    name  TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS t_va (
    id    INTEGER PRIMARY KEY,
    name  TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS r_tag_work (
    tag_id   INTEGER NOT NULL REFERENCES t_tag(id),
    work_id  INTEGER NOT NULL REFERENCES t_work(id),
    PRIMARY KEY (tag_id, work_id)
);

CREATE TABLE IF NOT EXISTS r_va_work (
    va_id    INTEGER NOT NULL REFERENCES t_va(id),
    work_id  INTEGER NOT NULL REFERENCES t_work(id),
    PRIMARY KEY (va_id, work_id)
);

CREATE TABLE IF NOT EXISTS index_meta (
    key   TEXT PRIMARY KEY,
    value TEXT NOT NULL
);
"""


class CatalogStore:
    """SQLite-backed work catalog.

    The connection is created lazily and shared by every operation on the
    instance. Calls may arrive from worker threads (the async wrapper runs
    them via ``asyncio.to_thread``), so each operation holds ``_lock`` for
    its whole unit of work.
    """

    def __init__(self, db_path: Path) -> None:
        """Initialize catalog with database path.

        Args:
            db_path: Path to SQLite database file (created if not exists)
        """
        self.db_path = db_path
        self._conn: sqlite3.Connection | None = None
        self._lock = threading.Lock()

    def _get_conn(self) -> sqlite3.Connection:
        """Get or create database connection."""
        if self._conn is None:
            try:
                self.db_path.parent.mkdir(parents=True, exist_ok=True)
                self._conn = sqlite3.connect(self.db_path, check_same_thread=False)
            except (OSError, sqlite3.Error) as e:
                raise CatalogError(
                    f"Cannot open catalog database: {e}", database=self.db_path
                ) from e
            self._conn.row_factory = sqlite3.Row
            self._conn.execute("PRAGMA foreign_keys = ON")
        return self._conn

    def _error(self, action: str, e: Exception, work_id: int | None = None) -> CatalogError:
        return CatalogError(
            f"Catalog {action} failed: {e}", database=self.db_path, work_id=work_id
        )

    def close(self) -> None:
        """Close database connection."""
        with self._lock:
            if self._conn is not None:
                self._conn.close()
                self._conn = None

    def __enter__(self) -> CatalogStore:
        """Context manager entry."""
        return self

    def __exit__(self, *args: object) -> None:
        """Context manager exit."""
        self.close()

    # === Schema ===

    def ensure_schema(self) -> bool:
        """Create tables if they don't exist.

        Returns:
            True if the schema was created by this call
        """
        with self._lock:
            conn = self._get_conn()
            try:
                cursor = conn.execute(
                    "SELECT name FROM sqlite_master WHERE type='table' AND name='t_work'"
                )
                if cursor.fetchone() is not None:
                    self._check_version(conn)
                    return False
                conn.executescript(SCHEMA_SQL)
                conn.execute(
                    "INSERT OR REPLACE INTO index_meta (key, value) VALUES (?, ?)",
                    ("schema_version", str(SCHEMA_VERSION)),
                )
                conn.commit()
            except sqlite3.Error as e:
                raise self._error("schema creation", e) from e
        logger.info("Created catalog schema version %d at %s", SCHEMA_VERSION, self.db_path)
        return True

    def _check_version(self, conn: sqlite3.Connection) -> None:
        row = conn.execute("SELECT value FROM index_meta WHERE key = 'schema_version'").fetchone()
        if row is not None and int(row["value"]) != SCHEMA_VERSION:
            logger.warning(
                "Catalog schema version %s differs from expected %d",
                row["value"],
                SCHEMA_VERSION,
            )

    # === Lookups ===

    def count_by_id(self, work_id: int) -> int:
        """Number of records with this id (0 or 1)."""
        with self._lock:
            try:
                row = self._get_conn().execute(
                    "SELECT COUNT(*) FROM t_work WHERE id = ?", (work_id,)
                ).fetchone()
            except sqlite3.Error as e:
                raise self._error("lookup", e, work_id) from e
        return int(row[0])

    def list_works(self) -> list[WorkRef]:
        """All (id, dir) pairs in the catalog, ordered by id."""
        with self._lock:
            try:
                rows = self._get_conn().execute("SELECT id, dir FROM t_work ORDER BY id").fetchall()
            except sqlite3.Error as e:
                raise self._error("listing", e) from e
        return [WorkRef(id=row["id"], dir=row["dir"]) for row in rows]

    def get_work(self, work_id: int) -> WorkMetadata | None:
        """Load the full record for one work.

        Args:
            work_id: Numeric work id

        Returns:
            WorkMetadata if found, None otherwise
        """
        with self._lock:
            try:
                return self._load_work(self._get_conn(), work_id)
            except sqlite3.Error as e:
                raise self._error("lookup", e, work_id) from e

    def list_records(self) -> list[WorkMetadata]:
        """Load every record in full, ordered by id."""
        with self._lock:
            try:
                conn = self._get_conn()
                ids = [row["id"] for row in conn.execute("SELECT id FROM t_work ORDER BY id")]
                records = [self._load_work(conn, work_id) for work_id in ids]
            except sqlite3.Error as e:
                raise self._error("listing", e) from e
        return [r for r in records if r is not None]

    def _load_work(self, conn: sqlite3.Connection, work_id: int) -> WorkMetadata | None:
        row = conn.execute(
            """
            SELECT w.id, w.title, w.nsfw, w.dir, w.extra, c.id AS circle_id, c.name AS circle_name
            FROM t_work w LEFT JOIN t_circle c ON c.id = w.circle_id
            WHERE w.id = ?
            """,
            (work_id,),
        ).fetchone()
        if row is None:
            return None

        tags = conn.execute(
            """
            SELECT t.id, t.name FROM t_tag t
            JOIN r_tag_work r ON r.tag_id = t.id
            WHERE r.work_id = ? ORDER BY t.name
            """,
            (work_id,),
        ).fetchall()
        vas = conn.execute(
            """
            SELECT v.id, v.name FROM t_va v
            JOIN r_va_work r ON r.va_id = v.id
            WHERE r.work_id = ? ORDER BY v.name
            """,
            (work_id,),
        ).fetchall()

        circle = None
        if row["circle_id"] is not None:
            circle = Circle(id=row["circle_id"], name=row["circle_name"])

        return WorkMetadata(
            id=row["id"],
            title=row["title"],
            circle=circle,
            nsfw=bool(row["nsfw"]),
            tags=[Tag(id=t["id"], name=t["name"]) for t in tags],
            vas=[VoiceActor(id=v["id"], name=v["name"]) for v in vas],
            dir=row["dir"],
            extra=json.loads(row["extra"] or "{}"),
        )

    # === Mutations ===

    def insert_work(self, work: WorkMetadata) -> None:
        """Insert a complete record in one transaction.

        Args:
            work: Metadata with ``dir`` set

        Raises:
            CatalogError: If the id already exists or the write fails
        """
        if work.dir is None:
            raise CatalogError(
                f"Record {work.id} has no folder attached", database=self.db_path, work_id=work.id
            )

        extra: dict[str, Any] = work.extra
        with self._lock:
            conn = self._get_conn()
            try:
                with conn:
                    if work.circle is not None:
                        conn.execute(
                            "INSERT OR IGNORE INTO t_circle (id, name) VALUES (?, ?)",
                            (work.circle.id, work.circle.name),
                        )
                    conn.execute(
                        """
                        INSERT INTO t_work (id, title, circle_id, nsfw, dir, extra, added_at)
                        VALUES (?, ?, ?, ?, ?, ?, ?)
                        """,
                        (
                            work.id,
                            work.title,
                            work.circle.id if work.circle else None,
                            int(work.nsfw),
                            work.dir,
                            json.dumps(extra, ensure_ascii=False, sort_keys=True),
                            datetime.now(UTC).isoformat(),
                        ),
                    )
                    for tag in work.tags:
                        conn.execute(
                            "INSERT OR IGNORE INTO t_tag (id, name) VALUES (?, ?)",
                            (tag.id, tag.name),
                        )
                        conn.execute(
                            "INSERT OR IGNORE INTO r_tag_work (tag_id, work_id) VALUES (?, ?)",
                            (tag.id, work.id),
                        )
                    for va in work.vas:
                        conn.execute(
                            "INSERT OR IGNORE INTO t_va (id, name) VALUES (?, ?)",
                            (va.id, va.name),
                        )
                        conn.execute(
                            "INSERT OR IGNORE INTO r_va_work (va_id, work_id) VALUES (?, ?)",
                            (va.id, work.id),
                        )
            except (sqlite3.Error, TypeError, ValueError) as e:
                raise self._error("insert", e, work.id) from e

        logger.debug("Inserted work %d (%s)", work.id, work.dir)

    def remove_work(self, work_id: int) -> bool:
        """Delete a record and any circle, tag or voice actor left unreferenced.

        Args:
            work_id: Numeric work id

        Returns:
            True if a record was deleted
        """
        with self._lock:
            conn = self._get_conn()
            try:
                with conn:
                    conn.execute("DELETE FROM r_tag_work WHERE work_id = ?", (work_id,))
                    conn.execute("DELETE FROM r_va_work WHERE work_id = ?", (work_id,))
                    cursor = conn.execute("DELETE FROM t_work WHERE id = ?", (work_id,))
                    removed = cursor.rowcount > 0
                    conn.execute(
                        "DELETE FROM t_tag WHERE id NOT IN (SELECT tag_id FROM r_tag_work)"
                    )
                    conn.execute("DELETE FROM t_va WHERE id NOT IN (SELECT va_id FROM r_va_work)")
                    conn.execute(
                        """
                        DELETE FROM t_circle WHERE id NOT IN
                            (SELECT circle_id FROM t_work WHERE circle_id IS NOT NULL)
                        """
                    )
            except sqlite3.Error as e:
                raise self._error("delete", e, work_id) from e

        if removed:
            logger.debug("Removed work %d", work_id)
        return removed
