"""
SQLite Implementation of the Record Store
=========================================

- Async support via asyncio.to_thread
- One ``records`` table: pk, JSON document, ttl
- compare_and_set is one UPDATE with the precondition in its WHERE clause,
  so two processes deciding the same request cannot both succeed
"""

import asyncio
import json
import logging
import sqlite3
import threading
from pathlib import Path
from typing import Any

from agent_orange.core.exceptions import StoreUnavailableError

from .repositories import Clock, RecordStore, StoredRecord

logger = logging.getLogger(__name__)


class _ConnectionPool:
    """Thread-local SQLite connection cache."""

    def __init__(self, db_path: Path):
        self._db_path = db_path
        self._local = threading.local()
        self._lock = threading.Lock()
        self._all: list[sqlite3.Connection] = []

    def get(self) -> sqlite3.Connection:
        conn = getattr(self._local, 'conn', None)
        if conn is None:
            conn = sqlite3.connect(self._db_path, timeout=10.0, check_same_thread=False)
            conn.row_factory = sqlite3.Row
            conn.execute("PRAGMA journal_mode=WAL")
            self._local.conn = conn
            with self._lock:
                self._all.append(conn)
        return conn

    def close_all(self):
        with self._lock:
            for conn in self._all:
                conn.close()
            self._all.clear()
        self._local = threading.local()


class SQLiteRecordStore(RecordStore):
    """SQLite implementation of RecordStore."""

    def __init__(self, db_path: Path | None = None, clock: Clock | None = None):
        super().__init__(clock)
        self.db_path = db_path or Path("data") / "agent_orange.db"
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._pool = _ConnectionPool(self.db_path)
        self._init_db()

    def _init_db(self):
        """Initialize database schema"""
        conn = self._pool.get()
        conn.execute("""
            CREATE TABLE IF NOT EXISTS records (
                pk TEXT PRIMARY KEY,
                data TEXT NOT NULL,
                ttl INTEGER
            )
        """)
        conn.commit()

    # ------------------------------------------------------------------
    # Private sync helpers (called via asyncio.to_thread)
    # ------------------------------------------------------------------

    def _sync_put(self, key: str, item: dict[str, Any], ttl: int | None) -> None:
        conn = self._pool.get()
        conn.execute(
            "INSERT OR REPLACE INTO records (pk, data, ttl) VALUES (?, ?, ?)",
            (key, json.dumps(item), ttl),
        )
        conn.commit()

    def _sync_get(self, key: str, now: int) -> StoredRecord | None:
        conn = self._pool.get()
        row = conn.execute(
            "SELECT pk, data, ttl FROM records WHERE pk = ? AND (ttl IS NULL OR ttl >= ?)",
            (key, now),
        ).fetchone()
        if row is None:
            return None
        return StoredRecord(key=row["pk"], item=json.loads(row["data"]), ttl=row["ttl"])

    def _sync_delete(self, key: str) -> bool:
        conn = self._pool.get()
        cursor = conn.execute("DELETE FROM records WHERE pk = ?", (key,))
        conn.commit()
        return cursor.rowcount > 0

    def _sync_compare_and_set(
        self,
        key: str,
        field: str,
        expected: Any,
        changes: dict[str, Any],
        now: int,
    ) -> bool:
        conn = self._pool.get()
        cursor = conn.execute(
            """
            UPDATE records
            SET data = json_patch(data, ?)
            WHERE pk = ?
              AND json_extract(data, ?) = ?
              AND (ttl IS NULL OR ttl >= ?)
            """,
            (json.dumps(changes), key, f"$.{field}", expected, now),
        )
        conn.commit()
        return cursor.rowcount == 1

    def _sync_health(self) -> bool:
        conn = self._pool.get()
        conn.execute("SELECT 1").fetchone()
        return True

    async def _run(self, func, *args):
        try:
            return await asyncio.to_thread(func, *args)
        except sqlite3.Error as e:
            logger.error("SQLite record store error: %s", e, exc_info=True)
            raise StoreUnavailableError(
                f"record store unavailable: {e}",
                details={"db_path": str(self.db_path)},
            ) from e

    # ------------------------------------------------------------------
    # Public async API
    # ------------------------------------------------------------------

    async def put(self, key: str, item: dict[str, Any], ttl: int | None = None) -> None:
        await self._run(self._sync_put, key, item, ttl)

    async def get(self, key: str) -> StoredRecord | None:
        return await self._run(self._sync_get, key, self.now())

    async def delete(self, key: str) -> bool:
        return await self._run(self._sync_delete, key)

    async def compare_and_set(
        self,
        key: str,
        field: str,
        expected: Any,
        changes: dict[str, Any],
    ) -> bool:
        return await self._run(self._sync_compare_and_set, key, field, expected, changes, self.now())

    async def health_check(self) -> bool:
        try:
            return await self._run(self._sync_health)
        except StoreUnavailableError:
            return False

    async def close(self) -> None:
        self._pool.close_all()
