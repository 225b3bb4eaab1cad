"""
In-Memory Record Store
======================

Process-local implementation of RecordStore. Ideal for tests and for a
single-process deployment where the API, voice skill and relay share one
interpreter.

Limitations:
- Not persistent (rows lost on restart)
- Single-process only; use SQLiteRecordStore when the chat relay and the
  HTTP service run as separate processes
"""

import copy
import logging
import threading
from typing import Any

from .repositories import Clock, RecordStore, StoredRecord

logger = logging.getLogger(__name__)


class InMemoryRecordStore(RecordStore):
    """Dict-backed record store; every operation holds one lock."""

    def __init__(self, clock: Clock | None = None):
        super().__init__(clock)
        self._rows: dict[str, StoredRecord] = {}
        self._lock = threading.Lock()
        logger.info("InMemoryRecordStore initialized")

    def _live_row(self, key: str) -> StoredRecord | None:
        row = self._rows.get(key)
        if row is None or not self._is_live(row.ttl):
            return None
        return row

    async def put(self, key: str, item: dict[str, Any], ttl: int | None = None) -> None:
        with self._lock:
            self._rows[key] = StoredRecord(key=key, item=copy.deepcopy(item), ttl=ttl)

    async def get(self, key: str) -> StoredRecord | None:
        with self._lock:
            row = self._live_row(key)
            return copy.deepcopy(row) if row else None

    async def delete(self, key: str) -> bool:
        with self._lock:
            return self._rows.pop(key, None) is not None

    async def compare_and_set(
        self,
        key: str,
        field: str,
        expected: Any,
        changes: dict[str, Any],
    ) -> bool:
        with self._lock:
            row = self._live_row(key)
            if row is None or row.item.get(field) != expected:
                return False
            row.item.update(copy.deepcopy(changes))
            return True

    async def health_check(self) -> bool:
        return True
