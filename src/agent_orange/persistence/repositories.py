"""
Abstract Record Store
=====================

Defines the contract for the key-value store behind every singleton record
(MODE, CURRENT, USER, API_TOKEN, NOTIFICATION).

Rows carry an optional numeric ``ttl`` (epoch seconds). A row whose ttl lies
in the past is invisible to every read and to compare_and_set, exactly as if
it had been deleted.
"""

import time
from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

Clock = Callable[[], float]


@dataclass
class StoredRecord:
    """A row as returned by the store"""
    key: str
    item: dict[str, Any]
    ttl: int | None = None


class RecordStore(ABC):
    """
    Abstract interface for singleton record persistence.

    Implementations:
    - SQLiteRecordStore: Local SQLite database, safe across processes
    - InMemoryRecordStore: Process-local dict, for tests and single-process runs
    """

    def __init__(self, clock: Clock | None = None) -> None:
        self._clock = clock or time.time

    def now(self) -> int:
        return int(self._clock())

    def _is_live(self, ttl: int | None) -> bool:
        return ttl is None or self.now() <= ttl

    @abstractmethod
    async def put(self, key: str, item: dict[str, Any], ttl: int | None = None) -> None:
        """Create or unconditionally replace the row at *key*"""
        pass

    @abstractmethod
    async def get(self, key: str) -> StoredRecord | None:
        """Return the live row at *key*, or None when absent or expired"""
        pass

    @abstractmethod
    async def delete(self, key: str) -> bool:
        """Remove the row at *key*; True if a row was removed"""
        pass

    @abstractmethod
    async def compare_and_set(
        self,
        key: str,
        field: str,
        expected: Any,
        changes: dict[str, Any],
    ) -> bool:
        """
        Merge *changes* into the live row at *key* only if ``item[field] == expected``.

        Must be a single conditional write. Returns False when the row is
        missing, expired, or the precondition does not hold.
        """
        pass

    @abstractmethod
    async def health_check(self) -> bool:
        """Return True when the store answers queries"""
        pass

    async def close(self) -> None:
        """Release connections. Default: nothing to release."""
        return None
