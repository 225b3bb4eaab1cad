"""
Persistence Layer
=================

Abstract record store plus SQLite and in-memory backends. Swapping the
backend never changes the approval logic built on top of it.
"""

from pathlib import Path

from .inmemory_impl import InMemoryRecordStore
from .repositories import Clock, RecordStore, StoredRecord
from .sqlite_impl import SQLiteRecordStore


def create_record_store(backend: str, db_path: Path | None = None, clock: Clock | None = None) -> RecordStore:
    """Build the configured RecordStore backend."""
    if backend == "memory":
        return InMemoryRecordStore(clock=clock)
    if backend == "sqlite":
        return SQLiteRecordStore(db_path=db_path, clock=clock)
    raise ValueError(f"Unknown store backend: {backend!r}")


__all__ = [
    "Clock",
    "InMemoryRecordStore",
    "RecordStore",
    "SQLiteRecordStore",
    "StoredRecord",
    "create_record_store",
]
