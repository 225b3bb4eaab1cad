"""Contract tests shared by every RecordStore backend."""

import asyncio

import pytest

from agent_orange.persistence import InMemoryRecordStore, SQLiteRecordStore, create_record_store


@pytest.fixture(params=["memory", "sqlite"])
async def store(request, tmp_path, clock):
    if request.param == "memory":
        backend = InMemoryRecordStore(clock=clock)
    else:
        backend = SQLiteRecordStore(db_path=tmp_path / "records.db", clock=clock)
    yield backend
    await backend.close()


class TestPutGetDelete:
    async def test_get_missing_returns_none(self, store):
        assert await store.get("CURRENT") is None

    async def test_put_then_get(self, store):
        await store.put("MODE", {"mode": "voice-channel", "updatedAt": 1})
        row = await store.get("MODE")
        assert row.key == "MODE"
        assert row.item == {"mode": "voice-channel", "updatedAt": 1}
        assert row.ttl is None

    async def test_put_replaces_whole_item(self, store):
        await store.put("USER", {"userId": "a", "extra": True})
        await store.put("USER", {"userId": "b"})
        row = await store.get("USER")
        assert row.item == {"userId": "b"}

    async def test_delete(self, store):
        await store.put("NOTIFICATION", {"notificationId": "n-1"})
        assert await store.delete("NOTIFICATION") is True
        assert await store.get("NOTIFICATION") is None
        assert await store.delete("NOTIFICATION") is False

    async def test_returned_item_is_a_copy(self, store):
        await store.put("USER", {"userId": "a"})
        row = await store.get("USER")
        row.item["userId"] = "mutated"
        assert (await store.get("USER")).item["userId"] == "a"


class TestExpiry:
    async def test_row_visible_until_ttl(self, store, clock):
        await store.put("CURRENT", {"status": "pending"}, ttl=store.now() + 10)
        clock.advance(10)
        assert await store.get("CURRENT") is not None

    async def test_row_invisible_after_ttl(self, store, clock):
        await store.put("CURRENT", {"status": "pending"}, ttl=store.now() + 10)
        clock.advance(11)
        assert await store.get("CURRENT") is None

    async def test_compare_and_set_ignores_expired_row(self, store, clock):
        await store.put("CURRENT", {"status": "pending"}, ttl=store.now() + 10)
        clock.advance(11)
        applied = await store.compare_and_set("CURRENT", "status", "pending", {"status": "approved"})
        assert applied is False


class TestCompareAndSet:
    async def test_applies_when_precondition_holds(self, store):
        await store.put("CURRENT", {"status": "pending", "decidedAt": 0, "toolName": "Bash"})
        applied = await store.compare_and_set(
            "CURRENT", "status", "pending", {"status": "approved", "decidedAt": 42}
        )
        assert applied is True
        row = await store.get("CURRENT")
        assert row.item == {"status": "approved", "decidedAt": 42, "toolName": "Bash"}

    async def test_rejects_when_precondition_fails(self, store):
        await store.put("CURRENT", {"status": "denied", "decidedAt": 7})
        applied = await store.compare_and_set(
            "CURRENT", "status", "pending", {"status": "approved", "decidedAt": 42}
        )
        assert applied is False
        assert (await store.get("CURRENT")).item == {"status": "denied", "decidedAt": 7}

    async def test_rejects_missing_row(self, store):
        assert await store.compare_and_set("CURRENT", "status", "pending", {"status": "x"}) is False

    async def test_keeps_ttl(self, store):
        await store.put("CURRENT", {"status": "pending"}, ttl=store.now() + 100)
        await store.compare_and_set("CURRENT", "status", "pending", {"status": "denied"})
        assert (await store.get("CURRENT")).ttl == store.now() + 100

    async def test_concurrent_attempts_single_winner(self, store):
        await store.put("CURRENT", {"status": "pending"})
        results = await asyncio.gather(*[
            store.compare_and_set("CURRENT", "status", "pending", {"status": f"s{i}"})
            for i in range(8)
        ])
        assert results.count(True) == 1
        winner = results.index(True)
        assert (await store.get("CURRENT")).item["status"] == f"s{winner}"


async def test_health_check(store):
    assert await store.health_check() is True


class TestCreateRecordStore:
    def test_memory_backend(self):
        assert isinstance(create_record_store("memory"), InMemoryRecordStore)

    def test_sqlite_backend(self, tmp_path):
        store = create_record_store("sqlite", tmp_path / "x.db")
        assert isinstance(store, SQLiteRecordStore)
        assert store.db_path == tmp_path / "x.db"

    def test_unknown_backend(self):
        with pytest.raises(ValueError, match="Unknown store backend"):
            create_record_store("dynamo")
