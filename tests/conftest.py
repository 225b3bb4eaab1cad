"""
Pytest configuration for Agent Orange tests — shared clock, stores and
service wiring with outbound HTTP routed through httpx.MockTransport.
"""

from collections.abc import Callable

import httpx
import pytest

from agent_orange.approval import ModeStore, RequestStore
from agent_orange.config.settings import Settings
from agent_orange.notifications import NotificationRecords
from agent_orange.persistence import InMemoryRecordStore, SQLiteRecordStore

# =============================================================================
# SHARED FIXTURES
# =============================================================================


class FakeClock:
    """Callable clock that only moves when told to."""

    def __init__(self, start: float = 1_700_000_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class RecordingTransport:
    """Wraps a handler for httpx.MockTransport and remembers every request."""

    def __init__(self, handler: Callable[[httpx.Request], httpx.Response] | None = None) -> None:
        self.requests: list[httpx.Request] = []
        self.handler = handler or (lambda request: httpx.Response(200, json={}))

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.handler(request)

    def paths(self) -> list[str]:
        return [r.url.path for r in self.requests]


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def memory_store(clock):
    return InMemoryRecordStore(clock=clock)


@pytest.fixture
async def sqlite_store(tmp_path, clock):
    store = SQLiteRecordStore(db_path=tmp_path / "records.db", clock=clock)
    yield store
    await store.close()


@pytest.fixture
def request_store(memory_store):
    return RequestStore(memory_store)


@pytest.fixture
def mode_store(memory_store):
    return ModeStore(memory_store)


@pytest.fixture
def records(memory_store):
    return NotificationRecords(memory_store)


@pytest.fixture
def settings():
    return Settings(
        store={"backend": "memory"},
        voice={"client_id": "amzn1.application-oa2-client.test", "client_secret": "s3cr3t-value-for-tests"},
    )


@pytest.fixture
def recorder():
    """Outbound HTTP recorder; set ``recorder.handler`` to script responses."""
    return RecordingTransport()


@pytest.fixture
async def http_client(recorder):
    client = httpx.AsyncClient(transport=httpx.MockTransport(recorder))
    yield client
    await client.aclose()
