"""Unit tests for WebInterface — producer API, voice webhook, auth, request IDs, health."""

import httpx
import pytest
from fastapi.testclient import TestClient

from agent_orange.config.settings import Settings
from agent_orange.core.factories import ServiceContainer
from agent_orange.interfaces.web.server import WebInterface
from agent_orange.persistence import InMemoryRecordStore

API_KEY = "Zq8-wP3rT6yU1iO4aS7dF0gH"


def _make_client(recorder, clock, **settings_overrides):
    settings = Settings(store={"backend": "memory"}, **settings_overrides)
    services = ServiceContainer(
        settings,
        store=InMemoryRecordStore(clock=clock),
        http_client=httpx.AsyncClient(transport=httpx.MockTransport(recorder)),
        clock=clock,
    )
    return TestClient(WebInterface(services, settings).app), services


@pytest.fixture
def client(recorder, clock):
    test_client, _ = _make_client(recorder, clock)
    return test_client


class TestRequestRoutes:
    def test_create_and_read(self, client):
        created = client.post("/request", json={"toolName": "Bash", "toolDetail": "pytest -q"})
        assert created.status_code == 200
        request_id = created.json()["requestId"]

        current = client.get("/request").json()
        assert current == {
            "status": "pending",
            "requestId": request_id,
            "toolName": "Bash",
            "toolDetail": "pytest -q",
        }

    def test_create_without_body_uses_defaults(self, client):
        assert client.post("/request").status_code == 200
        assert client.get("/request").json()["toolName"] == "unknown"

    def test_read_when_empty(self, client):
        assert client.get("/request").json() == {"status": "none"}

    def test_read_with_stale_id(self, client):
        first = client.post("/request", json={"toolName": "A"}).json()["requestId"]
        client.post("/request", json={"toolName": "B"})
        assert client.get("/request", params={"requestId": first}).json() == {"status": "none"}

    def test_detail_truncated(self, client):
        client.post("/request", json={"toolName": "Write", "toolDetail": "z" * 1000})
        assert len(client.get("/request").json()["toolDetail"]) == 500

    def test_default_mode_sends_no_notifications(self, client, recorder):
        client.post("/request", json={"toolName": "Bash"})
        assert recorder.requests == []


class TestModeRoutes:
    def test_default_mode(self, client):
        assert client.get("/mode").json() == {"mode": "relay-channel"}

    def test_put_mode(self, client):
        response = client.put("/mode", json={"mode": "voice-channel"})
        assert response.status_code == 200
        assert response.json() == {"mode": "voice-channel"}
        assert client.get("/mode").json() == {"mode": "voice-channel"}

    @pytest.mark.parametrize("body", [{"mode": "alexa"}, {"mode": 1}, {}, "voice-channel", ["voice-channel"]])
    def test_put_invalid_mode_returns_400(self, client, body):
        response = client.put("/mode", json=body)
        assert response.status_code == 400
        error = response.json()["error"]
        assert error["code"] == "validation_error"
        assert "mode must be one of" in error["message"]
        assert client.get("/mode").json() == {"mode": "relay-channel"}


class TestVoiceRoute:
    def test_launch(self, client):
        response = client.post("/voice", json={
            "version": "1.0",
            "request": {"type": "LaunchRequest", "requestId": "r"},
        })
        assert response.status_code == 200
        body = response.json()
        assert body["version"] == "1.0"
        assert body["response"]["outputSpeech"]["text"] == "Agent Orange. No pending requests right now."

    def test_approve_round_trip(self, client):
        client.post("/request", json={"toolName": "Bash"})
        response = client.post("/voice", json={
            "request": {"type": "IntentRequest", "intent": {"name": "ApproveIntent"}},
        })
        assert response.json()["response"]["outputSpeech"]["text"] == "Approved Bash."
        assert client.get("/request").json()["status"] == "approved"

    def test_wrong_skill_id_returns_403(self, recorder, clock):
        client, _ = _make_client(recorder, clock, voice={"skill_id": "amzn1.ask.skill.mine"})
        response = client.post("/voice", json={
            "session": {"application": {"applicationId": "amzn1.ask.skill.other"}},
            "request": {"type": "LaunchRequest"},
        })
        assert response.status_code == 403


class TestApiKey:
    @pytest.fixture
    def secured(self, recorder, clock):
        client, _ = _make_client(recorder, clock, web={"api_key": API_KEY})
        return client

    def test_missing_key_returns_401(self, secured):
        response = secured.get("/mode")
        assert response.status_code == 401
        assert response.json()["error"]["code"] == "invalid_api_key"

    def test_wrong_key_returns_401(self, secured):
        response = secured.post("/request", headers={"Authorization": "Bearer nope"}, json={})
        assert response.status_code == 401

    def test_bearer_key_accepted(self, secured):
        response = secured.get("/mode", headers={"Authorization": f"Bearer {API_KEY}"})
        assert response.status_code == 200

    def test_x_api_key_accepted(self, secured):
        response = secured.get("/request", headers={"X-Api-Key": API_KEY})
        assert response.status_code == 200

    def test_voice_and_health_are_open(self, secured):
        assert secured.get("/health").status_code == 200
        assert secured.post("/voice", json={"request": {"type": "SessionEndedRequest"}}).status_code == 200


class TestUtilityRoutes:
    def test_request_id_echoed(self, client):
        response = client.get("/mode", headers={"X-Request-Id": "trace-abc"})
        assert response.headers["X-Request-Id"] == "trace-abc"

    def test_request_id_generated(self, client):
        assert client.get("/mode").headers.get("X-Request-Id")

    def test_health(self, client):
        body = client.get("/health").json()
        assert body["status"] == "ok"
        assert body["store"] == {"backend": "memory", "healthy": True}
        assert "version" in body

    def test_health_reports_configured_version(self, recorder, clock):
        client, _ = _make_client(recorder, clock, version="9.9.9")
        assert client.get("/health").json()["version"] == "9.9.9"

    def test_health_degraded(self, recorder, clock, monkeypatch):
        client, services = _make_client(recorder, clock)

        async def unhealthy():
            return False

        monkeypatch.setattr(services.store, "health_check", unhealthy)
        response = client.get("/health")
        assert response.status_code == 503
        assert response.json()["status"] == "degraded"

    def test_metrics(self, client):
        client.post("/request", json={"toolName": "Bash"})
        response = client.get("/metrics")
        assert response.status_code == 200
        assert "agent_orange_requests_created_total" in response.text

    def test_store_unavailable_returns_503(self, recorder, clock, monkeypatch, caplog):
        from agent_orange.core.exceptions import StoreUnavailableError

        client, services = _make_client(recorder, clock)

        async def broken(*args, **kwargs):
            raise StoreUnavailableError("record store unavailable: disk full")

        monkeypatch.setattr(services.store, "put", broken)
        response = client.post("/request", json={"toolName": "Bash"})
        assert response.status_code == 503
        assert response.json()["error"]["code"] == "store_unavailable"
        assert "'error_code': 5002" in caplog.text
