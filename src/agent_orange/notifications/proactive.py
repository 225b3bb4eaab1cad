"""Feed events (tier 2): a message-alert entry in the user's notification feed."""

from __future__ import annotations

import logging
import time
from datetime import UTC, datetime, timedelta
from typing import Any

import httpx

from agent_orange.config.settings import DEFAULT_PROACTIVE_EVENTS_URL
from agent_orange.core.exceptions import DeliveryError
from agent_orange.notifications.device import iso_timestamp
from agent_orange.notifications.oauth import CredentialCache
from agent_orange.persistence import Clock

logger = logging.getLogger(__name__)

EVENT_LIFETIME = timedelta(hours=1)


def build_audience(user_id: str | None) -> dict[str, Any]:
    if user_id:
        return {"type": "Unicast", "payload": {"user": user_id}}
    return {"type": "Multicast", "payload": {}}


class ProactiveEventsClient:
    def __init__(
        self,
        http_client: httpx.AsyncClient,
        credentials: CredentialCache,
        url: str = DEFAULT_PROACTIVE_EVENTS_URL,
        provider_name: str = "Agent Orange",
        locale: str = "en-US",
        clock: Clock | None = None,
    ) -> None:
        self.http_client = http_client
        self.credentials = credentials
        self.url = url
        self.provider_name = provider_name
        self.locale = locale
        self._clock = clock or time.time

    def build_event(self, request_id: str, user_id: str | None) -> dict[str, Any]:
        now = datetime.fromtimestamp(self._clock(), tz=UTC)
        return {
            "timestamp": iso_timestamp(now),
            "referenceId": request_id,
            "expiryTime": iso_timestamp(now + EVENT_LIFETIME),
            "event": {
                "name": "AMAZON.MessageAlert.Activated",
                "payload": {
                    "state": {"status": "UNREAD", "freshness": "NEW"},
                    "messageGroup": {
                        "creator": {"name": "Claude"},
                        "count": 1,
                        "urgency": "URGENT",
                    },
                },
            },
            "localizedAttributes": [
                {"locale": self.locale, "providerName": self.provider_name},
            ],
            "relevantAudience": build_audience(user_id),
        }

    async def send(self, request_id: str, user_id: str | None = None) -> None:
        """Publish one feed event for *request_id*.

        Raises:
            UpstreamAuthorizationError: token exchange failed
            DeliveryError: non-2xx answer
            httpx.HTTPError: transport failure
        """
        token = await self.credentials.get_token()
        response = await self.http_client.post(
            self.url,
            json=self.build_event(request_id, user_id),
            headers={"Authorization": f"Bearer {token}"},
        )
        logger.info("Proactive event response: %s", response.status_code)
        if not response.is_success:
            raise DeliveryError("proactive-events", response.status_code, response.text)
