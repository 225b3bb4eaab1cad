"""Device notifications (tier 1): a chime and indicator light on the user's speaker."""

from __future__ import annotations

import logging
import time
from datetime import UTC, datetime, timedelta
from typing import Any

import httpx

from agent_orange.core.exceptions import DeliveryError
from agent_orange.core.types import ActiveNotification, DeviceCredential
from agent_orange.persistence import Clock

logger = logging.getLogger(__name__)

BODY_MAX_CHARS = 200
NOTIFICATION_LIFETIME = timedelta(hours=1)


def iso_timestamp(moment: datetime) -> str:
    return moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")


class DeviceNotificationClient:
    """Posts and retracts notifications against a per-session API endpoint."""

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        title: str = "Agent Orange",
        locale: str = "en-US",
        clock: Clock | None = None,
    ) -> None:
        self.http_client = http_client
        self.title = title
        self.locale = locale
        self._clock = clock or time.time

    def build_payload(self, tool_name: str, tool_detail: str) -> dict[str, Any]:
        now = datetime.fromtimestamp(self._clock(), tz=UTC)
        detail = f"{tool_name}: {tool_detail}" if tool_detail else tool_name
        return {
            "displayInfo": {
                "content": [{
                    "locale": self.locale,
                    "toast": {"primaryText": self.title},
                    "title": self.title,
                    "bodyItems": [{"primaryText": detail[:BODY_MAX_CHARS]}],
                }],
            },
            "referenceId": f"agent-orange-{int(now.timestamp() * 1000)}",
            "expiryTime": iso_timestamp(now + NOTIFICATION_LIFETIME),
            "spokenInfo": {
                "content": [{
                    "locale": self.locale,
                    "text": f"Approval needed for {tool_name}.",
                }],
            },
        }

    async def post(self, credential: DeviceCredential, tool_name: str, tool_detail: str) -> str | None:
        """Post a notification; return its id (None if the API omitted one).

        Raises:
            DeliveryError: non-2xx answer
            httpx.HTTPError: transport failure
        """
        response = await self.http_client.post(
            f"{credential.endpoint}/v2/notifications",
            json=self.build_payload(tool_name, tool_detail),
            headers={"Authorization": f"Bearer {credential.access_token}"},
        )
        logger.info("Notifications API response: %s", response.status_code)
        if not response.is_success:
            raise DeliveryError("notifications", response.status_code, response.text)

        try:
            body = response.json()
        except ValueError:
            return None
        return body.get("id") if isinstance(body, dict) else None

    async def delete(self, notification: ActiveNotification) -> int:
        response = await self.http_client.delete(
            f"{notification.endpoint}/v2/notifications/{notification.notification_id}",
            headers={"Authorization": f"Bearer {notification.access_token}"},
        )
        logger.info("Delete notification %s: %s", notification.notification_id, response.status_code)
        return response.status_code
