"""Session-scoped rows the notification tiers depend on (USER, API_TOKEN, NOTIFICATION)."""

from __future__ import annotations

import logging

from agent_orange.core.types import (
    CREDENTIAL_TTL_SECONDS,
    NOTIFICATION_TTL_SECONDS,
    ActiveNotification,
    DeviceCredential,
    RecordKey,
    UnicastTarget,
)
from agent_orange.persistence import RecordStore

logger = logging.getLogger(__name__)


class NotificationRecords:
    """Typed access to the three notification rows of the record store."""

    def __init__(self, store: RecordStore) -> None:
        self.store = store

    # -- USER -----------------------------------------------------------

    async def save_user(self, user_id: str) -> None:
        await self.store.put(
            RecordKey.USER.value,
            {"userId": user_id, "updatedAt": self.store.now()},
        )

    async def get_user(self) -> UnicastTarget | None:
        row = await self.store.get(RecordKey.USER.value)
        if row is None or not row.item.get("userId"):
            return None
        return UnicastTarget(user_id=row.item["userId"], updated_at=int(row.item.get("updatedAt", 0)))

    # -- API_TOKEN ------------------------------------------------------

    async def save_device_credential(self, access_token: str, endpoint: str) -> None:
        now = self.store.now()
        await self.store.put(
            RecordKey.API_TOKEN.value,
            {"apiAccessToken": access_token, "apiEndpoint": endpoint, "updatedAt": now},
            ttl=now + CREDENTIAL_TTL_SECONDS,
        )

    async def get_device_credential(self) -> DeviceCredential | None:
        row = await self.store.get(RecordKey.API_TOKEN.value)
        if row is None:
            return None
        token = row.item.get("apiAccessToken")
        endpoint = row.item.get("apiEndpoint")
        if not token or not endpoint:
            return None
        return DeviceCredential(
            access_token=token,
            endpoint=endpoint,
            updated_at=int(row.item.get("updatedAt", 0)),
            expires_at=row.ttl or 0,
        )

    # -- NOTIFICATION ---------------------------------------------------

    async def save_active_notification(self, notification_id: str, credential: DeviceCredential) -> ActiveNotification:
        expires_at = self.store.now() + NOTIFICATION_TTL_SECONDS
        await self.store.put(
            RecordKey.NOTIFICATION.value,
            {
                "notificationId": notification_id,
                "apiAccessToken": credential.access_token,
                "apiEndpoint": credential.endpoint,
            },
            ttl=expires_at,
        )
        return ActiveNotification(
            notification_id=notification_id,
            access_token=credential.access_token,
            endpoint=credential.endpoint,
            expires_at=expires_at,
        )

    async def get_active_notification(self) -> ActiveNotification | None:
        row = await self.store.get(RecordKey.NOTIFICATION.value)
        if row is None or not row.item.get("notificationId"):
            return None
        return ActiveNotification(
            notification_id=row.item["notificationId"],
            access_token=row.item.get("apiAccessToken", ""),
            endpoint=row.item.get("apiEndpoint", ""),
            expires_at=row.ttl or 0,
        )

    async def clear_active_notification(self) -> bool:
        return await self.store.delete(RecordKey.NOTIFICATION.value)
