"""
Notification Dispatcher
=======================

Tells the human that a request is waiting, but only while the voice channel
is selected. Delivery is tiered and strictly sequential:

1. Device notification, when a session credential is on record.
2. Feed event, when tier 1 was skipped or failed.

Both tiers are best effort. Failures are logged and reported through the
returned DispatchOutcome; nothing here raises into request creation.
"""

from __future__ import annotations

import logging
from enum import Enum

from agent_orange.approval.mode import ModeStore
from agent_orange.core.exceptions import AgentOrangeError
from agent_orange.core.types import ApprovalRequest, Mode
from agent_orange.notifications.device import DeviceNotificationClient
from agent_orange.notifications.proactive import ProactiveEventsClient
from agent_orange.notifications.records import NotificationRecords
from agent_orange.observability.metrics import NOTIFICATIONS

logger = logging.getLogger(__name__)


class DispatchOutcome(str, Enum):
    SKIPPED = "skipped"
    DEVICE = "device"
    FEED = "feed"
    FAILED = "failed"


class NotificationDispatcher:
    def __init__(
        self,
        mode_store: ModeStore,
        records: NotificationRecords,
        device_client: DeviceNotificationClient,
        feed_client: ProactiveEventsClient | None = None,
    ) -> None:
        self.mode_store = mode_store
        self.records = records
        self.device_client = device_client
        self.feed_client = feed_client

    async def dispatch(self, request: ApprovalRequest) -> DispatchOutcome:
        mode = await self.mode_store.get_mode()
        if mode != Mode.VOICE:
            logger.info("Mode is %s; skipping voice notification", mode)
            NOTIFICATIONS.labels(tier="none", outcome="skipped").inc()
            return DispatchOutcome.SKIPPED

        if await self._try_device_notification(request):
            return DispatchOutcome.DEVICE

        logger.info("Device notification unavailable, falling back to feed event")
        return await self._send_feed_event(request)

    async def _try_device_notification(self, request: ApprovalRequest) -> bool:
        """Tier 1. Returns False instead of raising on any failure."""
        try:
            credential = await self.records.get_device_credential()
        except AgentOrangeError as e:
            logger.warning("Could not read device credential: %s", e)
            NOTIFICATIONS.labels(tier="device", outcome="failed").inc()
            return False

        if credential is None:
            logger.info("No saved device credential; interact with the skill once to prime it")
            NOTIFICATIONS.labels(tier="device", outcome="skipped").inc()
            return False

        try:
            notification_id = await self.device_client.post(credential, request.tool_name, request.tool_detail)
        except Exception as e:
            logger.warning("Device notification failed: %s", e)
            NOTIFICATIONS.labels(tier="device", outcome="failed").inc()
            return False

        if notification_id:
            try:
                await self.records.save_active_notification(notification_id, credential)
                logger.info("Saved notification id %s", notification_id)
            except AgentOrangeError as e:
                logger.warning("Failed to save notification id: %s", e)

        NOTIFICATIONS.labels(tier="device", outcome="sent").inc()
        logger.info("Device notification sent for request %s", request.id)
        return True

    async def _send_feed_event(self, request: ApprovalRequest) -> DispatchOutcome:
        """Tier 2. Errors end here; the caller only sees the outcome."""
        if self.feed_client is None:
            logger.warning("Feed events are not configured (missing client credentials)")
            NOTIFICATIONS.labels(tier="feed", outcome="skipped").inc()
            return DispatchOutcome.FAILED

        user_id = None
        try:
            target = await self.records.get_user()
            user_id = target.user_id if target else None
        except AgentOrangeError as e:
            logger.warning("Failed to read user id, using multicast: %s", e)
        logger.info("Sending %s feed event", "unicast" if user_id else "multicast")

        try:
            await self.feed_client.send(request.id, user_id)
        except Exception as e:
            logger.error("Feed event failed: %s", e)
            NOTIFICATIONS.labels(tier="feed", outcome="failed").inc()
            return DispatchOutcome.FAILED

        NOTIFICATIONS.labels(tier="feed", outcome="sent").inc()
        return DispatchOutcome.FEED
