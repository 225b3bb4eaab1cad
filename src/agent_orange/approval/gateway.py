"""
Decision Gateway
================

Approve/deny entry point for the voice channel. The compare-and-set in
RequestStore.decide() is the only guard against two humans (or a human
and the terminal hook) deciding at once; this class never re-checks state
after a successful decide().
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum

from agent_orange.approval.requests import RequestStore
from agent_orange.core.exceptions import AgentOrangeError
from agent_orange.core.types import DecisionResult, RequestStatus
from agent_orange.notifications.device import DeviceNotificationClient
from agent_orange.notifications.records import NotificationRecords
from agent_orange.observability.metrics import DECISIONS

logger = logging.getLogger(__name__)


class DecisionKind(str, Enum):
    NOTHING_PENDING = "nothing_pending"
    ALREADY_HANDLED = "already_handled"
    DECIDED = "decided"


@dataclass
class DecisionOutcome:
    kind: DecisionKind
    decision: RequestStatus
    tool_name: str | None = None


class DecisionGateway:
    def __init__(
        self,
        requests: RequestStore,
        records: NotificationRecords,
        device_client: DeviceNotificationClient,
    ) -> None:
        self.requests = requests
        self.records = records
        self.device_client = device_client

    async def approve(self) -> DecisionOutcome:
        return await self._decide(RequestStatus.APPROVED)

    async def deny(self) -> DecisionOutcome:
        return await self._decide(RequestStatus.DENIED)

    async def _decide(self, decision: RequestStatus) -> DecisionOutcome:
        pending = await self.requests.get_pending()
        if pending is None:
            DECISIONS.labels(decision=decision.value, outcome="nothing_pending").inc()
            return DecisionOutcome(DecisionKind.NOTHING_PENDING, decision)

        result = await self.requests.decide(decision)
        if result == DecisionResult.CONFLICT:
            DECISIONS.labels(decision=decision.value, outcome="conflict").inc()
            return DecisionOutcome(DecisionKind.ALREADY_HANDLED, decision, pending.tool_name)

        DECISIONS.labels(decision=decision.value, outcome="success").inc()
        await self.retract_notification()
        return DecisionOutcome(DecisionKind.DECIDED, decision, pending.tool_name)

    async def retract_notification(self) -> None:
        """Delete the outstanding device notification, if any. Never raises."""
        try:
            notification = await self.records.get_active_notification()
        except AgentOrangeError as e:
            logger.warning("Failed to read active notification: %s", e)
            return
        if notification is None:
            return

        try:
            await self.device_client.delete(notification)
        except Exception as e:
            logger.warning("Failed to delete notification %s: %s", notification.notification_id, e)
        finally:
            try:
                await self.records.clear_active_notification()
            except AgentOrangeError as e:
                logger.warning("Failed to clear notification record: %s", e)

    async def remember_session(
        self,
        user_id: str | None,
        access_token: str | None,
        endpoint: str | None,
    ) -> None:
        """Refresh the unicast target and device credential from a voice interaction."""
        if user_id:
            try:
                await self.records.save_user(user_id)
            except AgentOrangeError as e:
                logger.warning("Failed to save user id: %s", e)
        if access_token and endpoint:
            try:
                await self.records.save_device_credential(access_token, endpoint)
            except AgentOrangeError as e:
                logger.warning("Failed to save device credential: %s", e)
