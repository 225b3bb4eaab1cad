"""Outbound notification tiers and the dispatcher that sequences them."""

from agent_orange.notifications.device import DeviceNotificationClient
from agent_orange.notifications.dispatcher import DispatchOutcome, NotificationDispatcher
from agent_orange.notifications.oauth import CredentialCache
from agent_orange.notifications.proactive import ProactiveEventsClient
from agent_orange.notifications.records import NotificationRecords

__all__ = [
    "CredentialCache",
    "DeviceNotificationClient",
    "DispatchOutcome",
    "NotificationDispatcher",
    "NotificationRecords",
    "ProactiveEventsClient",
]
