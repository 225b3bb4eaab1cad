"""Prometheus counters for the approval lifecycle."""

from __future__ import annotations

from prometheus_client import CONTENT_TYPE_LATEST, Counter, generate_latest

REQUESTS_CREATED = Counter(
    "agent_orange_requests_created_total", "Approval requests created"
)
NOTIFICATIONS = Counter(
    "agent_orange_notifications_total",
    "Notification attempts by tier and outcome",
    ["tier", "outcome"],
)
DECISIONS = Counter(
    "agent_orange_decisions_total",
    "Approve/deny attempts by decision and outcome",
    ["decision", "outcome"],
)
RELAY_COMMANDS = Counter(
    "agent_orange_relay_commands_total", "Chat relay commands by outcome", ["outcome"]
)


def render_latest() -> tuple[bytes, str]:
    """Return the exposition payload and its content type."""
    return generate_latest(), CONTENT_TYPE_LATEST
