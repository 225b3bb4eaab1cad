"""Observability — Prometheus metrics."""

from agent_orange.observability.metrics import (
    DECISIONS,
    NOTIFICATIONS,
    RELAY_COMMANDS,
    REQUESTS_CREATED,
    render_latest,
)

__all__ = ["DECISIONS", "NOTIFICATIONS", "RELAY_COMMANDS", "REQUESTS_CREATED", "render_latest"]
