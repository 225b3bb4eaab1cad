"""Approval lifecycle: mode, current request, decisions."""

from agent_orange.approval.mode import DEFAULT_MODE, ModeStore
from agent_orange.approval.requests import RequestStore
from agent_orange.approval.gateway import DecisionGateway, DecisionKind, DecisionOutcome  # noqa: I001
from agent_orange.approval.service import ApprovalService

__all__ = [
    "ApprovalService",
    "DEFAULT_MODE",
    "DecisionGateway",
    "DecisionKind",
    "DecisionOutcome",
    "ModeStore",
    "RequestStore",
]
