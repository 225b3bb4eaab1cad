"""Request Store — the single outstanding approval request and its decision."""

from __future__ import annotations

import logging
import uuid

from agent_orange.core.types import (
    REQUEST_TTL_SECONDS,
    TOOL_DETAIL_MAX_CHARS,
    ApprovalRequest,
    DecisionResult,
    RecordKey,
    RequestStatus,
)
from agent_orange.persistence import RecordStore

logger = logging.getLogger(__name__)


class RequestStore:
    """
    Owns the ``CURRENT`` row.

    There is never more than one request: creating a new one replaces the
    previous row whatever its status. The only mutation after creation is
    :meth:`decide`, a compare-and-set from ``pending`` to a terminal status.
    """

    def __init__(self, store: RecordStore, ttl_seconds: int = REQUEST_TTL_SECONDS) -> None:
        self.store = store
        self.ttl_seconds = ttl_seconds

    async def create_request(self, tool_name: str | None, tool_detail: str | None) -> ApprovalRequest:
        previous = await self.get_pending()
        if previous is not None:
            logger.warning("Replacing undecided request %s (%s)", previous.id, previous.tool_name)

        now = self.store.now()
        request = ApprovalRequest(
            id=str(uuid.uuid4()),
            tool_name=tool_name or "unknown",
            tool_detail=(tool_detail or "")[:TOOL_DETAIL_MAX_CHARS],
            status=RequestStatus.PENDING,
            created_at=now,
            decided_at=0,
            expires_at=now + self.ttl_seconds,
        )
        await self.store.put(RecordKey.CURRENT.value, request.to_item(), ttl=request.expires_at)
        logger.info("Created approval request %s for %s", request.id, request.tool_name)
        return request

    async def read_current(self, match_id: str | None = None) -> ApprovalRequest | None:
        """Return the live request, or None when absent, expired, or not *match_id*."""
        row = await self.store.get(RecordKey.CURRENT.value)
        if row is None:
            return None
        request = ApprovalRequest.from_item(row.item, expires_at=row.ttl or 0)
        if match_id and request.id != match_id:
            return None
        return request

    async def get_pending(self) -> ApprovalRequest | None:
        request = await self.read_current()
        if request is None or not request.is_pending:
            return None
        return request

    async def decide(self, decision: RequestStatus) -> DecisionResult:
        if decision == RequestStatus.PENDING:
            raise ValueError("decision must be a terminal status")

        applied = await self.store.compare_and_set(
            RecordKey.CURRENT.value,
            field="status",
            expected=RequestStatus.PENDING.value,
            changes={"status": decision.value, "decidedAt": self.store.now()},
        )
        if not applied:
            logger.info("Decision %s rejected: request already handled", decision.value)
            return DecisionResult.CONFLICT
        logger.info("Request decided: %s", decision.value)
        return DecisionResult.SUCCESS
