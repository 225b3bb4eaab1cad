"""ApprovalService — the operations behind the request-producer API."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from agent_orange.approval.mode import ModeStore
from agent_orange.approval.requests import RequestStore
from agent_orange.core.structured_logger import get_logger
from agent_orange.core.types import ApprovalRequest, Mode
from agent_orange.observability.metrics import REQUESTS_CREATED

if TYPE_CHECKING:
    from agent_orange.notifications.dispatcher import NotificationDispatcher

logger = get_logger("ApprovalService")


class ApprovalService:
    def __init__(
        self,
        requests: RequestStore,
        mode_store: ModeStore,
        dispatcher: NotificationDispatcher,
    ) -> None:
        self.requests = requests
        self.mode_store = mode_store
        self.dispatcher = dispatcher

    async def submit(self, tool_name: str | None, tool_detail: str | None) -> ApprovalRequest:
        """Create the request, then notify before returning.

        Store failures while writing the request propagate. Anything that goes
        wrong afterwards is logged; the request id is returned regardless.
        """
        request = await self.requests.create_request(tool_name, tool_detail)
        REQUESTS_CREATED.inc()
        logger.info("Request created", request_id=request.id, tool_name=request.tool_name)

        try:
            outcome = await self.dispatcher.dispatch(request)
            logger.info("Notification dispatch finished", request_id=request.id, outcome=outcome.value)
        except Exception as e:
            logger.error("Notification dispatch failed (non-fatal)", request_id=request.id, error=str(e))

        return request

    async def status(self, match_id: str | None = None) -> dict[str, Any]:
        request = await self.requests.read_current(match_id)
        if request is None:
            return {"status": "none"}
        return request.to_view()

    async def get_mode(self) -> Mode:
        return await self.mode_store.get_mode()

    async def set_mode(self, value: Any) -> Mode:
        return await self.mode_store.set_mode(value)
