"""
Voice Skill
===========

Handles one voice-skill request envelope per call. Every envelope first
refreshes the stored unicast target and device credential, then goes to
exactly one handler picked by :func:`classify`.
"""

from __future__ import annotations

import logging
from typing import Any, Awaitable, Callable, Optional

from agent_orange.approval import DecisionGateway, DecisionKind, DecisionOutcome, ModeStore, RequestStore
from agent_orange.core.exceptions import ForbiddenError
from agent_orange.core.types import Mode, RequestStatus
from agent_orange.interfaces.voice.envelope import VoiceEnvelope
from agent_orange.interfaces.voice.responses import ask, empty, speak
from agent_orange.interfaces.voice.routing import IntentKind, classify

logger = logging.getLogger(__name__)

Handler = Callable[[VoiceEnvelope], Awaitable[dict[str, Any]]]

APPROVE_OR_DENY = "Say approve or deny."
MENU_REPROMPT = "Say check pending, approve, deny, or help."
HELP_TEXT = (
    "You can say check pending to hear what Claude needs, then say approve or deny. "
    "You can also say enable voice mode, enable text mode, or disable."
)
ERROR_TEXT = "Sorry, something went wrong. Please try again."

MODE_NAMES = {
    Mode.RELAY: "text mode",
    Mode.VOICE: "voice mode",
    Mode.DISABLED: "disabled",
}

MODE_CONFIRMATIONS = {
    Mode.VOICE: "Voice mode enabled. You'll get notifications here.",
    Mode.RELAY: "Text mode enabled. Approvals will go through the chat relay.",
    Mode.DISABLED: "Agent Orange disabled. Approvals will fall through to the terminal.",
}


class VoiceSkill:
    def __init__(
        self,
        gateway: DecisionGateway,
        mode_store: ModeStore,
        requests: RequestStore,
        skill_id: Optional[str] = None,
    ) -> None:
        self.gateway = gateway
        self.mode_store = mode_store
        self.requests = requests
        self.skill_id = skill_id
        self._handlers: dict[IntentKind, Handler] = {
            IntentKind.LAUNCH: self._launch,
            IntentKind.CHECK_PENDING: self._check_pending,
            IntentKind.APPROVE: self._approve,
            IntentKind.DENY: self._deny,
            IntentKind.ENABLE_VOICE: self._mode_setter(Mode.VOICE),
            IntentKind.ENABLE_TEXT: self._mode_setter(Mode.RELAY),
            IntentKind.DISABLE: self._mode_setter(Mode.DISABLED),
            IntentKind.STATUS: self._status,
            IntentKind.HELP: self._help,
            IntentKind.CANCEL_STOP: self._cancel_stop,
            IntentKind.FALLBACK: self._fallback,
            IntentKind.SESSION_ENDED: self._session_ended,
            IntentKind.CATCH_ALL: self._catch_all,
        }

    def verify_application(self, envelope: VoiceEnvelope) -> None:
        """Reject envelopes addressed to another skill when skill_id is configured."""
        if self.skill_id and envelope.application_id != self.skill_id:
            raise ForbiddenError(
                "voice request is for a different application",
                details={"application_id": envelope.application_id},
            )

    async def handle(self, envelope: VoiceEnvelope) -> dict[str, Any]:
        self.verify_application(envelope)
        logger.info(
            "Voice request type=%s intent=%s",
            envelope.request_type,
            envelope.intent_name or "N/A",
        )
        await self.gateway.remember_session(
            envelope.user_id, envelope.api_access_token, envelope.api_endpoint
        )

        kind = classify(envelope)
        try:
            return await self._handlers[kind](envelope)
        except Exception as e:
            logger.error("Voice handler %s failed: %s", kind.value, e, exc_info=True)
            return speak(ERROR_TEXT)

    # ========================================================================
    # HANDLERS
    # ========================================================================

    async def _launch(self, envelope: VoiceEnvelope) -> dict[str, Any]:
        pending = await self.requests.get_pending()
        if pending:
            return ask(f"Approval needed for {pending.tool_name}. {APPROVE_OR_DENY}", APPROVE_OR_DENY)
        return speak("Agent Orange. No pending requests right now.")

    async def _check_pending(self, envelope: VoiceEnvelope) -> dict[str, Any]:
        pending = await self.requests.get_pending()
        if not pending:
            return speak("No pending requests right now.")
        return ask(f"Approval needed for {pending.tool_name}. {APPROVE_OR_DENY}", APPROVE_OR_DENY)

    async def _approve(self, envelope: VoiceEnvelope) -> dict[str, Any]:
        return self._decision_response(await self.gateway.approve())

    async def _deny(self, envelope: VoiceEnvelope) -> dict[str, Any]:
        return self._decision_response(await self.gateway.deny())

    @staticmethod
    def _decision_response(outcome: DecisionOutcome) -> dict[str, Any]:
        verb = "approve" if outcome.decision == RequestStatus.APPROVED else "deny"
        if outcome.kind == DecisionKind.NOTHING_PENDING:
            return speak(f"Nothing pending to {verb}.")
        if outcome.kind == DecisionKind.ALREADY_HANDLED:
            return speak("That request was already handled.")
        if outcome.decision == RequestStatus.APPROVED:
            return speak(f"Approved {outcome.tool_name}.")
        return speak("Denied.")

    def _mode_setter(self, mode: Mode) -> Handler:
        async def handler(envelope: VoiceEnvelope) -> dict[str, Any]:
            await self.mode_store.set_mode(mode)
            return speak(MODE_CONFIRMATIONS[mode])
        return handler

    async def _status(self, envelope: VoiceEnvelope) -> dict[str, Any]:
        mode = await self.mode_store.get_mode()
        return speak(f"Agent Orange is currently in {MODE_NAMES.get(mode, mode.value)}.")

    async def _help(self, envelope: VoiceEnvelope) -> dict[str, Any]:
        return ask(HELP_TEXT, MENU_REPROMPT)

    async def _cancel_stop(self, envelope: VoiceEnvelope) -> dict[str, Any]:
        return speak("Goodbye.")

    async def _fallback(self, envelope: VoiceEnvelope) -> dict[str, Any]:
        return ask(f"I didn't understand that. {MENU_REPROMPT}", MENU_REPROMPT)

    async def _session_ended(self, envelope: VoiceEnvelope) -> dict[str, Any]:
        return empty()

    async def _catch_all(self, envelope: VoiceEnvelope) -> dict[str, Any]:
        logger.info("Catch-all handling request type: %s", envelope.request_type)
        return empty()
