"""
Intent classification for the voice skill.

ROUTES is evaluated top to bottom and the first matching predicate wins.
The final entry matches everything, so classify() is total.
"""

from enum import Enum
from typing import Callable

from agent_orange.interfaces.voice.envelope import VoiceEnvelope

Predicate = Callable[[VoiceEnvelope], bool]


class IntentKind(str, Enum):
    LAUNCH = "launch"
    CHECK_PENDING = "check_pending"
    APPROVE = "approve"
    DENY = "deny"
    ENABLE_VOICE = "enable_voice"
    ENABLE_TEXT = "enable_text"
    DISABLE = "disable"
    STATUS = "status"
    HELP = "help"
    CANCEL_STOP = "cancel_stop"
    FALLBACK = "fallback"
    SESSION_ENDED = "session_ended"
    CATCH_ALL = "catch_all"


def request_type(expected: str) -> Predicate:
    return lambda envelope: envelope.request_type == expected


def intent(*names: str) -> Predicate:
    return lambda envelope: (
        envelope.request_type == "IntentRequest" and envelope.intent_name in names
    )


ROUTES: list[tuple[Predicate, IntentKind]] = [
    (request_type("LaunchRequest"), IntentKind.LAUNCH),
    (intent("CheckPendingIntent"), IntentKind.CHECK_PENDING),
    (intent("ApproveIntent"), IntentKind.APPROVE),
    (intent("DenyIntent"), IntentKind.DENY),
    (intent("EnableVoiceModeIntent"), IntentKind.ENABLE_VOICE),
    (intent("EnableTextModeIntent"), IntentKind.ENABLE_TEXT),
    (intent("DisableIntent"), IntentKind.DISABLE),
    (intent("StatusIntent"), IntentKind.STATUS),
    (intent("AMAZON.HelpIntent"), IntentKind.HELP),
    (intent("AMAZON.CancelIntent", "AMAZON.StopIntent"), IntentKind.CANCEL_STOP),
    (intent("AMAZON.FallbackIntent"), IntentKind.FALLBACK),
    (request_type("SessionEndedRequest"), IntentKind.SESSION_ENDED),
    (lambda envelope: True, IntentKind.CATCH_ALL),
]


def classify(envelope: VoiceEnvelope) -> IntentKind:
    for predicate, kind in ROUTES:
        if predicate(envelope):
            return kind
    return IntentKind.CATCH_ALL
