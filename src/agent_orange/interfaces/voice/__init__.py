"""Voice-skill webhook: envelope parsing, intent routing and handlers."""

from agent_orange.interfaces.voice.envelope import VoiceEnvelope
from agent_orange.interfaces.voice.routing import ROUTES, IntentKind, classify
from agent_orange.interfaces.voice.skill import VoiceSkill

__all__ = ["IntentKind", "ROUTES", "VoiceEnvelope", "VoiceSkill", "classify"]
