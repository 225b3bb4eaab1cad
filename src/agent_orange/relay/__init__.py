"""Chat relay core: single-flight agent execution and output chunking."""

from agent_orange.relay.chunking import DEFAULT_MAX_LENGTH, chunk_text
from agent_orange.relay.guard import CommandGuard, CommandOutcome, CommandResult
from agent_orange.relay.lock import PendingLock
from agent_orange.relay.runner import AgentRunner

__all__ = [
    "AgentRunner",
    "CommandGuard",
    "CommandOutcome",
    "CommandResult",
    "DEFAULT_MAX_LENGTH",
    "PendingLock",
    "chunk_text",
]
