"""
Command Execution Guard
=======================

Single-flight gate in front of the agent runner. One command may run per
process; a second one arriving meanwhile is rejected, never queued. A live
pending lock (a terminal approval prompt waiting for Y/N) also rejects.

The busy flag lives for the process lifetime only. It starts False on every
start-up and is cleared in a ``finally`` once the agent exits.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

from agent_orange.core.exceptions import AgentOrangeError
from agent_orange.observability.metrics import RELAY_COMMANDS
from agent_orange.relay.lock import PendingLock
from agent_orange.relay.runner import AgentRunner

logger = logging.getLogger(__name__)

ERROR_MAX_CHARS = 1900

PENDING_MESSAGE = "A permission request is pending. Reply Y or N to that first."
BUSY_MESSAGE = "Claude is still working on your previous request. Please wait."


class CommandOutcome(str, Enum):
    REJECTED_PENDING = "rejected_pending"
    REJECTED_BUSY = "rejected_busy"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass
class CommandResult:
    outcome: CommandOutcome
    text: str

    @property
    def accepted(self) -> bool:
        return self.outcome in (CommandOutcome.COMPLETED, CommandOutcome.FAILED)


class CommandGuard:
    def __init__(self, runner: AgentRunner, lock: PendingLock) -> None:
        self.runner = runner
        self.lock = lock
        self._busy = False

    @property
    def busy(self) -> bool:
        return self._busy

    async def execute(
        self,
        command: str,
        on_accept: Optional[Callable[[], None]] = None,
    ) -> CommandResult:
        """
        Run *command* through the agent unless something else holds the floor.

        Args:
            command: Prompt text passed to the agent
            on_accept: Called once the command is admitted, before the agent starts

        Returns:
            CommandResult; FAILED carries the agent error text truncated for chat.
        """
        if self.lock.is_live():
            RELAY_COMMANDS.labels(outcome=CommandOutcome.REJECTED_PENDING.value).inc()
            return CommandResult(CommandOutcome.REJECTED_PENDING, PENDING_MESSAGE)

        if self._busy:
            RELAY_COMMANDS.labels(outcome=CommandOutcome.REJECTED_BUSY.value).inc()
            return CommandResult(CommandOutcome.REJECTED_BUSY, BUSY_MESSAGE)

        # Set before the first await so a concurrent caller sees it.
        self._busy = True
        try:
            if on_accept is not None:
                on_accept()
            logger.info("[command] %s", command[:200])
            output = await self.runner.run(command)
        except AgentOrangeError as e:
            logger.error("[error] %s", e.message)
            RELAY_COMMANDS.labels(outcome=CommandOutcome.FAILED.value).inc()
            return CommandResult(CommandOutcome.FAILED, e.message[:ERROR_MAX_CHARS])
        finally:
            self._busy = False

        RELAY_COMMANDS.labels(outcome=CommandOutcome.COMPLETED.value).inc()
        return CommandResult(CommandOutcome.COMPLETED, output)
