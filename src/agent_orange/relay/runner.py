"""
Agent Runner
============

Runs the command-line agent once per chat command and captures its reply.
Standard input is closed so the agent can never block on a prompt; any
permission question it raises is answered through the terminal hook instead.
"""

import asyncio
import logging
from pathlib import Path

from agent_orange.core.exceptions import AgentProcessError

logger = logging.getLogger(__name__)

NO_OUTPUT = "(No output)"


class AgentRunner:
    def __init__(self, binary: str = "claude", project_dir: Path | None = None) -> None:
        self.binary = binary
        self.project_dir = project_dir

    def build_args(self, prompt: str) -> list[str]:
        return [self.binary, "-c", "-p", prompt, "--output-format", "text"]

    async def run(self, prompt: str) -> str:
        """
        Run the agent with *prompt* and return its trimmed standard output.

        Raises:
            AgentProcessError: the process could not be started or exited non-zero.
                The message is the trimmed stderr when there is any.
        """
        try:
            proc = await asyncio.create_subprocess_exec(
                *self.build_args(prompt),
                cwd=str(self.project_dir) if self.project_dir else None,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            raise AgentProcessError(f"could not start {self.binary}: {e}") from e

        stdout, stderr = await proc.communicate()
        out = stdout.decode("utf-8", errors="replace").strip()
        err = stderr.decode("utf-8", errors="replace").strip()

        if proc.returncode != 0:
            logger.warning("%s exited with code %s", self.binary, proc.returncode)
            raise AgentProcessError(
                err or f"{self.binary} exited with code {proc.returncode}",
                exit_code=proc.returncode,
            )
        return out or NO_OUTPUT
