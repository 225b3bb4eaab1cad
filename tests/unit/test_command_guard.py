"""Tests for the relay core — pending lock, agent runner and the single-flight guard."""

import asyncio
import os
import stat
from unittest.mock import MagicMock

import pytest

from agent_orange.core.exceptions import AgentProcessError
from agent_orange.relay import AgentRunner, CommandGuard, CommandOutcome, PendingLock


def _script(tmp_path, body):
    path = tmp_path / "fake-agent"
    path.write_text("#!/bin/sh\n" + body)
    path.chmod(path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return str(path)


# ── PendingLock ──────────────────────────────────────────────────────────


class TestPendingLock:
    def test_missing_file(self, tmp_path):
        assert PendingLock(tmp_path / "none.lock").is_live() is False

    def test_live_pid(self, tmp_path):
        lock_file = tmp_path / "approve.lock"
        lock_file.write_text(f"{os.getpid()}\n")
        assert PendingLock(lock_file).is_live() is True

    def test_stale_pid(self, tmp_path, monkeypatch):
        lock_file = tmp_path / "approve.lock"
        lock_file.write_text("424242")
        monkeypatch.setattr("agent_orange.relay.lock.psutil.pid_exists", lambda pid: False)
        assert PendingLock(lock_file).is_live() is False

    @pytest.mark.parametrize("content", ["", "not-a-pid", "0", "-5"])
    def test_garbage(self, tmp_path, content):
        lock_file = tmp_path / "approve.lock"
        lock_file.write_text(content)
        assert PendingLock(lock_file).is_live() is False


# ── AgentRunner ──────────────────────────────────────────────────────────


class TestAgentRunner:
    def test_arguments(self):
        runner = AgentRunner("claude")
        assert runner.build_args("fix the tests") == [
            "claude", "-c", "-p", "fix the tests", "--output-format", "text",
        ]

    async def test_success_output_trimmed(self, tmp_path):
        binary = _script(tmp_path, 'echo "  prompt=$3  "\necho "cwd=$(pwd -P)"\n')
        workdir = tmp_path / "project"
        workdir.mkdir()
        output = await AgentRunner(binary, workdir).run("hello there")
        assert output == f"prompt=hello there  \ncwd={workdir.resolve()}"

    async def test_empty_output(self, tmp_path):
        binary = _script(tmp_path, "exit 0\n")
        assert await AgentRunner(binary).run("x") == "(No output)"

    async def test_stdin_is_closed(self, tmp_path):
        binary = _script(tmp_path, 'read line || echo "eof"\n')
        assert await AgentRunner(binary).run("x") == "eof"

    async def test_failure_uses_stderr(self, tmp_path):
        binary = _script(tmp_path, 'echo "  rate limited  " >&2\nexit 3\n')
        with pytest.raises(AgentProcessError) as exc_info:
            await AgentRunner(binary).run("x")
        assert exc_info.value.message == "rate limited"
        assert exc_info.value.exit_code == 3

    async def test_failure_without_stderr(self, tmp_path):
        binary = _script(tmp_path, "exit 2\n")
        with pytest.raises(AgentProcessError, match="exited with code 2"):
            await AgentRunner(binary).run("x")

    async def test_missing_binary(self, tmp_path):
        with pytest.raises(AgentProcessError, match="could not start"):
            await AgentRunner(str(tmp_path / "missing")).run("x")


# ── CommandGuard ─────────────────────────────────────────────────────────


class BlockingRunner:
    """Runner stub that waits until released and counts invocations."""

    def __init__(self, output="done"):
        self.output = output
        self.calls = []
        self.started = asyncio.Event()
        self.release = asyncio.Event()

    async def run(self, prompt):
        self.calls.append(prompt)
        await asyncio.sleep(0)
        self.started.set()
        await self.release.wait()
        if isinstance(self.output, Exception):
            raise self.output
        return self.output


def _lock(live=False):
    lock = MagicMock(spec=PendingLock)
    lock.is_live.return_value = live
    return lock


class TestCommandGuard:
    async def test_completed(self):
        runner = BlockingRunner("all good")
        runner.release.set()
        guard = CommandGuard(runner, _lock())
        result = await guard.execute("do it")
        assert result.outcome == CommandOutcome.COMPLETED
        assert result.text == "all good"
        assert guard.busy is False

    async def test_pending_lock_rejects_without_running(self):
        runner = BlockingRunner()
        guard = CommandGuard(runner, _lock(live=True))
        result = await guard.execute("do it")
        assert result.outcome == CommandOutcome.REJECTED_PENDING
        assert "pending" in result.text
        assert not result.accepted
        assert runner.calls == []

    async def test_second_command_rejected_while_busy(self):
        runner = BlockingRunner("first done")
        guard = CommandGuard(runner, _lock())

        first = asyncio.create_task(guard.execute("first"))
        await runner.started.wait()
        assert guard.busy is True

        second = await guard.execute("second")
        assert second.outcome == CommandOutcome.REJECTED_BUSY
        assert second.text == "Claude is still working on your previous request. Please wait."
        assert runner.calls == ["first"]

        runner.release.set()
        assert (await first).outcome == CommandOutcome.COMPLETED
        assert guard.busy is False

    async def test_simultaneous_arrivals_only_one_runs(self):
        runner = BlockingRunner()
        runner.release.set()
        guard = CommandGuard(runner, _lock())
        results = await asyncio.gather(guard.execute("a"), guard.execute("b"))
        outcomes = sorted(r.outcome.value for r in results)
        assert outcomes == ["completed", "rejected_busy"]
        assert len(runner.calls) == 1

    async def test_failure_text_truncated_and_flag_cleared(self):
        runner = BlockingRunner(AgentProcessError("e" * 5000, exit_code=1))
        runner.release.set()
        guard = CommandGuard(runner, _lock())
        result = await guard.execute("x")
        assert result.outcome == CommandOutcome.FAILED
        assert result.accepted
        assert len(result.text) == 1900
        assert guard.busy is False

    async def test_on_accept_called_only_when_admitted(self):
        runner = BlockingRunner()
        runner.release.set()
        accepted = MagicMock()

        await CommandGuard(runner, _lock(live=True)).execute("x", on_accept=accepted)
        accepted.assert_not_called()

        await CommandGuard(runner, _lock()).execute("x", on_accept=accepted)
        accepted.assert_called_once()
