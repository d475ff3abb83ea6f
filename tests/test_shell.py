"""Tests for the shell session manager.

Tests cover:
- Sync mode: output, stderr, exit codes, spawn failures
- Async mode: registration, stdin round-trips, continuous capture
- Signals: delivery, names, signals after completion
- Registry: lookups, completed instances stay queryable, clear()
- shell_start / shell_message tool adapters

These tests start real /bin/sh processes.
"""

from __future__ import annotations

import asyncio
import json
import signal

import pytest

from conftest import tool_call
from skein.exceptions import InstanceNotFoundError, ShellError
from skein.shell import (
    ExecutionMode,
    ShellAsyncResult,
    ShellSessionManager,
    ShellSyncResult,
    resolve_signal,
)
from skein.toolkit import ToolExecutor
from skein.toolkit.builtin import make_shell_tools


@pytest.fixture
async def shells():
    manager = ShellSessionManager(input_settle=2.0)
    yield manager
    await manager.clear()


async def poll_until_completed(shells, instance_id, timeout: float = 5.0) -> tuple[str, object]:
    """Poll a session until it completes; return all stdout and the last snapshot."""
    chunks = []
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while True:
        snap = await shells.message(instance_id)
        chunks.append(snap.stdout)
        if snap.completed or loop.time() > deadline:
            return "".join(chunks), snap
        await asyncio.sleep(0.05)


# ---------------------------------------------------------------------------
# Sync mode
# ---------------------------------------------------------------------------


class TestSyncMode:
    async def test_quick_command_returns_output(self, shells):
        result = await shells.start("echo hello", timeout=5)
        assert isinstance(result, ShellSyncResult)
        assert result.mode == ExecutionMode.SYNC
        assert result.stdout == "hello\n"
        assert result.exit_code == 0
        assert result.error is None
        assert len(shells) == 0

    async def test_stderr_and_exit_code(self, shells):
        result = await shells.start("echo oops 1>&2; exit 3", timeout=5)
        assert result.stderr == "oops\n"
        assert result.exit_code == 3

    async def test_spawn_failure_reported(self):
        manager = ShellSessionManager(cwd="/definitely/not/a/dir")
        result = await manager.start("echo hi", timeout=5)
        assert isinstance(result, ShellSyncResult)
        assert result.error is not None
        assert len(manager) == 0

    async def test_background_child_does_not_delay_exit(self, shells):
        loop = asyncio.get_running_loop()
        started = loop.time()
        result = await shells.start("sleep 3 & echo hi", timeout=5)
        elapsed = loop.time() - started

        assert isinstance(result, ShellSyncResult)
        assert result.stdout == "hi\n"
        assert result.exit_code == 0
        assert elapsed < 2.5

    async def test_to_dict(self, shells):
        result = await shells.start("printf abc", timeout=5)
        assert result.to_dict() == {
            "mode": "sync",
            "stdout": "abc",
            "stderr": "",
            "exit_code": 0,
            "error": None,
        }


# ---------------------------------------------------------------------------
# Async mode
# ---------------------------------------------------------------------------


class TestAsyncMode:
    async def test_zero_timeout_forces_async(self, shells):
        result = await shells.start("echo fast", timeout=0)
        assert isinstance(result, ShellAsyncResult)
        assert result.mode == ExecutionMode.ASYNC
        assert result.instance_id in shells

    async def test_slow_command_goes_async(self, shells):
        result = await shells.start("sleep 5", timeout=0.2)
        assert isinstance(result, ShellAsyncResult)
        assert shells.get(result.instance_id).mode == ExecutionMode.ASYNC

    async def test_stdin_round_trip(self, shells):
        started = await shells.start("cat", timeout=0)
        snap = await shells.message(started.instance_id, stdin="ping\n")
        assert snap.stdout == "ping\n"
        assert not snap.completed
        assert snap.error is None

        snap = await shells.message(started.instance_id, stdin="pong\n")
        assert snap.stdout == "pong\n"

    async def test_output_captured_between_polls(self, shells):
        started = await shells.start("echo one; sleep 0.3; echo two", timeout=0)
        stdout, snap = await poll_until_completed(shells, started.instance_id)
        assert started.stdout + stdout == "one\ntwo\n"
        assert snap.completed
        assert snap.exit_code == 0

    async def test_completed_instance_stays_queryable(self, shells):
        started = await shells.start("echo bye", timeout=0)
        await shells.get(started.instance_id).wait()

        first = await shells.message(started.instance_id)
        second = await shells.message(started.instance_id)
        assert first.completed and second.completed
        assert started.stdout + first.stdout == "bye\n"
        assert second.stdout == ""
        assert started.instance_id in shells

    async def test_async_instance_completes_despite_background_child(self, shells):
        started = await shells.start("sleep 3 & echo hi", timeout=0)
        await asyncio.wait_for(shells.get(started.instance_id).wait(), 2.5)
        snap = await shells.message(started.instance_id)
        assert snap.completed
        assert snap.exit_code == 0

    async def test_unread_input_does_not_block(self):
        manager = ShellSessionManager(write_timeout=0.5)
        try:
            started = await manager.start("sleep 30", timeout=0)
            snap = await asyncio.wait_for(
                manager.message(started.instance_id, stdin="x" * 1_000_000), 5
            )
            assert not snap.completed
            assert "partially delivered" in snap.error
        finally:
            await manager.clear()

    async def test_stdin_after_exit_reports_error(self, shells):
        started = await shells.start("true", timeout=0)
        await shells.get(started.instance_id).wait()
        snap = await shells.message(started.instance_id, stdin="late\n")
        assert snap.completed
        assert snap.error is not None


# ---------------------------------------------------------------------------
# Signals
# ---------------------------------------------------------------------------


class TestSignals:
    def test_resolve_signal_names(self):
        assert resolve_signal("SIGTERM") == signal.SIGTERM
        assert resolve_signal("term") == signal.SIGTERM
        assert resolve_signal(" sigint ") == signal.SIGINT

    def test_resolve_unknown_signal(self):
        with pytest.raises(ShellError, match="Unknown signal"):
            resolve_signal("SIGNOPE")

    async def test_sigterm_stops_process(self, shells):
        started = await shells.start("sleep 30", timeout=0)
        await shells.message(started.instance_id, signal="SIGTERM")
        await asyncio.wait_for(shells.get(started.instance_id).wait(), 5)

        snap = await shells.message(started.instance_id)
        assert snap.completed
        assert snap.signaled
        assert snap.exit_code in (-signal.SIGTERM, 128 + signal.SIGTERM)

    async def test_signal_after_completion_is_noop(self, shells):
        started = await shells.start("true", timeout=0)
        await shells.get(started.instance_id).wait()
        snap = await shells.message(started.instance_id, signal="SIGINT")
        assert snap.completed
        assert snap.signaled
        assert snap.exit_code == 0

    async def test_unknown_signal_raises(self, shells):
        started = await shells.start("sleep 30", timeout=0)
        with pytest.raises(ShellError):
            await shells.message(started.instance_id, signal="SIGNOPE")


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------


class TestRegistry:
    async def test_unknown_instance(self, shells):
        with pytest.raises(InstanceNotFoundError, match="Shell instance not found with ID: nope"):
            await shells.message("nope")

    async def test_clear_kills_and_empties(self, shells):
        started = await shells.start("sleep 30", timeout=0)
        instance = shells.get(started.instance_id)
        await shells.clear()
        assert len(shells) == 0
        assert instance.completed
        with pytest.raises(InstanceNotFoundError):
            shells.get(started.instance_id)

    async def test_list_instances(self, shells):
        a = await shells.start("sleep 30", timeout=0)
        b = await shells.start("sleep 30", timeout=0)
        ids = {i.instance_id for i in shells.list_instances()}
        assert ids == {a.instance_id, b.instance_id}


# ---------------------------------------------------------------------------
# Tool adapters
# ---------------------------------------------------------------------------


class TestShellTools:
    async def test_shell_start_tool(self, shells):
        executor = ToolExecutor(make_shell_tools(shells))
        result = await executor.execute(
            tool_call("shell_start", command="echo via tool", description="echo test")
        )
        assert result.success
        payload = json.loads(result.content)
        assert payload["mode"] == "sync"
        assert payload["stdout"] == "via tool\n"

    async def test_shell_message_unknown_id_is_reported(self, shells):
        executor = ToolExecutor(make_shell_tools(shells))
        result = await executor.execute(
            tool_call("shell_message", instance_id="missing", description="poll")
        )
        assert not result.success
        assert "InstanceNotFoundError" in result.content
        assert "Shell instance not found with ID: missing" in result.content

    async def test_shell_round_trip_through_tools(self, shells):
        executor = ToolExecutor(make_shell_tools(shells))
        started = await executor.execute(
            tool_call("shell_start", command="cat", timeout=0, description="start cat")
        )
        instance_id = json.loads(started.content)["instance_id"]
        reply = await executor.execute(
            tool_call("shell_message", instance_id=instance_id, stdin="hi\n", description="send")
        )
        assert json.loads(reply.content)["stdout"] == "hi\n"

    async def test_description_length_enforced(self, shells):
        executor = ToolExecutor(make_shell_tools(shells))
        result = await executor.execute(
            tool_call("shell_start", command="true", description="x" * 81)
        )
        assert not result.success
        assert "ToolInputError" in result.content
