"""Tests for the tool dispatcher, tool models, and profiles.

Tests cover:
- ToolDefinition schema export
- ToolExecutor: success, unknown tool, invalid input, handler failure,
  concurrent batches, completion detection
- ToolProfile filtering and the built-in profiles
- get_all_tools / get_tools assembly
"""

from __future__ import annotations

import asyncio

import pytest
from pydantic import BaseModel, Field

from conftest import tool_call
from skein.exceptions import ToolInputError, UnknownToolError
from skein.shell.manager import ShellSessionManager
from skein.subagents.supervisor import SubAgentSupervisor
from skein.toolkit import (
    MAIN_PROFILE,
    SUBAGENT_PROFILE,
    ToolCallResult,
    ToolConfig,
    ToolDefinition,
    ToolExecutor,
    ToolProfile,
    get_all_tools,
    get_profile,
    get_tools,
)
from skein.toolkit.executor import format_failure, format_output


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


class EchoInput(BaseModel):
    text: str = Field(description="Text to echo")


class SleepInput(BaseModel):
    seconds: float
    label: str


def _echo(params: EchoInput, context) -> str:
    return params.text


def _boom(params: EchoInput, context) -> str:
    raise RuntimeError("kaboom")


async def _sleep(params: SleepInput, context) -> dict:
    await asyncio.sleep(params.seconds)
    return {"label": params.label}


class _DoneInput(BaseModel):
    result: str


ECHO = ToolDefinition("echo", "Echo text back", EchoInput, _echo)
BOOM = ToolDefinition("boom", "Always fails", EchoInput, _boom)
SLEEP = ToolDefinition("sleep", "Sleep then answer", SleepInput, _sleep)
DONE = ToolDefinition("sequence_complete", "Finish", _DoneInput, lambda p, c: p.result)


# ---------------------------------------------------------------------------
# ToolDefinition
# ---------------------------------------------------------------------------


class TestToolDefinition:
    def test_to_anthropic(self):
        schema = ECHO.to_anthropic()
        assert schema["name"] == "echo"
        assert schema["description"] == "Echo text back"
        assert schema["input_schema"]["properties"]["text"]["type"] == "string"
        assert schema["input_schema"]["required"] == ["text"]

    def test_tool_result_block(self):
        ok = ToolCallResult("toolu_1", "echo", "hi")
        assert ok.to_anthropic() == {
            "type": "tool_result",
            "tool_use_id": "toolu_1",
            "content": "hi",
        }
        failed = ToolCallResult("toolu_2", "echo", "Error", success=False)
        assert failed.to_anthropic()["is_error"] is True


# ---------------------------------------------------------------------------
# ToolExecutor
# ---------------------------------------------------------------------------


class TestToolExecutor:
    def test_duplicate_names_rejected(self):
        with pytest.raises(ValueError, match="Duplicate tool name"):
            ToolExecutor([ECHO, ECHO])

    def test_available_tools_and_schemas_keep_order(self):
        executor = ToolExecutor([SLEEP, ECHO])
        assert executor.available_tools() == ["sleep", "echo"]
        assert [s["name"] for s in executor.schemas()] == ["sleep", "echo"]

    async def test_execute_success(self):
        executor = ToolExecutor([ECHO])
        result = await executor.execute(tool_call("echo", call_id="toolu_a", text="hello"))
        assert result.success
        assert result.content == "hello"
        assert result.tool_use_id == "toolu_a"
        assert not result.is_complete

    async def test_unknown_tool_reported_as_text(self):
        executor = ToolExecutor([ECHO])
        result = await executor.execute(tool_call("nope"))
        assert not result.success
        assert result.content == (
            "Error: Exception thrown during tool execution. "
            "Type: UnknownToolError, Message: No tool with the name 'nope' exists."
        )

    async def test_invalid_input_reported_as_text(self):
        executor = ToolExecutor([ECHO])
        result = await executor.execute(tool_call("echo", wrong=1))
        assert not result.success
        assert "Type: ToolInputError" in result.content
        assert "text" in result.content

    async def test_handler_exception_reported_as_text(self):
        executor = ToolExecutor([BOOM])
        result = await executor.execute(tool_call("boom", text="x"))
        assert not result.success
        assert result.content == (
            "Error: Exception thrown during tool execution. "
            "Type: RuntimeError, Message: kaboom"
        )

    async def test_batch_runs_concurrently_and_preserves_order(self):
        executor = ToolExecutor([SLEEP])
        calls = [
            tool_call("sleep", seconds=0.3, label="slow"),
            tool_call("sleep", seconds=0.0, label="fast"),
            tool_call("sleep", seconds=0.3, label="slow2"),
        ]
        loop = asyncio.get_running_loop()
        started = loop.time()
        results = await executor.execute_batch(calls)
        elapsed = loop.time() - started

        assert [r.tool_use_id for r in results] == [c.id for c in calls]
        assert [r.content for r in results] == [
            '{"label": "slow"}',
            '{"label": "fast"}',
            '{"label": "slow2"}',
        ]
        assert elapsed < 0.55

    async def test_batch_with_failure_still_yields_every_result(self):
        executor = ToolExecutor([ECHO, BOOM])
        results = await executor.execute_batch([
            tool_call("echo", text="a"),
            tool_call("boom", text="b"),
            tool_call("missing"),
        ])
        assert [r.success for r in results] == [True, False, False]

    async def test_empty_batch(self):
        assert await ToolExecutor([ECHO]).execute_batch([]) == []

    async def test_completion_tool_flagged_only_on_success(self):
        executor = ToolExecutor([DONE])
        ok = await executor.execute(tool_call("sequence_complete", result="42"))
        assert ok.is_complete
        assert ok.content == "42"
        bad = await executor.execute(tool_call("sequence_complete"))
        assert not bad.success
        assert not bad.is_complete

    async def test_custom_completion_tool(self):
        executor = ToolExecutor([ECHO], completion_tool="echo")
        result = await executor.execute(tool_call("echo", text="bye"))
        assert result.is_complete

    async def test_logging_hooks_called(self):
        seen = []
        tool = ToolDefinition(
            "echo",
            "Echo",
            EchoInput,
            _echo,
            log_parameters=lambda p, c: seen.append(("params", p.text, c.logger.name)),
            log_returns=lambda out, c: seen.append(("returns", out)),
        )
        await ToolExecutor([tool]).execute(tool_call("echo", text="x"))
        assert seen == [("params", "x", "skein.tools.echo"), ("returns", "x")]


class TestFormatting:
    def test_format_output(self):
        assert format_output(None) == ""
        assert format_output("plain") == "plain"
        assert format_output({"a": 1}) == '{"a": 1}'
        assert format_output(EchoInput(text="t")) == '{"text":"t"}'

    def test_format_failure(self):
        assert format_failure(UnknownToolError("x")) == (
            "Error: Exception thrown during tool execution. "
            "Type: UnknownToolError, Message: No tool with the name 'x' exists."
        )
        assert format_failure(ToolInputError("x", "bad")).startswith(
            "Error: Exception thrown during tool execution. Type: ToolInputError"
        )


# ---------------------------------------------------------------------------
# Profiles
# ---------------------------------------------------------------------------


class TestProfiles:
    def test_filter_disables_and_overrides(self):
        profile = ToolProfile(
            "custom",
            tool_configs={
                "boom": ToolConfig(enabled=False),
                "echo": ToolConfig(description="Repeat"),
            },
        )
        tools = profile.filter_tools([ECHO, BOOM, SLEEP])
        assert [t.name for t in tools] == ["echo", "sleep"]
        assert tools[0].description == "Repeat"
        assert ECHO.description == "Echo text back"

    def test_get_profile_by_name(self):
        assert get_profile("main") is MAIN_PROFILE
        assert get_profile("subagent") is SUBAGENT_PROFILE

    def test_get_profile_unknown_raises(self):
        with pytest.raises(ValueError, match="Unknown profile"):
            get_profile("nope")


class TestGetTools:
    def test_base_tools_without_shells_or_supervisor(self):
        names = [t.name for t in get_all_tools()]
        assert names == ["read_file", "update_file", "user_prompt", "sequence_complete", "fetch"]

    def test_all_tools(self):
        shells = ShellSessionManager()
        supervisor = SubAgentSupervisor(shells=shells)
        names = [t.name for t in get_all_tools(shells=shells, supervisor=supervisor)]
        assert names == [
            "sub_agent_start",
            "sub_agent_message",
            "read_file",
            "update_file",
            "user_prompt",
            "sequence_complete",
            "fetch",
            "shell_start",
            "shell_message",
        ]
        assert len(set(names)) == len(names)

    def test_subagent_profile_drops_user_prompt(self):
        shells = ShellSessionManager()
        names = [t.name for t in get_tools("subagent", shells=shells)]
        assert "user_prompt" not in names
        assert "shell_start" in names
        assert "sequence_complete" in names

    def test_subagent_profile_rewords_completion(self):
        main = {t.name: t for t in get_tools("main")}
        sub = {t.name: t for t in get_tools("subagent")}
        assert "parent agent" in sub["sequence_complete"].description
        assert sub["sequence_complete"].description != main["sequence_complete"].description
        assert main["sequence_complete"].description.startswith("Completes the tool use sequence")
        assert sub["read_file"].description == main["read_file"].description

    def test_every_schema_is_an_object(self):
        shells = ShellSessionManager()
        for tool in get_tools("main", shells=shells, supervisor=SubAgentSupervisor(shells=shells)):
            schema = tool.to_anthropic()
            assert schema["input_schema"]["type"] == "object", tool.name
            assert schema["description"], tool.name
