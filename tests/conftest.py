"""Shared test fixtures for Skein.

Provides a scripted fake LLM client and response builders. No test makes a
real API call.
"""

from __future__ import annotations

import asyncio
import itertools

import pytest

from skein.protocols import ModelResponse, TextBlock, TokenUsage, ToolCall

_ids = itertools.count(1)


# ------------------------------------------------------------------
# Response builders
# ------------------------------------------------------------------


def text_response(text: str, input_tokens: int = 10, output_tokens: int = 5) -> ModelResponse:
    """Model response holding a single text block."""
    return ModelResponse(
        content=[TextBlock(text)],
        usage=TokenUsage(input_tokens, output_tokens),
        stop_reason="end_turn",
    )


def tool_call(name: str, call_id: str | None = None, **arguments) -> ToolCall:
    return ToolCall(id=call_id or f"toolu_{next(_ids)}", name=name, arguments=arguments)


def tool_response(
    *calls: ToolCall,
    text: str | None = None,
    input_tokens: int = 10,
    output_tokens: int = 5,
) -> ModelResponse:
    """Model response with optional leading text and one or more tool calls."""
    content = [TextBlock(text)] if text else []
    content.extend(calls)
    return ModelResponse(
        content=content,
        usage=TokenUsage(input_tokens, output_tokens),
        stop_reason="tool_use",
    )


def complete_response(result: str, text: str | None = None, **kwargs) -> ModelResponse:
    """Model response calling sequence_complete with ``result``."""
    return tool_response(tool_call("sequence_complete", result=result), text=text, **kwargs)


def empty_response(input_tokens: int = 3, output_tokens: int = 0) -> ModelResponse:
    return ModelResponse(content=[], usage=TokenUsage(input_tokens, output_tokens))


# ------------------------------------------------------------------
# Fake client
# ------------------------------------------------------------------


class FakeLLM:
    """Scripted LLMClient.

    Returns ``responses`` in sequence (repeating the last one), or raises
    an item that is an exception. Every request is recorded in ``calls``.
    ``gate``, when set, must be released before each request returns.
    """

    def __init__(self, responses: list, gate: asyncio.Event | None = None) -> None:
        self.responses = list(responses)
        self.calls: list[dict] = []
        self.gate = gate
        self.closed = False

    async def complete(self, messages, *, system=None, tools=None, tool_choice=None, **kwargs):
        self.calls.append({
            "messages": [dict(m) for m in messages],
            "system": system,
            "tools": tools,
            "tool_choice": tool_choice,
            **kwargs,
        })
        if self.gate is not None:
            await self.gate.wait()
        idx = min(len(self.calls) - 1, len(self.responses) - 1)
        item = self.responses[idx]
        if isinstance(item, BaseException):
            raise item
        return item

    async def aclose(self) -> None:
        self.closed = True

    @property
    def call_count(self) -> int:
        return len(self.calls)


def make_mock_llm(responses: list, **kwargs) -> FakeLLM:
    """Create a FakeLLM that returns responses in sequence."""
    return FakeLLM(responses, **kwargs)


@pytest.fixture
def no_api_key(monkeypatch):
    """Remove the Anthropic API key from the environment."""
    monkeypatch.delenv("ANTHROPIC_API_KEY", raising=False)


class StepLLM:
    """LLMClient whose every request blocks until the test pushes a response.

    Lets a test decide exactly where a run is suspended.
    """

    def __init__(self) -> None:
        self.calls: list[dict] = []
        self._queue: asyncio.Queue = asyncio.Queue()
        self.closed = False

    def push(self, *items) -> None:
        for item in items:
            self._queue.put_nowait(item)

    async def complete(self, messages, *, system=None, tools=None, tool_choice=None, **kwargs):
        self.calls.append({
            "messages": [dict(m) for m in messages],
            "system": system,
            "tools": tools,
            "tool_choice": tool_choice,
            **kwargs,
        })
        item = await self._queue.get()
        if isinstance(item, BaseException):
            raise item
        return item

    async def aclose(self) -> None:
        self.closed = True

    @property
    def call_count(self) -> int:
        return len(self.calls)
