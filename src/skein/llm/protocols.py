"""LLM client protocol.

Defines the pluggable interface the orchestrator uses to talk to a
model provider.
"""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable

from skein.protocols import ModelResponse


@runtime_checkable
class LLMClient(Protocol):
    """Protocol for pluggable LLM clients.

    Any object with async complete() and aclose() methods matching these
    signatures works. The built-in AnthropicClient implements this protocol;
    tests use small in-memory fakes.
    """

    async def complete(
        self,
        messages: list[dict],
        *,
        system: str | None = None,
        tools: list[dict] | None = None,
        tool_choice: dict | None = None,
        **kwargs: Any,
    ) -> ModelResponse:
        """Send the conversation, return the parsed response."""
        ...

    async def aclose(self) -> None:
        """Release underlying resources."""
        ...
