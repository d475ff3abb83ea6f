"""Orchestrator configuration types."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Awaitable, Callable, Union

from skein.toolkit.executor import DEFAULT_COMPLETION_TOOL

SystemPromptSource = Union[str, Callable[[], Union[str, Awaitable[str]]], None]


@dataclass
class OrchestratorConfig:
    """Configuration for a conversation run.

    Mutable dataclass -- callers may adjust settings between runs.

    Attributes:
        max_iterations: Maximum number of model requests per run.
        model: Model identifier sent with every request.
        max_tokens: Maximum tokens per model response.
        temperature: Sampling temperature.
        system_prompt: A fixed prompt, a (sync or async) callable producing
            one at run start, or None for the default context-gathering
            agent prompt.
        completion_tool: Name of the tool whose successful call ends a run.
        extra_llm_kwargs: Additional request fields forwarded to the client.
    """

    max_iterations: int = 50
    model: str = "claude-3-5-sonnet-20241022"
    max_tokens: int = 4096
    temperature: float = 0.7
    system_prompt: SystemPromptSource = None
    completion_tool: str = DEFAULT_COMPLETION_TOOL
    extra_llm_kwargs: dict | None = None

    def __post_init__(self) -> None:
        if self.max_iterations < 1:
            raise ValueError(f"max_iterations must be >= 1, got {self.max_iterations}")
