"""Toolkit data models for Skein tool definitions.

Frozen dataclasses for tool definitions, profiles, configs, call context,
and call results.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Callable

    from pydantic import BaseModel

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ToolContext:
    """Per-call context handed to every tool handler.

    Attributes:
        logger: Logging sink scoped to the tool (``skein.tools.<name>``).
        tool_call_id: Id of the tool call being executed.
    """

    logger: logging.Logger
    tool_call_id: str = ""


@dataclass(frozen=True)
class ToolDefinition:
    """A single tool definition for LLM consumption.

    Attributes:
        name: Tool name (e.g. "shell_start", "sequence_complete").
        description: Human-readable description of when/why to use this tool.
        input_model: Pydantic model that validates the call's input. The
            JSON Schema sent to the model is derived from it.
        handler: Callable ``(params, context) -> output``; may be a
            coroutine function.
        log_parameters: Optional hook called with the validated params
            before execution.
        log_returns: Optional hook called with the raw output after a
            successful execution.
    """

    name: str
    description: str
    input_model: type[BaseModel]
    handler: Callable[..., Any]
    log_parameters: Callable[[Any, ToolContext], None] | None = None
    log_returns: Callable[[Any, ToolContext], None] | None = None

    @property
    def parameters(self) -> dict:
        """JSON Schema dict describing the tool's input."""
        return self.input_model.model_json_schema()

    def to_anthropic(self) -> dict:
        """Convert to Anthropic tool-use format.

        Returns:
            Dict with "name", "description", and "input_schema".
        """
        return {
            "name": self.name,
            "description": self.description,
            "input_schema": self.parameters,
        }


@dataclass(frozen=True)
class ToolConfig:
    """Per-tool configuration within a profile.

    Attributes:
        enabled: Whether this tool is included in the profile.
        description: Override description, or None to use default.
    """

    enabled: bool = True
    description: str | None = None


@dataclass
class ToolProfile:
    """A named profile that curates a subset of tools.

    Attributes:
        name: Profile identifier (e.g. "main", "subagent").
        tool_configs: Mapping of tool_name -> ToolConfig. Tools missing from
            the mapping are included unchanged.
    """

    name: str
    tool_configs: dict[str, ToolConfig] = field(default_factory=dict)

    def filter_tools(self, all_tools: list[ToolDefinition]) -> list[ToolDefinition]:
        """Filter and optionally override tool descriptions based on this profile.

        If a ``ToolConfig`` provides a description override, the tool's
        description is replaced using ``dataclasses.replace()``.
        """
        from dataclasses import replace

        result: list[ToolDefinition] = []
        for tool in all_tools:
            config = self.tool_configs.get(tool.name)
            if config is None:
                result.append(tool)
                continue
            if not config.enabled:
                continue
            if config.description is not None:
                tool = replace(tool, description=config.description)
            result.append(tool)
        return result


@dataclass(frozen=True)
class ToolCallResult:
    """Structured result from executing one tool call.

    Attributes:
        tool_use_id: Id of the tool call this result answers.
        tool_name: Name of the tool that was requested.
        content: Textual output, or a diagnostic string on failure.
        success: Whether execution succeeded.
        is_complete: True only for a successful call of the completion tool.
    """

    tool_use_id: str
    tool_name: str
    content: str = ""
    success: bool = True
    is_complete: bool = False

    def to_anthropic(self) -> dict:
        """Convert to an Anthropic ``tool_result`` content block."""
        block: dict[str, Any] = {
            "type": "tool_result",
            "tool_use_id": self.tool_use_id,
            "content": self.content,
        }
        if not self.success:
            block["is_error"] = True
        return block
