"""ToolExecutor: dispatches tool calls to registered tool handlers.

Looks each call up by name, validates its input against the tool's
pydantic model, invokes the handler, and returns a structured
``ToolCallResult``. Batches run concurrently and every call yields exactly
one result; a failing call is reported as diagnostic text.
"""

from __future__ import annotations

import asyncio
import inspect
import json
import logging
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, ValidationError

from skein.exceptions import ToolInputError, UnknownToolError
from skein.toolkit.models import ToolCallResult, ToolContext

if TYPE_CHECKING:
    from collections.abc import Iterable

    from skein.protocols import ToolCall
    from skein.toolkit.models import ToolDefinition

logger = logging.getLogger(__name__)

DEFAULT_COMPLETION_TOOL = "sequence_complete"


def format_output(value: Any) -> str:
    """Render a handler's return value as tool result text."""
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, BaseModel):
        return value.model_dump_json(exclude_none=True)
    try:
        return json.dumps(value, default=str)
    except (TypeError, ValueError):
        return str(value)


def format_failure(exc: BaseException) -> str:
    return (
        "Error: Exception thrown during tool execution. "
        f"Type: {type(exc).__name__}, Message: {exc}"
    )


class ToolExecutor:
    """Dispatches tool calls to handlers and returns structured results.

    Usage::

        executor = ToolExecutor(get_tools(shells=shells))
        results = await executor.execute_batch(response.tool_calls)
        for r in results:
            print(r.tool_use_id, r.content)
    """

    def __init__(
        self,
        tools: Iterable[ToolDefinition],
        *,
        completion_tool: str = DEFAULT_COMPLETION_TOOL,
    ) -> None:
        self._tools: dict[str, ToolDefinition] = {}
        for tool in tools:
            if tool.name in self._tools:
                raise ValueError(f"Duplicate tool name: {tool.name}")
            self._tools[tool.name] = tool
        self._completion_tool = completion_tool

    @property
    def completion_tool(self) -> str:
        return self._completion_tool

    def available_tools(self) -> list[str]:
        """Return the names of all registered tools."""
        return list(self._tools.keys())

    def get(self, tool_name: str) -> ToolDefinition | None:
        return self._tools.get(tool_name)

    def schemas(self) -> list[dict]:
        """Tool schemas in Anthropic tool-use format, in registration order."""
        return [tool.to_anthropic() for tool in self._tools.values()]

    async def execute_batch(self, calls: list[ToolCall]) -> list[ToolCallResult]:
        """Execute every call concurrently and wait for all of them to settle.

        Returns:
            One ToolCallResult per call, in the same order as ``calls``.
        """
        if not calls:
            return []
        logger.debug("Executing %d tool calls", len(calls))
        return list(await asyncio.gather(*(self.execute(call) for call in calls)))

    async def execute(self, call: ToolCall) -> ToolCallResult:
        """Execute a single tool call.

        Never raises for tool-level failures: unknown tools, invalid input,
        and handler exceptions all become a failed ToolCallResult.
        """
        try:
            output = await self._invoke(call)
        except Exception as exc:
            logger.debug("Tool %s failed: %s", call.name, exc, exc_info=True)
            return ToolCallResult(
                tool_use_id=call.id,
                tool_name=call.name,
                content=format_failure(exc),
                success=False,
            )
        return ToolCallResult(
            tool_use_id=call.id,
            tool_name=call.name,
            content=output,
            success=True,
            is_complete=call.name == self._completion_tool,
        )

    async def _invoke(self, call: ToolCall) -> str:
        tool = self._tools.get(call.name)
        if tool is None:
            raise UnknownToolError(call.name)

        try:
            params = tool.input_model.model_validate(call.arguments)
        except ValidationError as exc:
            raise ToolInputError(call.name, str(exc)) from exc

        context = ToolContext(
            logger=logging.getLogger(f"skein.tools.{tool.name}"),
            tool_call_id=call.id,
        )
        if tool.log_parameters is not None:
            tool.log_parameters(params, context)

        output = tool.handler(params, context)
        if inspect.isawaitable(output):
            output = await output

        if tool.log_returns is not None:
            tool.log_returns(output, context)
        return format_output(output)
