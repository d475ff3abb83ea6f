"""Agent toolkit: tool definitions, profiles, and the tool-call executor.

Provides LLM-consumable tool definitions validated by pydantic input
models, profiles that curate tool subsets, and the ToolExecutor that
dispatches batches of tool calls concurrently.
"""

from skein.toolkit.definitions import get_all_tools, get_tools
from skein.toolkit.executor import DEFAULT_COMPLETION_TOOL, ToolExecutor
from skein.toolkit.models import (
    ToolCallResult,
    ToolConfig,
    ToolContext,
    ToolDefinition,
    ToolProfile,
)
from skein.toolkit.profiles import MAIN_PROFILE, SUBAGENT_PROFILE, get_profile

__all__ = [
    "ToolDefinition",
    "ToolProfile",
    "ToolConfig",
    "ToolContext",
    "ToolCallResult",
    "ToolExecutor",
    "DEFAULT_COMPLETION_TOOL",
    "get_all_tools",
    "get_tools",
    "get_profile",
    "MAIN_PROFILE",
    "SUBAGENT_PROFILE",
]
