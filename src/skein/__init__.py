"""Skein: an agent runtime for tool-using language-model conversations.

Drives a conversation with a model provider, dispatches the tool calls the
model requests (including long-running shell sessions and nested
sub-agents), and feeds the results back until the model signals completion.
"""

from skein._version import __version__

# Conversation loop
from skein.orchestrator import (
    AgentEvent,
    AgentRun,
    ConversationState,
    EventType,
    Orchestrator,
    OrchestratorConfig,
    OrchestratorResult,
    RunOutcome,
)

# Provider types
from skein.llm import AnthropicClient, LLMClient
from skein.protocols import ModelResponse, TextBlock, TokenUsage, ToolCall

# Tools
from skein.toolkit import (
    ToolCallResult,
    ToolContext,
    ToolDefinition,
    ToolExecutor,
    ToolProfile,
    get_all_tools,
    get_tools,
)

# Sessions
from skein.shell import ShellSessionManager, ShellSnapshot
from skein.subagents import SubAgentSupervisor

# Errors
from skein.exceptions import (
    InstanceNotFoundError,
    OrchestratorError,
    ShellError,
    SkeinError,
    SubAgentAbortedError,
    SubAgentError,
    ToolInputError,
    UnknownToolError,
)

__all__ = [
    "__version__",
    "AgentEvent",
    "AgentRun",
    "AnthropicClient",
    "ConversationState",
    "EventType",
    "InstanceNotFoundError",
    "LLMClient",
    "ModelResponse",
    "Orchestrator",
    "OrchestratorConfig",
    "OrchestratorError",
    "OrchestratorResult",
    "RunOutcome",
    "ShellError",
    "ShellSessionManager",
    "ShellSnapshot",
    "SkeinError",
    "SubAgentAbortedError",
    "SubAgentError",
    "SubAgentSupervisor",
    "TextBlock",
    "TokenUsage",
    "ToolCall",
    "ToolCallResult",
    "ToolContext",
    "ToolDefinition",
    "ToolExecutor",
    "ToolInputError",
    "ToolProfile",
    "UnknownToolError",
    "get_all_tools",
    "get_tools",
]
