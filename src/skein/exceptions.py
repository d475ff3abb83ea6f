"""Skein exception hierarchy.

All Skein-specific exceptions inherit from SkeinError.
"""


class SkeinError(Exception):
    """Base exception for all Skein errors."""


class OrchestratorError(SkeinError):
    """Raised when a conversation run cannot continue."""


class ToolError(SkeinError):
    """Base for tool resolution and input errors."""


class UnknownToolError(ToolError):
    """Raised when a tool call names a tool that is not registered."""

    def __init__(self, tool_name: str) -> None:
        self.tool_name = tool_name
        super().__init__(f"No tool with the name '{tool_name}' exists.")


class ToolInputError(ToolError):
    """Raised when a tool call's input fails schema validation."""

    def __init__(self, tool_name: str, details: str) -> None:
        self.tool_name = tool_name
        self.details = details
        super().__init__(f"Invalid input for tool '{tool_name}': {details}")


class InstanceNotFoundError(SkeinError):
    """Raised when a shell or sub-agent instance lookup fails."""

    def __init__(self, kind: str, instance_id: str) -> None:
        self.kind = kind
        self.instance_id = instance_id
        super().__init__(f"{kind} not found with ID: {instance_id}")


class ShellError(SkeinError):
    """Raised when a shell session operation fails."""


class SubAgentError(SkeinError):
    """Raised when a sub-agent cannot be started or messaged."""


class SubAgentAbortedError(SubAgentError):
    """Raised when messaging a sub-agent that has been aborted."""

    def __init__(self, instance_id: str) -> None:
        self.instance_id = instance_id
        super().__init__(f"Sub-agent {instance_id} has been aborted")
