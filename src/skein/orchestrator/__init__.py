"""Orchestrator package -- the conversation loop and its types.

Provides the Orchestrator class, configuration, the run handle and state,
event/control channels, and result types.
"""

from skein.orchestrator.channels import (
    ControlChannel,
    ControlKind,
    ControlMessage,
    EventStream,
)
from skein.orchestrator.config import OrchestratorConfig
from skein.orchestrator.loop import Orchestrator
from skein.orchestrator.models import (
    ABORTED_RESULT,
    EMPTY_RESPONSE_RESULT,
    MAX_ITERATIONS_RESULT,
    AgentEvent,
    EventType,
    OrchestratorResult,
    RunOutcome,
)
from skein.orchestrator.state import AgentRun, ConversationState

__all__ = [
    # Core
    "Orchestrator",
    "AgentRun",
    "ConversationState",
    # Config
    "OrchestratorConfig",
    # Channels
    "EventStream",
    "ControlChannel",
    "ControlKind",
    "ControlMessage",
    # Models
    "AgentEvent",
    "EventType",
    "OrchestratorResult",
    "RunOutcome",
    "ABORTED_RESULT",
    "EMPTY_RESPONSE_RESULT",
    "MAX_ITERATIONS_RESULT",
]
