"""Orchestrator event and result models.

Provides EventType, AgentEvent, RunOutcome, and OrchestratorResult for the
conversation loop's event stream and final result.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Any

from skein.protocols import TokenUsage

EMPTY_RESPONSE_RESULT = "Agent returned empty message implying it is done its given task"
MAX_ITERATIONS_RESULT = "Maximum sub-agent iterations reached without successful completion"
ABORTED_RESULT = "Conversation aborted before completion"


class EventType(str, enum.Enum):
    """Tags of the events a run emits."""

    USER = "user"
    ASSISTANT = "assistant"
    COMPLETE = "complete"
    ERROR = "error"


@dataclass(frozen=True)
class AgentEvent:
    """One entry of a run's outbound event stream.

    ``content`` is the message text for USER/ASSISTANT events, the
    OrchestratorResult for COMPLETE, and the exception for ERROR.
    """

    type: EventType
    content: Any

    @classmethod
    def user(cls, text: str) -> AgentEvent:
        return cls(EventType.USER, text)

    @classmethod
    def assistant(cls, text: str) -> AgentEvent:
        return cls(EventType.ASSISTANT, text)

    @classmethod
    def complete(cls, result: OrchestratorResult) -> AgentEvent:
        return cls(EventType.COMPLETE, result)

    @classmethod
    def error(cls, cause: BaseException) -> AgentEvent:
        return cls(EventType.ERROR, cause)


class RunOutcome(str, enum.Enum):
    """How a run that produced a result ended."""

    COMPLETED = "completed"
    MAX_ITERATIONS = "max_iterations"
    CANCELLED = "cancelled"


@dataclass(frozen=True)
class OrchestratorResult:
    """Final result of a conversation run.

    Frozen: the result is immutable once the run completes.
    """

    result: str
    tokens: TokenUsage = field(default_factory=TokenUsage)
    interactions: int = 0
    outcome: RunOutcome = RunOutcome.COMPLETED

    def to_dict(self) -> dict:
        return {
            "result": self.result,
            "tokens": self.tokens.to_dict(),
            "interactions": self.interactions,
        }
