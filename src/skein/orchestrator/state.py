"""Per-run conversation state and the caller-facing run handle."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from skein.exceptions import OrchestratorError
from skein.orchestrator.channels import ControlChannel, EventStream
from skein.orchestrator.models import AgentEvent, OrchestratorResult
from skein.protocols import TokenUsage

if TYPE_CHECKING:
    from skein.orchestrator.models import RunOutcome


@dataclass
class ConversationState:
    """Everything one orchestrator run owns.

    Mutated only by the run's own loop. Messages are append-only. The run
    becomes terminal exactly once, via ``finish()`` or ``fail()``, and the
    event stream is closed at that point.
    """

    events: EventStream = field(default_factory=EventStream)
    control: ControlChannel = field(default_factory=ControlChannel)
    messages: list[dict] = field(default_factory=list)
    input_tokens: int = 0
    output_tokens: int = 0
    interactions: int = 0
    abort_requested: bool = False
    pending_input: list[str] = field(default_factory=list)
    result: OrchestratorResult | None = None
    error: BaseException | None = None

    @property
    def terminal(self) -> bool:
        return self.result is not None or self.error is not None

    @property
    def tokens(self) -> TokenUsage:
        return TokenUsage(self.input_tokens, self.output_tokens)

    def append_message(self, message: dict) -> None:
        if self.terminal:
            raise OrchestratorError("Cannot append messages to a finished conversation")
        self.messages.append(message)

    def add_usage(self, usage: TokenUsage) -> None:
        self.input_tokens += usage.input_tokens
        self.output_tokens += usage.output_tokens

    def build_result(self, text: str, outcome: RunOutcome) -> OrchestratorResult:
        return OrchestratorResult(
            result=text,
            tokens=self.tokens,
            interactions=self.interactions,
            outcome=outcome,
        )

    def finish(self, result: OrchestratorResult) -> None:
        if self.terminal:
            raise OrchestratorError("Conversation already finished")
        self.result = result
        self.events.emit(AgentEvent.complete(result))
        self.events.close()

    def fail(self, cause: BaseException) -> None:
        if self.terminal:
            raise OrchestratorError("Conversation already finished")
        self.error = cause
        self.events.emit(AgentEvent.error(cause))
        self.events.close()


class AgentRun:
    """Handle to one running conversation.

    Attributes:
        events: Live outbound event stream.
        control: Inbound control channel (abort, follow-up messages).
        done: Task resolving to the OrchestratorResult, or raising the
            fatal cause.
    """

    def __init__(self, state: ConversationState, done: asyncio.Task) -> None:
        self._state = state
        self.done = done

    @property
    def state(self) -> ConversationState:
        return self._state

    @property
    def events(self) -> EventStream:
        return self._state.events

    @property
    def control(self) -> ControlChannel:
        return self._state.control

    @property
    def input_tokens(self) -> int:
        return self._state.input_tokens

    @property
    def output_tokens(self) -> int:
        return self._state.output_tokens

    @property
    def interactions(self) -> int:
        return self._state.interactions

    @property
    def result(self) -> str | None:
        return self._state.result.result if self._state.result else None

    @property
    def error(self) -> BaseException | None:
        return self._state.error

    def abort(self) -> None:
        self._state.control.abort()

    def __await__(self):
        return self.done.__await__()
