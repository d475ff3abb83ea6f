"""Sub-agent instance and result types."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from skein.orchestrator.models import OrchestratorResult
    from skein.orchestrator.state import AgentRun


@dataclass
class SubAgentInstance:
    """One nested conversation owned by a SubAgentSupervisor.

    ``aborted`` is a one-way latch: once set it is never cleared.
    """

    instance_id: str
    prompt: str
    run: AgentRun
    description: str = ""
    messages: list[dict] = field(default_factory=list)
    aborted: bool = False
    final_result: OrchestratorResult | None = None
    error: BaseException | None = None
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    unread: list[str] = field(default_factory=list, repr=False)
    activity: asyncio.Event = field(default_factory=asyncio.Event, repr=False)
    relay: asyncio.Task | None = field(default=None, repr=False)

    @property
    def completed(self) -> bool:
        return self.run.done.done()

    def take_unread(self) -> list[str]:
        texts = list(self.unread)
        self.unread.clear()
        self.activity.clear()
        return texts


@dataclass(frozen=True)
class SubAgentStartResult:
    instance_id: str
    response: str

    def to_dict(self) -> dict:
        return {"instance_id": self.instance_id, "response": self.response}


@dataclass(frozen=True)
class SubAgentStatus:
    """What a parent sees of a sub-agent after an exchange.

    Attributes:
        instance_id: The sub-agent's id.
        messages: Assistant messages relayed since the previous exchange.
        completed: Whether the nested run has finished.
        aborted: Whether the sub-agent has been aborted.
        result: The nested run's final answer, once completed.
        error: The nested run's fatal error message, if it failed.
    """

    instance_id: str
    messages: list[str] = field(default_factory=list)
    completed: bool = False
    aborted: bool = False
    result: str | None = None
    error: str | None = None

    def to_dict(self) -> dict:
        return {
            "instance_id": self.instance_id,
            "messages": list(self.messages),
            "completed": self.completed,
            "aborted": self.aborted,
            "result": self.result,
            "error": self.error,
        }
