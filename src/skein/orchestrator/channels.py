"""Message-passing channels between a conversation run and its callers.

``EventStream`` is the outbound side: an unbounded queue of AgentEvents
terminated by an end-of-stream marker. ``ControlChannel`` is the inbound
side: callers write abort directives and follow-up messages, and the
orchestrator polls it once per loop iteration.
"""

from __future__ import annotations

import asyncio
import enum
from dataclasses import dataclass
from typing import TYPE_CHECKING

from skein.exceptions import OrchestratorError

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from skein.orchestrator.models import AgentEvent

_END_OF_STREAM = object()


class EventStream:
    """Ordered, unbounded outbound event queue.

    Once closed, every reader sees end-of-stream (``next_event()`` returns
    None and iteration stops), no matter how many readers there are.
    """

    def __init__(self) -> None:
        self._queue: asyncio.Queue = asyncio.Queue()
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def emit(self, event: AgentEvent) -> None:
        if self._closed:
            raise OrchestratorError(f"Cannot emit {event.type.value} event on a closed stream")
        self._queue.put_nowait(event)

    def close(self) -> None:
        """Append the end-of-stream marker. Idempotent."""
        if not self._closed:
            self._closed = True
            self._queue.put_nowait(_END_OF_STREAM)

    async def next_event(self) -> AgentEvent | None:
        """Wait for the next event; None once the stream has ended."""
        item = await self._queue.get()
        if item is _END_OF_STREAM:
            # Leave the marker in place for any other reader.
            self._queue.put_nowait(_END_OF_STREAM)
            return None
        return item

    async def __aiter__(self) -> AsyncIterator[AgentEvent]:
        while True:
            event = await self.next_event()
            if event is None:
                return
            yield event


class ControlKind(str, enum.Enum):
    """Kinds of directives accepted on the control channel."""

    ABORT = "abort"
    MESSAGE = "message"


@dataclass(frozen=True)
class ControlMessage:
    kind: ControlKind
    text: str | None = None


class ControlChannel:
    """Inbound directives for a running conversation.

    Write-only for callers; the orchestrator drains it with ``poll()``.
    """

    def __init__(self) -> None:
        self._queue: asyncio.Queue[ControlMessage] = asyncio.Queue()

    def abort(self) -> None:
        """Ask the run to stop at its next check."""
        self._queue.put_nowait(ControlMessage(ControlKind.ABORT))

    def send(self, text: str) -> None:
        """Queue a follow-up user message for the next user turn."""
        self._queue.put_nowait(ControlMessage(ControlKind.MESSAGE, text=text))

    def poll(self) -> list[ControlMessage]:
        """Drain and return every pending directive without waiting."""
        pending: list[ControlMessage] = []
        while True:
            try:
                pending.append(self._queue.get_nowait())
            except asyncio.QueueEmpty:
                return pending
