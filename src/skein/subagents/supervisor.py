"""Sub-agent supervisor: nested conversations a parent can delegate to.

A spawn starts a nested Orchestrator run with the sub-agent tool profile,
waits for its first assistant message, and keeps relaying the rest of the
run's event stream in the background. Parents address sub-agents by
instance id to send follow-up messages or abort them.
"""

from __future__ import annotations

import asyncio
import logging
import threading
import uuid
from typing import TYPE_CHECKING

from skein.exceptions import InstanceNotFoundError, SubAgentAbortedError, SubAgentError
from skein.orchestrator.config import OrchestratorConfig
from skein.orchestrator.loop import Orchestrator
from skein.orchestrator.models import EventType
from skein.prompts.system import SUBAGENT_SYSTEM_PROMPT
from skein.subagents.models import SubAgentInstance, SubAgentStartResult, SubAgentStatus

if TYPE_CHECKING:
    from collections.abc import Callable

    from skein.llm.protocols import LLMClient
    from skein.shell.manager import ShellSessionManager
    from skein.toolkit.models import ToolDefinition

logger = logging.getLogger(__name__)


def default_subagent_config() -> OrchestratorConfig:
    return OrchestratorConfig(system_prompt=SUBAGENT_SYSTEM_PROMPT)


class SubAgentSupervisor:
    """Owns the registry of sub-agent instances.

    Usage::

        supervisor = SubAgentSupervisor(shells=shells, client=client)
        started = await supervisor.spawn("Summarize README.md", "summarize readme")
        status = await supervisor.message(started.instance_id, "Shorter please", wait=30)
        supervisor.abort(started.instance_id)
    """

    def __init__(
        self,
        *,
        shells: ShellSessionManager | None = None,
        client: LLMClient | None = None,
        client_factory: Callable[[], LLMClient] | None = None,
        config: OrchestratorConfig | None = None,
        tools: list[ToolDefinition] | None = None,
    ) -> None:
        """Initialize the supervisor.

        Args:
            shells: Shell manager shared with sub-agents' shell tools.
            client: LLM client shared by every nested run.
            client_factory: Per-run client factory when ``client`` is None.
            config: Config for nested runs (default: sub-agent system prompt).
            tools: Tools for nested runs. Defaults to the ``subagent``
                profile bound to ``shells`` and this supervisor.
        """
        self._shells = shells
        self._client = client
        self._client_factory = client_factory
        self._config = config or default_subagent_config()
        self._tools = tools
        self._instances: dict[str, SubAgentInstance] = {}
        self._lock = threading.Lock()

    @property
    def tools(self) -> list[ToolDefinition]:
        if self._tools is None:
            from skein.shell.manager import ShellSessionManager
            from skein.toolkit.definitions import get_tools

            if self._shells is None:
                self._shells = ShellSessionManager()
            self._tools = get_tools("subagent", shells=self._shells, supervisor=self)
        return self._tools

    # ------------------------------------------------------------------
    # Registry
    # ------------------------------------------------------------------

    def get(self, instance_id: str) -> SubAgentInstance:
        """Look up a sub-agent.

        Raises:
            InstanceNotFoundError: If the id is not registered.
        """
        with self._lock:
            instance = self._instances.get(instance_id)
        if instance is None:
            raise InstanceNotFoundError("Sub-agent", instance_id)
        return instance

    def list_instances(self) -> list[SubAgentInstance]:
        with self._lock:
            return list(self._instances.values())

    def __contains__(self, instance_id: object) -> bool:
        with self._lock:
            return instance_id in self._instances

    def __len__(self) -> int:
        with self._lock:
            return len(self._instances)

    def clear(self) -> None:
        """Abort every sub-agent and empty the registry."""
        for instance in self.list_instances():
            self._abort(instance)
        with self._lock:
            self._instances.clear()

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    async def spawn(self, prompt: str, description: str = "") -> SubAgentStartResult:
        """Start a nested run and return its first assistant message.

        A failed spawn leaves nothing registered.

        Raises:
            SubAgentError: If the nested stream ends without an assistant
                message.
            Exception: The nested run's fatal error (e.g. LLMConfigError).
        """
        orchestrator = Orchestrator(
            self.tools,
            client=self._client,
            client_factory=self._client_factory,
            config=self._config,
        )
        instance_id = str(uuid.uuid4())
        logger.debug("Creating new sub-agent with instance ID: %s", instance_id)
        run = orchestrator.start(prompt)
        instance = SubAgentInstance(
            instance_id=instance_id,
            prompt=prompt,
            run=run,
            description=description,
            messages=[{"role": "user", "content": prompt}],
        )
        with self._lock:
            self._instances[instance_id] = instance

        try:
            response = await self._first_assistant_message(instance)
        except BaseException:
            # No id reaches the caller, so nothing may stay registered.
            with self._lock:
                self._instances.pop(instance_id, None)
            if not instance.completed:
                instance.run.control.abort()
            raise
        instance.messages.append({"role": "assistant", "content": response})
        instance.relay = asyncio.create_task(self._relay(instance))
        return SubAgentStartResult(instance_id=instance_id, response=response)

    async def message(
        self, instance_id: str, text: str, wait: float = 0.0
    ) -> SubAgentStatus:
        """Forward a follow-up message into a sub-agent's run.

        Args:
            instance_id: The sub-agent to message.
            text: The message.
            wait: Seconds to wait for a new assistant message or completion.

        Raises:
            InstanceNotFoundError: If the id is not registered.
            SubAgentAbortedError: If the sub-agent has been aborted.
        """
        instance = self.get(instance_id)
        if instance.aborted:
            raise SubAgentAbortedError(instance_id)

        logger.debug("Sending message to sub-agent %s", instance_id)
        instance.run.control.send(text)
        instance.messages.append({"role": "user", "content": text})

        if wait > 0 and not instance.completed and not instance.unread:
            try:
                await asyncio.wait_for(instance.activity.wait(), wait)
            except asyncio.TimeoutError:
                pass
        return self._status(instance, consume=True)

    def abort(self, instance_id: str) -> SubAgentStatus:
        """Abort a sub-agent. Aborting twice is a no-op.

        Raises:
            InstanceNotFoundError: If the id is not registered.
        """
        instance = self.get(instance_id)
        self._abort(instance)
        return self._status(instance, consume=False)

    def status(self, instance_id: str) -> SubAgentStatus:
        """Report a sub-agent's state and any unread assistant messages."""
        return self._status(self.get(instance_id), consume=True)

    # ------------------------------------------------------------------
    # Internal methods
    # ------------------------------------------------------------------

    def _abort(self, instance: SubAgentInstance) -> None:
        if instance.aborted:
            return
        logger.info("Aborting sub-agent %s", instance.instance_id)
        instance.aborted = True
        instance.run.control.abort()

    def _status(self, instance: SubAgentInstance, *, consume: bool) -> SubAgentStatus:
        messages = instance.take_unread() if consume else []
        result = instance.final_result.result if instance.final_result else None
        error = str(instance.error) if instance.error is not None else None
        return SubAgentStatus(
            instance_id=instance.instance_id,
            messages=messages,
            completed=instance.completed,
            aborted=instance.aborted,
            result=result,
            error=error,
        )

    async def _first_assistant_message(self, instance: SubAgentInstance) -> str:
        events = instance.run.events
        while True:
            event = await events.next_event()
            if event is None:
                break
            if event.type == EventType.ASSISTANT:
                return event.content
            if event.type == EventType.COMPLETE:
                instance.final_result = event.content
            elif event.type == EventType.ERROR:
                instance.error = event.content
                self._retrieve_outcome(instance)
                raise event.content
        raise SubAgentError(
            f"Sub-agent {instance.instance_id}: stream ended without an assistant message"
        )

    async def _relay(self, instance: SubAgentInstance) -> None:
        async for event in instance.run.events:
            if event.type == EventType.ASSISTANT:
                instance.messages.append({"role": "assistant", "content": event.content})
                instance.unread.append(event.content)
            elif event.type == EventType.COMPLETE:
                instance.final_result = event.content
            elif event.type == EventType.ERROR:
                instance.error = event.content
            else:
                continue
            instance.activity.set()
        self._retrieve_outcome(instance)
        instance.activity.set()

    @staticmethod
    def _retrieve_outcome(instance: SubAgentInstance) -> None:
        # The failure was already reported as an event.
        done = instance.run.done
        if done.done() and not done.cancelled():
            done.exception()
