"""Core conversation loop.

Provides the Orchestrator class that runs a tool-calling loop: send the
history and tool schemas to the model, dispatch the requested tool calls
concurrently, append the results, and repeat until the completion tool
is called, the model returns no content, the run is aborted, or
max_iterations is reached.

Model requests of one run are strictly sequential. A provider failure is
fatal to the run; a tool failure is reported to the model as text.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from typing import TYPE_CHECKING

from skein.orchestrator.channels import ControlKind
from skein.orchestrator.config import OrchestratorConfig
from skein.orchestrator.models import (
    ABORTED_RESULT,
    EMPTY_RESPONSE_RESULT,
    MAX_ITERATIONS_RESULT,
    AgentEvent,
    OrchestratorResult,
    RunOutcome,
)
from skein.orchestrator.state import AgentRun, ConversationState
from skein.toolkit.executor import ToolExecutor

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable

    from skein.llm.protocols import LLMClient
    from skein.toolkit.models import ToolDefinition

logger = logging.getLogger(__name__)

TOOL_CHOICE_AUTO = {"type": "auto"}


def _text_message(role: str, texts: list[str]) -> dict:
    return {"role": role, "content": [{"type": "text", "text": t} for t in texts]}


class Orchestrator:
    """Runs conversations between a model and a set of tools.

    One Orchestrator may start any number of independent runs; each run
    gets its own ConversationState.

    Usage::

        orch = Orchestrator(get_tools(shells=shells), client=client)
        run = orch.start("List the files in this directory")
        async for event in run.events:
            print(event.type.value, event.content)
        result = await run.done
    """

    def __init__(
        self,
        tools: Iterable[ToolDefinition] | ToolExecutor,
        *,
        client: LLMClient | None = None,
        client_factory: Callable[[], LLMClient] | None = None,
        config: OrchestratorConfig | None = None,
    ) -> None:
        """Initialize the orchestrator.

        Args:
            tools: Tool definitions (or a prepared ToolExecutor).
            client: Shared LLM client. Not closed by the orchestrator.
            client_factory: Builds a per-run client when ``client`` is None.
                Defaults to AnthropicClient(), which fails with
                LLMConfigError when no API key is configured.
            config: Run configuration.
        """
        self._config = config or OrchestratorConfig()
        if isinstance(tools, ToolExecutor):
            self._executor = tools
        else:
            self._executor = ToolExecutor(
                tools, completion_tool=self._config.completion_tool
            )
        self._client = client
        self._client_factory = client_factory

    @property
    def config(self) -> OrchestratorConfig:
        return self._config

    @property
    def executor(self) -> ToolExecutor:
        return self._executor

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def start(self, prompt: str) -> AgentRun:
        """Start a run in the background and return its handle.

        Must be called from a running event loop. The initial ``user``
        event is on the stream before this returns.
        """
        state = ConversationState()
        state.events.emit(AgentEvent.user(prompt))
        task = asyncio.get_running_loop().create_task(self._drive(state, prompt))
        return AgentRun(state, task)

    async def run(self, prompt: str) -> OrchestratorResult:
        """Start a run and wait for its result."""
        return await self.start(prompt).done

    # ------------------------------------------------------------------
    # Internal methods
    # ------------------------------------------------------------------

    async def _drive(self, state: ConversationState, prompt: str) -> OrchestratorResult:
        try:
            if self._client is not None:
                result = await self._loop(state, prompt, self._client)
            else:
                client = self._make_client()
                try:
                    result = await self._loop(state, prompt, client)
                finally:
                    await client.aclose()
        except asyncio.CancelledError:
            if not state.terminal:
                state.fail(asyncio.CancelledError("Conversation task was cancelled"))
            raise
        except Exception as exc:
            logger.error("Conversation failed: %s", exc)
            state.fail(exc)
            raise
        state.finish(result)
        return result

    def _make_client(self) -> LLMClient:
        if self._client_factory is not None:
            return self._client_factory()
        from skein.llm.client import AnthropicClient

        return AnthropicClient(
            default_model=self._config.model,
            default_max_tokens=self._config.max_tokens,
        )

    async def _resolve_system_prompt(self) -> str:
        source = self._config.system_prompt
        if source is None:
            from skein.prompts.system import build_agent_system_prompt

            return await asyncio.to_thread(build_agent_system_prompt)
        if callable(source):
            value = source()
            if inspect.isawaitable(value):
                value = await value
            return value
        return source

    async def _loop(
        self, state: ConversationState, prompt: str, client: LLMClient
    ) -> OrchestratorResult:
        config = self._config
        system_prompt = await self._resolve_system_prompt()
        tool_schemas = self._executor.schemas()
        extra = dict(config.extra_llm_kwargs or {})

        logger.debug("User message: %s", prompt)
        state.append_message(_text_message("user", [prompt]))

        for iteration in range(config.max_iterations):
            if self._poll_control(state):
                return state.build_result(ABORTED_RESULT, RunOutcome.CANCELLED)
            if state.pending_input and state.messages[-1]["role"] == "assistant":
                state.append_message(_text_message("user", self._take_pending(state)))

            logger.debug(
                "Requesting completion %d with %d messages",
                iteration + 1,
                len(state.messages),
            )
            state.interactions += 1
            response = await client.complete(
                list(state.messages),
                system=system_prompt,
                tools=tool_schemas,
                tool_choice=TOOL_CHOICE_AUTO,
                model=config.model,
                max_tokens=config.max_tokens,
                temperature=config.temperature,
                **extra,
            )
            state.add_usage(response.usage)

            if self._poll_control(state):
                logger.info("Abort received during model request; discarding response")
                return state.build_result(ABORTED_RESULT, RunOutcome.CANCELLED)

            if not response.content:
                return state.build_result(EMPTY_RESPONSE_RESULT, RunOutcome.COMPLETED)

            state.append_message({
                "role": "assistant",
                "content": [block.to_dict() for block in response.content],
            })
            text = response.text
            if text:
                logger.info(text)
                state.events.emit(AgentEvent.assistant(text))

            tool_calls = response.tool_calls
            if not tool_calls:
                continue

            results = await self._executor.execute_batch(tool_calls)
            self._poll_control(state)
            blocks = [r.to_anthropic() for r in results]
            blocks.extend(
                {"type": "text", "text": t} for t in self._take_pending(state)
            )
            state.append_message({"role": "user", "content": blocks})

            completion = next((r for r in results if r.is_complete), None)
            if completion is not None:
                logger.debug("Sequence completed: %s", completion.content)
                return state.build_result(completion.content, RunOutcome.COMPLETED)

        logger.warning("Maximum iterations reached")
        return state.build_result(MAX_ITERATIONS_RESULT, RunOutcome.MAX_ITERATIONS)

    def _poll_control(self, state: ConversationState) -> bool:
        """Apply pending control directives; return True once aborted."""
        for directive in state.control.poll():
            if directive.kind == ControlKind.ABORT:
                state.abort_requested = True
            elif directive.kind == ControlKind.MESSAGE and directive.text:
                state.pending_input.append(directive.text)
        return state.abort_requested

    def _take_pending(self, state: ConversationState) -> list[str]:
        texts = list(state.pending_input)
        state.pending_input.clear()
        for text in texts:
            state.events.emit(AgentEvent.user(text))
        return texts
