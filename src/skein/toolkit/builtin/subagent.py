"""sub_agent_start / sub_agent_message: adapters over a SubAgentSupervisor."""

from __future__ import annotations

from typing import TYPE_CHECKING

from pydantic import BaseModel, Field, model_validator

from skein.toolkit.builtin.base import Description, log_description
from skein.toolkit.models import ToolContext, ToolDefinition

if TYPE_CHECKING:
    from skein.subagents.supervisor import SubAgentSupervisor

DEFAULT_RESPONSE_WAIT = 30.0


class SubAgentStartInput(BaseModel):
    prompt: str = Field(description="The prompt/task for the sub-agent")
    description: Description


class SubAgentMessageInput(BaseModel):
    instance_id: str = Field(description="The instance ID of the sub-agent to interact with")
    message: str | None = Field(
        default=None,
        description="The message to send to the sub-agent (required unless aborting)",
    )
    abort: bool = Field(
        default=False,
        description="Whether to abort the sub-agent instead of sending a message",
    )
    description: Description

    @model_validator(mode="after")
    def _message_unless_abort(self) -> SubAgentMessageInput:
        if not self.abort and not self.message:
            raise ValueError("message is required unless abort is true")
        return self


def make_subagent_tools(
    supervisor: SubAgentSupervisor,
    response_wait: float = DEFAULT_RESPONSE_WAIT,
) -> list[ToolDefinition]:
    """Build sub_agent_start and sub_agent_message bound to ``supervisor``."""

    async def _handle_start(params: SubAgentStartInput, context: ToolContext) -> dict:
        started = await supervisor.spawn(params.prompt, params.description)
        context.logger.debug("Sub-agent %s started", started.instance_id)
        return started.to_dict()

    async def _handle_message(params: SubAgentMessageInput, context: ToolContext) -> dict:
        if params.abort:
            return supervisor.abort(params.instance_id).to_dict()
        status = await supervisor.message(
            params.instance_id, params.message, wait=response_wait
        )
        return status.to_dict()

    return [
        ToolDefinition(
            name="sub_agent_start",
            description=(
                "Creates a sub-agent that has access to all tools to solve a "
                "specific task; returns its instance_id and first response"
            ),
            input_model=SubAgentStartInput,
            handler=_handle_start,
            log_parameters=log_description,
        ),
        ToolDefinition(
            name="sub_agent_message",
            description="Sends a message to or aborts an existing sub-agent",
            input_model=SubAgentMessageInput,
            handler=_handle_message,
            log_parameters=log_description,
        ),
    ]
