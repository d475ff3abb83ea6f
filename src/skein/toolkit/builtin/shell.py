"""shell_start / shell_message: adapters over a ShellSessionManager."""

from __future__ import annotations

from typing import TYPE_CHECKING

from pydantic import BaseModel, Field

from skein.shell.manager import DEFAULT_TIMEOUT
from skein.toolkit.builtin.base import Description, log_description
from skein.toolkit.models import ToolContext, ToolDefinition

if TYPE_CHECKING:
    from skein.shell.manager import ShellSessionManager


class ShellStartInput(BaseModel):
    command: str = Field(description="The shell command to execute")
    timeout: float = Field(
        default=DEFAULT_TIMEOUT,
        ge=0,
        description=(
            "Seconds to wait for the command to finish before returning an "
            "instance_id for the still-running process (0 returns at once)"
        ),
    )
    description: Description


class ShellMessageInput(BaseModel):
    instance_id: str = Field(description="The id returned by shell_start")
    stdin: str | None = Field(
        default=None,
        description="Input to send to the process; include a trailing newline if the program needs one",
    )
    signal: str | None = Field(
        default=None, description="Signal to send to the process (e.g. SIGTERM, SIGINT)"
    )
    description: Description


def make_shell_tools(shells: ShellSessionManager) -> list[ToolDefinition]:
    """Build shell_start and shell_message bound to ``shells``."""

    async def _handle_shell_start(params: ShellStartInput, context: ToolContext) -> dict:
        result = await shells.start(params.command, timeout=params.timeout)
        return result.to_dict()

    async def _handle_shell_message(params: ShellMessageInput, context: ToolContext) -> dict:
        snapshot = await shells.message(
            params.instance_id, stdin=params.stdin, signal=params.signal
        )
        return snapshot.to_dict()

    return [
        ToolDefinition(
            name="shell_start",
            description=(
                "Starts a shell command. Returns its output if it finishes "
                "within the timeout, otherwise an instance_id for shell_message"
            ),
            input_model=ShellStartInput,
            handler=_handle_shell_start,
            log_parameters=log_description,
        ),
        ToolDefinition(
            name="shell_message",
            description=(
                "Sends input or a signal to a running shell_start process and "
                "returns output produced since the last check"
            ),
            input_model=ShellMessageInput,
            handler=_handle_shell_message,
            log_parameters=log_description,
        ),
    ]
