"""user_prompt: ask the person at the terminal a question."""

from __future__ import annotations

import asyncio
from typing import Callable

from pydantic import BaseModel, Field

from skein.toolkit.models import ToolContext, ToolDefinition


class UserPromptInput(BaseModel):
    prompt: str = Field(description="The question to ask the user")


def _ask_terminal(prompt: str) -> str:
    from rich.prompt import Prompt

    return Prompt.ask(prompt)


def make_user_prompt_tool(ask: Callable[[str], str] | None = None) -> ToolDefinition:
    """Build the user_prompt tool.

    Args:
        ask: Blocking ``prompt -> answer`` function, run in a worker thread.
            Defaults to a rich terminal prompt.
    """
    ask_fn = ask or _ask_terminal

    async def _handle_user_prompt(params: UserPromptInput, context: ToolContext) -> str:
        answer = await asyncio.to_thread(ask_fn, params.prompt)
        context.logger.debug("User answered %d characters", len(answer))
        return answer

    return ToolDefinition(
        name="user_prompt",
        description="Prompts the user for input and returns their response",
        input_model=UserPromptInput,
        handler=_handle_user_prompt,
    )
