"""Assembly of the built-in tool registry.

Handlers that need a shell manager or a sub-agent supervisor are bound to
the instances passed in; nothing is stored at module level.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Callable

from skein.toolkit.builtin.completion import SEQUENCE_COMPLETE_TOOL
from skein.toolkit.builtin.fetch import make_fetch_tool
from skein.toolkit.builtin.files import READ_FILE_TOOL, UPDATE_FILE_TOOL
from skein.toolkit.builtin.prompt import make_user_prompt_tool
from skein.toolkit.builtin.shell import make_shell_tools
from skein.toolkit.builtin.subagent import make_subagent_tools
from skein.toolkit.profiles import get_profile

if TYPE_CHECKING:
    import httpx

    from skein.shell.manager import ShellSessionManager
    from skein.subagents.supervisor import SubAgentSupervisor
    from skein.toolkit.models import ToolDefinition, ToolProfile

logger = logging.getLogger(__name__)


def get_all_tools(
    *,
    shells: ShellSessionManager | None = None,
    supervisor: SubAgentSupervisor | None = None,
    ask: Callable[[str], str] | None = None,
    fetch_transport: httpx.AsyncBaseTransport | None = None,
) -> list[ToolDefinition]:
    """Build every built-in tool definition.

    Shell tools are included only with ``shells``; sub-agent tools only
    with ``supervisor``.

    Args:
        shells: Shell manager for shell_start / shell_message.
        supervisor: Supervisor for sub_agent_start / sub_agent_message.
        ask: Answer source for user_prompt (default: terminal prompt).
        fetch_transport: httpx transport for fetch (tests).
    """
    tools: list[ToolDefinition] = []
    if supervisor is not None:
        tools.extend(make_subagent_tools(supervisor))
    tools.extend([
        READ_FILE_TOOL,
        UPDATE_FILE_TOOL,
        make_user_prompt_tool(ask),
        SEQUENCE_COMPLETE_TOOL,
        make_fetch_tool(fetch_transport),
    ])
    if shells is not None:
        tools.extend(make_shell_tools(shells))
    return tools


def get_tools(profile: str | ToolProfile = "main", **kwargs) -> list[ToolDefinition]:
    """Build the built-in tools filtered through a profile.

    Args:
        profile: Profile name ("main", "subagent") or a ToolProfile.
        **kwargs: Forwarded to get_all_tools().
    """
    if isinstance(profile, str):
        profile = get_profile(profile)
    return profile.filter_tools(get_all_tools(**kwargs))
