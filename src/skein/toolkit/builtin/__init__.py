"""Built-in tool adapters."""

from skein.toolkit.builtin.completion import SEQUENCE_COMPLETE_TOOL
from skein.toolkit.builtin.fetch import make_fetch_tool
from skein.toolkit.builtin.files import READ_FILE_TOOL, UPDATE_FILE_TOOL
from skein.toolkit.builtin.prompt import make_user_prompt_tool
from skein.toolkit.builtin.shell import make_shell_tools
from skein.toolkit.builtin.subagent import make_subagent_tools

__all__ = [
    "SEQUENCE_COMPLETE_TOOL",
    "READ_FILE_TOOL",
    "UPDATE_FILE_TOOL",
    "make_fetch_tool",
    "make_user_prompt_tool",
    "make_shell_tools",
    "make_subagent_tools",
]
