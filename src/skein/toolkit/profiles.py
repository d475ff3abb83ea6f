"""Built-in tool profiles.

Two profiles:
- ``MAIN_PROFILE``: every tool, for a top-level agent with a user at hand.
- ``SUBAGENT_PROFILE``: every tool except the interactive ``user_prompt``;
  sub-agents ask their parent instead, and hand their result back to it
  through ``sequence_complete``.
"""

from __future__ import annotations

import logging

from skein.toolkit.models import ToolConfig, ToolProfile

logger = logging.getLogger(__name__)

INTERACTIVE_TOOLS = ("user_prompt",)

SUBAGENT_COMPLETE_DESCRIPTION = (
    "Completes your assigned task and returns the final result to the parent "
    "agent that started you. Call this exactly once, when the task is done. "
    "The result is all the parent sees, so include everything it needs."
)

MAIN_PROFILE = ToolProfile(name="main")

SUBAGENT_PROFILE = ToolProfile(
    name="subagent",
    tool_configs={
        **{name: ToolConfig(enabled=False) for name in INTERACTIVE_TOOLS},
        "sequence_complete": ToolConfig(description=SUBAGENT_COMPLETE_DESCRIPTION),
    },
)

_PROFILES: dict[str, ToolProfile] = {
    "main": MAIN_PROFILE,
    "subagent": SUBAGENT_PROFILE,
}


def get_profile(name: str) -> ToolProfile:
    """Look up a built-in profile by name.

    Raises:
        ValueError: If name is not a recognized profile.
    """
    profile = _PROFILES.get(name)
    if profile is None:
        raise ValueError(
            f"Unknown profile '{name}'. Available: {list(_PROFILES.keys())}"
        )
    return profile
