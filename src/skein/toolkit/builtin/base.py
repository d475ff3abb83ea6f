"""Shared pieces of the built-in tool input models."""

from __future__ import annotations

from typing import Annotated, Any

from pydantic import Field

from skein.toolkit.models import ToolContext

Description = Annotated[
    str,
    Field(
        max_length=80,
        description="A brief description of the purpose of this call (max 80 chars)",
    ),
]


def log_description(params: Any, context: ToolContext) -> None:
    """Default ``log_parameters`` hook: log the caller-supplied description."""
    description = getattr(params, "description", None)
    if description:
        context.logger.info(description)
