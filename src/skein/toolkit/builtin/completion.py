"""sequence_complete: the tool whose successful call ends a conversation."""

from __future__ import annotations

from pydantic import BaseModel, Field

from skein.toolkit.models import ToolContext, ToolDefinition


class SequenceCompleteInput(BaseModel):
    result: str = Field(description="The final result to return from the tool agent")


def _handle_sequence_complete(params: SequenceCompleteInput, context: ToolContext) -> str:
    context.logger.info("Completed: %s", params.result)
    return params.result


SEQUENCE_COMPLETE_TOOL = ToolDefinition(
    name="sequence_complete",
    description=(
        "Completes the tool use sequence and returns the final result. Call "
        "this exactly once, when the task is done."
    ),
    input_model=SequenceCompleteInput,
    handler=_handle_sequence_complete,
)
