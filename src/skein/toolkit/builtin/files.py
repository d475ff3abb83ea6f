"""File tools: read_file and update_file."""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, model_validator

from skein.toolkit.builtin.base import Description, log_description
from skein.toolkit.models import ToolContext, ToolDefinition

DEFAULT_MAX_SIZE = 10 * 1024 * 1024


class ReadFileInput(BaseModel):
    path: str = Field(description="Path to the file to read")
    max_size: int = Field(
        default=DEFAULT_MAX_SIZE,
        gt=0,
        description="Maximum size in bytes to read (default 10 MiB)",
    )
    description: Description


def _handle_read_file(params: ReadFileInput, context: ToolContext) -> dict:
    path = Path(params.path).expanduser()
    size = path.stat().st_size
    if size > params.max_size:
        raise ValueError(
            f"File size ({size} bytes) exceeds max_size ({params.max_size} bytes)"
        )
    content = path.read_text(encoding="utf-8", errors="replace")
    context.logger.debug("Read %d bytes from %s", size, path)
    return {"path": str(path), "content": content, "size": size}


class UpdateFileInput(BaseModel):
    path: str = Field(description="Path to the file to create or modify")
    command: Literal["create", "replace", "append"] = Field(
        description=(
            "'create' writes the file (overwriting it), 'replace' swaps one "
            "unique occurrence of old_str for content, 'append' adds content "
            "to the end"
        )
    )
    content: str = Field(description="Text to write, insert, or append")
    old_str: str | None = Field(
        default=None,
        description="For 'replace': the exact text to replace; must occur exactly once",
    )
    description: Description

    @model_validator(mode="after")
    def _old_str_for_replace(self) -> UpdateFileInput:
        if self.command == "replace" and not self.old_str:
            raise ValueError("old_str is required for the 'replace' command")
        return self


def _handle_update_file(params: UpdateFileInput, context: ToolContext) -> dict:
    path = Path(params.path).expanduser()

    if params.command == "create":
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(params.content, encoding="utf-8")
    elif params.command == "append":
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open("a", encoding="utf-8") as fh:
            fh.write(params.content)
    else:
        original = path.read_text(encoding="utf-8")
        occurrences = original.count(params.old_str)
        if occurrences != 1:
            raise ValueError(
                f"old_str must occur exactly once in {path}, found {occurrences}"
            )
        path.write_text(original.replace(params.old_str, params.content, 1), encoding="utf-8")

    context.logger.debug("%s %s", params.command, path)
    return {"path": str(path), "command": params.command, "success": True}


READ_FILE_TOOL = ToolDefinition(
    name="read_file",
    description="Reads a text file and returns its content",
    input_model=ReadFileInput,
    handler=_handle_read_file,
    log_parameters=log_description,
)

UPDATE_FILE_TOOL = ToolDefinition(
    name="update_file",
    description="Creates a file, replaces a unique snippet in it, or appends to it",
    input_model=UpdateFileInput,
    handler=_handle_update_file,
    log_parameters=log_description,
)
