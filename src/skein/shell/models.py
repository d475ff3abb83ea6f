"""Result types returned by the shell session manager."""

from __future__ import annotations

import enum
from dataclasses import asdict, dataclass
from typing import Union


class ExecutionMode(str, enum.Enum):
    """How a shell session's start call returned.

    - ``SYNC``: the process exited within the timeout; output is complete.
    - ``ASYNC``: the process is still running and is addressable by id.
    """

    SYNC = "sync"
    ASYNC = "async"


@dataclass(frozen=True)
class ShellSyncResult:
    """A process that finished (or failed to spawn) within the start timeout."""

    stdout: str = ""
    stderr: str = ""
    exit_code: int | None = None
    error: str | None = None

    @property
    def mode(self) -> ExecutionMode:
        return ExecutionMode.SYNC

    def to_dict(self) -> dict:
        return {"mode": self.mode.value, **asdict(self)}


@dataclass(frozen=True)
class ShellAsyncResult:
    """A still-running process registered under ``instance_id``."""

    instance_id: str
    stdout: str = ""
    stderr: str = ""

    @property
    def mode(self) -> ExecutionMode:
        return ExecutionMode.ASYNC

    def to_dict(self) -> dict:
        return {"mode": self.mode.value, **asdict(self)}


ShellStartResult = Union[ShellSyncResult, ShellAsyncResult]


@dataclass(frozen=True)
class ShellSnapshot:
    """State of a session as seen by one interaction.

    Attributes:
        stdout: Output accumulated since the previous read.
        stderr: Error output accumulated since the previous read.
        completed: Whether the process has exited.
        signaled: Whether a signal was ever delivered to the process.
        exit_code: Exit status once completed (negative for a signal exit).
        exit_signal: Name of the terminating signal, if any.
        error: Problem delivering input, if any.
    """

    stdout: str = ""
    stderr: str = ""
    completed: bool = False
    signaled: bool = False
    exit_code: int | None = None
    exit_signal: str | None = None
    error: str | None = None

    def to_dict(self) -> dict:
        return asdict(self)
