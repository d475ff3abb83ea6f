"""Shell session management: long-running external processes."""

from skein.shell.manager import (
    DEFAULT_TIMEOUT,
    ShellInstance,
    ShellSessionManager,
    resolve_signal,
)
from skein.shell.models import (
    ExecutionMode,
    ShellAsyncResult,
    ShellSnapshot,
    ShellStartResult,
    ShellSyncResult,
)

__all__ = [
    "DEFAULT_TIMEOUT",
    "ExecutionMode",
    "ShellAsyncResult",
    "ShellInstance",
    "ShellSessionManager",
    "ShellSnapshot",
    "ShellStartResult",
    "ShellSyncResult",
    "resolve_signal",
]
