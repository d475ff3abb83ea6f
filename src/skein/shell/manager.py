"""Shell session manager: external processes as addressable sessions.

A session starts a shell command with pipes for stdin/stdout/stderr. Output
is pumped into per-instance buffers by background tasks for the whole life
of the process, so nothing is lost between polls. A start call either
returns the finished process's output (sync mode) or registers the
still-running process under an instance id (async mode) for later
interaction via ``message()``.

Registered instances are never evicted when their process exits; only
``clear()`` removes them, so status polling after completion stays valid.
"""

from __future__ import annotations

import asyncio
import codecs
import logging
import os
import signal as _signal
import threading
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone

from skein.exceptions import InstanceNotFoundError, ShellError
from skein.shell.models import (
    ExecutionMode,
    ShellAsyncResult,
    ShellSnapshot,
    ShellStartResult,
    ShellSyncResult,
)

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 10.0
DEFAULT_INPUT_SETTLE = 0.5
DEFAULT_WRITE_TIMEOUT = 5.0

_READ_CHUNK = 4096
# Bounded wait for pipes to drain once the process has exited; a background
# grandchild may hold them open indefinitely.
_DRAIN_GRACE = 1.0
# Exit is detected from the transport returncode, which is set as soon as the
# child is reaped; Process.wait() may also wait for every pipe to close.
_EXIT_POLL = 0.05


def resolve_signal(name: str) -> _signal.Signals:
    """Map ``"SIGTERM"`` / ``"term"`` style names to a signal.

    Raises:
        ShellError: If the name is not a signal on this platform.
    """
    key = name.strip().upper()
    if not key.startswith("SIG"):
        key = f"SIG{key}"
    try:
        return _signal.Signals[key]
    except KeyError:
        raise ShellError(f"Unknown signal: {name}") from None


@dataclass
class ShellInstance:
    """One started external process and its captured output.

    Mutated only by its own pump/watch tasks and by the manager.
    """

    instance_id: str
    command: str
    process: asyncio.subprocess.Process
    mode: ExecutionMode = ExecutionMode.SYNC
    started_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    completed: bool = False
    signaled: bool = False
    exit_code: int | None = None
    exit_signal: str | None = None
    _stdout: list[str] = field(default_factory=list, repr=False)
    _stderr: list[str] = field(default_factory=list, repr=False)
    _pumps: list[asyncio.Task] = field(default_factory=list, repr=False)
    _watcher: asyncio.Task | None = field(default=None, repr=False)
    _activity: asyncio.Event = field(default_factory=asyncio.Event, repr=False)

    @property
    def pid(self) -> int:
        return self.process.pid

    def begin(self) -> None:
        """Start the output pumps and the exit watcher."""
        self._pumps = [
            asyncio.create_task(self._pump(self.process.stdout, self._stdout)),
            asyncio.create_task(self._pump(self.process.stderr, self._stderr)),
        ]
        self._watcher = asyncio.create_task(self._watch())

    async def wait(self) -> None:
        """Wait until the process has exited and its output is drained."""
        if self._watcher is not None:
            await asyncio.shield(self._watcher)

    def expect_activity(self) -> None:
        """Forget earlier activity so the next wait sees only new output."""
        if not self.completed:
            self._activity.clear()

    async def wait_for_activity(self, timeout: float) -> None:
        """Wait for new output or process exit, at most ``timeout`` seconds."""
        if self.completed:
            return
        try:
            await asyncio.wait_for(self._activity.wait(), timeout)
        except asyncio.TimeoutError:
            pass

    def drain(self) -> tuple[str, str]:
        """Return and clear the output accumulated since the last drain."""
        stdout = "".join(self._stdout)
        stderr = "".join(self._stderr)
        self._stdout.clear()
        self._stderr.clear()
        self._activity.clear()
        return stdout, stderr

    def send_signal(self, sig: _signal.Signals) -> None:
        """Deliver ``sig`` to the process group; no-op once completed."""
        self.signaled = True
        if self.completed:
            return
        try:
            os.killpg(self.process.pid, sig)
        except (ProcessLookupError, PermissionError):
            try:
                self.process.send_signal(sig)
            except ProcessLookupError:
                logger.debug("Process %s already gone", self.instance_id)

    async def write(self, data: str, timeout: float = DEFAULT_WRITE_TIMEOUT) -> None:
        """Write ``data`` to stdin, waiting at most ``timeout`` for the pipe.

        Raises:
            ShellError: If the process has exited, the pipe is broken, or
                the process did not read the input in time.
        """
        stdin = self.process.stdin
        if stdin is None or self.completed:
            raise ShellError("Process has exited; input was not delivered")
        stdin.write(data.encode("utf-8"))
        try:
            await asyncio.wait_for(stdin.drain(), timeout)
        except asyncio.TimeoutError:
            raise ShellError(
                f"Input partially delivered: process did not read stdin within {timeout}s"
            ) from None
        except (BrokenPipeError, ConnectionResetError) as exc:
            raise ShellError(f"Input was not delivered: {exc}") from exc

    def snapshot(self, error: str | None = None) -> ShellSnapshot:
        stdout, stderr = self.drain()
        return ShellSnapshot(
            stdout=stdout,
            stderr=stderr,
            completed=self.completed,
            signaled=self.signaled,
            exit_code=self.exit_code,
            exit_signal=self.exit_signal,
            error=error,
        )

    async def _pump(self, stream: asyncio.StreamReader | None, buffer: list[str]) -> None:
        if stream is None:
            return
        decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        while True:
            chunk = await stream.read(_READ_CHUNK)
            if not chunk:
                break
            text = decoder.decode(chunk)
            if text:
                buffer.append(text)
                self._activity.set()
        tail = decoder.decode(b"", final=True)
        if tail:
            buffer.append(tail)
            self._activity.set()

    async def _wait_for_exit(self) -> int:
        while self.process.returncode is None:
            await asyncio.sleep(_EXIT_POLL)
        return self.process.returncode

    async def _watch(self) -> None:
        returncode = await self._wait_for_exit()
        _done, pending = await asyncio.wait(self._pumps, timeout=_DRAIN_GRACE)
        for task in pending:
            task.cancel()
        self.exit_code = returncode
        if returncode is not None and returncode < 0:
            try:
                self.exit_signal = _signal.Signals(-returncode).name
            except ValueError:
                self.exit_signal = str(-returncode)
        self.completed = True
        self._activity.set()
        logger.debug(
            "Shell %s exited with %s", self.instance_id, returncode
        )


class ShellSessionManager:
    """Owns the registry of shell instances.

    Usage::

        shells = ShellSessionManager()
        started = await shells.start("cat", timeout=0)
        snap = await shells.message(started.instance_id, stdin="hi")
        print(snap.stdout)
        await shells.clear()
    """

    def __init__(
        self,
        *,
        cwd: str | None = None,
        env: dict[str, str] | None = None,
        input_settle: float = DEFAULT_INPUT_SETTLE,
        write_timeout: float = DEFAULT_WRITE_TIMEOUT,
    ) -> None:
        """Initialize the manager.

        Args:
            cwd: Working directory for started processes (default: inherit).
            env: Extra environment variables layered over ``os.environ``.
            input_settle: Seconds ``message()`` waits for a reaction after
                writing input.
            write_timeout: Seconds ``message()`` waits for a process to
                accept input before reporting it as partially delivered.
        """
        self._cwd = cwd
        self._env = env
        self._input_settle = input_settle
        self._write_timeout = write_timeout
        self._instances: dict[str, ShellInstance] = {}
        self._lock = threading.Lock()

    # ------------------------------------------------------------------
    # Registry
    # ------------------------------------------------------------------

    def get(self, instance_id: str) -> ShellInstance:
        """Look up a registered instance.

        Raises:
            InstanceNotFoundError: If the id is not registered.
        """
        with self._lock:
            instance = self._instances.get(instance_id)
        if instance is None:
            raise InstanceNotFoundError("Shell instance", instance_id)
        return instance

    def list_instances(self) -> list[ShellInstance]:
        with self._lock:
            return list(self._instances.values())

    def __contains__(self, instance_id: object) -> bool:
        with self._lock:
            return instance_id in self._instances

    def __len__(self) -> int:
        with self._lock:
            return len(self._instances)

    def _register(self, instance: ShellInstance) -> None:
        with self._lock:
            self._instances[instance.instance_id] = instance

    async def clear(self) -> None:
        """Kill any still-running processes and empty the registry."""
        with self._lock:
            instances = list(self._instances.values())
            self._instances.clear()
        for instance in instances:
            if not instance.completed:
                instance.send_signal(_signal.SIGKILL)
        if instances:
            await asyncio.gather(
                *(instance.wait() for instance in instances),
                return_exceptions=True,
            )

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    async def start(
        self, command: str, timeout: float = DEFAULT_TIMEOUT
    ) -> ShellStartResult:
        """Start ``command`` through the shell.

        Args:
            command: Shell command line.
            timeout: Seconds to wait for the process to exit before
                switching to async mode. ``0`` forces async mode.

        Returns:
            ShellSyncResult if the process exited in time or could not be
            spawned, otherwise ShellAsyncResult with the new instance id.
        """
        env = {**os.environ, **self._env} if self._env else None
        try:
            process = await asyncio.create_subprocess_shell(
                command,
                stdin=asyncio.subprocess.PIPE,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                cwd=self._cwd,
                env=env,
                start_new_session=True,
            )
        except (OSError, ValueError) as exc:
            logger.warning("Failed to start %r: %s", command, exc)
            return ShellSyncResult(error=f"{type(exc).__name__}: {exc}")

        instance = ShellInstance(
            instance_id=str(uuid.uuid4()),
            command=command,
            process=process,
        )
        instance.begin()
        logger.debug("Started %r (pid=%s)", command, process.pid)

        if timeout > 0:
            try:
                await asyncio.wait_for(instance.wait(), timeout)
            except asyncio.TimeoutError:
                pass

        if instance.completed:
            stdout, stderr = instance.drain()
            return ShellSyncResult(
                stdout=stdout, stderr=stderr, exit_code=instance.exit_code
            )

        instance.mode = ExecutionMode.ASYNC
        self._register(instance)
        logger.info("Shell %s running in async mode: %s", instance.instance_id, command)
        stdout, stderr = instance.drain()
        return ShellAsyncResult(
            instance_id=instance.instance_id, stdout=stdout, stderr=stderr
        )

    async def message(
        self,
        instance_id: str,
        stdin: str | None = None,
        signal: str | None = None,
    ) -> ShellSnapshot:
        """Send input and/or a signal to a session, then read its state.

        With neither ``stdin`` nor ``signal`` this is a plain poll.

        Raises:
            InstanceNotFoundError: If the id is not registered.
            ShellError: If ``signal`` is not a known signal name.
        """
        instance = self.get(instance_id)
        error: str | None = None

        if signal:
            sig = resolve_signal(signal)
            instance.send_signal(sig)
            logger.debug("Sent %s to shell %s", sig.name, instance_id)

        if stdin:
            instance.expect_activity()
            try:
                await instance.write(stdin, timeout=self._write_timeout)
            except ShellError as exc:
                error = str(exc)
            else:
                await instance.wait_for_activity(self._input_settle)

        return instance.snapshot(error=error)
