"""Process supervision: one child at a time, graceful stop, crash backoff.

Stop protocol (before every replacement and on shutdown):
- Interrupt the process immediately (SIGINT, terminate() on Windows)
- Wait for it to exit
- After stop_grace_sec print a "close process" notice, nothing more
- After stop_kill_sec kill it

"Process already finished" from the OS is never an error: the child can
exit between the liveness check and the signal.
"""

from __future__ import annotations

import asyncio
import signal
import sys
from collections.abc import Sequence
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

import structlog

from reloader.config.models import TimeoutsConfig
from reloader.core.errors import ProcessError
from reloader.core.progress import status
from reloader.engine.signals import Signal

logger = structlog.get_logger()


class ProcessState(Enum):
    """Lifecycle of the single process slot."""

    IDLE = "idle"
    STARTING = "starting"
    RUNNING = "running"
    STOPPING = "stopping"
    EXITED = "exited"


class StopOutcome(Enum):
    NOT_RUNNING = "not_running"
    EXITED = "exited"
    KILLED = "killed"


def describe_exit(returncode: int) -> str | None:
    """Human description of a failed exit, None for a clean one."""
    if returncode == 0:
        return None
    if returncode < 0:
        try:
            return f"signal: {signal.Signals(-returncode).name}"
        except ValueError:
            return f"signal: {-returncode}"
    return f"exit status {returncode}"


@dataclass
class Backoff:
    """Auto-restart delay, doubling per consecutive failure up to a ceiling."""

    floor: float = 1.0
    ceiling: float = 8.0
    current: float = field(init=False)

    def __post_init__(self) -> None:
        self.current = self.floor

    def next_delay(self) -> float:
        """Return the delay to wait now and double the following one."""
        delay = self.current
        self.current = min(self.current * 2, self.ceiling)
        return delay

    def reset(self) -> None:
        self.current = self.floor


@dataclass
class SupervisedProcess:
    """Owned child process plus a one-shot task resolving to its return code."""

    proc: asyncio.subprocess.Process
    exited: asyncio.Task[int]

    @property
    def pid(self) -> int:
        return self.proc.pid

    @classmethod
    async def spawn(cls, command: Sequence[str]) -> SupervisedProcess:
        try:
            proc = await asyncio.create_subprocess_exec(*command)
        except OSError as e:
            raise ProcessError.start_failed(command[0], e.strerror or str(e)) from e
        return cls(proc=proc, exited=asyncio.create_task(proc.wait()))


@dataclass
class ProcessSupervisor:
    """
    Owns the lifecycle of at most one child process.

    Signals:
    - restart: stop whatever runs, then start a fresh process
    - build_succeeded: reset the backoff; consumed before each decision
      that reads it, so only this loop ever touches the Backoff

    With auto_restart, a process ending on its own is restarted after the
    current backoff delay. Without it the slot stays idle until the next
    change triggers a restart.
    """

    command: Sequence[str]
    restart: Signal
    build_succeeded: Signal
    auto_restart: bool = False
    timeouts: TimeoutsConfig = field(default_factory=TimeoutsConfig)

    backoff: Backoff = field(init=False)
    starts: int = field(default=0, init=False)
    _process: SupervisedProcess | None = field(default=None, init=False)
    _state: ProcessState = field(default=ProcessState.IDLE, init=False)

    def __post_init__(self) -> None:
        self.backoff = Backoff(
            floor=self.timeouts.backoff_floor_sec,
            ceiling=self.timeouts.backoff_ceiling_sec,
        )

    @property
    def state(self) -> ProcessState:
        return self._state

    @property
    def process(self) -> SupervisedProcess | None:
        return self._process

    async def run(self) -> None:
        """Handle restart signals and process exits until cancelled."""
        try:
            while True:
                await self._next_event()
        finally:
            await self.stop()

    async def _next_event(self) -> None:
        restart_wait = asyncio.ensure_future(self.restart.wait())
        waiters: set[asyncio.Future[Any]] = {restart_wait}
        process = self._process
        if process is not None:
            waiters.add(process.exited)

        try:
            done, _ = await asyncio.wait(waiters, return_when=asyncio.FIRST_COMPLETED)
        finally:
            restart_wait.cancel()

        # A restart request wins over an exit observed at the same time.
        if restart_wait in done:
            self.restart.take()
            await self._handle_restart()
        elif process is not None and process.exited in done:
            await self._handle_exit(process)

    def _consume_build_success(self) -> None:
        if self.build_succeeded.take():
            self.backoff.reset()

    async def _handle_restart(self) -> None:
        self._consume_build_success()
        await self.stop()
        await self.start()

    async def _handle_exit(self, process: SupervisedProcess) -> None:
        self._process = None
        self._state = ProcessState.EXITED
        failure = describe_exit(process.exited.result())
        log = logger.bind(pid=process.pid)

        if not self.auto_restart:
            if failure is not None:
                log.error("command_failed", error=failure)
            else:
                log.info("command_exited")
            return

        self._consume_build_success()
        delay = self.backoff.next_delay()
        if failure is not None:
            log.error("command_failed_restarting", error=failure, delay_sec=delay)
        else:
            log.error("command_exited_restarting", delay_sec=delay)

        # Wait a little bit before restarting the failing process.
        await asyncio.sleep(delay)
        self.restart.try_set()

    async def start(self) -> SupervisedProcess:
        """Start a fresh process. The slot must be empty (see stop())."""
        if self._process is not None:
            raise RuntimeError("previous process must be stopped before starting a new one")

        status(">>> run...")
        self._state = ProcessState.STARTING
        try:
            process = await SupervisedProcess.spawn(self.command)
        except ProcessError:
            self._state = ProcessState.IDLE
            raise
        self._process = process
        self._state = ProcessState.RUNNING
        self.starts += 1
        logger.debug("process_started", pid=process.pid, command=list(self.command))
        return process

    async def stop(self) -> StopOutcome:
        """Run the stop protocol against the current process, if any.

        If signalling fails the process is killed before the error is
        raised. When even the kill fails the process stays in the slot
        (state RUNNING) so a later stop() can try again.

        Raises:
            ProcessError: Interrupting or killing the process failed.
        """
        process = self._process
        if process is None or process.exited.done():
            self._process = None
            if self._state is not ProcessState.EXITED:
                self._state = ProcessState.IDLE
            return StopOutcome.NOT_RUNNING

        self._state = ProcessState.STOPPING
        log = logger.bind(pid=process.pid)
        try:
            outcome = await self._stop_protocol(process, log)
        except asyncio.CancelledError:
            self._kill(process)
            await process.exited
            self._release()
            raise
        except ProcessError as e:
            log.error("stop_failed", error=e.message)
            try:
                self._kill(process)
            except ProcessError:
                self._state = ProcessState.RUNNING
                raise e
            await process.exited
            self._release()
            raise
        self._release()
        return outcome

    def _release(self) -> None:
        self._process = None
        self._state = ProcessState.IDLE

    async def _stop_protocol(
        self, process: SupervisedProcess, log: structlog.stdlib.BoundLogger
    ) -> StopOutcome:
        log.debug("send_interrupt_signal")
        self._interrupt(process)

        grace = self.timeouts.stop_grace_sec
        remaining = self.timeouts.stop_kill_sec - grace
        if await self._wait_exit(process, grace):
            log.debug("process_closed_before_timeout")
            return StopOutcome.EXITED

        status(">>> close process...")
        if await self._wait_exit(process, remaining):
            log.debug("process_closed_before_timeout")
            return StopOutcome.EXITED

        log.warning("kill_process_after_timeout")
        self._kill(process)
        await process.exited
        return StopOutcome.KILLED

    @staticmethod
    async def _wait_exit(process: SupervisedProcess, timeout: float) -> bool:
        try:
            async with asyncio.timeout(timeout):
                await asyncio.shield(process.exited)
        except TimeoutError:
            return False
        return True

    @staticmethod
    def _interrupt(process: SupervisedProcess) -> None:
        try:
            if sys.platform == "win32":
                process.proc.terminate()
            else:
                process.proc.send_signal(signal.SIGINT)
        except ProcessLookupError:
            pass
        except OSError as e:
            raise ProcessError.signal_failed(process.pid, e.strerror or str(e)) from e

    @staticmethod
    def _kill(process: SupervisedProcess) -> None:
        try:
            process.proc.kill()
        except ProcessLookupError:
            pass
        except OSError as e:
            raise ProcessError.kill_failed(process.pid, e.strerror or str(e)) from e
