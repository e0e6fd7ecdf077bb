"""Build coordination: single-flight builds that feed restarts."""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass, field
from enum import Enum

import structlog

from reloader.core.progress import status
from reloader.engine.commands import run_command
from reloader.engine.signals import Signal

logger = structlog.get_logger()


class BuildOutcome(Enum):
    SUCCEEDED = "succeeded"
    FAILED = "failed"


@dataclass
class BuildCoordinator:
    """
    Runs the build command on startup and after every rebuild signal.

    Design:
    - Builds run inline in run(), so at most one is ever in flight
    - Rebuild requests arriving mid-build coalesce into one pending signal
    - A failed build (non-zero exit) is logged and never restarts the app
    - CommandError (missing compiler, spawn failure) propagates as fatal
    - A good build sends build_succeeded before restart, so the supervisor
      resets its backoff before it launches the new binary
    """

    command: Sequence[str]
    rebuild: Signal
    restart: Signal
    build_succeeded: Signal
    runner: Callable[[Sequence[str]], Awaitable[int]] = run_command

    builds: int = field(default=0, init=False)
    last_outcome: BuildOutcome | None = field(default=None, init=False)

    async def build_once(self) -> BuildOutcome:
        status(">>> build...")
        self.builds += 1
        returncode = await self.runner(self.command)
        command = " ".join(self.command)
        if returncode != 0:
            status(">>> build command failed!", style="error")
            logger.error("build_failed", command=command, returncode=returncode)
            self.last_outcome = BuildOutcome.FAILED
        else:
            logger.debug("build_succeeded", command=command)
            self.last_outcome = BuildOutcome.SUCCEEDED
        return self.last_outcome

    async def run(self) -> None:
        # Build the application for the first time when starting up. An
        # old binary from a previous install still gets launched if it fails.
        await self.build_once()
        self.restart.try_set()

        while True:
            await self.rebuild.receive()
            if await self.build_once() is BuildOutcome.SUCCEEDED:
                self.build_succeeded.try_set()
                self.restart.try_set()
