"""Test mode: rerun the test command on every reload signal."""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass, field

import structlog

from reloader.core.progress import status
from reloader.engine.commands import run_command
from reloader.engine.signals import Signal

logger = structlog.get_logger()


@dataclass
class TestRunner:
    """Runs tests synchronously inside its own signal loop.

    There is no long-lived child, so there is nothing to restart on its
    own: a failing run is logged and the next change triggers the rerun.
    """

    __test__ = False  # not a pytest test class

    command: Sequence[str]
    reload: Signal
    runner: Callable[[Sequence[str]], Awaitable[int]] = run_command

    runs: int = field(default=0, init=False)
    failures: int = field(default=0, init=False)

    async def run_once(self) -> bool:
        status(">>> test...")
        self.runs += 1
        returncode = await self.runner(self.command)
        if returncode != 0:
            self.failures += 1
            status(">>> command failed!", style="error")
            logger.error("command_failed", command=" ".join(self.command), returncode=returncode)
            return False
        status(">>> waiting...")
        return True

    async def run(self) -> None:
        # First run of the tests before any change
        self.reload.try_set()
        while True:
            await self.reload.receive()
            await self.run_once()
