"""Tests for external command execution."""

import asyncio
import sys
import time
from pathlib import Path

import pytest

from reloader.core.errors import CommandError, ErrorCode
from reloader.engine.commands import run_command


class TestRunCommand:
    """run_command tests with real subprocesses."""

    @pytest.mark.asyncio
    async def test_given_exit_code_when_run_then_returned(self) -> None:
        assert await run_command([sys.executable, "-c", "raise SystemExit(3)"]) == 3
        assert await run_command([sys.executable, "-c", "pass"]) == 0

    @pytest.mark.asyncio
    async def test_given_cwd_when_run_then_used(self, tmp_path: Path) -> None:
        script = "import pathlib; pathlib.Path('out.txt').write_text('ok')"

        await run_command([sys.executable, "-c", script], cwd=str(tmp_path))

        assert (tmp_path / "out.txt").read_text() == "ok"

    @pytest.mark.asyncio
    async def test_given_missing_executable_when_run_then_not_found(
        self, tmp_path: Path
    ) -> None:
        with pytest.raises(CommandError) as exc_info:
            await run_command([str(tmp_path / "go-missing"), "install", "."])

        assert exc_info.value.code == ErrorCode.COMMAND_NOT_FOUND

    @pytest.mark.asyncio
    async def test_given_running_command_when_cancelled_then_killed(self) -> None:
        """Cancelling the caller does not leave the command running."""
        task = asyncio.create_task(
            run_command([sys.executable, "-c", "import time; time.sleep(60)"])
        )
        await asyncio.sleep(0.2)

        started = time.monotonic()
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

        assert time.monotonic() - started < 5
