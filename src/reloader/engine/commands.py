"""External command execution with inherited standard streams."""

from __future__ import annotations

import asyncio
import contextlib
from collections.abc import Sequence

import structlog

from reloader.core.errors import CommandError

logger = structlog.get_logger()


async def run_command(argv: Sequence[str], *, cwd: str | None = None) -> int:
    """Run argv to completion and return its exit status.

    stdin/stdout/stderr are inherited so compiler and test output reaches
    the terminal untouched. Cancelling the caller kills the command.

    Raises:
        CommandError: The executable is missing or cannot be spawned.
    """
    executable = argv[0]
    logger.debug("command_starting", argv=list(argv), cwd=cwd)
    try:
        proc = await asyncio.create_subprocess_exec(*argv, cwd=cwd)
    except FileNotFoundError as e:
        raise CommandError.not_found(executable) from e
    except OSError as e:
        raise CommandError.start_failed(executable, str(e)) from e

    try:
        returncode = await proc.wait()
    except asyncio.CancelledError:
        with contextlib.suppress(ProcessLookupError):
            proc.kill()
        await proc.wait()
        raise

    logger.debug("command_finished", executable=executable, returncode=returncode)
    return returncode
