"""Orchestrator: wires watchers, aggregator, builder and supervisor.

All components run as sibling tasks of one asyncio.TaskGroup. A fatal
error in any of them cancels the rest; the first ReloaderError is then
raised to the caller. Ctrl-C (asyncio.run) and SIGTERM cancel the group,
which ends in a clean shutdown: the supervisor stops its child on the
way out.
"""

from __future__ import annotations

import asyncio
import contextlib
import signal
from collections.abc import Coroutine, Iterator
from typing import Any

import structlog

from reloader.config.models import ReloaderConfig, RunOptions, TestOptions
from reloader.core.errors import InternalError, ReloaderError
from reloader.engine.aggregator import ChangeAggregator
from reloader.engine.builder import BuildCoordinator
from reloader.engine.signals import Signal
from reloader.engine.supervisor import ProcessSupervisor
from reloader.engine.tester import TestRunner
from reloader.engine.toolchain import (
    binary_path,
    go_install_command,
    go_test_command,
    package_dir,
)
from reloader.engine.watcher import watch_folder

logger = structlog.get_logger()


@contextlib.contextmanager
def _cancel_on_sigterm() -> Iterator[None]:
    """Treat SIGTERM like Ctrl-C: cancel the running orchestrator task."""
    loop = asyncio.get_running_loop()
    task = asyncio.current_task()
    installed = False
    if task is not None:
        try:
            loop.add_signal_handler(signal.SIGTERM, task.cancel)
            installed = True
        except (NotImplementedError, RuntimeError):
            # Windows event loops, or not running in the main thread
            pass
    try:
        yield
    finally:
        if installed:
            loop.remove_signal_handler(signal.SIGTERM)


def _first_error(group: BaseExceptionGroup[BaseException]) -> BaseException:
    """Pick the error to surface: the first ReloaderError, else the first leaf."""
    leaves: list[BaseException] = []

    def _collect(exc: BaseException) -> None:
        if isinstance(exc, BaseExceptionGroup):
            for inner in exc.exceptions:
                _collect(inner)
        else:
            leaves.append(exc)

    _collect(group)
    for exc in leaves:
        if isinstance(exc, ReloaderError):
            return exc
    return leaves[0]


async def run_group(coros: list[Coroutine[Any, Any, None]]) -> None:
    """Run coroutines as one cancellation-linked group."""
    with _cancel_on_sigterm():
        try:
            async with asyncio.TaskGroup() as tg:
                for coro in coros:
                    tg.create_task(coro)
        except BaseExceptionGroup as group:
            error = _first_error(group)
            if isinstance(error, ReloaderError) or not isinstance(error, Exception):
                raise error from None
            raise InternalError.unexpected(
                str(error) or type(error).__name__, exception=type(error).__name__
            ) from error


async def run_app(options: RunOptions, config: ReloaderConfig) -> None:
    """`reloader run`: rebuild and restart the target on every change."""
    changes: asyncio.Queue[str] = asyncio.Queue()
    rebuild = Signal("rebuild")
    restart = Signal("restart")
    build_succeeded = Signal("build_succeeded")

    aggregator = ChangeAggregator(
        changes=changes,
        rebuild=rebuild,
        restart=restart,
        source_extensions=config.toolchain.source_extensions,
        restart_extensions=options.restart_exts,
        debounce_sec=config.timeouts.debounce_sec,
    )
    builder = BuildCoordinator(
        command=go_install_command(config.toolchain, options.target),
        rebuild=rebuild,
        restart=restart,
        build_succeeded=build_succeeded,
    )
    supervisor = ProcessSupervisor(
        command=(str(binary_path(options.target)), *options.args),
        restart=restart,
        build_succeeded=build_succeeded,
        auto_restart=options.restart,
        timeouts=config.timeouts,
    )

    folders = [*options.watch, options.target]
    with structlog.contextvars.bound_contextvars(mode="run"):
        logger.debug("reloader_starting", target=options.target, watch=folders)
        await run_group(
            [
                *(watch_folder(changes, folder, options.ignore) for folder in folders),
                aggregator.run(),
                builder.run(),
                supervisor.run(),
            ]
        )


async def run_tests(options: TestOptions, config: ReloaderConfig) -> None:
    """`reloader test`: rerun the package tests on every change."""
    changes: asyncio.Queue[str] = asyncio.Queue()
    reload = Signal("reload")

    # Source and non-source changes both just rerun the tests.
    aggregator = ChangeAggregator(
        changes=changes,
        rebuild=reload,
        restart=reload,
        source_extensions=config.toolchain.source_extensions,
        restart_all=True,
        debounce_sec=config.timeouts.debounce_sec,
    )
    tester = TestRunner(command=go_test_command(config.toolchain, options), reload=reload)
    folders = list(dict.fromkeys(package_dir(p) for p in options.packages))

    with structlog.contextvars.bound_contextvars(mode="test"):
        logger.debug("reloader_starting", packages=list(options.packages), watch=folders)
        await run_group(
            [
                *(watch_folder(changes, folder) for folder in folders),
                aggregator.run(),
                tester.run(),
            ]
        )
