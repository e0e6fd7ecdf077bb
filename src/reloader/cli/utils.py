"""CLI utilities."""

from __future__ import annotations

import asyncio
from collections.abc import Coroutine
from typing import Any, NoReturn

import click
import structlog
from rich.traceback import Traceback

from reloader.config.loader import load_config
from reloader.config.models import ReloaderConfig
from reloader.core.errors import ReloaderError
from reloader.core.logging import configure_logging
from reloader.core.progress import get_console

logger = structlog.get_logger()


def is_debug(ctx: click.Context) -> bool:
    return bool((ctx.obj or {}).get("debug", False))


def fail(error: ReloaderError, *, debug: bool) -> NoReturn:
    """Report a fatal error and exit with status 1.

    Under --debug the structured error and the full traceback are printed first.
    """
    if debug:
        logger.debug("fatal_error", **error.to_dict())
        get_console().print(Traceback.from_exception(type(error), error, error.__traceback__))
    raise click.ClickException(error.message) from error


def prepare(ctx: click.Context) -> ReloaderConfig:
    """Load the configuration and set up logging for a command.

    Raises:
        click.ClickException: If the configuration is invalid.
    """
    debug = is_debug(ctx)
    try:
        config = load_config()
    except ReloaderError as e:
        fail(e, debug=debug)
    configure_logging(config=config.logging, level="DEBUG" if debug else None)
    return config


def run_until_stopped(ctx: click.Context, main: Coroutine[Any, Any, None]) -> None:
    """Run main until it fails, or until Ctrl-C / SIGTERM stops it.

    A clean stop prints "Stopped" and returns normally (exit status 0).
    """
    try:
        asyncio.run(main)
    except (KeyboardInterrupt, asyncio.CancelledError):
        click.echo("Stopped")
    except ReloaderError as e:
        fail(e, debug=is_debug(ctx))
