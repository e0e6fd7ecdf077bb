"""reloader run command - rebuild and restart a Go program on changes."""

from __future__ import annotations

import click

from reloader.cli.utils import prepare, run_until_stopped
from reloader.config.models import RunOptions
from reloader.engine.orchestrator import run_app


def split_extensions(values: tuple[str, ...]) -> tuple[str, ...]:
    """Flatten repeated and comma-separated --restart-exts values."""
    return tuple(ext.strip() for value in values for ext in value.split(",") if ext.strip())


@click.command(context_settings={"ignore_unknown_options": True})
@click.argument("target", type=click.Path(exists=True, file_okay=False))
@click.argument("args", nargs=-1, type=click.UNPROCESSED)
@click.option(
    "--watch", "-w", multiple=True, help="Additional folders to watch for changes (repeatable)"
)
@click.option(
    "--ignore", "-g", multiple=True, help="Folders to ignore when watching changes (repeatable)"
)
@click.option(
    "--restart", "-r", is_flag=True, help="Automatically restart the process if it exits"
)
@click.option(
    "--restart-exts",
    "-e",
    multiple=True,
    help="Extensions that restart the app without rebuilding, e.g. yml,yaml",
)
@click.pass_context
def run_command(
    ctx: click.Context,
    target: str,
    args: tuple[str, ...],
    watch: tuple[str, ...],
    ignore: tuple[str, ...],
    restart: bool,
    restart_exts: tuple[str, ...],
) -> None:
    """Build and run a Go app every time its sources change.

    TARGET is the package folder passed to `go install`. ARGS are passed to
    the built binary; put them after `--` when they clash with reloader options.
    """
    options = RunOptions(
        target=target,
        args=args,
        watch=watch,
        ignore=ignore,
        restart=restart,
        restart_exts=split_extensions(restart_exts),
    )

    config = prepare(ctx)
    run_until_stopped(ctx, run_app(options, config))
