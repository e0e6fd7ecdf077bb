"""Reloader CLI - reloader command."""

import click

from reloader import __version__
from reloader.cli.run import run_command
from reloader.cli.test import test_command


@click.group()
@click.version_option(version=__version__, prog_name="reloader")
@click.option("-d", "--debug", is_flag=True, help="Enable debug logging and full tracebacks")
@click.pass_context
def cli(ctx: click.Context, debug: bool) -> None:
    """Build & run a Go app or its tests for every change."""
    ctx.ensure_object(dict)
    ctx.obj["debug"] = debug


cli.add_command(run_command, name="run")
cli.add_command(test_command, name="test")


if __name__ == "__main__":
    cli()
