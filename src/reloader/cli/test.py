"""reloader test command - rerun Go tests on changes."""

from __future__ import annotations

import click

from reloader.cli.utils import prepare, run_until_stopped
from reloader.config.models import TestOptions
from reloader.engine.orchestrator import run_tests


@click.command()
@click.argument("packages", nargs=-1, required=True)
@click.option("--verbose", "-v", is_flag=True, help="Verbose run of the go tests")
@click.option(
    "--run", "-r", "run_filter", default="", help="Run only tests matching the regular expression"
)
@click.option("--tags", "-t", default="", help="Tags for the go build command")
@click.pass_context
def test_command(
    ctx: click.Context,
    packages: tuple[str, ...],
    verbose: bool,
    run_filter: str,
    tags: str,
) -> None:
    """Run Go tests every time the packages change.

    Example: reloader test ./my/package
    """
    options = TestOptions(packages=packages, verbose=verbose, run=run_filter, tags=tags)
    config = prepare(ctx)
    run_until_stopped(ctx, run_tests(options, config))
