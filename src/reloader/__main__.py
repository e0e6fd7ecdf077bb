"""Allow `python -m reloader`."""

from reloader.cli.main import cli

if __name__ == "__main__":
    cli()
