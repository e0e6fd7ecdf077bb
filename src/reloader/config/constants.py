"""Configuration constants.

Values that are not user-configurable. For tunables see models.py.
"""

from pathlib import Path

GLOBAL_CONFIG_PATH = Path("~/.config/reloader/config.yaml").expanduser()
"""Per-user configuration file."""

PROJECT_CONFIG_NAME = ".reloader.yaml"
"""Per-project configuration file, looked up in the working directory."""

INSTALL_SUBCOMMAND = "install"
TEST_SUBCOMMAND = "test"
"""go subcommands used by the run and test modes."""
