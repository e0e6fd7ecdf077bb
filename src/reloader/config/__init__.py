"""Config module exports."""

from reloader.config.loader import load_config
from reloader.config.models import (
    LoggingConfig,
    LogOutputConfig,
    ReloaderConfig,
    RunOptions,
    TestOptions,
    TimeoutsConfig,
    ToolchainConfig,
)

__all__ = [
    "load_config",
    "LoggingConfig",
    "LogOutputConfig",
    "ReloaderConfig",
    "RunOptions",
    "TestOptions",
    "TimeoutsConfig",
    "ToolchainConfig",
]
