"""Core module exports."""

from reloader.core.errors import (
    CommandError,
    ConfigError,
    ErrorCode,
    InternalError,
    ProcessError,
    ReloaderError,
    WatchError,
)
from reloader.core.logging import configure_logging, get_logger
from reloader.core.progress import status

__all__ = [
    # Errors
    "CommandError",
    "ConfigError",
    "ErrorCode",
    "InternalError",
    "ProcessError",
    "ReloaderError",
    "WatchError",
    # Logging
    "configure_logging",
    "get_logger",
    # Progress
    "status",
]
