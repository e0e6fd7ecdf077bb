"""Reloader error types with typed error codes.

Error code ranges:
- 2xxx: Config
- 3xxx: Watch
- 4xxx: Process
- 5xxx: Command
- 9xxx: Internal

Every ReloaderError is fatal for the invocation. Recoverable outcomes
(a failed build, a crashed child) are reported through return values
and logs, never through exceptions.
"""

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any


class ErrorCode(IntEnum):
    """Typed error codes for programmatic handling."""

    # Config (2xxx)
    CONFIG_PARSE_ERROR = 2001
    CONFIG_INVALID_VALUE = 2002

    # Watch (3xxx)
    WATCH_WALK_FAILED = 3001
    WATCH_SETUP_FAILED = 3002

    # Process (4xxx)
    PROCESS_START_FAILED = 4001
    PROCESS_SIGNAL_FAILED = 4002
    PROCESS_KILL_FAILED = 4003

    # Command (5xxx)
    COMMAND_NOT_FOUND = 5001
    COMMAND_START_FAILED = 5002

    # Internal (9xxx)
    INTERNAL_ERROR = 9001


@dataclass(frozen=True, slots=True)
class ReloaderError(Exception):
    """Base error with structured context."""

    code: ErrorCode
    message: str
    details: dict[str, Any] = field(default_factory=dict)

    @property
    def error_name(self) -> str:
        """String identifier for logging (e.g., 'PROCESS_START_FAILED')."""
        return self.code.name

    def to_dict(self) -> dict[str, Any]:
        return {
            "code": self.code.value,
            "error": self.error_name,
            "message": self.message,
            "details": self.details,
        }

    def __str__(self) -> str:
        return f"[{self.code.value}] {self.error_name}: {self.message}"


class ConfigError(ReloaderError):
    """Configuration-related errors."""

    @classmethod
    def parse_error(cls, path: str, reason: str) -> "ConfigError":
        return cls(
            code=ErrorCode.CONFIG_PARSE_ERROR,
            message=f"Failed to parse config at {path}: {reason}",
            details={"path": path, "reason": reason},
        )

    @classmethod
    def invalid_value(cls, field: str, value: Any, reason: str) -> "ConfigError":
        return cls(
            code=ErrorCode.CONFIG_INVALID_VALUE,
            message=f"Invalid value for '{field}': {reason}",
            details={"field": field, "value": str(value), "reason": reason},
        )


class WatchError(ReloaderError):
    """Directory enumeration and filesystem watcher errors."""

    @classmethod
    def walk_failed(cls, path: str, reason: str) -> "WatchError":
        return cls(
            code=ErrorCode.WATCH_WALK_FAILED,
            message=f"Cannot walk {path}: {reason}",
            details={"path": path, "reason": reason},
        )

    @classmethod
    def setup_failed(cls, paths: list[str], reason: str) -> "WatchError":
        return cls(
            code=ErrorCode.WATCH_SETUP_FAILED,
            message=f"Cannot watch {len(paths)} directories: {reason}",
            details={"paths": paths[:5], "reason": reason},
        )


class ProcessError(ReloaderError):
    """Errors controlling the supervised child process."""

    @classmethod
    def start_failed(cls, executable: str, reason: str) -> "ProcessError":
        return cls(
            code=ErrorCode.PROCESS_START_FAILED,
            message=f"Cannot start {executable}: {reason}",
            details={"executable": executable, "reason": reason},
        )

    @classmethod
    def signal_failed(cls, pid: int, reason: str) -> "ProcessError":
        return cls(
            code=ErrorCode.PROCESS_SIGNAL_FAILED,
            message=f"Cannot interrupt process {pid}: {reason}",
            details={"pid": pid, "reason": reason},
        )

    @classmethod
    def kill_failed(cls, pid: int, reason: str) -> "ProcessError":
        return cls(
            code=ErrorCode.PROCESS_KILL_FAILED,
            message=f"Cannot kill process {pid}: {reason}",
            details={"pid": pid, "reason": reason},
        )


class CommandError(ReloaderError):
    """Errors running the external build or test command."""

    @classmethod
    def not_found(cls, executable: str) -> "CommandError":
        return cls(
            code=ErrorCode.COMMAND_NOT_FOUND,
            message=f"Executable not found: {executable}",
            details={"executable": executable},
        )

    @classmethod
    def start_failed(cls, executable: str, reason: str) -> "CommandError":
        return cls(
            code=ErrorCode.COMMAND_START_FAILED,
            message=f"Cannot run {executable}: {reason}",
            details={"executable": executable, "reason": reason},
        )


class InternalError(ReloaderError):
    """Internal/unexpected errors."""

    @classmethod
    def unexpected(cls, reason: str, **details: Any) -> "InternalError":
        return cls(
            code=ErrorCode.INTERNAL_ERROR,
            message=f"Internal error: {reason}",
            details=details,
        )
