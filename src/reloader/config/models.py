"""Pydantic configuration models with env var support.

Configuration Hierarchy (highest to lowest precedence):
1. Direct kwargs to load_config()
2. Environment variables (RELOADER__SECTION__KEY)
3. Project YAML (.reloader.yaml in the working directory)
4. Global YAML (~/.config/reloader/config.yaml)
5. Built-in defaults (this file)

Environment Variable Format:
    RELOADER__<SECTION>__<KEY>=<VALUE>

Examples:
    RELOADER__LOGGING__LEVEL=DEBUG
    RELOADER__TIMEOUTS__STOP_KILL_SEC=30
    RELOADER__TOOLCHAIN__GO_EXECUTABLE=go1.22.1

Per-invocation options (RunOptions, TestOptions) come from the command
line only. Every model is frozen: components receive their settings once
at construction and never observe later changes.
"""

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


def normalize_extension(ext: str) -> str:
    """Return ext with exactly one leading dot ("yml" -> ".yml")."""
    ext = ext.strip()
    return ext if ext.startswith(".") else f".{ext}"


class LogOutputConfig(BaseModel):
    """Single logging output configuration.

    Env vars: Not directly configurable via env (use YAML for multi-output).
    """

    model_config = ConfigDict(frozen=True)

    format: Literal["json", "console"] = "console"
    destination: str = "stderr"  # stderr, stdout, or absolute file path
    level: LogLevel | None = None  # Inherits from parent if None

    @field_validator("destination")
    @classmethod
    def validate_destination(cls, v: str) -> str:
        if v in ("stderr", "stdout"):
            return v
        path = Path(v).expanduser()
        if not path.is_absolute():
            raise ValueError(f"File destination must be absolute path: {v}")
        return str(path)


class LoggingConfig(BaseModel):
    """Logging configuration.

    Env vars:
        RELOADER__LOGGING__LEVEL: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    """

    model_config = ConfigDict(frozen=True)

    level: LogLevel = Field(
        default="INFO",
        description="Root log level. DEBUG logs every detected file change.",
    )
    outputs: list[LogOutputConfig] = Field(default_factory=lambda: [LogOutputConfig()])


class TimeoutsConfig(BaseModel):
    """Timing of the reload loop.

    Env vars:
        RELOADER__TIMEOUTS__DEBOUNCE_SEC: Quiet period before acting on changes
        RELOADER__TIMEOUTS__STOP_GRACE_SEC: Delay before the "close process" notice
        RELOADER__TIMEOUTS__STOP_KILL_SEC: Delay before the process is killed
        RELOADER__TIMEOUTS__BACKOFF_FLOOR_SEC: First auto-restart delay
        RELOADER__TIMEOUTS__BACKOFF_CEILING_SEC: Maximum auto-restart delay
    """

    model_config = ConfigDict(frozen=True)

    debounce_sec: float = Field(
        default=0.05,
        description="Quiet period after the last change before building or restarting. "
        "Editors with atomic saves emit several events per save.",
    )
    stop_grace_sec: float = Field(
        default=3.0,
        description="After this long without exiting, a 'close process' notice is printed.",
    )
    stop_kill_sec: float = Field(
        default=15.0,
        description="After this long without exiting, the process is killed.",
    )
    backoff_floor_sec: float = Field(
        default=1.0,
        description="Auto-restart delay after the first failure, and after every good build.",
    )
    backoff_ceiling_sec: float = Field(
        default=8.0,
        description="Auto-restart delay cap. The delay doubles after each consecutive failure.",
    )

    @field_validator(
        "debounce_sec",
        "stop_grace_sec",
        "stop_kill_sec",
        "backoff_floor_sec",
        "backoff_ceiling_sec",
    )
    @classmethod
    def validate_positive(cls, v: float) -> float:
        if v <= 0:
            raise ValueError(f"Must be positive, got {v}")
        return v

    @model_validator(mode="after")
    def validate_ordering(self) -> "TimeoutsConfig":
        if self.stop_kill_sec < self.stop_grace_sec:
            raise ValueError("stop_kill_sec must not be shorter than stop_grace_sec")
        if self.backoff_ceiling_sec < self.backoff_floor_sec:
            raise ValueError("backoff_ceiling_sec must not be lower than backoff_floor_sec")
        return self


class ToolchainConfig(BaseModel):
    """Go toolchain configuration.

    Env vars:
        RELOADER__TOOLCHAIN__GO_EXECUTABLE: go binary used for install and test
    """

    model_config = ConfigDict(frozen=True)

    go_executable: str = Field(
        default="go",
        description="go command, resolved through PATH.",
    )
    source_extensions: list[str] = Field(
        default_factory=lambda: [".go"],
        description="Changes to these files trigger a rebuild before the restart.",
    )

    @field_validator("source_extensions")
    @classmethod
    def validate_extensions(cls, v: list[str]) -> list[str]:
        return [normalize_extension(ext) for ext in v if ext.strip()]


class ReloaderConfig(BaseModel):
    """Root configuration for reloader."""

    model_config = ConfigDict(frozen=True)

    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    timeouts: TimeoutsConfig = Field(default_factory=TimeoutsConfig)
    toolchain: ToolchainConfig = Field(default_factory=ToolchainConfig)


class RunOptions(BaseModel):
    """Options of `reloader run`."""

    model_config = ConfigDict(frozen=True)

    target: str
    args: tuple[str, ...] = ()
    watch: tuple[str, ...] = ()
    ignore: tuple[str, ...] = ()
    restart: bool = False
    restart_exts: tuple[str, ...] = ()

    @field_validator("restart_exts")
    @classmethod
    def validate_restart_exts(cls, v: tuple[str, ...]) -> tuple[str, ...]:
        return tuple(normalize_extension(ext) for ext in v if ext.strip())


class TestOptions(BaseModel):
    """Options of `reloader test`."""

    __test__ = False  # not a pytest test class

    model_config = ConfigDict(frozen=True)

    packages: tuple[str, ...] = Field(min_length=1)
    verbose: bool = False
    run: str = ""
    tags: str = ""
