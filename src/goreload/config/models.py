"""Pydantic configuration models with env var support.

Configuration Hierarchy (highest to lowest precedence):
1. Direct kwargs to load_config() (CLI flags)
2. Environment variables (GORELOAD__SECTION__KEY)
3. Repo YAML (.goreload.yaml in the watched root)
4. Built-in defaults (this file)

Environment Variable Format:
    GORELOAD__<SECTION>__<KEY>=<VALUE>

Examples:
    GORELOAD__DEBUG=true
    GORELOAD__RUN__COMMAND="./myserver -port 8080"
    GORELOAD__WATCH__EXCLUDES=".git vendor"
    GORELOAD__BUILD__RELAUNCH_ON_FAILURE=true
"""

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, field_validator

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class LogOutputConfig(BaseModel):
    """Single logging output configuration."""

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
        GORELOAD__LOGGING__LEVEL: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    """

    level: LogLevel = Field(
        default="INFO",
        description="Root log level. Forced to DEBUG when debug mode is on.",
    )
    outputs: list[LogOutputConfig] = Field(default_factory=lambda: [LogOutputConfig()])


class BuildConfig(BaseModel):
    """Build step configuration.

    Env vars:
        GORELOAD__BUILD__TOOL: Build tool invocation (default: "go build")
        GORELOAD__BUILD__COMMAND: Full build command, overrides the derived one
        GORELOAD__BUILD__RELAUNCH_ON_FAILURE: Relaunch even if the build failed
    """

    tool: str = Field(
        default="go build",
        description="Build tool invocation. The build command is '<tool> -o <name> *<suffix>'.",
    )
    source_suffix: str = Field(
        default=".go",
        description="Only writes to files with this suffix trigger a rebuild.",
    )
    manifest: str = Field(
        default="go.mod",
        description="Marker file that must exist in the watched root.",
    )
    command: str | None = Field(
        default=None,
        description="Full shell build command. Overrides the derived command when set.",
    )
    relaunch_on_failure: bool = Field(
        default=False,
        description="Relaunch the run command even when the build exits non-zero. "
        "RISK: runs a stale or missing binary.",
    )

    @field_validator("source_suffix")
    @classmethod
    def validate_source_suffix(cls, v: str) -> str:
        if not v.startswith(".") or len(v) < 2:
            raise ValueError(f"Source suffix must look like '.ext', got {v!r}")
        return v


class RunConfig(BaseModel):
    """Run command configuration.

    Env vars:
        GORELOAD__RUN__COMMAND: Shell command launched after each build
        GORELOAD__RUN__SHUTDOWN_GRACE_SEC: Delay before signalling the child on interrupt (debug only)
    """

    command: str | None = Field(
        default=None,
        description="Shell command started after each build. Nothing is run when unset.",
    )
    shutdown_grace_sec: float = Field(
        default=1.0,
        description="Delay before the child is terminated on interrupt, debug mode only.",
    )

    @field_validator("shutdown_grace_sec")
    @classmethod
    def validate_grace(cls, v: float) -> float:
        if v < 0:
            raise ValueError(f"Grace period must be >= 0, got {v}")
        return v


class WatchConfig(BaseModel):
    """Watch configuration.

    Env vars:
        GORELOAD__WATCH__EXCLUDES: Whitespace separated directories to skip
    """

    excludes: str = Field(
        default=".git",
        description="Whitespace separated directories, relative to the root, never watched.",
    )


class GoReloadConfig(BaseModel):
    """Root configuration for goreload."""

    debug: bool = False
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    build: BuildConfig = Field(default_factory=BuildConfig)
    run: RunConfig = Field(default_factory=RunConfig)
    watch: WatchConfig = Field(default_factory=WatchConfig)
