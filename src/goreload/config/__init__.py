"""Config module exports."""

from goreload.config.loader import load_config
from goreload.config.models import (
    BuildConfig,
    GoReloadConfig,
    LoggingConfig,
    LogOutputConfig,
    RunConfig,
    WatchConfig,
)

__all__ = [
    "load_config",
    "BuildConfig",
    "GoReloadConfig",
    "LoggingConfig",
    "LogOutputConfig",
    "RunConfig",
    "WatchConfig",
]
