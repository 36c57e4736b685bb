"""Core module exports."""

from goreload.core.errors import (
    ConfigError,
    ErrorCode,
    GoReloadError,
    InternalError,
    StartupError,
)
from goreload.core.logging import (
    clear_cycle_id,
    configure_logging,
    get_cycle_id,
    get_logger,
    set_cycle_id,
)

__all__ = [
    # Errors
    "ConfigError",
    "ErrorCode",
    "GoReloadError",
    "InternalError",
    "StartupError",
    # Logging
    "clear_cycle_id",
    "configure_logging",
    "get_cycle_id",
    "get_logger",
    "set_cycle_id",
]
