"""goreload error types with typed error codes.

Error code ranges:
- 2xxx: Config
- 3xxx: Startup
- 9xxx: Internal
"""

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any

# Exit status for a failed startup precondition and for interrupt shutdown.
EXIT_PRECONDITION = 2


class ErrorCode(IntEnum):
    """Typed error codes for programmatic handling."""

    # Config (2xxx)
    CONFIG_PARSE_ERROR = 2001
    CONFIG_INVALID_VALUE = 2002

    # Startup (3xxx)
    STARTUP_MANIFEST_MISSING = 3001
    STARTUP_WORKDIR_UNAVAILABLE = 3002
    STARTUP_WATCHER_UNAVAILABLE = 3003

    # Internal (9xxx)
    INTERNAL_ERROR = 9001


@dataclass(frozen=True, slots=True)
class GoReloadError(Exception):
    """Base error with structured context."""

    code: ErrorCode
    message: str
    details: dict[str, Any] = field(default_factory=dict)

    @property
    def error_name(self) -> str:
        """String identifier for logging (e.g., 'CONFIG_PARSE_ERROR')."""
        return self.code.name

    @property
    def exit_code(self) -> int:
        return 1

    def to_dict(self) -> dict[str, Any]:
        return {
            "code": self.code.value,
            "error": self.error_name,
            "message": self.message,
            "details": self.details,
        }

    def __str__(self) -> str:
        return f"[{self.code.value}] {self.error_name}: {self.message}"


class ConfigError(GoReloadError):
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


class StartupError(GoReloadError):
    """Fatal errors raised before the daemon starts watching."""

    @property
    def exit_code(self) -> int:
        if self.code == ErrorCode.STARTUP_MANIFEST_MISSING:
            return EXIT_PRECONDITION
        return 1

    @classmethod
    def manifest_missing(cls, root: str, manifest: str) -> "StartupError":
        return cls(
            code=ErrorCode.STARTUP_MANIFEST_MISSING,
            message=f"the watch directory must have {manifest}",
            details={"root": root, "manifest": manifest},
        )

    @classmethod
    def workdir_unavailable(cls, reason: str) -> "StartupError":
        return cls(
            code=ErrorCode.STARTUP_WORKDIR_UNAVAILABLE,
            message=f"Cannot determine working directory: {reason}",
            details={"reason": reason},
        )

    @classmethod
    def watcher_unavailable(cls, root: str, reason: str) -> "StartupError":
        return cls(
            code=ErrorCode.STARTUP_WATCHER_UNAVAILABLE,
            message=f"Cannot watch {root}: {reason}",
            details={"root": root, "reason": reason},
        )


class InternalError(GoReloadError):
    """Internal/unexpected errors."""

    @classmethod
    def unexpected(cls, reason: str, **details: Any) -> "InternalError":
        return cls(
            code=ErrorCode.INTERNAL_ERROR,
            message=f"Internal error: {reason}",
            details=details,
        )
