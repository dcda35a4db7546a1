"""overalls error types with typed error codes.

Error code ranges:
- 2xxx: Config
- 3xxx: Traversal
- 7xxx: Dispatch (runner subprocesses)
- 9xxx: Internal

Every error here is fatal to a run: a coverage profile is only meaningful when
computed over all intended packages, so nothing is retried or skipped.
"""

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any


class ErrorCode(IntEnum):
    """Typed error codes for programmatic handling."""

    # Config (2xxx)
    CONFIG_PARSE_ERROR = 2001
    CONFIG_INVALID_VALUE = 2002
    CONFIG_PROJECT_NOT_FOUND = 2003

    # Traversal (3xxx)
    TRAVERSAL_RESOLVE_FAILED = 3001
    TRAVERSAL_STAT_FAILED = 3002
    TRAVERSAL_LIST_FAILED = 3003
    TRAVERSAL_RELATIVE_FAILED = 3004

    # Dispatch (7xxx)
    DISPATCH_START_FAILED = 7001
    DISPATCH_EXIT_FAILED = 7002
    DISPATCH_REPORT_UNREADABLE = 7003

    # Internal (9xxx)
    INTERNAL_ERROR = 9001


@dataclass(frozen=True)
class OverallsError(Exception):
    """Base error with structured context for diagnostics."""

    code: ErrorCode
    message: str
    details: dict[str, Any] = field(default_factory=dict)

    @property
    def error_name(self) -> str:
        """String identifier for logging (e.g., 'CONFIG_PARSE_ERROR')."""
        return self.code.name

    def to_dict(self) -> dict[str, Any]:
        """Serialize for JSON logs."""
        return {
            "code": self.code.value,
            "error": self.error_name,
            "message": self.message,
            "details": self.details,
        }

    def __str__(self) -> str:
        return f"[{self.code.value}] {self.error_name}: {self.message}"


class ConfigError(OverallsError):
    """Configuration-related errors, raised before any traversal."""

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

    @classmethod
    def project_not_found(cls, project: str, searched: list[str]) -> "ConfigError":
        return cls(
            code=ErrorCode.CONFIG_PROJECT_NOT_FOUND,
            message=f"Could not find project path '{project}'",
            details={"project": project, "searched": searched},
        )


class TraversalError(OverallsError):
    """Filesystem errors while walking the project tree."""

    @classmethod
    def resolve_failed(cls, path: str, reason: str) -> "TraversalError":
        return cls(
            code=ErrorCode.TRAVERSAL_RESOLVE_FAILED,
            message=f"Could not resolve '{path}': {reason}",
            details={"path": path, "reason": reason},
        )

    @classmethod
    def stat_failed(cls, path: str, reason: str) -> "TraversalError":
        return cls(
            code=ErrorCode.TRAVERSAL_STAT_FAILED,
            message=f"Could not stat '{path}': {reason}",
            details={"path": path, "reason": reason},
        )

    @classmethod
    def list_failed(cls, path: str, reason: str) -> "TraversalError":
        return cls(
            code=ErrorCode.TRAVERSAL_LIST_FAILED,
            message=f"Could not list directory '{path}': {reason}",
            details={"path": path, "reason": reason},
        )

    @classmethod
    def relative_failed(cls, path: str, root: str) -> "TraversalError":
        return cls(
            code=ErrorCode.TRAVERSAL_RELATIVE_FAILED,
            message=f"Could not make path '{path}' relative to project path '{root}'",
            details={"path": path, "root": root},
        )


class DispatchError(OverallsError):
    """Runner subprocess errors. Any one of these aborts the whole run."""

    @classmethod
    def start_failed(cls, package: str, command: list[str], reason: str) -> "DispatchError":
        return cls(
            code=ErrorCode.DISPATCH_START_FAILED,
            message=f"Could not start runner for {package}: {reason}",
            details={"package": package, "command": command, "reason": reason},
        )

    @classmethod
    def exit_failed(cls, package: str, command: list[str], exit_code: int) -> "DispatchError":
        return cls(
            code=ErrorCode.DISPATCH_EXIT_FAILED,
            message=f"Runner for {package} exited with code {exit_code}",
            details={"package": package, "command": command, "exit_code": exit_code},
        )

    @classmethod
    def report_unreadable(cls, package: str, path: str, reason: str) -> "DispatchError":
        return cls(
            code=ErrorCode.DISPATCH_REPORT_UNREADABLE,
            message=f"Could not read coverage profile for {package} at {path}: {reason}",
            details={"package": package, "path": path, "reason": reason},
        )


class InternalError(OverallsError):
    """Internal/unexpected errors."""

    @classmethod
    def unexpected(cls, reason: str, **details: Any) -> "InternalError":
        return cls(
            code=ErrorCode.INTERNAL_ERROR,
            message=f"Internal error: {reason}",
            details=details,
        )
