"""Core module exports."""

from overalls.core.errors import (
    ConfigError,
    DispatchError,
    ErrorCode,
    InternalError,
    OverallsError,
    TraversalError,
)
from overalls.core.logging import (
    clear_run_id,
    configure_cli_logging,
    configure_logging,
    get_logger,
    get_run_id,
    set_run_id,
)
from overalls.core.progress import pluralize, status

__all__ = [
    # Errors
    "ConfigError",
    "DispatchError",
    "ErrorCode",
    "InternalError",
    "OverallsError",
    "TraversalError",
    # Logging
    "clear_run_id",
    "configure_cli_logging",
    "configure_logging",
    "get_logger",
    "get_run_id",
    "set_run_id",
    # Progress
    "pluralize",
    "status",
]
