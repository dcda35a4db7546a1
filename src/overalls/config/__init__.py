"""Config module exports."""

from overalls.config.loader import load_config
from overalls.config.models import (
    LoggingConfig,
    LogOutputConfig,
    RunConfiguration,
    parse_ignore_list,
)

__all__ = [
    "load_config",
    "LoggingConfig",
    "LogOutputConfig",
    "RunConfiguration",
    "parse_ignore_list",
]
