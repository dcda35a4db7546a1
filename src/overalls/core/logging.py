"""Structured logging for coverage runs.

A run usually has two outputs: a console on stderr (INFO, or DEBUG with
--debug) and an optional JSON file that always records DEBUG, e.g. as a CI
artifact. Every event emitted while a run is active carries its run ID, and
runner output lines carry their package and stream, so the JSON log of many
concurrent packages can be split back apart.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import TYPE_CHECKING
from uuid import uuid4

import structlog

if TYPE_CHECKING:
    from overalls.config.models import LoggingConfig, LogOutputConfig

# Track the current log file path for error pointers
_log_file_path: Path | None = None


def get_run_id() -> str | None:
    run_id: str | None = structlog.contextvars.get_contextvars().get("run_id")
    return run_id


def set_run_id(run_id: str | None = None) -> str:
    """Set or generate the run correlation ID for the current context."""
    rid = run_id or uuid4().hex[:12]
    structlog.contextvars.bind_contextvars(run_id=rid)
    return rid


def clear_run_id() -> None:
    structlog.contextvars.unbind_contextvars("run_id")


def get_log_file_path() -> Path | None:
    """Get the current log file path, if any."""
    return _log_file_path


def _level(name: str | None, default: int) -> int:
    if name is None:
        return default
    value = logging.getLevelName(name.upper())
    return value if isinstance(value, int) else default


def _shared_processors() -> list[structlog.types.Processor]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="%Y-%m-%d %H:%M:%S", key="timestamp"),
    ]


def _create_handler(output: LogOutputConfig) -> logging.Handler:
    """Create handler for stderr, stdout, or file path."""
    if output.destination == "stderr":
        return logging.StreamHandler(sys.stderr)
    if output.destination == "stdout":
        return logging.StreamHandler(sys.stdout)
    path = Path(output.destination)
    path.parent.mkdir(parents=True, exist_ok=True)
    return logging.FileHandler(path, mode="a")


def _create_formatter(
    output: LogOutputConfig,
    shared_processors: list[structlog.types.Processor],
) -> logging.Formatter:
    renderer: structlog.types.Processor
    if output.format == "json":
        renderer = structlog.processors.JSONRenderer()
    else:
        stream = sys.stdout if output.destination == "stdout" else sys.stderr
        is_console = output.destination in ("stderr", "stdout")
        renderer = structlog.dev.ConsoleRenderer(
            colors=is_console and stream.isatty(),
            pad_event_to=0,
            pad_level=False,
        )
    return structlog.stdlib.ProcessorFormatter(
        processor=renderer,
        foreign_pre_chain=shared_processors,
    )


def configure_logging(
    *,
    config: LoggingConfig | None = None,
    json_format: bool = False,
    level: str = "INFO",
) -> None:
    """Configure structlog over stdlib logging.

    Pass config for multiple outputs, or use the simple params for one
    stderr output. Safe to call again; previous handlers are closed.
    """
    global _log_file_path
    from overalls.config.models import LoggingConfig, LogOutputConfig

    if config is None:
        config = LoggingConfig(
            level=level,  # type: ignore[arg-type]
            outputs=[LogOutputConfig(format="json" if json_format else "console")],
        )

    default_level = _level(config.level, logging.INFO)
    shared_processors = _shared_processors()

    structlog.configure(
        processors=[
            *shared_processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(default_level),
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        # Don't cache - the CLI reconfigures once the run config is known
        cache_logger_on_first_use=False,
    )

    root_logger = logging.getLogger()
    for handler in root_logger.handlers:
        handler.close()
    root_logger.handlers.clear()
    root_logger.setLevel(default_level)

    # asyncio logs every slow callback at DEBUG; runner output is what matters here
    logging.getLogger("asyncio").setLevel(logging.WARNING)

    _log_file_path = None
    for output in config.outputs:
        if output.destination not in ("stderr", "stdout") and _log_file_path is None:
            _log_file_path = Path(output.destination)

        handler = _create_handler(output)
        handler.setLevel(_level(output.level, default_level))
        handler.setFormatter(_create_formatter(output, shared_processors))
        root_logger.addHandler(handler)


def configure_cli_logging(*, debug: bool = False, log_file: Path | None = None) -> None:
    """Console follows ``debug``; a log file, when given, records everything as JSON."""
    from overalls.config.models import LoggingConfig, LogOutputConfig

    outputs = [
        LogOutputConfig(destination="stderr", format="console", level="DEBUG" if debug else "INFO")
    ]
    if log_file is not None:
        outputs.append(
            LogOutputConfig(destination=str(log_file.resolve()), format="json", level="DEBUG")
        )
    configure_logging(
        config=LoggingConfig(
            level="DEBUG" if debug or log_file is not None else "INFO",
            outputs=outputs,
        )
    )


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    logger = structlog.get_logger()
    if name:
        logger = logger.bind(logger=name)
    return logger  # type: ignore[no-any-return]
