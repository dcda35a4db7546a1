"""Pydantic configuration models.

Configuration Hierarchy (highest to lowest precedence):
1. Command-line options (passed as kwargs to load_config())
2. Environment variables (OVERALLS_<KEY>)
3. Project YAML (<project>/.overalls.yaml)
4. Built-in defaults (constants.py)

RunConfiguration is resolved once before the walk begins and is never mutated
afterwards; every component receives it explicitly.
"""

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from overalls.config.constants import (
    DEFAULT_COVER_MODE,
    DEFAULT_GO_BINARY,
    OUT_FILENAME,
    CoverMode,
)

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
    """Logging configuration."""

    level: LogLevel = Field(
        default="INFO",
        description="Root log level. DEBUG echoes every runner command.",
    )
    outputs: list[LogOutputConfig] = Field(default_factory=lambda: [LogOutputConfig()])


def parse_ignore_list(value: str | list[str] | tuple[str, ...] | frozenset[str]) -> frozenset[str]:
    """Normalize ignore entries to POSIX paths relative to the project root.

    Accepts a comma separated string or a sequence. Leading ``./`` and trailing
    slashes are dropped so ``./vendor/`` and ``vendor`` name the same directory.
    """
    items = value.split(",") if isinstance(value, str) else list(value)
    normalized: set[str] = set()
    for item in items:
        entry = item.strip().replace("\\", "/")
        while entry.startswith("./"):
            entry = entry[2:]
        entry = entry.rstrip("/")
        if entry:
            normalized.add(entry)
    return frozenset(normalized)


class RunConfiguration(BaseModel):
    """Resolved, immutable options for one coverage run."""

    model_config = ConfigDict(frozen=True)

    project_root: Path = Field(description="Absolute project directory; anchors relative paths.")
    cover_mode: CoverMode = Field(
        default=DEFAULT_COVER_MODE,
        description="Statistical method passed through to go test -covermode.",
    )
    ignores: frozenset[str] = Field(
        default_factory=frozenset,
        description="Relative directory paths never descended into.",
    )
    concurrency: int | None = Field(
        default=None,
        description="Max packages in flight. None means unbounded.",
    )
    test_args: tuple[str, ...] = Field(
        default=(),
        description="Pass-through arguments for the runner and the test binary.",
    )
    go_binary: str = Field(
        default=DEFAULT_GO_BINARY,
        description="Runner executable, e.g. 'richgo' for friendlier output.",
    )
    debug: bool = False

    @field_validator("project_root")
    @classmethod
    def validate_project_root(cls, v: Path) -> Path:
        if not v.is_absolute():
            raise ValueError(f"Project root must be an absolute path: {v}")
        if not v.is_dir():
            raise ValueError(f"Project root is not a directory: {v}")
        return v

    @field_validator("ignores", mode="before")
    @classmethod
    def validate_ignores(cls, v: object) -> frozenset[str]:
        if isinstance(v, str | list | tuple | set | frozenset):
            return parse_ignore_list(v)  # type: ignore[arg-type]
        raise ValueError(f"Ignore list must be a string or a list, got {type(v).__name__}")

    @field_validator("concurrency")
    @classmethod
    def validate_concurrency(cls, v: int | None) -> int | None:
        if v is not None and v < 1:
            raise ValueError(f"Concurrency must be at least 1, got {v}")
        return v

    @field_validator("go_binary")
    @classmethod
    def validate_go_binary(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Runner binary must not be empty")
        return v

    @property
    def is_limited(self) -> bool:
        return self.concurrency is not None

    @property
    def output_path(self) -> Path:
        """Where the merged profile is written."""
        return self.project_root / OUT_FILENAME
