"""Configuration loading with pydantic-settings.

Supports loading configuration from multiple sources with precedence:
1. Direct kwargs (command-line options, highest priority)
2. Environment variables (OVERALLS_COVERMODE, OVERALLS_IGNORE, ...)
3. Project config (<project>/.overalls.yaml)
4. Built-in defaults (lowest priority)

The result is a frozen RunConfiguration. Nothing reads settings after this
point, so a run behaves the same no matter when a component looks at it.
"""

from collections.abc import Sequence
from pathlib import Path
from typing import Any

import structlog
import yaml
from pydantic import ValidationError, field_validator
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource, SettingsConfigDict

from overalls.config.constants import (
    CONFIG_FILENAME,
    DEFAULT_COVER_MODE,
    DEFAULT_GO_BINARY,
    DEFAULT_IGNORES,
    ENV_PREFIX,
)
from overalls.config.models import RunConfiguration
from overalls.core.errors import ConfigError

log = structlog.get_logger(__name__)


def _load_yaml(path: Path) -> dict[str, Any]:
    if not path.exists():
        return {}
    try:
        with path.open() as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigError.parse_error(str(path), str(e)) from e
    if not isinstance(data, dict):
        raise ConfigError.parse_error(str(path), "top level must be a mapping")
    return data


class _YamlSource(PydanticBaseSettingsSource):
    """Settings source that reads from pre-loaded YAML config."""

    def __init__(self, settings_cls: type[BaseSettings], yaml_config: dict[str, Any]) -> None:
        super().__init__(settings_cls)
        self._yaml_config = yaml_config

    def get_field_value(
        self,
        field: Any,  # noqa: ARG002
        field_name: str,
    ) -> tuple[Any, str, bool]:
        val = self._yaml_config.get(field_name)
        return val, field_name, val is not None

    def __call__(self) -> dict[str, Any]:
        return self._yaml_config


def _make_settings_class(yaml_config: dict[str, Any]) -> type[BaseSettings]:
    """Create a Settings class with instance-based YAML source."""

    class OverallsSettings(BaseSettings):
        """Operator settings. Env vars: OVERALLS_COVERMODE, OVERALLS_CONCURRENCY, etc."""

        model_config = SettingsConfigDict(
            env_prefix=ENV_PREFIX,
            case_sensitive=False,
        )

        covermode: str = DEFAULT_COVER_MODE
        ignore: str = DEFAULT_IGNORES
        concurrency: int | None = None
        go_binary: str = DEFAULT_GO_BINARY
        debug: bool = False

        @field_validator("ignore", mode="before")
        @classmethod
        def join_ignore_list(cls, v: Any) -> Any:
            # YAML may spell the list out; env vars and flags use commas
            if isinstance(v, list | tuple):
                return ",".join(str(item) for item in v)
            return v

        @classmethod
        def settings_customise_sources(
            cls,
            settings_cls: type[BaseSettings],
            init_settings: PydanticBaseSettingsSource,
            env_settings: PydanticBaseSettingsSource,
            dotenv_settings: PydanticBaseSettingsSource,  # noqa: ARG003
            file_secret_settings: PydanticBaseSettingsSource,  # noqa: ARG003
        ) -> tuple[PydanticBaseSettingsSource, ...]:
            # Precedence (first wins): init kwargs > env vars > yaml file
            return (init_settings, env_settings, _YamlSource(settings_cls, yaml_config))

    return OverallsSettings


def _invalid_value(e: ValidationError) -> ConfigError:
    err = e.errors()[0]
    field = ".".join(str(loc) for loc in err["loc"])
    return ConfigError.invalid_value(field, err.get("input"), err["msg"])


def load_config(
    project_root: Path,
    *,
    test_args: Sequence[str] = (),
    **overrides: Any,
) -> RunConfiguration:
    """Load config: defaults < project yaml < env vars < overrides.

    Args:
        project_root: Absolute project directory.
        test_args: Pass-through arguments for the runner and test binary.
        **overrides: covermode, ignore, concurrency, go_binary, debug.
                     None values are treated as "not given".

    Returns:
        Frozen run configuration.

    Raises:
        ConfigError: On invalid YAML syntax or validation errors.
    """
    yaml_config = _load_yaml(project_root / CONFIG_FILENAME)
    given = {key: value for key, value in overrides.items() if value is not None}

    settings_cls = _make_settings_class(yaml_config)
    try:
        settings: Any = settings_cls(**given)
        config = RunConfiguration(
            project_root=project_root,
            cover_mode=settings.covermode,
            ignores=settings.ignore,
            concurrency=settings.concurrency,
            test_args=tuple(test_args),
            go_binary=settings.go_binary,
            debug=settings.debug,
        )
    except ValidationError as e:
        raise _invalid_value(e) from e

    if config.cover_mode == "count" and "-race" in config.test_args:
        log.warning(
            "race_with_count_mode",
            hint="some common patterns in parallel code can trigger race conditions "
            "when using covermode=count and the -race flag; use covermode=atomic",
        )

    return config
