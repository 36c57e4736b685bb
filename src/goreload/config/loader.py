"""Configuration loading with pydantic-settings.

Supports loading configuration from multiple sources with precedence:
1. Direct kwargs (highest priority, CLI flags)
2. Environment variables (GORELOAD__SECTION__KEY)
3. Repo config (.goreload.yaml in the watched root)
4. Built-in defaults (lowest priority)
"""

from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource, SettingsConfigDict

from goreload.config.models import (
    BuildConfig,
    GoReloadConfig,
    LoggingConfig,
    RunConfig,
    WatchConfig,
)
from goreload.core.errors import ConfigError

CONFIG_FILE = ".goreload.yaml"


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

    class GoReloadSettings(BaseSettings):
        """Root config. Env vars: GORELOAD__DEBUG, GORELOAD__RUN__COMMAND, etc."""

        model_config = SettingsConfigDict(
            env_prefix="GORELOAD__",
            env_nested_delimiter="__",
            case_sensitive=False,
        )

        debug: bool = False
        logging: LoggingConfig = LoggingConfig()
        build: BuildConfig = BuildConfig()
        run: RunConfig = RunConfig()
        watch: WatchConfig = WatchConfig()

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

    return GoReloadSettings


def load_config(root: Path | None = None, **kwargs: Any) -> GoReloadConfig:
    """Load config: defaults < .goreload.yaml < env vars < kwargs.

    Nested sections from each source are merged, so ``run={"command": "/app"}``
    keeps a ``shutdown_grace_sec`` set in the file.

    Args:
        root: Watched root to load config from. Defaults to the current
              working directory.
        **kwargs: Override values (highest precedence).

    Raises:
        ConfigError: On invalid YAML syntax or validation errors.
    """
    root = root or Path.cwd()
    yaml_config = _load_yaml(root / CONFIG_FILE)

    settings_cls = _make_settings_class(yaml_config)
    try:
        settings = settings_cls(**kwargs)
    except ValidationError as e:
        err = e.errors()[0]
        field = ".".join(str(loc) for loc in err["loc"])
        raise ConfigError.invalid_value(field, err.get("input"), err["msg"]) from e
    return GoReloadConfig.model_validate(settings.model_dump())
