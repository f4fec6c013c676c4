"""Pydantic settings loaded from YAML configuration."""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path
from typing import Any, TypeVar

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from prom_adapter.core.exceptions import ConfigurationError

_settings: Settings | None = None

_DEFAULT_CONFIG_PATH = Path("config/settings.yaml")

ConfigT = TypeVar("ConfigT", bound=BaseModel)


class AlertmanagerConfig(BaseModel):
    """Alertmanager provider configuration."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    url: str = Field(alias="alertmanagerURL", min_length=1)
    timeout_secs: float = Field(default=30.0, alias="timeoutSecs", gt=0)


class PrometheusConfig(BaseModel):
    """Prometheus metric provider configuration."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    url: str = Field(min_length=1)
    # None = no client-side timeout; the caller's deadline applies.
    timeout_secs: float | None = Field(default=None, alias="timeoutSecs", gt=0)


class LoggingConfig(BaseModel):
    """Logging configuration.

    ``levels`` maps logger names to levels, e.g. ``prom_adapter.alert: DEBUG``
    to trace only the Alertmanager backend.
    """

    level: str = "INFO"
    format: str = "json"
    levels: dict[str, str] = Field(default_factory=dict)


class Settings(BaseModel):
    """Root settings container."""

    alertmanager: AlertmanagerConfig | None = None
    prometheus: PrometheusConfig | None = None
    logging: LoggingConfig = LoggingConfig()


def parse_provider_config(model: type[ConfigT], raw: Mapping[str, Any] | ConfigT | None) -> ConfigT:
    """Validate a loosely typed config mapping into *model*.

    Raises:
        ConfigurationError: listing every missing or mistyped field.
    """
    if isinstance(raw, model):
        return raw
    try:
        return model.model_validate(dict(raw or {}))
    except ValidationError as exc:
        errors = exc.errors()
        fields = [".".join(str(part) for part in err["loc"]) for err in errors]
        details = "; ".join(f"{field}: {err['msg']}" for field, err in zip(fields, errors))
        raise ConfigurationError(
            f"invalid {model.__name__} configuration: {details}",
            fields=fields,
        ) from exc


def load_settings(path: str | Path | None = None) -> Settings:
    """Load settings from a YAML file and cache globally.

    Args:
        path: Path to YAML config. Defaults to config/settings.yaml.

    Returns:
        Parsed Settings instance.
    """
    global _settings  # noqa: PLW0603

    config_path = Path(path) if path else _DEFAULT_CONFIG_PATH

    data: dict[str, Any] = {}
    if config_path.exists():
        with open(config_path) as f:
            raw = yaml.safe_load(f)
            if isinstance(raw, dict):
                data = raw

    try:
        _settings = Settings(**data)
    except ValidationError as exc:
        raise ConfigurationError(f"invalid settings file {config_path}: {exc}") from exc
    return _settings


def get_settings() -> Settings:
    """Return the cached settings, loading defaults if not yet loaded."""
    global _settings  # noqa: PLW0603
    if _settings is None:
        _settings = load_settings()
    return _settings


def reset_settings() -> None:
    """Reset the cached settings (useful for testing)."""
    global _settings  # noqa: PLW0603
    _settings = None
