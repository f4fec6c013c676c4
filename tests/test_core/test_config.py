"""Tests for prom_adapter/core/config.py: YAML loading, provider config validation."""

from __future__ import annotations

from pathlib import Path

import pytest
import yaml
from pydantic import ValidationError

from prom_adapter.core.config import (
    AlertmanagerConfig,
    LoggingConfig,
    PrometheusConfig,
    Settings,
    get_settings,
    load_settings,
    parse_provider_config,
    reset_settings,
)
from prom_adapter.core.exceptions import ConfigurationError


@pytest.fixture(autouse=True)
def _clean_settings() -> None:
    """Reset the global settings cache before each test."""
    reset_settings()


class TestDefaults:
    """Settings should have sensible defaults when no YAML is provided."""

    def test_default_logging_config(self) -> None:
        cfg = LoggingConfig()
        assert cfg.level == "INFO"
        assert cfg.format == "json"
        assert cfg.levels == {}

    def test_default_settings_have_no_backends(self) -> None:
        s = Settings()
        assert s.alertmanager is None
        assert s.prometheus is None
        assert s.logging.level == "INFO"

    def test_alertmanager_default_timeout(self) -> None:
        cfg = AlertmanagerConfig(url="http://am:9093")
        assert cfg.timeout_secs == 30.0

    def test_prometheus_has_no_default_timeout(self) -> None:
        cfg = PrometheusConfig(url="http://prom:9090")
        assert cfg.timeout_secs is None


class TestParseProviderConfig:
    """Host config mappings are validated into typed config models."""

    def test_alertmanager_from_host_key(self) -> None:
        cfg = parse_provider_config(AlertmanagerConfig, {"alertmanagerURL": "http://am:9093"})
        assert cfg.url == "http://am:9093"
        assert cfg.timeout_secs == 30.0

    def test_alertmanager_timeout_override(self) -> None:
        cfg = parse_provider_config(
            AlertmanagerConfig,
            {"alertmanagerURL": "http://am:9093", "timeoutSecs": 5},
        )
        assert cfg.timeout_secs == 5.0

    def test_prometheus_from_host_key(self) -> None:
        cfg = parse_provider_config(PrometheusConfig, {"url": "http://prom:9090"})
        assert cfg.url == "http://prom:9090"

    def test_existing_instance_passes_through(self) -> None:
        cfg = PrometheusConfig(url="http://prom:9090")
        assert parse_provider_config(PrometheusConfig, cfg) is cfg

    def test_missing_url(self) -> None:
        with pytest.raises(ConfigurationError) as exc_info:
            parse_provider_config(AlertmanagerConfig, {})
        assert exc_info.value.fields == ["alertmanagerURL"]
        assert "alertmanagerURL" in str(exc_info.value)

    def test_none_is_treated_as_empty(self) -> None:
        with pytest.raises(ConfigurationError):
            parse_provider_config(PrometheusConfig, None)

    def test_empty_url(self) -> None:
        with pytest.raises(ConfigurationError) as exc_info:
            parse_provider_config(PrometheusConfig, {"url": ""})
        assert exc_info.value.fields == ["url"]

    def test_wrong_type(self) -> None:
        with pytest.raises(ConfigurationError) as exc_info:
            parse_provider_config(PrometheusConfig, {"url": 123})
        assert exc_info.value.fields == ["url"]

    def test_lists_every_bad_field(self) -> None:
        with pytest.raises(ConfigurationError) as exc_info:
            parse_provider_config(AlertmanagerConfig, {"timeoutSecs": "soon"})
        assert set(exc_info.value.fields) == {"alertmanagerURL", "timeoutSecs"}

    def test_negative_timeout_rejected(self) -> None:
        with pytest.raises(ConfigurationError):
            parse_provider_config(PrometheusConfig, {"url": "http://p", "timeoutSecs": -1})

    def test_config_is_frozen(self) -> None:
        cfg = AlertmanagerConfig(url="http://am:9093")
        with pytest.raises(ValidationError):
            cfg.url = "http://other"  # type: ignore[misc]


class TestYamlLoading:
    """Settings should load correctly from YAML files."""

    def test_load_from_yaml(self, tmp_path: Path) -> None:
        config_data = {
            "alertmanager": {"url": "http://am:9093", "timeout_secs": 10},
            "prometheus": {"url": "http://prom:9090"},
            "logging": {"level": "DEBUG", "format": "console", "levels": {"httpx": "INFO"}},
        }
        config_file = tmp_path / "settings.yaml"
        config_file.write_text(yaml.dump(config_data))

        settings = load_settings(config_file)

        assert settings.alertmanager is not None
        assert settings.alertmanager.url == "http://am:9093"
        assert settings.alertmanager.timeout_secs == 10.0
        assert settings.prometheus is not None
        assert settings.prometheus.url == "http://prom:9090"
        assert settings.logging.level == "DEBUG"
        assert settings.logging.format == "console"
        assert settings.logging.levels == {"httpx": "INFO"}

    def test_load_missing_file_uses_defaults(self, tmp_path: Path) -> None:
        settings = load_settings(tmp_path / "nonexistent.yaml")
        assert settings.alertmanager is None
        assert settings.logging.format == "json"

    def test_load_empty_file_uses_defaults(self, tmp_path: Path) -> None:
        config_file = tmp_path / "empty.yaml"
        config_file.write_text("")
        settings = load_settings(config_file)
        assert settings.prometheus is None

    def test_invalid_backend_section(self, tmp_path: Path) -> None:
        config_file = tmp_path / "settings.yaml"
        config_file.write_text(yaml.dump({"prometheus": {"url": 123}}))
        with pytest.raises(ConfigurationError):
            load_settings(config_file)

    def test_get_settings_caches(self, tmp_path: Path) -> None:
        config_file = tmp_path / "settings.yaml"
        config_file.write_text(yaml.dump({"logging": {"level": "WARNING"}}))
        loaded = load_settings(config_file)
        assert get_settings() is loaded
