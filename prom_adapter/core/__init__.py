"""Core module: schema types, provider interfaces, config, errors, logging."""

from prom_adapter.core.config import (
    AlertmanagerConfig,
    PrometheusConfig,
    Settings,
    get_settings,
    load_settings,
    parse_provider_config,
    reset_settings,
)
from prom_adapter.core.exceptions import (
    AdapterError,
    ConfigurationError,
    UpstreamConnectionError,
    UpstreamError,
    UpstreamParseError,
    UpstreamStatusError,
)
from prom_adapter.core.logging import backend_context, setup_logging
from prom_adapter.core.providers import AlertProvider, MetricProvider
from prom_adapter.core.types import (
    ZERO_TIME,
    Alert,
    AlertQuery,
    AlertStatus,
    MetricDescriptor,
    MetricExpression,
    MetricFilter,
    MetricPoint,
    MetricQuery,
    MetricSeries,
    QueryScope,
)

__all__ = [
    "ZERO_TIME",
    "backend_context",
    "AdapterError",
    "Alert",
    "AlertProvider",
    "AlertQuery",
    "AlertStatus",
    "AlertmanagerConfig",
    "ConfigurationError",
    "MetricDescriptor",
    "MetricExpression",
    "MetricFilter",
    "MetricPoint",
    "MetricProvider",
    "MetricQuery",
    "MetricSeries",
    "PrometheusConfig",
    "QueryScope",
    "Settings",
    "UpstreamConnectionError",
    "UpstreamError",
    "UpstreamParseError",
    "UpstreamStatusError",
    "get_settings",
    "load_settings",
    "parse_provider_config",
    "reset_settings",
    "setup_logging",
]
