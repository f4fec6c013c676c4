"""Prometheus metric provider."""

from prom_adapter.metric.client import PrometheusAPI
from prom_adapter.metric.exceptions import MissingExpressionError
from prom_adapter.metric.promql import build_promql
from prom_adapter.metric.provider import PrometheusMetricProvider, convert_matrix

__all__ = [
    "MissingExpressionError",
    "PrometheusAPI",
    "PrometheusMetricProvider",
    "build_promql",
    "convert_matrix",
]
