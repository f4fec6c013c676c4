"""Metric provider backed by the Prometheus HTTP API."""

from __future__ import annotations

from collections.abc import Mapping
from datetime import datetime, timezone
from typing import Any

import httpx
import structlog

from prom_adapter.core.config import (
    PrometheusConfig,
    Settings,
    get_settings,
    parse_provider_config,
)
from prom_adapter.core.exceptions import ConfigurationError, UpstreamParseError
from prom_adapter.core.logging import backend_context
from prom_adapter.core.providers import MetricProvider
from prom_adapter.core.types import (
    MetricDescriptor,
    MetricPoint,
    MetricQuery,
    MetricSeries,
    QueryScope,
)
from prom_adapter.metric.client import PrometheusAPI
from prom_adapter.metric.promql import build_promql

logger = structlog.stdlib.get_logger(__name__)

BACKEND = "prometheus"
METRIC_NAME_LABEL = "__name__"


def _parse_sample(sample: Any) -> MetricPoint:
    """Parse a ``[<unix seconds>, "<value>"]`` pair."""
    try:
        ts, value = sample
        return MetricPoint(
            timestamp=datetime.fromtimestamp(float(ts), tz=timezone.utc),
            value=float(value),
        )
    except (TypeError, ValueError, OverflowError) as exc:
        raise UpstreamParseError(f"malformed sample: {sample!r}") from exc


def _parse_stream(stream: Any) -> MetricSeries:
    """Convert one matrix entry to a MetricSeries.

    Expected structure::

        {"metric": {"__name__": "up", "job": "api"}, "values": [[1696118400, "1"], ...]}
    """
    if not isinstance(stream, dict):
        raise UpstreamParseError(f"malformed series: {stream!r}")

    metric = stream.get("metric") or {}
    values = stream.get("values") or []
    if not isinstance(metric, dict) or not isinstance(values, list):
        raise UpstreamParseError(f"malformed series: {stream!r}")

    return MetricSeries(
        name=str(metric.get(METRIC_NAME_LABEL, "")),
        labels={str(k): str(v) for k, v in metric.items() if k != METRIC_NAME_LABEL},
        points=[_parse_sample(s) for s in values],
    )


def convert_matrix(data: Mapping[str, Any]) -> list[MetricSeries]:
    """Convert a ``query_range`` data object to MetricSeries, keeping upstream order.

    Raises:
        UpstreamParseError: the result is not a matrix or is malformed.
    """
    result_type = data.get("resultType")
    if result_type != "matrix":
        raise UpstreamParseError(f"expected matrix result, got {result_type!r}")

    result = data.get("result") or []
    if not isinstance(result, list):
        raise UpstreamParseError(f"malformed matrix result: {type(result).__name__}")
    return [_parse_stream(stream) for stream in result]


class PrometheusMetricProvider(MetricProvider):
    """Metric provider for Prometheus.

    Usage::

        async with PrometheusMetricProvider.from_config({"url": url}) as prom:
            series = await prom.query(query)
            catalog = await prom.describe(QueryScope())
    """

    def __init__(
        self,
        config: PrometheusConfig,
        api: PrometheusAPI | None = None,
        http: httpx.AsyncClient | None = None,
    ) -> None:
        self._config = config
        self._api = api or PrometheusAPI(
            config.url,
            timeout_secs=config.timeout_secs,
            http=http,
        )

    @classmethod
    def from_config(
        cls,
        raw: Mapping[str, Any] | PrometheusConfig | None,
        http: httpx.AsyncClient | None = None,
    ) -> PrometheusMetricProvider:
        """Build a provider from a host config mapping (``url`` required)."""
        return cls(parse_provider_config(PrometheusConfig, raw), http=http)

    @classmethod
    def from_settings(
        cls,
        settings: Settings | None = None,
        http: httpx.AsyncClient | None = None,
    ) -> PrometheusMetricProvider:
        """Build a provider from the ``prometheus`` section of the settings file.

        Raises:
            ConfigurationError: the settings have no ``prometheus`` section.
        """
        section = (settings if settings is not None else get_settings()).prometheus
        if section is None:
            raise ConfigurationError("settings have no prometheus section", fields=["prometheus"])
        return cls(section, http=http)

    @property
    def api(self) -> PrometheusAPI:
        return self._api

    async def close(self) -> None:
        await self._api.close()

    async def query(self, query: MetricQuery) -> list[MetricSeries]:
        """Build PromQL for *query*, run it as a range query and convert the matrix."""
        promql = build_promql(query)
        with backend_context(BACKEND, self._api.base_url):
            data = await self._api.query_range(promql, query.start, query.end, query.step)
            series = convert_matrix(data)
            logger.debug("prometheus_query_done", promql=promql, series=len(series))
        return series

    async def describe(self, scope: QueryScope) -> list[MetricDescriptor]:
        """List every metric name known to Prometheus.

        *scope* is not applied: the label-values lookup always returns the
        global catalog.
        """
        with backend_context(BACKEND, self._api.base_url):
            if not scope.is_empty:
                logger.debug("prometheus_describe_scope_ignored", scope=scope.model_dump())
            names = await self._api.label_values(METRIC_NAME_LABEL)
        return [MetricDescriptor(name=name, type="unknown") for name in names]
