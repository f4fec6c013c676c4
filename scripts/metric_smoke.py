#!/usr/bin/env python3
"""Smoke-check the Prometheus metric provider against a live Prometheus.

Usage::

    PROMETHEUS_URL=http://localhost:9090 python scripts/metric_smoke.py
    python scripts/metric_smoke.py --config config/settings.yaml
"""

from __future__ import annotations

import argparse
import asyncio
import os
import sys
from datetime import datetime, timedelta, timezone

import structlog

from prom_adapter.core.config import get_settings, load_settings
from prom_adapter.core.exceptions import AdapterError
from prom_adapter.core.logging import setup_logging
from prom_adapter.core.types import (
    MetricExpression,
    MetricFilter,
    MetricQuery,
    QueryScope,
)
from prom_adapter.metric.provider import PrometheusMetricProvider

logger = structlog.get_logger(__name__)


def _scenarios(now: datetime) -> list[tuple[str, MetricQuery]]:
    window = {"start": now - timedelta(minutes=5), "end": now, "step": 60}
    return [
        ("basic query (up)", MetricQuery(
            expression=MetricExpression(metric_name="up"), **window,
        )),
        ("filters (up{job='prometheus'})", MetricQuery(
            expression=MetricExpression(
                metric_name="up",
                filters=[MetricFilter(label="job", operator="=", value="prometheus")],
            ),
            **window,
        )),
        ("aggregation (sum(up))", MetricQuery(
            expression=MetricExpression(metric_name="up", aggregation="sum"), **window,
        )),
        ("scope", MetricQuery(
            expression=MetricExpression(metric_name="up"),
            scope=QueryScope(service="my-service", environment="prod"),
            **window,
        )),
        ("raw query override", MetricQuery(
            expression=MetricExpression(metric_name="ignored"),
            metadata={"query": "count(up)"},
            **window,
        )),
    ]


def _build_provider() -> PrometheusMetricProvider:
    """``PROMETHEUS_URL`` wins, then the settings file, then localhost."""
    url = os.environ.get("PROMETHEUS_URL", "")
    if url:
        return PrometheusMetricProvider.from_config({"url": url})
    if get_settings().prometheus is not None:
        return PrometheusMetricProvider.from_settings()
    url = "http://localhost:9090"
    logger.info("prometheus_url_defaulted", url=url)
    return PrometheusMetricProvider.from_config({"url": url})


async def run(args: argparse.Namespace) -> int:
    load_settings(args.config)
    setup_logging(level=args.log_level, fmt="console")

    async with _build_provider() as provider:
        try:
            descriptors = await provider.describe(QueryScope())
        except AdapterError as exc:
            logger.error("describe_failed", error=str(exc))
            return 1
        logger.info(
            "describe_ok",
            metrics=len(descriptors),
            first=descriptors[0].name if descriptors else None,
        )

        for name, query in _scenarios(datetime.now(timezone.utc)):
            try:
                series = await provider.query(query)
            except AdapterError as exc:
                logger.error("scenario_failed", scenario=name, error=str(exc))
                continue

            logger.info("scenario_ok", scenario=name, series=len(series))
            for s in series[:3]:
                print(f"    {s.name} {s.labels} (points: {len(s.points)})")
            if len(series) > 3:
                print(f"    ... and {len(series) - 3} more")

    return 0


def main() -> None:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("--config", default=None, help="settings YAML path")
    parser.add_argument("--log-level", default=None, help="overrides logging.level from settings")
    sys.exit(asyncio.run(run(parser.parse_args())))


if __name__ == "__main__":
    main()
