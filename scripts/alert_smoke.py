#!/usr/bin/env python3
"""Smoke-check the Alertmanager provider against a live Alertmanager.

Usage::

    ALERTMANAGER_URL=http://localhost:9093 python scripts/alert_smoke.py
    python scripts/alert_smoke.py --config config/settings.yaml --log-level DEBUG
"""

from __future__ import annotations

import argparse
import asyncio
import os
import sys

import structlog

from prom_adapter.alert.provider import AlertmanagerProvider
from prom_adapter.core.config import get_settings, load_settings
from prom_adapter.core.exceptions import AdapterError
from prom_adapter.core.logging import setup_logging
from prom_adapter.core.types import AlertQuery, QueryScope

logger = structlog.get_logger(__name__)

SCENARIOS: list[tuple[str, AlertQuery]] = [
    ("list all alerts", AlertQuery()),
    ("list active alerts", AlertQuery(statuses=["firing"])),
    ("list critical alerts", AlertQuery(severities=["critical"])),
    ("list with scope service=api", AlertQuery(scope=QueryScope(service="api"))),
]


def _build_provider() -> AlertmanagerProvider:
    """``ALERTMANAGER_URL`` wins, then the settings file, then localhost."""
    url = os.environ.get("ALERTMANAGER_URL", "")
    if url:
        return AlertmanagerProvider.from_config({"alertmanagerURL": url})
    if get_settings().alertmanager is not None:
        return AlertmanagerProvider.from_settings()
    url = "http://localhost:9093"
    logger.info("alertmanager_url_defaulted", url=url)
    return AlertmanagerProvider.from_config({"alertmanagerURL": url})


async def run(args: argparse.Namespace) -> int:
    load_settings(args.config)
    setup_logging(level=args.log_level, fmt="console")

    last_id = ""
    async with _build_provider() as provider:
        for name, query in SCENARIOS:
            try:
                alerts = await provider.query(query)
            except AdapterError as exc:
                logger.error("scenario_failed", scenario=name, error=str(exc))
                continue

            logger.info("scenario_ok", scenario=name, alerts=len(alerts))
            for alert in alerts[:3]:
                print(f"    [{alert.status}] {alert.title} ({alert.id})")
            if len(alerts) > 3:
                print(f"    ... and {len(alerts) - 3} more")
            if alerts:
                last_id = alerts[-1].id

        if not last_id:
            logger.info("get_skipped", reason="no alerts found")
            return 0

        try:
            alert = await provider.get(last_id)
        except AdapterError as exc:
            logger.error("get_failed", alert_id=last_id, error=str(exc))
            return 1
        logger.info("get_ok", alert_id=last_id, title=alert.title)

    return 0


def main() -> None:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("--config", default=None, help="settings YAML path")
    parser.add_argument("--log-level", default=None, help="overrides logging.level from settings")
    sys.exit(asyncio.run(run(parser.parse_args())))


if __name__ == "__main__":
    main()
