"""Alert provider backed by the Prometheus Alertmanager v2 API."""

from __future__ import annotations

import re
from collections.abc import Mapping
from datetime import datetime
from typing import Any

import httpx
import structlog
from pydantic import ValidationError

from prom_adapter.alert.exceptions import AlertNotFoundError
from prom_adapter.core.config import (
    AlertmanagerConfig,
    Settings,
    get_settings,
    parse_provider_config,
)
from prom_adapter.core.exceptions import (
    ConfigurationError,
    UpstreamConnectionError,
    UpstreamParseError,
    UpstreamStatusError,
)
from prom_adapter.core.logging import backend_context
from prom_adapter.core.providers import AlertProvider
from prom_adapter.core.types import ZERO_TIME, Alert, AlertQuery, AlertStatus

logger = structlog.stdlib.get_logger(__name__)

BACKEND = "alertmanager"
ALERTS_PATH = "/api/v2/alerts"
ALERT_URL_PREFIX = "/alerting/alerts#"

# Generic status → Alertmanager state used in filter queries
_STATUS_TO_STATE: dict[str, str] = {
    "firing": "active",
    "open": "active",
    "active": "active",
    "resolved": "suppressed",
    "closed": "suppressed",
}

# Alertmanager state → generic status
_STATE_TO_STATUS: dict[str, str] = {
    "active": AlertStatus.FIRING.value,
    "suppressed": AlertStatus.SUPPRESSED.value,
    "unprocessed": AlertStatus.PENDING.value,
}

# RFC3339 date-time with a mandatory offset; the fraction may be any length.
_RFC3339_RE = re.compile(r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}(?:\.\d+)?(?:Z|[+-]\d{2}:\d{2})$")

# Python keeps at most microseconds; Alertmanager sends nanoseconds.
_FRACTION_RE = re.compile(r"\.(\d+)")


def map_status_to_alertmanager(status: str) -> str:
    """Map a generic alert status to an Alertmanager state; unknown passes through."""
    return _STATUS_TO_STATE.get(status, status)


def map_state_to_status(state: str) -> str:
    """Map an Alertmanager state to a generic alert status; unknown passes through."""
    return _STATE_TO_STATUS.get(state, state)


def build_filters(query: AlertQuery) -> list[str]:
    """Build the repeated ``filter`` matchers for ``GET /api/v2/alerts``.

    Order: statuses, severities, then scope (service, team, env).
    """
    filters = [f'state="{map_status_to_alertmanager(s)}"' for s in query.statuses]
    filters.extend(f'severity="{s}"' for s in query.severities)

    scope = query.scope
    if scope.service:
        filters.append(f'service="{scope.service}"')
    if scope.team:
        filters.append(f'team="{scope.team}"')
    if scope.environment:
        filters.append(f'env="{scope.environment}"')
    return filters



def parse_timestamp(raw: Any) -> datetime:
    """Parse an RFC3339 timestamp, returning ``ZERO_TIME`` when it cannot be parsed.

    Only the RFC3339 profile is accepted: ISO 8601 variants such as the
    basic format or a time without seconds are rejected, and the offset
    is mandatory. Fractional seconds of any precision are truncated to
    microseconds.
    """
    if not isinstance(raw, str) or not _RFC3339_RE.fullmatch(raw):
        if raw:
            logger.debug("alert_timestamp_unparsable", value=raw)
        return ZERO_TIME

    normalized = _FRACTION_RE.sub(lambda m: "." + (m.group(1) + "000000")[:6], raw, count=1)
    try:
        return datetime.fromisoformat(normalized)
    except ValueError:
        # Well-formed but out of range, e.g. month 13.
        logger.debug("alert_timestamp_unparsable", value=raw)
        return ZERO_TIME


def _string_map(record: Mapping[str, Any], key: str) -> dict[str, str]:
    """Return ``record[key]`` as a string-to-string map; absent or null is empty."""
    value = record.get(key)
    if value is None:
        return {}
    if not isinstance(value, Mapping) or not all(
        isinstance(k, str) and isinstance(v, str) for k, v in value.items()
    ):
        raise UpstreamParseError(f"malformed alert record: {key} must map strings: {value!r}")
    return dict(value)


def convert_alert(raw: Mapping[str, Any]) -> Alert:
    """Convert one Alertmanager alert record to the uniform Alert schema.

    Expected structure::

        {
            "fingerprint": "abc123",
            "status": {"state": "active", ...},
            "labels": {"alertname": "HighCPU", "severity": "critical", ...},
            "annotations": {"description": "...", ...},
            "startsAt": "2025-12-03T10:00:00Z",
            "updatedAt": "2025-12-03T10:05:00Z",
            ...
        }

    Raises:
        UpstreamParseError: the record does not have this shape.
    """
    fingerprint = raw.get("fingerprint") or ""
    labels = _string_map(raw, "labels")
    annotations = _string_map(raw, "annotations")
    status = raw.get("status") or {}
    if not isinstance(fingerprint, str) or not isinstance(status, Mapping):
        raise UpstreamParseError(f"malformed alert record: {dict(raw)!r}")
    state = status.get("state") or ""

    try:
        return Alert(
            id=fingerprint,
            title=labels.get("alertname", ""),
            description=annotations.get("description", ""),
            status=map_state_to_status(state),
            severity=labels.get("severity", ""),
            service=labels.get("service", ""),
            url=ALERT_URL_PREFIX + fingerprint,
            fields={
                "labels": labels,
                "annotations": annotations,
            },
            metadata={
                "source": "prometheus",
                "fingerprint": fingerprint,
            },
            created_at=parse_timestamp(raw.get("startsAt")),
            updated_at=parse_timestamp(raw.get("updatedAt")),
        )
    except (ValidationError, TypeError) as exc:
        raise UpstreamParseError(f"malformed alert record {fingerprint!r}: {exc}") from exc

class AlertmanagerProvider(AlertProvider):
    """Alert provider for Prometheus Alertmanager.

    Usage::

        async with AlertmanagerProvider.from_config({"alertmanagerURL": url}) as am:
            alerts = await am.query(AlertQuery(statuses=["firing"]))
            alert = await am.get(alerts[0].id)
    """

    def __init__(
        self,
        config: AlertmanagerConfig,
        http: httpx.AsyncClient | None = None,
    ) -> None:
        self._config = config
        self._base_url = config.url.rstrip("/")
        self._owns_http = http is None
        self._http = http or httpx.AsyncClient(timeout=httpx.Timeout(config.timeout_secs))

    @classmethod
    def from_config(
        cls,
        raw: Mapping[str, Any] | AlertmanagerConfig | None,
        http: httpx.AsyncClient | None = None,
    ) -> AlertmanagerProvider:
        """Build a provider from a host config mapping (``alertmanagerURL`` required)."""
        return cls(parse_provider_config(AlertmanagerConfig, raw), http=http)

    @classmethod
    def from_settings(
        cls,
        settings: Settings | None = None,
        http: httpx.AsyncClient | None = None,
    ) -> AlertmanagerProvider:
        """Build a provider from the ``alertmanager`` section of the settings file.

        Raises:
            ConfigurationError: the settings have no ``alertmanager`` section.
        """
        section = (settings if settings is not None else get_settings()).alertmanager
        if section is None:
            raise ConfigurationError(
                "settings have no alertmanager section", fields=["alertmanager"]
            )
        return cls(section, http=http)

    @property
    def base_url(self) -> str:
        return self._base_url

    async def close(self) -> None:
        if self._owns_http:
            await self._http.aclose()

    async def query(self, query: AlertQuery) -> list[Alert]:
        """Fetch alerts matching the query's filters, truncated to ``query.limit``."""
        filters = build_filters(query)
        with backend_context(BACKEND, self._base_url):
            records = await self._fetch_alerts(filters)

            alerts = [convert_alert(r) for r in records]
            if 0 < query.limit < len(alerts):
                alerts = alerts[: query.limit]

            logger.debug(
                "alertmanager_query_done",
                filters=filters,
                returned=len(records),
                kept=len(alerts),
            )
        return alerts

    async def get(self, alert_id: str) -> Alert:
        """Fetch one alert by fingerprint.

        Alertmanager has no single-alert endpoint, so this scans the full
        unfiltered alert list. Every record is converted, so a malformed
        list fails even when the match is well formed.
        """
        with backend_context(BACKEND, self._base_url):
            alerts = [convert_alert(r) for r in await self._fetch_alerts([])]
            for alert in alerts:
                if alert.id == alert_id:
                    return alert
            logger.debug("alertmanager_alert_not_found", alert_id=alert_id, scanned=len(alerts))
        raise AlertNotFoundError(alert_id)

    async def _fetch_alerts(self, filters: list[str]) -> list[dict[str, Any]]:
        """GET the alert list and validate its shape."""
        url = self._base_url + ALERTS_PATH
        params = [("filter", f) for f in filters]

        try:
            response = await self._http.get(url, params=params)
        except httpx.HTTPError as exc:
            raise UpstreamConnectionError(f"alertmanager request failed: {exc}") from exc

        if response.status_code != httpx.codes.OK:
            raise UpstreamStatusError(
                f"alertmanager API error: {response.status_code} {response.text.strip()}",
                status_code=response.status_code,
            )

        try:
            body = response.json()
        except ValueError as exc:
            raise UpstreamParseError("alertmanager returned invalid JSON") from exc

        if not isinstance(body, list) or not all(isinstance(r, dict) for r in body):
            raise UpstreamParseError(
                f"alertmanager returned unexpected body: expected a list of alerts, "
                f"got {type(body).__name__}"
            )
        return body
