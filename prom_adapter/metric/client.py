"""Minimal async client for the Prometheus HTTP API (v1)."""

from __future__ import annotations

from datetime import datetime
from typing import Any

import httpx
import structlog

from prom_adapter.core.exceptions import (
    UpstreamConnectionError,
    UpstreamParseError,
    UpstreamStatusError,
)

logger = structlog.stdlib.get_logger(__name__)

QUERY_RANGE_PATH = "/api/v1/query_range"
LABEL_VALUES_PATH = "/api/v1/label/{label}/values"


def _format_time(ts: datetime) -> str:
    """Unix seconds, as accepted by every Prometheus time parameter."""
    return str(ts.timestamp())


class PrometheusAPI:
    """Async HTTP client for the subset of the Prometheus API we need.

    Every call decodes the standard response envelope::

        {"status": "success" | "error", "data": ..., "errorType": "...",
         "error": "...", "warnings": [...]}

    and returns ``data``. Failures raise ``UpstreamError`` subclasses.
    """

    def __init__(
        self,
        base_url: str,
        timeout_secs: float | None = None,
        http: httpx.AsyncClient | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._owns_http = http is None
        self._http = http or httpx.AsyncClient(timeout=httpx.Timeout(timeout_secs))

    @property
    def base_url(self) -> str:
        return self._base_url

    async def close(self) -> None:
        if self._owns_http:
            await self._http.aclose()

    async def query_range(
        self,
        expr: str,
        start: datetime,
        end: datetime,
        step_secs: int,
    ) -> dict[str, Any]:
        """Evaluate *expr* over [start, end] at *step_secs* resolution.

        Returns:
            The ``data`` object: ``{"resultType": ..., "result": [...]}``.
        """
        data = await self._get(QUERY_RANGE_PATH, {
            "query": expr,
            "start": _format_time(start),
            "end": _format_time(end),
            "step": str(step_secs),
        })
        if not isinstance(data, dict):
            raise UpstreamParseError(
                f"prometheus query_range returned unexpected data: {type(data).__name__}"
            )
        return data

    async def label_values(
        self,
        label: str,
        start: datetime | None = None,
        end: datetime | None = None,
    ) -> list[str]:
        """List the distinct values of *label*; unbounded time range when unset."""
        params: dict[str, str] = {}
        if start is not None:
            params["start"] = _format_time(start)
        if end is not None:
            params["end"] = _format_time(end)

        data = await self._get(LABEL_VALUES_PATH.format(label=label), params)
        if data is None:
            return []
        if not isinstance(data, list):
            raise UpstreamParseError(
                f"prometheus label values returned unexpected data: {type(data).__name__}"
            )
        return [str(v) for v in data]

    async def _get(self, path: str, params: dict[str, str]) -> Any:
        """GET *path* and unwrap the response envelope."""
        logger.debug("prometheus_request", path=path, params=params)
        try:
            response = await self._http.get(self._base_url + path, params=params)
        except httpx.HTTPError as exc:
            raise UpstreamConnectionError(f"prometheus request failed: {exc}") from exc

        try:
            body = response.json()
        except ValueError as exc:
            if not response.is_success:
                raise UpstreamStatusError(
                    f"prometheus API error: {response.status_code} {response.text.strip()}",
                    status_code=response.status_code,
                ) from exc
            raise UpstreamParseError("prometheus returned invalid JSON") from exc

        if not isinstance(body, dict):
            raise UpstreamParseError(
                f"prometheus returned unexpected body: {type(body).__name__}"
            )

        if body.get("status") != "success" or not response.is_success:
            error_type = str(body.get("errorType") or "")
            raise UpstreamStatusError(
                f"prometheus API error: {response.status_code} "
                f"{error_type or 'unknown'}: {body.get('error', '')}",
                status_code=response.status_code,
                error_type=error_type,
            )

        for warning in body.get("warnings") or []:
            logger.warning("prometheus_warning", path=path, warning=warning)

        return body.get("data")
