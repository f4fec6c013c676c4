"""Uniform schema types shared by the alert and metric providers."""

from __future__ import annotations

from datetime import datetime, timezone
from enum import StrEnum
from typing import Any

from pydantic import AwareDatetime, BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

# Zero value for timestamps that could not be parsed upstream.
ZERO_TIME = datetime(1, 1, 1, tzinfo=timezone.utc)


class _Schema(BaseModel):
    """Accepts both snake_case names and the host's camelCase JSON keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class QueryScope(_Schema):
    """Optional organizational narrowing for alert and metric queries."""

    service: str = ""
    team: str = ""
    environment: str = ""

    @property
    def is_empty(self) -> bool:
        return not (self.service or self.team or self.environment)


# ── Alerts ───────────────────────────────────────────────────────


class AlertStatus(StrEnum):
    """Known alert statuses. Unknown upstream states pass through as-is."""

    FIRING = "firing"
    SUPPRESSED = "suppressed"
    PENDING = "pending"


class AlertQuery(_Schema):
    """Generic alert query."""

    statuses: list[str] = Field(default_factory=list)
    severities: list[str] = Field(default_factory=list)
    scope: QueryScope = Field(default_factory=QueryScope)
    limit: int = 0  # 0 = unlimited


class Alert(_Schema):
    """An alert in the uniform schema."""

    id: str
    title: str = ""
    description: str = ""
    status: str = ""
    severity: str = ""
    service: str = ""
    url: str = ""
    fields: dict[str, Any] = Field(default_factory=dict)
    metadata: dict[str, Any] = Field(default_factory=dict)
    created_at: datetime = ZERO_TIME
    updated_at: datetime = ZERO_TIME


# ── Metrics ──────────────────────────────────────────────────────


class MetricFilter(_Schema):
    """A single label matcher, e.g. ``method="POST"``."""

    label: str
    operator: str = "="
    value: str = ""


class MetricExpression(_Schema):
    """Structured metric expression."""

    metric_name: str
    filters: list[MetricFilter] = Field(default_factory=list)
    aggregation: str = ""
    group_by: list[str] = Field(default_factory=list)


class MetricQuery(_Schema):
    """Generic ranged metric query.

    ``metadata["query"]`` may carry a raw PromQL string that overrides
    ``expression`` entirely. ``start`` and ``end`` must carry an offset.
    """

    expression: MetricExpression | None = None
    scope: QueryScope = Field(default_factory=QueryScope)
    start: AwareDatetime
    end: AwareDatetime
    step: int = 60  # seconds
    metadata: dict[str, Any] = Field(default_factory=dict)


class MetricPoint(_Schema):
    timestamp: datetime
    value: float


class MetricSeries(_Schema):
    """One labeled time series. Identified only by name + labels."""

    name: str = ""
    labels: dict[str, Any] = Field(default_factory=dict)
    points: list[MetricPoint] = Field(default_factory=list)


class MetricDescriptor(_Schema):
    name: str
    type: str = "unknown"
