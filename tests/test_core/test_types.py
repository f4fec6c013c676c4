"""Tests for the uniform schema types: host JSON decoding and defaults."""

from __future__ import annotations

from datetime import datetime, timezone

import pytest
from pydantic import ValidationError

from prom_adapter.core.types import (
    ZERO_TIME,
    Alert,
    AlertQuery,
    AlertStatus,
    MetricDescriptor,
    MetricFilter,
    MetricQuery,
    QueryScope,
)


class TestQueryScope:
    def test_empty(self) -> None:
        assert QueryScope().is_empty

    def test_any_field_makes_it_non_empty(self) -> None:
        assert not QueryScope(team="core").is_empty


class TestAlertQuery:
    def test_defaults(self) -> None:
        q = AlertQuery()
        assert q.statuses == []
        assert q.severities == []
        assert q.scope.is_empty
        assert q.limit == 0

    def test_from_host_payload(self) -> None:
        q = AlertQuery.model_validate({
            "statuses": ["firing"],
            "severities": ["critical"],
            "scope": {"service": "api", "environment": "prod"},
            "limit": 5,
        })
        assert q.statuses == ["firing"]
        assert q.scope.environment == "prod"
        assert q.limit == 5


class TestAlert:
    def test_timestamps_default_to_zero_time(self) -> None:
        a = Alert(id="abc")
        assert a.created_at == ZERO_TIME
        assert a.updated_at == ZERO_TIME

    def test_dumps_camel_case(self) -> None:
        a = Alert(id="abc", status=AlertStatus.FIRING)
        dumped = a.model_dump(by_alias=True)
        assert "createdAt" in dumped
        assert "updatedAt" in dumped
        assert dumped["status"] == "firing"


class TestMetricQuery:
    def test_from_host_payload(self) -> None:
        q = MetricQuery.model_validate({
            "expression": {
                "metricName": "http_requests_total",
                "filters": [{"label": "method", "operator": "=", "value": "POST"}],
                "aggregation": "sum",
                "groupBy": ["method"],
            },
            "scope": {"service": "api"},
            "start": "2023-10-01T00:00:00Z",
            "end": "2023-10-01T00:01:00Z",
            "step": 60,
            "metadata": {"query": "up"},
        })
        assert q.expression is not None
        assert q.expression.metric_name == "http_requests_total"
        assert q.expression.group_by == ["method"]
        assert q.expression.filters[0].value == "POST"
        assert q.start == datetime(2023, 10, 1, tzinfo=timezone.utc)
        assert q.metadata == {"query": "up"}

    def test_expression_is_optional(self) -> None:
        q = MetricQuery(
            start=datetime(2023, 10, 1, tzinfo=timezone.utc),
            end=datetime(2023, 10, 1, 0, 1, tzinfo=timezone.utc),
        )
        assert q.expression is None
        assert q.step == 60

    def test_naive_start_rejected(self) -> None:
        with pytest.raises(ValidationError) as exc_info:
            MetricQuery.model_validate({
                "expression": {"metricName": "up"},
                "start": "2023-10-01T00:00:00",
                "end": "2023-10-01T00:01:00Z",
            })
        assert [err["loc"] for err in exc_info.value.errors()] == [("start",)]

    def test_naive_datetime_objects_rejected(self) -> None:
        with pytest.raises(ValidationError):
            MetricQuery(start=datetime(2023, 10, 1), end=datetime(2023, 10, 1, 0, 1))

    def test_offset_start_accepted(self) -> None:
        q = MetricQuery.model_validate({
            "start": "2023-10-01T02:00:00+02:00",
            "end": "2023-10-01T00:01:00Z",
        })
        assert q.start == datetime(2023, 10, 1, tzinfo=timezone.utc)

    def test_filter_operator_defaults_to_equality(self) -> None:
        assert MetricFilter(label="job", value="api").operator == "="


class TestMetricDescriptor:
    def test_type_defaults_to_unknown(self) -> None:
        assert MetricDescriptor(name="up").type == "unknown"
