"""PromQL construction from the generic metric query model."""

from __future__ import annotations

import json

from prom_adapter.core.types import MetricQuery, QueryScope
from prom_adapter.metric.exceptions import MissingExpressionError

RAW_QUERY_KEY = "query"


def quote(value: str) -> str:
    """Quote a PromQL string literal, escaping backslashes and double quotes."""
    return json.dumps(value, ensure_ascii=False)


def scope_matchers(scope: QueryScope) -> list[str]:
    """Label matchers for the non-empty scope fields, in service, team, env order."""
    matchers: list[str] = []
    if scope.service:
        matchers.append(f"service={quote(scope.service)}")
    if scope.team:
        matchers.append(f"team={quote(scope.team)}")
    if scope.environment:
        matchers.append(f"env={quote(scope.environment)}")
    return matchers


def build_promql(query: MetricQuery) -> str:
    """Build the PromQL expression for *query*.

    A non-empty string under ``metadata["query"]`` is used verbatim.
    Otherwise the structured expression is rendered as::

        agg(metric{label<op>"value",...,service="...",team="...",env="..."}) by (a,b)

    Raises:
        MissingExpressionError: no raw override and no structured expression.
    """
    raw = query.metadata.get(RAW_QUERY_KEY)
    if isinstance(raw, str) and raw:
        return raw

    expression = query.expression
    if expression is None:
        raise MissingExpressionError("missing query expression")

    matchers = [f"{f.label}{f.operator}{quote(f.value)}" for f in expression.filters]
    matchers.extend(scope_matchers(query.scope))

    expr = expression.metric_name
    if matchers:
        expr += "{" + ",".join(matchers) + "}"

    # "by" is only valid on an aggregation
    if expression.aggregation:
        expr = f"{expression.aggregation}({expr})"
        if expression.group_by:
            expr += " by (" + ",".join(expression.group_by) + ")"

    return expr
