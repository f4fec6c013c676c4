"""Metric-provider exceptions."""

from __future__ import annotations

from prom_adapter.core.exceptions import AdapterError


class MissingExpressionError(AdapterError):
    """A metric query has neither a raw ``query`` override nor a structured expression."""
