"""Abstract provider interfaces the host's dispatch shim programs against."""

from __future__ import annotations

import abc
from types import TracebackType
from typing import Self

from prom_adapter.core.types import (
    Alert,
    AlertQuery,
    MetricDescriptor,
    MetricQuery,
    MetricSeries,
    QueryScope,
)


class _Provider(abc.ABC):
    """Lifecycle shared by all providers.

    Providers hold only configuration and an HTTP client fixed at
    construction, so one instance may serve concurrent calls. Whether
    to cache an instance is up to the caller.

    Usage::

        async with SomeProvider.from_config(raw_config) as provider:
            result = await provider.query(query)
    """

    @abc.abstractmethod
    async def close(self) -> None:
        """Release the underlying HTTP client."""

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        await self.close()


class AlertProvider(_Provider):
    """Translates generic alert queries to an alerting backend."""

    @abc.abstractmethod
    async def query(self, query: AlertQuery) -> list[Alert]:
        """Return alerts matching *query*, truncated to ``query.limit``."""

    @abc.abstractmethod
    async def get(self, alert_id: str) -> Alert:
        """Return the alert whose identifier is *alert_id*."""


class MetricProvider(_Provider):
    """Translates generic metric queries to a time-series backend."""

    @abc.abstractmethod
    async def query(self, query: MetricQuery) -> list[MetricSeries]:
        """Run a ranged query and return the resulting series."""

    @abc.abstractmethod
    async def describe(self, scope: QueryScope) -> list[MetricDescriptor]:
        """List the metrics the backend knows about."""
