"""Exception hierarchy shared by the alert and metric providers."""

from __future__ import annotations


class AdapterError(Exception):
    """Base exception for all adapter errors."""


class ConfigurationError(AdapterError):
    """Provider configuration is missing a required field or has a wrong type."""

    def __init__(self, message: str, fields: list[str] | None = None) -> None:
        super().__init__(message)
        self.fields = fields or []


class UpstreamError(AdapterError):
    """Base exception for failures talking to Alertmanager or Prometheus."""


class UpstreamConnectionError(UpstreamError):
    """The HTTP request could not be completed (connect, timeout, transport)."""


class UpstreamStatusError(UpstreamError):
    """The upstream answered with a non-success status."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        error_type: str = "",
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.error_type = error_type


class UpstreamParseError(UpstreamError):
    """The upstream response body was not valid JSON or had an unexpected shape."""
