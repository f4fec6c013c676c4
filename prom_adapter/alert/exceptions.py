"""Alert-provider exceptions."""

from __future__ import annotations

from prom_adapter.core.exceptions import AdapterError


class AlertNotFoundError(AdapterError):
    """No alert with the requested fingerprint exists upstream."""

    def __init__(self, alert_id: str) -> None:
        super().__init__(f"alert not found: {alert_id}")
        self.alert_id = alert_id
