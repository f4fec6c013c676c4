"""Alertmanager alert provider."""

from prom_adapter.alert.exceptions import AlertNotFoundError
from prom_adapter.alert.provider import (
    AlertmanagerProvider,
    build_filters,
    convert_alert,
    map_state_to_status,
    map_status_to_alertmanager,
)

__all__ = [
    "AlertNotFoundError",
    "AlertmanagerProvider",
    "build_filters",
    "convert_alert",
    "map_state_to_status",
    "map_status_to_alertmanager",
]
