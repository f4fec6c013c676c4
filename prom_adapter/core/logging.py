"""Structured logging setup using structlog.

Every event carries the emitting logger's name (``prom_adapter.alert.provider``,
``prom_adapter.metric.client``, ...) and, while a provider call is running,
the ``backend`` and ``base_url`` it talks to. Levels can be routed per
logger from the settings file::

    logging:
      level: INFO
      levels:
        prom_adapter.metric: DEBUG
"""

from __future__ import annotations

import logging
import sys
from collections.abc import Iterator, Mapping
from contextlib import contextmanager

import structlog

from prom_adapter.core.config import get_settings

# httpx and httpcore log every request at INFO/DEBUG.
DEFAULT_LOGGER_LEVELS: dict[str, str] = {
    "httpx": "WARNING",
    "httpcore": "WARNING",
}


def _to_level(name: str) -> int:
    level = logging.getLevelName(name.upper())
    return level if isinstance(level, int) else logging.INFO


@contextmanager
def backend_context(backend: str, base_url: str) -> Iterator[None]:
    """Tag every event logged inside the block with the upstream it concerns."""
    with structlog.contextvars.bound_contextvars(backend=backend, base_url=base_url):
        yield


def setup_logging(
    level: str | None = None,
    fmt: str | None = None,
    levels: Mapping[str, str] | None = None,
) -> None:
    """Configure structlog with JSON or console renderer.

    Logs go to stderr; stdout carries the plugin's response stream.

    Args:
        level: Root log level override (e.g. "DEBUG"). Uses config if None.
        fmt: Renderer format override ("json" or "console"). Uses config if None.
        levels: Per-logger levels, layered over the config's ``levels`` and
            the httpx defaults.
    """
    settings = get_settings()
    log_level = _to_level(level or settings.logging.level)
    log_format = fmt or settings.logging.format

    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.format_exc_info,
    ]

    if log_format == "json":
        renderer: structlog.types.Processor = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer()

    structlog.configure(
        processors=[
            *shared_processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            renderer,
        ],
    )

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(log_level)

    routed = {**DEFAULT_LOGGER_LEVELS, **settings.logging.levels, **(levels or {})}
    for name, name_level in routed.items():
        logging.getLogger(name).setLevel(_to_level(name_level))
