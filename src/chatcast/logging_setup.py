"""Logging configuration and structured log helper."""

from __future__ import annotations

import logging
from typing import Any

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s [%(component)s] %(message)s"
DEFAULT_COMPONENT = "core"


class _ComponentDefaultFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "component"):
            record.component = DEFAULT_COMPONENT
        return True


def configure_logging(level: str | int = "INFO") -> None:
    """Install a stream handler on the root logger for CLI entrypoints."""
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    handler.addFilter(_ComponentDefaultFilter())

    root = logging.getLogger()
    root.handlers = [handler]
    root.setLevel(level.upper() if isinstance(level, str) else level)


def log_event(
    logger: logging.Logger,
    message: str,
    *,
    component: str,
    extra: dict[str, Any] | None = None,
    level: int = logging.INFO,
) -> None:
    """Emit a log record ensuring `component` is always present."""
    extra_payload = dict(extra or {})
    extra_payload.setdefault("component", component)
    logger.log(level, message, extra=extra_payload)
