from __future__ import annotations

from .context import ContextLogger, context_logger, ensure_logger, noop_logger
from .core import (
    _HANDLER_TAG_ATTR,
    _QUEUE_LISTENER_ATTR,
    LoggingConfig,
    configure_logging,
    get_logger,
    shutdown_logging,
)

__all__ = [
    "LoggingConfig",
    "ContextLogger",
    "configure_logging",
    "context_logger",
    "ensure_logger",
    "get_logger",
    "noop_logger",
    "shutdown_logging",
]
