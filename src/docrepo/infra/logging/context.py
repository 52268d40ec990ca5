from __future__ import annotations

"""
Injected Logging Handles.

Sources, repositories and the manager receive a ContextLogger at
construction instead of reaching for a module-level singleton. A handle
carries bound context fields (repo, source...) that are rendered in front
of every message and exposed to formatters as ``record.context``.
"""

import logging
from typing import Any, Dict, MutableMapping, Optional, Tuple

_NOOP_LOGGER_NAME = "docrepo.noop"


class ContextLogger(logging.LoggerAdapter):
    """Logger adapter that prefixes messages with bound context fields."""

    def __init__(self, logger: logging.Logger, fields: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(logger, {})
        self.fields: Dict[str, Any] = dict(fields or {})

    def process(self, msg: Any, kwargs: MutableMapping[str, Any]) -> Tuple[Any, MutableMapping[str, Any]]:
        extra = dict(kwargs.get("extra") or {})
        extra.setdefault("context", dict(self.fields))
        kwargs["extra"] = extra
        if not self.fields:
            return msg, kwargs
        prefix = " ".join(f"{k}={v}" for k, v in self.fields.items())
        return f"[{prefix}] {msg}", kwargs

    def child(self, **fields: Any) -> "ContextLogger":
        merged = dict(self.fields)
        merged.update({k: v for k, v in fields.items() if v is not None})
        return ContextLogger(self.logger, merged)


def noop_logger() -> ContextLogger:
    """Return a handle whose records are discarded."""
    logger = logging.getLogger(_NOOP_LOGGER_NAME)
    if not logger.handlers:
        logger.addHandler(logging.NullHandler())
    logger.propagate = False
    # Handlers attached straight to this logger must not see records either.
    logger.disabled = True
    return ContextLogger(logger)


def context_logger(name: str = "docrepo", **fields: Any) -> ContextLogger:
    """Return a handle on a named logger with optional bound fields."""
    return ContextLogger(logging.getLogger(name), fields)


def ensure_logger(logger: Optional[Any]) -> ContextLogger:
    """Normalize an optional injected logger into a ContextLogger."""
    if logger is None:
        return noop_logger()
    if isinstance(logger, ContextLogger):
        return logger
    if isinstance(logger, logging.Logger):
        return ContextLogger(logger)
    raise TypeError(f"Unsupported logger type: {type(logger).__name__}")
