from __future__ import annotations

"""
Logging Bootstrap.

Idempotent configuration of the root logger for the command line. Records
go through a QueueHandler and are written by a QueueListener thread, so
file writes never block the event loop running a build.

Library code never reads LoggingConfig: sources, repositories and the
manager receive an injected ContextLogger instead. Handlers created here
carry a tag attribute so reconfiguration only removes handlers docrepo
installed itself.
"""

import atexit
import logging
import os
import queue
import sys
from dataclasses import dataclass
from logging.handlers import QueueHandler, QueueListener, RotatingFileHandler
from typing import Dict, List, Optional

_CONFIGURED_FLAG_ATTR: str = "_docrepo_configured"
_QUEUE_LISTENER_ATTR: str = "_docrepo_queue_listener"
_HANDLER_TAG_ATTR: str = "_docrepo_handler"

_LEVEL_MAP: Dict[str, int] = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "WARN": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}


@dataclass(frozen=True)
class LoggingConfig:
    """
    Settings for the command line logging bootstrap.

    Attributes:
        level: Minimum severity level to capture.
        console: Emit records to stderr. Reports go to stdout, so logs
            never mix with JSON output.
        log_file: Optional path of a rotating log file.
        max_bytes: Size of one log segment before rotation.
        backup_count: Number of rotated segments kept.
    """
    level: str = "INFO"
    console: bool = True
    log_file: Optional[str] = None

    max_bytes: int = 1024 * 1024
    backup_count: int = 2

    console_fmt: str = "%(levelname)s | %(name)s | %(message)s"
    file_fmt: str = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
    datefmt: str = "%Y-%m-%d %H:%M:%S"


# ==============================================================================
# PUBLIC API
# ==============================================================================

def configure_logging(cfg: LoggingConfig, *, force: bool = False) -> logging.Logger:
    """
    Configure the root logger once.

    Later calls are no-ops unless ``force`` is set, in which case the
    handlers and listener installed by a previous call are replaced.
    Handlers installed by anyone else are left untouched.

    Args:
        cfg: Logging settings.
        force: Re-initialize even if already configured.

    Returns:
        logging.Logger: The root logger.
    """
    root = logging.getLogger()

    if getattr(root, _CONFIGURED_FLAG_ATTR, False) and not force:
        return root

    level_int = _parse_level(cfg.level)
    root.setLevel(level_int)

    _remove_our_handlers(root)
    _stop_existing_listener(root)

    handlers_list: List[logging.Handler] = []

    if cfg.console:
        sh = logging.StreamHandler(sys.stderr)
        sh.setLevel(level_int)
        sh.setFormatter(logging.Formatter(cfg.console_fmt))
        _tag_handler(sh)
        handlers_list.append(sh)

    if cfg.log_file:
        fh = _create_rotating_file_handler(cfg, level_int)
        if fh:
            handlers_list.append(fh)

    if not handlers_list:
        return root

    log_queue: queue.Queue[logging.LogRecord] = queue.Queue(-1)
    queue_handler = QueueHandler(log_queue)
    _tag_handler(queue_handler)

    listener = QueueListener(log_queue, *handlers_list, respect_handler_level=True)
    listener.start()
    root.addHandler(queue_handler)

    setattr(root, _QUEUE_LISTENER_ATTR, listener)
    setattr(root, _CONFIGURED_FLAG_ATTR, True)
    atexit.register(_safe_stop_listener, listener)

    return root


def shutdown_logging() -> None:
    """Flush and detach everything configure_logging installed."""
    root = logging.getLogger()
    _stop_existing_listener(root)
    _remove_our_handlers(root)
    setattr(root, _CONFIGURED_FLAG_ATTR, False)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


# ==============================================================================
# PRIVATE HELPERS
# ==============================================================================

def _parse_level(level: str) -> int:
    if not level:
        return logging.INFO
    return _LEVEL_MAP.get(str(level).strip().upper(), logging.INFO)


def _remove_our_handlers(root: logging.Logger) -> None:
    for h in list(root.handlers):
        if _is_our_handler(h):
            root.removeHandler(h)
            h.close()


def _stop_existing_listener(root: logging.Logger) -> None:
    listener = getattr(root, _QUEUE_LISTENER_ATTR, None)
    if listener:
        _safe_stop_listener(listener)
        setattr(root, _QUEUE_LISTENER_ATTR, None)


def _safe_stop_listener(listener: Optional[QueueListener]) -> None:
    """Stop a listener; stopping one that is already stopped is a no-op."""
    if listener is None:
        return
    if getattr(listener, "_thread", None) is not None:
        listener.stop()


def _tag_handler(handler: logging.Handler) -> None:
    setattr(handler, _HANDLER_TAG_ATTR, True)


def _is_our_handler(handler: logging.Handler) -> bool:
    return bool(getattr(handler, _HANDLER_TAG_ATTR, False))


def _create_rotating_file_handler(cfg: LoggingConfig, level_int: int) -> Optional[RotatingFileHandler]:
    """Build the tagged log file handler, or None when the file cannot be opened."""
    try:
        os.makedirs(os.path.dirname(os.path.abspath(cfg.log_file)), exist_ok=True)
        fh = RotatingFileHandler(
            cfg.log_file,
            maxBytes=int(cfg.max_bytes),
            backupCount=int(cfg.backup_count),
            encoding="utf-8",
        )
    except OSError as e:
        sys.stderr.write(f"WARNING: cannot open log file '{cfg.log_file}': {e}\n")
        return None

    fh.setLevel(level_int)
    fh.setFormatter(logging.Formatter(cfg.file_fmt, datefmt=cfg.datefmt))
    _tag_handler(fh)
    return fh
