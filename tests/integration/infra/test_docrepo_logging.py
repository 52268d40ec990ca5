from __future__ import annotations

"""
Integration tests for Logging Infrastructure.

Verifies the asynchronous QueueListener architecture, idempotency
of configuration, log file output and the injected context loggers.
"""

import logging
from logging.handlers import QueueListener
from pathlib import Path

import pytest

from docrepo.infra.logging import (
    _HANDLER_TAG_ATTR,
    _QUEUE_LISTENER_ATTR,
    ContextLogger,
    LoggingConfig,
    configure_logging,
    context_logger,
    ensure_logger,
    noop_logger,
    shutdown_logging,
)


@pytest.fixture(autouse=True)
def reset_logging():
    """Clean up root logger handlers before and after each test."""
    root = logging.getLogger()
    original_level = root.level
    shutdown_logging()
    yield
    shutdown_logging()
    root.setLevel(original_level)


def test_logging_idempotency() -> None:
    """TC-01: Verify that multiple config calls do not duplicate handlers."""
    cfg = LoggingConfig(level="INFO", console=True)

    configure_logging(cfg)
    root = logging.getLogger()
    initial_handler_count = len(root.handlers)

    configure_logging(cfg)
    assert len(root.handlers) == initial_handler_count, "Handlers were duplicated."
    assert isinstance(getattr(root, _QUEUE_LISTENER_ATTR), QueueListener)


def test_force_replaces_only_own_handlers() -> None:
    """TC-02: Forced reconfiguration keeps foreign handlers."""
    root = logging.getLogger()
    foreign = logging.NullHandler()
    root.addHandler(foreign)
    try:
        configure_logging(LoggingConfig(level="INFO"))
        configure_logging(LoggingConfig(level="DEBUG"), force=True)

        ours = [h for h in root.handlers if getattr(h, _HANDLER_TAG_ATTR, False)]
        assert len(ours) == 1
        assert foreign in root.handlers
        assert root.level == logging.DEBUG
    finally:
        root.removeHandler(foreign)


def test_file_output(tmp_path: Path) -> None:
    """TC-03: Records reach the log file once the listener is flushed."""
    log_file = tmp_path / "logs" / "docrepo.log"
    configure_logging(LoggingConfig(level="INFO", console=False, log_file=str(log_file)))

    context_logger("docrepo.test", repo="handbook").info("Indexed 3 documents")
    shutdown_logging()

    content = log_file.read_text(encoding="utf-8")
    assert "[repo=handbook] Indexed 3 documents" in content


def test_context_logger_prefix_and_children(caplog) -> None:
    """TC-04: Bound fields prefix messages; children extend without mutating parents."""
    parent = context_logger("docrepo.ctx", repo="r")
    child = parent.child(source="s", ignored=None)

    with caplog.at_level(logging.INFO, logger="docrepo.ctx"):
        parent.info("parent")
        child.info("child")

    messages = [r.getMessage() for r in caplog.records]
    assert messages == ["[repo=r] parent", "[repo=r source=s] child"]
    assert caplog.records[1].context == {"repo": "r", "source": "s"}
    assert parent.fields == {"repo": "r"}


def test_ensure_logger_variants() -> None:
    assert isinstance(ensure_logger(None), ContextLogger)
    assert ensure_logger(None).logger.propagate is False

    handle = context_logger("docrepo.x")
    assert ensure_logger(handle) is handle
    assert ensure_logger(logging.getLogger("docrepo.y")).logger.name == "docrepo.y"

    with pytest.raises(TypeError):
        ensure_logger("not a logger")


def test_noop_logger_discards(caplog) -> None:
    """TC-05: The default handle drops records even with handlers attached to it directly."""
    handle = noop_logger()
    seen = []
    direct = logging.Handler()
    direct.emit = seen.append
    handle.logger.addHandler(direct)
    try:
        with caplog.at_level(logging.DEBUG), caplog.at_level(logging.DEBUG, logger=handle.logger.name):
            handle.warning("hidden")
            noop_logger().child(source="s").error("also hidden")
    finally:
        handle.logger.removeHandler(direct)

    assert seen == []
    assert "hidden" not in caplog.text
    assert handle.isEnabledFor(logging.CRITICAL) is False
