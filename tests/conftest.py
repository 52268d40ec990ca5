from __future__ import annotations

"""
Global Pytest Configuration and Fixtures.

This module sets up the testing environment, including:
1. Path manipulation to ensure the 'src' directory is importable.
2. Factories for in-memory and on-disk sources shared across tests.
"""

import os
import sys
from pathlib import Path
from typing import Callable, Dict, Union

import pytest

# -----------------------------------------------------------------------------
# Path Configuration
# -----------------------------------------------------------------------------
_SRC_PATH = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "src"))
if _SRC_PATH not in sys.path:
    sys.path.insert(0, _SRC_PATH)

from docrepo.core.memory_source import MemorySource  # noqa: E402
from docrepo.domain.config import SourceConfig, SourceOptions  # noqa: E402
from docrepo.providers.markdown import MarkdownProvider  # noqa: E402


# -----------------------------------------------------------------------------
# Shared Fixtures
# -----------------------------------------------------------------------------
@pytest.fixture
def memory_source() -> Callable[..., MemorySource]:
    """
    Factory for in-memory markdown sources.

    Usage: ``memory_source({"a/one.md": "# One"}, name="docs", root="r1")``.
    Extra keyword arguments are forwarded to MemorySource.
    """

    def _make(
            files: Union[Dict[str, str], list],
            *,
            name: str = "test",
            root: str = "memory",
            config: SourceConfig = None,
            **kwargs,
    ) -> MemorySource:
        if isinstance(files, list):
            files = {path: "" for path in files}
        cfg = config or SourceConfig(options=SourceOptions(root=root))
        return MemorySource(name, files, MarkdownProvider(), config=cfg, **kwargs)

    return _make


@pytest.fixture
def write_files(tmp_path: Path) -> Callable[[Dict[str, str]], Path]:
    """Write ``{relative path: content}`` under tmp_path and return the root."""

    def _write(files: Dict[str, str], root: Path = tmp_path) -> Path:
        for rel, content in files.items():
            target = root / rel
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(content, encoding="utf-8")
        return root

    return _write
