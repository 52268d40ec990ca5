from __future__ import annotations

"""
Filesystem Path Utilities.

Normalization helpers shared by listing, skeleton building and reads:
user paths are expanded to absolute OS paths, repository paths are kept
as POSIX strings relative to a source root and must never escape it.
"""

import os
import posixpath
from typing import List

from docrepo.domain.errors import InvariantViolation


def normalize_path(path: str, fallback: str = ".") -> str:
    """
    Expand env vars and '~' and return an absolute, normalized path.

    Args:
        path: Raw user supplied path.
        fallback: Used when ``path`` is empty.

    Returns:
        str: Absolute path.
    """
    raw = (path or "").strip() or fallback
    expanded = os.path.expandvars(os.path.expanduser(raw))
    return os.path.abspath(expanded)


def split_rel_path(path: str) -> List[str]:
    """
    Split a repository-relative path into clean segments.

    Backslashes become separators, leading './' and empty or '.' segments
    are dropped. A '..' segment or an absolute path is rejected.
    """
    cleaned = path.replace("\\", "/")
    if cleaned.startswith("/"):
        raise InvariantViolation(f"Expected a relative path, received '{path}'.")
    segments = [s for s in cleaned.split("/") if s and s != "."]
    if ".." in segments:
        raise InvariantViolation(f"Path '{path}' escapes the source root.")
    return segments


def to_rel_posix(path: str) -> str:
    """Canonical POSIX form of a repository-relative path ("" for the root)."""
    return "/".join(split_rel_path(path))


def join_rel(base: str, name: str) -> str:
    return posixpath.join(base, name) if base else name


def resolve_within_root(root: str, rel_path: str) -> str:
    """
    Map a relative path onto ``root`` and verify it stays inside it.

    Raises:
        InvariantViolation: The resolved path lies outside ``root``.
    """
    root_abs = os.path.abspath(root)
    full = os.path.abspath(os.path.join(root_abs, *split_rel_path(rel_path)))
    if full != root_abs and not full.startswith(root_abs + os.sep):
        raise InvariantViolation(f"Path '{rel_path}' escapes the source root '{root}'.")
    return full
