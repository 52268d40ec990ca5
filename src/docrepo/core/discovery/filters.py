from __future__ import annotations

"""
Listing Filters.

Glob patterns select files; regex patterns exclude path segments. Glob
matching uses fnmatch on the POSIX relative path, where '*' also crosses
'/', so "*.png" selects PNG files at any depth.
"""

import fnmatch
import logging
import re
from typing import List, Sequence

logger = logging.getLogger(__name__)


def compile_patterns(patterns: Sequence[str]) -> List[re.Pattern]:
    """
    Compile regex strings, skipping malformed ones with a warning.

    Args:
        patterns: Raw regex strings.

    Returns:
        List[re.Pattern]: Compiled patterns.
    """
    compiled: List[re.Pattern] = []
    for p in patterns:
        try:
            compiled.append(re.compile(p))
        except re.error as e:
            logger.warning(f"Ignoring invalid exclude pattern '{p}': {e}")
    return compiled


def matches_any(name: str, compiled_patterns: Sequence[re.Pattern]) -> bool:
    return any(rx.search(name) for rx in compiled_patterns)


def normalize_glob(pattern: str) -> str:
    """Strip the leading './' some configs use."""
    while pattern.startswith("./"):
        pattern = pattern[2:]
    return pattern


def matches_glob(rel_path: str, patterns: Sequence[str]) -> bool:
    """True if the POSIX relative path matches any glob pattern."""
    for raw in patterns:
        pattern = normalize_glob(raw)
        if fnmatch.fnmatchcase(rel_path, pattern):
            return True
        # "**/*.md" must also select files at the root.
        if pattern.startswith("**/") and fnmatch.fnmatchcase(rel_path, pattern[3:]):
            return True
    return False
