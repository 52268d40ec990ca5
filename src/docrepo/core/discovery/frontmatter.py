from __future__ import annotations

"""
Bounded Frontmatter Scanner.

Pulls the metadata block at the head of a document out of an async line
stream without reading the body. Two bounds apply: the opening marker must
show up within the first ``open_within`` lines, and an open block stops
being consumed after ``max_lines`` lines in total.
"""

import logging
from typing import Any, AsyncIterator, Callable, Dict, List, Optional, Tuple

import yaml

from docrepo.domain.config import (
    DEFAULT_FRONTMATTER_MARKER,
    DEFAULT_FRONTMATTER_MAX_LINES,
    DEFAULT_FRONTMATTER_OPEN_WITHIN,
)
from docrepo.domain.errors import FrontmatterError

logger = logging.getLogger(__name__)

Deserializer = Callable[[str], Any]


# -----------------------------------------------------------------------------
# PUBLIC API
# -----------------------------------------------------------------------------

def parse_yaml_frontmatter(block: str) -> Any:
    """Default deserializer: safe YAML."""
    return yaml.safe_load(block)


async def extract_frontmatter(
        lines: AsyncIterator[str],
        *,
        marker: str = DEFAULT_FRONTMATTER_MARKER,
        open_within: int = DEFAULT_FRONTMATTER_OPEN_WITHIN,
        max_lines: int = DEFAULT_FRONTMATTER_MAX_LINES,
        deserializer: Optional[Deserializer] = None,
        rel_path: str = "<stream>",
) -> Dict[str, Any]:
    """
    Scan a line stream for a frontmatter block and deserialize it.

    Args:
        lines: Async iterator of text lines (line endings optional).
        marker: Line that opens and closes the block.
        open_within: Number of leading lines searched for the opening marker.
        max_lines: Maximum number of lines consumed while the block is open.
        deserializer: Block text to mapping; YAML when None.
        rel_path: Used in error and log messages only.

    Returns:
        Dict[str, Any]: The deserialized block, or {} when there is no block
        or the result is not a mapping.

    Raises:
        FrontmatterError: A closed block failed to deserialize.
        OSError: The underlying stream failed.
    """
    deserialize = deserializer or parse_yaml_frontmatter
    captured: List[str] = []
    opened = False
    closed = False
    consumed = 0

    try:
        async for raw in lines:
            consumed += 1
            line = raw.rstrip("\r\n")

            if not opened:
                if line.strip() == marker:
                    opened = True
                elif consumed >= open_within:
                    return {}
                continue

            if line.strip() == marker:
                closed = True
                break

            captured.append(line)
            if consumed >= max_lines:
                logger.debug(f"Frontmatter in '{rel_path}' not closed within {max_lines} lines")
                break
    finally:
        aclose = getattr(lines, "aclose", None)
        if aclose is not None:
            await aclose()

    if not opened:
        return {}

    block = "\n".join(captured)
    if closed:
        try:
            data = deserialize(block)
        except Exception as e:
            raise FrontmatterError(rel_path, str(e)) from e
    else:
        try:
            data = deserialize(block)
        except Exception as e:
            logger.warning(f"Discarding truncated frontmatter in '{rel_path}': {e}")
            return {}

    return data if isinstance(data, dict) else {}


def locate_frontmatter(
        lines: List[str],
        *,
        marker: str = DEFAULT_FRONTMATTER_MARKER,
        open_within: int = DEFAULT_FRONTMATTER_OPEN_WITHIN,
        max_lines: int = DEFAULT_FRONTMATTER_MAX_LINES,
) -> Optional[Tuple[int, int]]:
    """
    Find the closed frontmatter block the line scanner would accept.

    Returns:
        Optional[Tuple[int, int]]: Indices of the opening and closing marker
        lines, or None when the block is missing or not closed within the
        same bounds extract_frontmatter applies.
    """
    start = None
    for i, raw in enumerate(lines[:open_within]):
        if raw.rstrip("\r\n").strip() == marker:
            start = i
            break
    if start is None:
        return None
    # The closing marker counts against max_lines like any consumed line.
    for j in range(start + 1, min(len(lines), max_lines)):
        if lines[j].rstrip("\r\n").strip() == marker:
            return start, j
    return None


def strip_frontmatter(
        text: str,
        *,
        marker: str = DEFAULT_FRONTMATTER_MARKER,
        open_within: int = DEFAULT_FRONTMATTER_OPEN_WITHIN,
        max_lines: int = DEFAULT_FRONTMATTER_MAX_LINES,
        deserializer: Optional[Deserializer] = None,
) -> str:
    """
    Return ``text`` without its leading frontmatter block.

    Only a block that discovery would have accepted is removed: closed
    within the bounds and deserializing to a mapping. Anything else, such
    as a horizontal rule near the top, stays part of the body.
    """
    lines = text.splitlines(keepends=True)
    span = locate_frontmatter(lines, marker=marker, open_within=open_within, max_lines=max_lines)
    if span is None:
        return text
    start, end = span
    block = "\n".join(line.rstrip("\r\n") for line in lines[start + 1:end])
    try:
        data = (deserializer or parse_yaml_frontmatter)(block)
    except Exception as e:
        logger.debug(f"Keeping unparsable leading block in the body: {e}")
        return text
    if not isinstance(data, dict):
        return text
    return "".join(lines[end + 1:])


async def iter_text_lines(text: str) -> AsyncIterator[str]:
    """Adapt an in-memory string to the async line stream the scanner reads."""
    for line in text.splitlines(keepends=True):
        yield line
