from __future__ import annotations

"""
Link Classification.

Turns raw link targets found in documents into OutLink records and
resolves local targets against the linking document's directory.
"""

import posixpath
import re
from typing import List, Optional
from urllib.parse import unquote, urlsplit

from docrepo.domain.models import LinkKind, OutLink

# [text](target "optional title") and ![alt](target)
_MD_LINK_RX = re.compile(r"!?\[(?P<text>[^\]]*)\]\((?P<target><[^>]+>|[^)\s]+)(?:\s+\"[^\"]*\")?\)")
_FENCE_RX = re.compile(r"^\s*(```|~~~)")


def classify_link(raw: str, from_path: str = "", line: Optional[int] = None) -> OutLink:
    """
    Classify a link target.

    Args:
        raw: Target exactly as written in the document.
        from_path: Relative path of the linking document, used to resolve
            relative targets.
        line: Optional 1-based line number.

    Returns:
        OutLink: external ('http...', '...://...', 'mailto:'), id ('id:...'),
        anchor ('#...'), absolute ('/...') or relative.
    """
    target = raw.strip()
    if target.startswith("<") and target.endswith(">"):
        target = target[1:-1]

    if target.startswith("http") or "://" in target or target.startswith("mailto:"):
        return OutLink(raw=raw, kind=LinkKind.EXTERNAL, anchor=urlsplit(target).fragment, line=line)

    if target.startswith("id:"):
        parts = urlsplit(target[3:])
        return OutLink(raw=raw, kind=LinkKind.ID, path=parts.path, anchor=parts.fragment, line=line)

    if target.startswith("#"):
        return OutLink(raw=raw, kind=LinkKind.ANCHOR, anchor=target[1:], line=line)

    parts = urlsplit(target)
    path = unquote(parts.path)
    if path.startswith("/"):
        resolved = posixpath.normpath(path).lstrip("/")
        return OutLink(raw=raw, kind=LinkKind.ABSOLUTE, path=resolved, anchor=parts.fragment, line=line)

    base = posixpath.dirname(from_path)
    resolved = posixpath.normpath(posixpath.join(base, path)) if path else from_path
    if resolved == ".":
        resolved = ""
    return OutLink(raw=raw, kind=LinkKind.RELATIVE, path=resolved, anchor=parts.fragment, line=line)


def find_markdown_links(text: str, from_path: str = "", *, line_offset: int = 0) -> List[OutLink]:
    """Collect inline markdown links and images outside fenced code blocks."""
    links: List[OutLink] = []
    in_fence = False
    for number, line in enumerate(text.splitlines(), start=1):
        if _FENCE_RX.match(line):
            in_fence = not in_fence
            continue
        if in_fence:
            continue
        for match in _MD_LINK_RX.finditer(line):
            links.append(classify_link(match.group("target"), from_path, number + line_offset))
    return links
