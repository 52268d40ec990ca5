from __future__ import annotations

"""
Content Title Enrichment.

Uses the first level-one heading of a document as its title when neither
the frontmatter nor earlier enrichments provided one. A leading frontmatter
block is skipped, so YAML comments inside it never become titles.
"""

from typing import Optional

from docrepo.core.enrichment import Enrichment
from docrepo.domain.nodes import DocNode


class ContentTitleEnrichment(Enrichment):
    name = "content-title"
    description = "Sets the document title from its first '# ' heading"

    def __init__(self, max_lines: Optional[int] = None) -> None:
        self.max_lines = max_lines

    async def find_title(self, node: DocNode) -> Optional[str]:
        opts = node.source.options
        lines = node.source.iter_lines(node.rel_path)
        consumed = 0
        # None before the block is seen, True inside it, False once closed or absent.
        in_block: Optional[bool] = None if node.frontmatter else False
        try:
            async for line in lines:
                consumed += 1
                if self.max_lines is not None and consumed > self.max_lines:
                    return None
                if in_block is not False and line.strip() == opts.frontmatter_marker:
                    if in_block is None and consumed <= opts.frontmatter_open_within:
                        in_block = True
                        continue
                    if in_block:
                        in_block = False
                        continue
                if in_block:
                    continue
                if line.startswith("# "):
                    return line[2:].strip()
        finally:
            aclose = getattr(lines, "aclose", None)
            if aclose is not None:
                await aclose()
        return None

    async def enrich_doc(self, node: DocNode) -> DocNode:
        if node.frontmatter.get("title") or node.metadata.get("title"):
            return node
        title = await self.find_title(node)
        if title:
            node.title = title
            if not node.frontmatter.get("navTitle"):
                node.nav_title = title
        return node
