from __future__ import annotations

"""
Plain Markdown Provider.

Reference flavor: documents are built from their frontmatter alone during
discovery; load() reads the body, splits it into a light block structure
and collects inline links. Rendering is not HTML: render_other returns the
body text unchanged.
"""

import re
from typing import TYPE_CHECKING, Any, Dict, List, Optional

from docrepo.core.collaborators import Extractor, Validator
from docrepo.core.discovery.frontmatter import strip_frontmatter
from docrepo.core.enrichment import Enrichment
from docrepo.core.links import find_markdown_links
from docrepo.domain.models import OutLink
from docrepo.domain.nodes import DirNode, DocNode, to_jsonable
from docrepo.plugins.enrichments.category import CategoryEnrichment
from docrepo.plugins.enrichments.content_title import ContentTitleEnrichment
from docrepo.plugins.extractors.frontmatter import FrontmatterExtractor
from docrepo.plugins.validators.local_links import LocalLinkValidator
from docrepo.providers.base import RENDER_OTHER, LoadedDoc, Provider

if TYPE_CHECKING:
    from docrepo.core.source import Source

_HEADING_RX = re.compile(r"^(?P<hashes>#{1,6})\s+(?P<text>.+?)\s*#*\s*$")
_FENCE_RX = re.compile(r"^\s*(```|~~~)(?P<lang>[\w+-]*)")
_INLINE_LINK_RX = re.compile(r"!?\[([^\]]*)\]\([^)]*\)")


class MarkdownDoc(LoadedDoc):
    """Parsed markdown body."""

    render_target = RENDER_OTHER

    def __init__(self, body: str, links: List[OutLink], doc: DocNode) -> None:
        self.body = body
        self.doc = doc
        self._links = links
        self._blocks = _split_blocks(body)

    def ast(self) -> List[Dict[str, Any]]:
        return self._blocks

    def links(self) -> List[OutLink]:
        return list(self._links)

    def as_markdown(self) -> str:
        return self.body

    def render_other(self, **options: Any) -> str:
        return self.body

    def headings(self) -> List[Dict[str, Any]]:
        return [b for b in self._blocks if b["type"] == "heading"]

    def sections(self) -> List[Dict[str, Any]]:
        """Split the body at headings; text before the first heading forms a standalone section."""
        web_url = self.doc.web_url
        sections: List[Dict[str, Any]] = []
        current: Optional[Dict[str, Any]] = None
        for block in self._blocks:
            if block["type"] == "heading":
                current = {"level": block["level"], "web_url": web_url, "header": block["text"], "content": ""}
                sections.append(current)
                continue
            text = _plain_text(block["text"]).strip()
            if not text:
                continue
            if current is None:
                current = {"content": text}
                sections.append(current)
            else:
                current["content"] = f"{current['content']}\n{text}" if current["content"] else text
        return sections

    def extract_index(self) -> Dict[str, Any]:
        doc = self.doc
        return {
            "web_url": doc.web_url,
            "title": doc.title,
            "description": to_jsonable(doc.frontmatter.get("description")),
            "tags": list(doc.tags),
            "metadata": doc.metadata.to_dict(),
            "frontmatter": to_jsonable(doc.frontmatter),
            "sections": self.sections(),
        }


class MarkdownProvider(Provider):
    name = "markdown"

    async def build_doc_node(
            self,
            source: "Source",
            rel_path: str,
            index: int,
            parent: Optional[DirNode] = None,
    ) -> DocNode:
        frontmatter = await source.extract_frontmatter(rel_path)
        return DocNode(
            source,
            rel_path,
            index,
            parent,
            provider=self,
            frontmatter=frontmatter,
            index_doc_name=source.options.index_doc_name,
        )

    async def load(self, doc: DocNode) -> MarkdownDoc:
        text = await doc.read()
        opts = doc.source.options
        body = strip_frontmatter(
            text,
            marker=opts.frontmatter_marker,
            open_within=opts.frontmatter_open_within,
            max_lines=opts.frontmatter_max_lines,
            deserializer=opts.frontmatter_deserializer,
        )
        offset = len(text.splitlines()) - len(body.splitlines())
        return MarkdownDoc(body, find_markdown_links(body, doc.rel_path, line_offset=offset), doc)

    def default_enrichments(self) -> List[Enrichment]:
        return [CategoryEnrichment(), ContentTitleEnrichment()]

    def default_extractors(self) -> List[Extractor]:
        return [FrontmatterExtractor()]

    def default_validators(self) -> List[Validator]:
        return [LocalLinkValidator()]


def _split_blocks(body: str) -> List[Dict[str, Any]]:
    blocks: List[Dict[str, Any]] = []
    paragraph: List[str] = []
    code: Optional[Dict[str, Any]] = None

    def flush() -> None:
        if paragraph:
            blocks.append({"type": "paragraph", "text": " ".join(paragraph)})
            paragraph.clear()

    for number, line in enumerate(body.splitlines(), start=1):
        fence = _FENCE_RX.match(line)
        if code is not None:
            if fence:
                blocks.append(code)
                code = None
            else:
                code["text"] += line + "\n"
            continue
        if fence:
            flush()
            code = {"type": "code", "lang": fence.group("lang"), "text": "", "line": number}
            continue

        heading = _HEADING_RX.match(line)
        if heading:
            flush()
            blocks.append({
                "type": "heading",
                "level": len(heading.group("hashes")),
                "text": heading.group("text"),
                "line": number,
            })
        elif line.strip():
            paragraph.append(line.strip())
        else:
            flush()

    flush()
    if code is not None:
        blocks.append(code)
    return blocks


def _plain_text(text: str) -> str:
    """Replace inline links and images by their label or alt text."""
    return _INLINE_LINK_RX.sub(r"\1", text)
