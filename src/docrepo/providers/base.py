from __future__ import annotations

"""
Markup Flavor Contracts.

A Provider knows one markup flavor. It builds DocNode instances during
discovery (frontmatter only, no body parsing) and, on request, parses a
document into a LoadedDoc capability object that the node keeps. The
capability exposes the syntax tree, links and exactly one render call,
selected by ``render_target``.
"""

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, Dict, List, Optional

from docrepo.domain.errors import RenderTargetError
from docrepo.domain.models import OutLink
from docrepo.domain.nodes import DirNode, DocNode

if TYPE_CHECKING:
    from docrepo.core.collaborators import Extractor, Validator
    from docrepo.core.enrichment import Enrichment
    from docrepo.core.source import Source

RENDER_HTML = "html"
RENDER_REACT = "react"
RENDER_OTHER = "other"


# -----------------------------------------------------------------------------
# LOADED DOCUMENT CAPABILITY
# -----------------------------------------------------------------------------

class LoadedDoc(ABC):
    """
    Parsed view of a document.

    Subclasses implement the render call matching ``render_target``; the
    other two raise RenderTargetError.
    """

    render_target: str = RENDER_OTHER

    @abstractmethod
    def ast(self) -> Any:
        raise NotImplementedError

    @abstractmethod
    def links(self) -> List[OutLink]:
        raise NotImplementedError

    def local_links(self) -> List[OutLink]:
        return [link for link in self.links() if link.is_local]

    @abstractmethod
    def as_markdown(self) -> str:
        raise NotImplementedError

    @abstractmethod
    def extract_index(self) -> Dict[str, Any]:
        """
        Build the search index record of the document.

        Returns:
            Dict[str, Any]: web_url, title, description, tags, metadata,
            frontmatter and sections. A section is ``{"level", "web_url",
            "header", "content"}`` when it starts at a heading, or just
            ``{"content"}`` for text before the first heading.
        """
        raise NotImplementedError

    def render_html(self, **options: Any) -> str:
        raise RenderTargetError(f"render_html is not available for target '{self.render_target}'.")

    def render_react(self, **options: Any) -> Any:
        raise RenderTargetError(f"render_react is not available for target '{self.render_target}'.")

    def render_other(self, **options: Any) -> Any:
        raise RenderTargetError(f"render_other is not available for target '{self.render_target}'.")


# -----------------------------------------------------------------------------
# PROVIDER
# -----------------------------------------------------------------------------

class Provider(ABC):
    """Flavor-specific factory for document nodes and their parsed form."""

    name: str = "provider"

    @abstractmethod
    async def build_doc_node(
            self,
            source: "Source",
            rel_path: str,
            index: int,
            parent: Optional[DirNode] = None,
    ) -> DocNode:
        raise NotImplementedError

    @abstractmethod
    async def load(self, doc: DocNode) -> LoadedDoc:
        raise NotImplementedError

    def default_enrichments(self) -> List["Enrichment"]:
        return []

    def default_extractors(self) -> List["Extractor"]:
        return []

    def default_validators(self) -> List["Validator"]:
        return []
