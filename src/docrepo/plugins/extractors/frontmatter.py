from __future__ import annotations

"""Collects every document's frontmatter, keyed by relative path."""

from typing import TYPE_CHECKING, Any, Dict

from docrepo.core.collaborators import Extractor
from docrepo.domain.models import Extraction
from docrepo.domain.nodes import to_jsonable

if TYPE_CHECKING:
    from docrepo.core.repo import DocRepo


class FrontmatterExtractor(Extractor):
    name = "frontmatter"
    requires_load = False

    async def extract(self, repo: "DocRepo") -> Extraction:
        doc_data: Dict[str, Any] = {}
        for doc in repo.docs():
            doc_data[doc.rel_path] = to_jsonable(doc.frontmatter)
        return Extraction(extractor_name=self.name, doc_data=doc_data)
