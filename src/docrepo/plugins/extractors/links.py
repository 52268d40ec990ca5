from __future__ import annotations

"""
Link Extractor.

Loads every document and reports its outgoing links. The global data is
a reverse index: target path to the documents linking to it.
"""

from typing import TYPE_CHECKING, Dict, List

from docrepo.core.collaborators import Extractor, load_documents
from docrepo.domain.models import Extraction

if TYPE_CHECKING:
    from docrepo.core.repo import DocRepo


class LinkExtractor(Extractor):
    name = "links"
    requires_load = True

    async def extract(self, repo: "DocRepo") -> Extraction:
        docs = repo.docs()
        await load_documents(docs)

        doc_data: Dict[str, List[dict]] = {}
        backlinks: Dict[str, List[str]] = {}
        for doc in docs:
            links = doc.links()
            doc_data[doc.rel_path] = [link.as_json() for link in links]
            for link in links:
                if link.is_local and link.path:
                    backlinks.setdefault(link.path, []).append(doc.rel_path)

        return Extraction(extractor_name=self.name, global_data={"backlinks": backlinks}, doc_data=doc_data)
