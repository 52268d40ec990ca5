from __future__ import annotations

"""
Search Index Extractor.

Loads every document and collects its search index record: document
fields plus the body split into heading-delimited sections. A document
that fails to load or index is logged and left out; the rest of the
index is still produced.
"""

import asyncio
import logging
from typing import TYPE_CHECKING, Any, Dict, Optional

from docrepo.core.collaborators import Extractor
from docrepo.domain.errors import DocRepoError
from docrepo.domain.models import Extraction
from docrepo.domain.nodes import DocNode

if TYPE_CHECKING:
    from docrepo.core.repo import DocRepo

logger = logging.getLogger(__name__)


class SearchIndexExtractor(Extractor):
    name = "search-index"
    requires_load = True

    async def extract(self, repo: "DocRepo") -> Extraction:
        docs = repo.docs()
        records = await asyncio.gather(*(self._index(doc) for doc in docs))
        doc_data = {doc.rel_path: record for doc, record in zip(docs, records) if record is not None}
        return Extraction(extractor_name=self.name, doc_data=doc_data)

    async def _index(self, doc: DocNode) -> Optional[Dict[str, Any]]:
        try:
            await doc.load()
            return doc.extract_index()
        except (DocRepoError, OSError) as e:
            logger.error(f"Error extracting index for '{doc.rel_path}': {e}")
            return None
