from __future__ import annotations

"""
Repository Facade.

Owns the merged tree of one or more sources and the lookup indices built
from it in a single breadth-first pass. Indices map to lists because a
merge can legitimately leave several documents under one path or URL
(sources with different roots). Extraction and validation fan out to all
collaborators concurrently; the first failure propagates to the caller.
"""

import asyncio
from typing import Any, Dict, Iterator, List, Optional, Sequence

from docrepo.core.collaborators import Extractor, Validator, union_by_name
from docrepo.core.multi_source import MultiSource, MultiTree
from docrepo.core.tree import DocTree
from docrepo.domain.models import Extraction, ValidationError
from docrepo.domain.nodes import DocNode, MediaNode, Node
from docrepo.infra.logging import ContextLogger, ensure_logger


class DocRepo:
    """
    Read-only view over a merged set of source trees.

    Attributes:
        name: Repository name.
        sources: The sources the trees came from.
    """

    def __init__(
            self,
            name: str,
            trees: Sequence[DocTree],
            *,
            extractors: Sequence[Extractor] = (),
            validators: Sequence[Validator] = (),
            logger: Optional[Any] = None,
    ) -> None:
        self.name = name
        self.logger: ContextLogger = ensure_logger(logger).child(repo=name)
        self.sources = MultiSource([t.source for t in trees if t.source is not None])
        self._tree = MultiTree(trees)

        self._extractors = union_by_name(list(extractors), self.sources.default_extractors())
        self._validators = union_by_name(list(validators), self.sources.default_validators())

        self._docs: List[DocNode] = []
        self._media: List[MediaNode] = []
        self._docs_by_path: Dict[str, List[DocNode]] = {}
        self._docs_by_url: Dict[str, List[DocNode]] = {}
        self._media_by_path: Dict[str, List[MediaNode]] = {}
        self._build_indices()

    def _build_indices(self) -> None:
        for node in self._tree.walk_bfs():
            if isinstance(node, DocNode):
                self._docs.append(node)
                self._docs_by_path.setdefault(node.rel_path, []).append(node)
                self._docs_by_url.setdefault(node.web_url, []).append(node)
            elif isinstance(node, MediaNode):
                self._media.append(node)
                self._media_by_path.setdefault(node.rel_path, []).append(node)

        self.logger.info(f"Indexed {len(self._docs)} documents and {len(self._media)} media files")

    # -------------------------------------------------------------------------
    # LOOKUPS
    # -------------------------------------------------------------------------

    def tree(self) -> MultiTree:
        return self._tree

    def walk_bfs(self) -> Iterator[Node]:
        return self._tree.walk_bfs()

    def docs(self) -> List[DocNode]:
        return list(self._docs)

    def doc_by_path(self, rel_path: str) -> List[DocNode]:
        return list(self._docs_by_path.get(rel_path, []))

    def doc_by_url(self, url: str) -> List[DocNode]:
        return list(self._docs_by_url.get(url, []))

    def media(self) -> List[MediaNode]:
        return list(self._media)

    def media_item_by_path(self, rel_path: str) -> List[MediaNode]:
        return list(self._media_by_path.get(rel_path, []))

    def find_node_by_rel_path(self, rel_path: str) -> Optional[Node]:
        return self._tree.find_node_by_rel_path(rel_path)

    # -------------------------------------------------------------------------
    # COLLABORATOR FAN-OUT
    # -------------------------------------------------------------------------

    @property
    def extractors(self) -> List[Extractor]:
        return list(self._extractors)

    @property
    def validators(self) -> List[Validator]:
        return list(self._validators)

    async def extract(self) -> Dict[str, Extraction]:
        return await self.extract_set(self._extractors)

    async def extract_set(self, extractors: Sequence[Extractor]) -> Dict[str, Extraction]:
        """
        Run ``extractors`` concurrently.

        Returns:
            Dict[str, Extraction]: Results keyed by extractor name.
        """
        self.logger.debug(f"Running {len(extractors)} extractors")
        results = await asyncio.gather(*(e.extract(self) for e in extractors))
        return {e.name: r for e, r in zip(extractors, results)}

    async def validate(self) -> List[ValidationError]:
        return await self.validate_set(self._validators)

    async def validate_set(self, validators: Sequence[Validator]) -> List[ValidationError]:
        """Run ``validators`` concurrently and flatten their findings in validator order."""
        self.logger.debug(f"Running {len(validators)} validators")
        results = await asyncio.gather(*(v.validate(self) for v in validators))
        errors = [err for batch in results for err in batch]
        if errors:
            self.logger.info(f"Validation reported {len(errors)} findings")
        return errors
