from __future__ import annotations

"""
Discovery-Time Enrichment Pipeline.

Enrichments are ordered, vetoable transforms applied to each node right
after it is created. A hook returns the node (usually mutated in place)
or the REMOVE sentinel; the first REMOVE stops the chain and the node is
dropped from the tree. Hooks may only touch the node and the source's
read helpers (read_text, file_exists...).
"""

from typing import Any, List, Optional, Sequence, Union

from docrepo.domain.errors import EnrichmentError
from docrepo.domain.nodes import DirNode, DocNode, MediaNode, Node


class _Removal:
    _instance: Optional["_Removal"] = None

    def __new__(cls) -> "_Removal":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "REMOVE"

    def __bool__(self) -> bool:
        return False


REMOVE = _Removal()

DirResult = Union[DirNode, _Removal]
DocResult = Union[DocNode, _Removal]
MediaResult = Union[MediaNode, _Removal]


class Enrichment:
    """
    Base class for enrichments; override any subset of the hooks.

    Attributes:
        name: Registry name.
        description: One-line summary shown by tooling.
        metadata_fields: Metadata keys this enrichment may write.
    """

    name: str = "enrichment"
    description: str = ""
    metadata_fields: Sequence[str] = ()

    async def enrich_dir(self, node: DirNode) -> DirResult:
        return node

    async def enrich_doc(self, node: DocNode) -> DocResult:
        return node

    async def enrich_media(self, node: MediaNode) -> MediaResult:
        return node

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r})"


class EnrichmentPipeline:
    """Runs the configured enrichments over a node in order."""

    def __init__(self, enrichments: Sequence[Enrichment]) -> None:
        self.enrichments: List[Enrichment] = list(enrichments)

    async def apply(self, node: Node) -> Optional[Node]:
        """
        Run every applicable hook on ``node``.

        Returns:
            Optional[Node]: The resulting node, or None if a hook vetoed it.

        Raises:
            EnrichmentError: A hook returned something other than a node of
                the same kind or REMOVE.
        """
        current = node
        for enrichment in self.enrichments:
            result = await _dispatch(enrichment, current)
            if result is REMOVE:
                return None
            if not isinstance(result, type(node)):
                raise EnrichmentError(
                    f"Enrichment '{enrichment.name}' returned {type(result).__name__} "
                    f"for '{node.rel_path}'; expected {type(node).__name__} or REMOVE."
                )
            current = result
        return current


async def _dispatch(enrichment: Enrichment, node: Node) -> Any:
    if isinstance(node, DirNode):
        return await enrichment.enrich_dir(node)
    if isinstance(node, DocNode):
        return await enrichment.enrich_doc(node)
    if isinstance(node, MediaNode):
        return await enrichment.enrich_media(node)
    raise EnrichmentError(f"Cannot enrich node of type {type(node).__name__}.")
