from __future__ import annotations

"""
Multi-Source Aggregation.

Merges independently built source trees into one logical tree. Nodes are
folded by dedupe_id, first seen wins; on a collision the incoming node is
merged into the surviving one:

- directories union their children (recursively) and their metadata,
- media union their metadata, later source winning on key conflicts,
- documents cannot be merged and raise MergeConflictError.

Surviving nodes are mutated in place.
"""

import asyncio
import logging
from typing import Dict, Iterable, Iterator, List, Optional, Sequence

from docrepo.core.collaborators import Extractor, Validator, union_by_name
from docrepo.core.source import Source
from docrepo.core.tree import DocTree
from docrepo.domain.errors import MergeConflictError
from docrepo.domain.nodes import DedupeId, DirNode, DocNode, MediaNode, Node

logger = logging.getLogger(__name__)


# -----------------------------------------------------------------------------
# MERGE RULES
# -----------------------------------------------------------------------------

def merge_nodes(nodes: Iterable[Node]) -> List[Node]:
    """Fold ``nodes`` by dedupe_id, keeping first-encounter order."""
    merged: Dict[DedupeId, Node] = {}
    for node in nodes:
        key = node.dedupe_id()
        existing = merged.get(key)
        merged[key] = node if existing is None else merge(existing, node)
    return list(merged.values())


def merge(existing: Node, incoming: Node) -> Node:
    """
    Merge ``incoming`` into ``existing`` (same dedupe_id) and return ``existing``.

    Raises:
        MergeConflictError: Both are documents, or the node kinds differ.
    """
    if existing is incoming:
        return existing

    if existing.type != incoming.type:
        raise MergeConflictError(
            f"Cannot merge {incoming.type.value} into {existing.type.value} "
            f"at '{existing.rel_path}' (root '{existing.source.root}')."
        )

    if isinstance(existing, DocNode):
        raise MergeConflictError(
            f"Document '{existing.rel_path}' is provided by both "
            f"'{existing.source.name}' and '{incoming.source.name}'."
        )

    if isinstance(existing, DirNode) and isinstance(incoming, DirNode):
        logger.debug(
            f"Merging directory '{existing.rel_path}' from '{incoming.source.name}' "
            f"into '{existing.source.name}'"
        )
        existing.metadata.update(incoming.metadata)
        children = merge_nodes(list(existing.children) + list(incoming.children))
        for child in children:
            child.parent = existing
        existing.children = children
        return existing

    if isinstance(existing, MediaNode):
        existing.metadata.update(incoming.metadata)
        return existing

    raise MergeConflictError(f"Unsupported node kind at '{existing.rel_path}'.")


# -----------------------------------------------------------------------------
# MERGED VIEW
# -----------------------------------------------------------------------------

class MultiTree(DocTree):
    """
    Merged view over several source trees.

    Attributes:
        trees: Constituent trees, in source order.
    """

    def __init__(self, trees: Sequence[DocTree]) -> None:
        self.trees: List[DocTree] = list(trees)
        flattened: List[Node] = [node for tree in self.trees for node in tree.children]
        super().__init__(None, merge_nodes(flattened))

    def find_node_by_rel_path(self, rel_path: str) -> Optional[Node]:
        """Look up in the merged view, then fall back to each constituent tree."""
        found = super().find_node_by_rel_path(rel_path)
        if found is not None:
            return found
        for tree in self.trees:
            found = tree.find_node_by_rel_path(rel_path)
            if found is not None:
                return found
        return None

    def find_nodes_by_rel_path(self, rel_path: str) -> List[Node]:
        return [n for n in self.walk_bfs() if n.rel_path == rel_path]

    def as_json(self) -> Dict[str, object]:
        return {
            "sources": [t.source.name for t in self.trees if t.source is not None],
            "children": [c.as_json() for c in self.children],
        }


class MultiSource:
    """Builds several sources concurrently and merges their collaborators."""

    def __init__(self, sources: Sequence[Source]) -> None:
        self.sources: List[Source] = list(sources)

    def __iter__(self) -> Iterator[Source]:
        return iter(self.sources)

    async def build_trees(self) -> List[DocTree]:
        return list(await asyncio.gather(*(s.build_tree() for s in self.sources)))

    async def build_tree(self) -> MultiTree:
        trees = await self.build_trees()
        return MultiTree(trees)

    def default_extractors(self) -> List[Extractor]:
        return union_by_name([], (e for s in self.sources for e in s.default_extractors()))

    def default_validators(self) -> List[Validator]:
        return union_by_name([], (v for s in self.sources for v in s.default_validators()))

    def source_by_name(self, name: str) -> Optional[Source]:
        for source in self.sources:
            if source.name == name:
                return source
        return None
