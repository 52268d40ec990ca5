from __future__ import annotations

"""
Per-Source Document Tree.

Thin wrapper around the top-level nodes produced by one build. For a
filesystem source this is a single synthetic root directory (rel_path "").
"""

from collections import deque
from typing import TYPE_CHECKING, Any, Dict, Iterator, List, Optional

from docrepo.domain.nodes import DirNode, DocNode, MediaNode, Node

if TYPE_CHECKING:
    from docrepo.core.source import Source


class DocTree:
    """
    Ordered top-level nodes of one source.

    Attributes:
        source: The source that built the tree.
        children: Top-level nodes in build order.
    """

    def __init__(self, source: Optional["Source"], children: List[Node]) -> None:
        self.source = source
        self.children: List[Node] = children

    @property
    def root(self) -> Optional[DirNode]:
        """The single top-level directory, if the tree has exactly one."""
        if len(self.children) == 1 and isinstance(self.children[0], DirNode):
            return self.children[0]
        return None

    def walk_bfs(self) -> Iterator[Node]:
        """Yield every node breadth-first, top-level nodes included. Restartable."""
        pending: deque = deque(self.children)
        while pending:
            node = pending.popleft()
            yield node
            if isinstance(node, DirNode):
                pending.extend(node.children)

    def doc_nodes(self) -> List[DocNode]:
        return [n for n in self.walk_bfs() if isinstance(n, DocNode)]

    def media_nodes(self) -> List[MediaNode]:
        return [n for n in self.walk_bfs() if isinstance(n, MediaNode)]

    def nav_children(self) -> List[Node]:
        """Navigable children of the root(s), sorted by index."""
        result: List[Node] = []
        for node in self.children:
            if isinstance(node, DirNode):
                result.extend(node.nav_children())
            elif node.navigable():
                result.append(node)
        return result

    def find_node_by_rel_path(self, rel_path: str) -> Optional[Node]:
        for node in self.walk_bfs():
            if node.rel_path == rel_path:
                return node
        return None

    def as_json(self) -> Dict[str, Any]:
        return {
            "source": self.source.name if self.source is not None else None,
            "children": [c.as_json() for c in self.children],
        }
