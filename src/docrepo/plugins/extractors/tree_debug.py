from __future__ import annotations

"""
Tree Debug Printer.

Renders the merged tree as indented text: documents and media of a
directory first, then its subdirectories.
"""

from typing import TYPE_CHECKING, List, Sequence

from docrepo.core.collaborators import Extractor
from docrepo.domain.models import Extraction
from docrepo.domain.nodes import DirNode, DocNode, MediaNode, Node

if TYPE_CHECKING:
    from docrepo.core.repo import DocRepo


class TreeDebugPrinter(Extractor):
    name = "tree-debug"
    requires_load = False

    async def extract(self, repo: "DocRepo") -> Extraction:
        lines = [f"Tree({repo.name})"]
        lines.extend(self.print_children(repo.tree().children))
        return Extraction(extractor_name=self.name, global_data="\n".join(lines))

    def print_node_header(self, node: Node) -> str:
        prefix = f"{'  ' * node.depth}{node.type.value} at '{node.rel_path}' (from {node.source.name}):"
        if isinstance(node, DocNode):
            return f"{prefix} {node.nav_title}"
        if isinstance(node, DirNode):
            return f"{prefix} {node.nav_title} with {len(node.children)} children"
        if isinstance(node, MediaNode):
            return f"{prefix} media type {node.media_type.value}"
        return f"{prefix} unknown node type"

    def print_children(self, children: Sequence[Node]) -> List[str]:
        lines: List[str] = []
        for child in children:
            lines.append(self.print_node_header(child))
            if isinstance(child, DirNode):
                files = [c for c in child.children if not isinstance(c, DirNode)]
                dirs = [c for c in child.children if isinstance(c, DirNode)]
                lines.extend(self.print_children(files))
                lines.extend(self.print_children(dirs))
        return lines
