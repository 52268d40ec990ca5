from __future__ import annotations

"""Warns about directories that hold documents but no index document."""

from typing import TYPE_CHECKING, List

from docrepo.core.collaborators import Validator
from docrepo.domain.models import DocLocation, ValidationError, ValidationLevel
from docrepo.domain.nodes import DirNode, DocNode

if TYPE_CHECKING:
    from docrepo.core.repo import DocRepo


class IndexDocValidator(Validator):
    name = "index-docs"
    requires_load = False

    async def validate(self, repo: "DocRepo") -> List[ValidationError]:
        errors: List[ValidationError] = []
        for node in repo.walk_bfs():
            if not isinstance(node, DirNode) or node.hidden:
                continue
            has_docs = any(isinstance(c, DocNode) for c in node.children)
            if has_docs and node.find_index_doc() is None:
                errors.append(ValidationError(
                    name=self.name,
                    level=ValidationLevel.WARNING,
                    message=f"Directory '{node.rel_path or '/'}' has no index document",
                    location=DocLocation(rel_path=node.rel_path),
                ))
        return errors
