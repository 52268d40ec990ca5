from __future__ import annotations

"""
Title / Index / Version Enrichment.

Reads naming conventions such as ``02 - v1.3 - Getting Started`` from a
directory or document stem: the leading number becomes the sort index,
the version goes to ``metadata["version"]`` and the rest becomes the
navigation title. Identity (the relative path) is never touched.
"""

import re
from typing import Optional, Pattern, Union

from docrepo.core.enrichment import Enrichment
from docrepo.domain.nodes import DirNode, DocNode

DEFAULT_TITLE_INDEX_VERSION_RX = re.compile(
    r"^(?P<idx>\d+)?\s*-?\s*(?P<version>v\d+(\.\d+)?(\.\d+)?)?\s*-?\s*(?P<name>.*)"
)


class TitleIndexVersionEnrichment(Enrichment):
    name = "title-index-version"
    description = "Extracts title, version and index from the file or directory name"
    metadata_fields = ("version",)

    def __init__(self, pattern: Optional[Union[str, Pattern[str]]] = None) -> None:
        if pattern is None:
            self.pattern = DEFAULT_TITLE_INDEX_VERSION_RX
        else:
            self.pattern = re.compile(pattern) if isinstance(pattern, str) else pattern

    def _apply(self, node: Union[DirNode, DocNode]) -> None:
        match = self.pattern.match(node.stem)
        if not match:
            return
        groups = match.groupdict()
        title = (groups.get("name") or "").strip()
        if title:
            node.nav_title = title
        if groups.get("version"):
            node.metadata["version"] = groups["version"]
        if groups.get("idx"):
            node.index = int(groups["idx"])

    async def enrich_dir(self, node: DirNode) -> DirNode:
        if node.rel_path:
            self._apply(node)
        return node

    async def enrich_doc(self, node: DocNode) -> DocNode:
        self._apply(node)
        return node
