from __future__ import annotations

"""
Category File Enrichment.

Looks for a ``_category_.json`` (or ``.yaml`` / ``.yml``) file inside each
directory, in the style of Docusaurus. ``label`` becomes the navigation
title, an integer ``position`` the sort index, and the whole document is
kept under ``metadata["category"]``. Unreadable files are logged and
ignored.
"""

import json
from typing import Any, Dict, Optional

import yaml

from docrepo.core.enrichment import Enrichment
from docrepo.domain.nodes import DirNode
from docrepo.infra.fs import join_rel

CATEGORY_FILES = ("_category_.json", "_category_.yaml", "_category_.yml")


class CategoryEnrichment(Enrichment):
    name = "category"
    description = "Reads _category_ files and adds them to directory nodes"
    metadata_fields = ("category",)

    async def read_category(self, node: DirNode) -> Optional[Dict[str, Any]]:
        source = node.source
        for file_name in CATEGORY_FILES:
            rel_path = join_rel(node.rel_path, file_name)
            if not await source.file_exists(rel_path):
                continue
            content = await source.read_text(rel_path)
            try:
                data = json.loads(content) if file_name.endswith(".json") else yaml.safe_load(content)
            except (ValueError, yaml.YAMLError) as e:
                source.logger.warning(f"Error parsing '{rel_path}': {e}")
                return None
            if not isinstance(data, dict):
                source.logger.warning(f"Ignoring '{rel_path}': expected a mapping")
                return None
            return data
        return None

    async def enrich_dir(self, node: DirNode) -> DirNode:
        category = await self.read_category(node)
        if not category:
            return node

        label = category.get("label")
        if isinstance(label, str) and label:
            node.nav_title = label
        position = category.get("position")
        if isinstance(position, int) and not isinstance(position, bool):
            node.index = position

        node.metadata["category"] = _metadata_safe(category)
        return node


def _metadata_safe(value: Any) -> Any:
    """Drop values the metadata bag cannot hold (null, dates...)."""
    if isinstance(value, dict):
        return {
            str(k): _metadata_safe(v)
            for k, v in value.items()
            if _metadata_safe(v) is not None
        }
    if isinstance(value, list):
        return [_metadata_safe(v) for v in value if _metadata_safe(v) is not None]
    if isinstance(value, (str, int, float, bool)):
        return value
    return None
