from __future__ import annotations

"""
Plugin Registry.

Maps configuration names to factories for flavors, enrichments, extractors
and validators. A reference may be a registered name, a mapping
``{"name": ..., "options": {...}}`` whose options are passed to the
factory, a zero-argument factory, or a ready instance. Unknown names fail
fast with ConfigurationError.
"""

import logging
from typing import Any, Callable, Dict, List, Sequence, Type, TypeVar

from docrepo.core.collaborators import Extractor, Validator
from docrepo.core.enrichment import Enrichment
from docrepo.domain.errors import ConfigurationError
from docrepo.plugins.enrichments.category import CategoryEnrichment
from docrepo.plugins.enrichments.content_title import ContentTitleEnrichment
from docrepo.plugins.enrichments.title_index_version import TitleIndexVersionEnrichment
from docrepo.plugins.extractors.frontmatter import FrontmatterExtractor
from docrepo.plugins.extractors.links import LinkExtractor
from docrepo.plugins.extractors.search_index import SearchIndexExtractor
from docrepo.plugins.extractors.tree_debug import TreeDebugPrinter
from docrepo.plugins.validators.index_docs import IndexDocValidator
from docrepo.plugins.validators.local_links import LocalLinkValidator
from docrepo.providers.base import Provider
from docrepo.providers.markdown import MarkdownProvider

logger = logging.getLogger(__name__)

T = TypeVar("T")
Factory = Callable[..., Any]


class PluginRegistry:
    """Name tables for every pluggable kind."""

    def __init__(self) -> None:
        self.flavors: Dict[str, Factory] = {"markdown": MarkdownProvider}
        self.enrichments: Dict[str, Factory] = {
            "title-index-version": TitleIndexVersionEnrichment,
            "content-title": ContentTitleEnrichment,
            "category": CategoryEnrichment,
        }
        self.extractors: Dict[str, Factory] = {
            "tree-debug": TreeDebugPrinter,
            "frontmatter": FrontmatterExtractor,
            "links": LinkExtractor,
            "search-index": SearchIndexExtractor,
        }
        self.validators: Dict[str, Factory] = {
            "local-links": LocalLinkValidator,
            "index-docs": IndexDocValidator,
        }

    # -------------------------------------------------------------------------
    # REGISTRATION
    # -------------------------------------------------------------------------

    def register_flavor(self, name: str, factory: Factory) -> None:
        self.flavors[name] = factory

    def register_enrichment(self, name: str, factory: Factory) -> None:
        self.enrichments[name] = factory

    def register_extractor(self, name: str, factory: Factory) -> None:
        self.extractors[name] = factory

    def register_validator(self, name: str, factory: Factory) -> None:
        self.validators[name] = factory

    # -------------------------------------------------------------------------
    # RESOLUTION
    # -------------------------------------------------------------------------

    def resolve_flavor(self, ref: Any) -> Provider:
        return _resolve_one("flavor", ref, self.flavors, Provider)

    def resolve_enrichments(self, refs: Sequence[Any]) -> List[Enrichment]:
        return [_resolve_one("enrichment", r, self.enrichments, Enrichment) for r in refs]

    def resolve_extractors(self, refs: Sequence[Any]) -> List[Extractor]:
        return [_resolve_one("extractor", r, self.extractors, Extractor) for r in refs]

    def resolve_validators(self, refs: Sequence[Any]) -> List[Validator]:
        return [_resolve_one("validator", r, self.validators, Validator) for r in refs]


def _resolve_one(kind: str, ref: Any, table: Dict[str, Factory], expected: Type[T]) -> T:
    if isinstance(ref, expected):
        return ref

    options: Dict[str, Any] = {}
    if isinstance(ref, dict):
        if "name" not in ref:
            raise ConfigurationError(f"Invalid {kind} reference {ref!r}: missing 'name'.")
        options = dict(ref.get("options") or {})
        ref = ref["name"]

    if isinstance(ref, str):
        factory = table.get(ref)
        if factory is None:
            known = ", ".join(sorted(table))
            raise ConfigurationError(f"Unknown {kind} '{ref}'. Known: {known}.")
        try:
            instance = factory(**options)
        except TypeError as e:
            raise ConfigurationError(f"Invalid options for {kind} '{ref}': {e}") from e
    elif callable(ref):
        instance = ref()
    else:
        raise ConfigurationError(f"Invalid {kind} reference of type {type(ref).__name__}.")

    if not isinstance(instance, expected):
        raise ConfigurationError(
            f"The {kind} factory returned {type(instance).__name__}, expected {expected.__name__}."
        )
    logger.debug(f"Resolved {kind} {type(instance).__name__}")
    return instance
