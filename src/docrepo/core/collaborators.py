from __future__ import annotations

"""
Extractor and Validator Contracts.

Both run against a fully built, read-only repository. Collaborators that
need parsed documents declare ``requires_load`` and call ``load()`` on the
documents themselves; the repository never loads documents on its own.
"""

import asyncio
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Iterable, List, Sequence, TypeVar

from docrepo.domain.models import Extraction, ValidationError
from docrepo.domain.nodes import DocNode

if TYPE_CHECKING:
    from docrepo.core.repo import DocRepo


class Extractor(ABC):
    """Derives structured data from a repository."""

    name: str = "extractor"
    requires_load: bool = False

    @abstractmethod
    async def extract(self, repo: "DocRepo") -> Extraction:
        raise NotImplementedError


class Validator(ABC):
    """Checks a repository and reports findings."""

    name: str = "validator"
    requires_load: bool = False

    @abstractmethod
    async def validate(self, repo: "DocRepo") -> List[ValidationError]:
        raise NotImplementedError


T = TypeVar("T", Extractor, Validator)


def union_by_name(configured: Sequence[T], defaults: Iterable[T]) -> List[T]:
    """Configured collaborators first, then defaults whose name is not taken yet."""
    result: List[T] = []
    seen = set()
    for item in list(configured) + list(defaults):
        if item.name in seen:
            continue
        seen.add(item.name)
        result.append(item)
    return result


async def load_documents(docs: Iterable[DocNode]) -> None:
    """Load every document concurrently. Used by collaborators that require load."""
    await asyncio.gather(*(doc.load() for doc in docs))
