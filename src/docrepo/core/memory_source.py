from __future__ import annotations

"""
In-Memory Source.

Serves files from a mapping of relative path to content. Listing order is
the mapping's insertion order, which makes it convenient for fixtures and
for content generated on the fly.
"""

from typing import Any, AsyncIterator, Dict, List, Optional, Sequence, Union

from docrepo.core.enrichment import Enrichment
from docrepo.core.source import Source, UrlExtractor
from docrepo.domain.config import SourceConfig
from docrepo.infra.fs import to_rel_posix
from docrepo.providers.base import Provider


class MemorySource(Source):
    source_type = "memory"

    def __init__(
            self,
            name: str,
            files: Dict[str, Union[str, bytes]],
            provider: Provider,
            *,
            config: Optional[SourceConfig] = None,
            enrichments: Sequence[Enrichment] = (),
            url_extractor: Optional[UrlExtractor] = None,
            logger: Optional[Any] = None,
    ) -> None:
        config = config or SourceConfig()
        super().__init__(
            name,
            config,
            provider,
            enrichments=enrichments,
            url_extractor=url_extractor,
            logger=logger,
        )
        self.files: Dict[str, bytes] = {
            to_rel_posix(path): content.encode("utf-8") if isinstance(content, str) else content
            for path, content in files.items()
        }

    async def list_files(self) -> List[str]:
        return list(self.files)

    async def read_bytes(self, rel_path: str) -> bytes:
        key = to_rel_posix(rel_path)
        if key not in self.files:
            raise FileNotFoundError(f"No such file in source '{self.name}': '{rel_path}'")
        return self.files[key]

    async def iter_lines(self, rel_path: str) -> AsyncIterator[str]:
        text = await self.read_text(rel_path)
        for line in text.splitlines(keepends=True):
            yield line

    async def file_exists(self, rel_path: str) -> bool:
        return to_rel_posix(rel_path) in self.files
