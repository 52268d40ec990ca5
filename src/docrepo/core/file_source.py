from __future__ import annotations

"""
Local Filesystem Source.

Lists files under a root directory with os.walk and reads them through
worker threads (asyncio.to_thread) so the event loop keeps building other
parts of the tree while the disk is busy.
"""

import asyncio
import os
from typing import TYPE_CHECKING, Any, AsyncIterator, List, Optional, Sequence

from docrepo.core.discovery.filters import compile_patterns, matches_any, matches_glob
from docrepo.core.enrichment import Enrichment
from docrepo.core.source import Source, UrlExtractor
from docrepo.domain.config import SourceConfig
from docrepo.domain.errors import InvariantViolation
from docrepo.infra.fs import normalize_path, resolve_within_root

if TYPE_CHECKING:
    from docrepo.providers.base import Provider


class LocalFileSource(Source):
    """Source backed by a directory on local disk."""

    source_type = "files"

    def __init__(
            self,
            name: str,
            config: SourceConfig,
            provider: "Provider",
            *,
            enrichments: Sequence[Enrichment] = (),
            url_extractor: Optional[UrlExtractor] = None,
            logger: Optional[Any] = None,
    ) -> None:
        super().__init__(
            name,
            config,
            provider,
            enrichments=enrichments,
            url_extractor=url_extractor,
            logger=logger,
        )
        self.root = normalize_path(config.options.root)
        self._exclude_rx = compile_patterns(config.options.exclude_patterns)

    # -------------------------------------------------------------------------
    # LISTING
    # -------------------------------------------------------------------------

    async def list_files(self) -> List[str]:
        if not os.path.isdir(self.root):
            raise FileNotFoundError(f"Source root does not exist: '{self.root}'")
        return await asyncio.to_thread(self._scan)

    def _scan(self) -> List[str]:
        patterns = self.options.file_patterns()
        found: List[str] = []

        for current, dirs, files in os.walk(self.root):
            dirs[:] = [d for d in dirs if not matches_any(d, self._exclude_rx)]
            dirs.sort()
            files.sort()

            rel_dir = os.path.relpath(current, self.root)
            for file_name in files:
                if matches_any(file_name, self._exclude_rx):
                    continue
                rel_path = file_name if rel_dir == "." else os.path.join(rel_dir, file_name)
                rel_path = rel_path.replace(os.sep, "/")
                if matches_glob(rel_path, patterns):
                    found.append(rel_path)

        return found

    # -------------------------------------------------------------------------
    # READS
    # -------------------------------------------------------------------------

    async def read_bytes(self, rel_path: str) -> bytes:
        path = resolve_within_root(self.root, rel_path)
        return await asyncio.to_thread(_read_bytes, path)

    async def iter_lines(self, rel_path: str) -> AsyncIterator[str]:
        """Stream a text file line by line; the file is closed when iteration stops."""
        path = resolve_within_root(self.root, rel_path)
        handle = await asyncio.to_thread(open, path, "r", encoding="utf-8", errors="replace")
        try:
            while True:
                line = await asyncio.to_thread(handle.readline)
                if not line:
                    break
                yield line
        finally:
            handle.close()

    async def file_exists(self, rel_path: str) -> bool:
        try:
            path = resolve_within_root(self.root, rel_path)
        except InvariantViolation:
            return False
        return await asyncio.to_thread(os.path.isfile, path)


def _read_bytes(path: str) -> bytes:
    with open(path, "rb") as f:
        return f.read()
