from __future__ import annotations

"""
Source Engine.

A Source is one configured origin of content. It lists files, builds the
raw skeleton, then materializes nodes breadth-first: a directory is built
and enriched before anything below it, so every non-root directory finds
its parent already registered. Directories of one BFS level are built
concurrently, and so are the files of one directory; results are attached
in skeleton order so the tree shape never depends on I/O timing.

Concrete sources implement the listing and read contract (list_files,
read_bytes, iter_lines, file_exists); see LocalFileSource.
"""

import asyncio
import posixpath
from abc import ABC, abstractmethod
from collections import deque
from typing import (
    TYPE_CHECKING,
    Any,
    AsyncIterator,
    Callable,
    Deque,
    Dict,
    List,
    Optional,
    Sequence,
    Tuple,
)

from docrepo.core.discovery.frontmatter import extract_frontmatter
from docrepo.core.discovery.skeleton import RawDir, build_raw_tree
from docrepo.core.enrichment import Enrichment, EnrichmentPipeline
from docrepo.core.tree import DocTree
from docrepo.domain.config import FILE_KINDS, SourceConfig, SourceOptions
from docrepo.domain.errors import InvariantViolation
from docrepo.domain.nodes import DirNode, MediaNode, MediaType, Node
from docrepo.infra.fs import join_rel
from docrepo.infra.logging import ContextLogger, ensure_logger

if TYPE_CHECKING:
    from docrepo.core.collaborators import Extractor, Validator
    from docrepo.providers.base import Provider

UrlExtractor = Callable[[Node], Optional[str]]


class Source(ABC):
    """
    Base class for content origins.

    Attributes:
        name: Source name, unique within a repository.
        config: Source configuration.
        provider: Flavor provider used for documents.
        root: Root identifier; first component of every node's dedupe_id.
        logger: Injected logging handle (no-op by default).
    """

    source_type: str = "abstract"

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
        self.name = name
        self.config = config
        self.provider = provider
        self.root: str = config.options.root
        self.url_extractor = url_extractor
        self.logger: ContextLogger = ensure_logger(logger).child(source=name)
        self._enrichments: List[Enrichment] = list(enrichments)

    @property
    def options(self) -> SourceOptions:
        return self.config.options

    # -------------------------------------------------------------------------
    # COLLABORATORS
    # -------------------------------------------------------------------------

    @property
    def enrichments(self) -> List[Enrichment]:
        """Configured enrichments followed by the provider defaults, when enabled."""
        defaults = self.provider.default_enrichments() if self.config.enable_default_enrichments else []
        return self._enrichments + list(defaults)

    def default_extractors(self) -> List["Extractor"]:
        if self.config.enable_default_extractors:
            return list(self.provider.default_extractors())
        return []

    def default_validators(self) -> List["Validator"]:
        if self.config.enable_default_validators:
            return list(self.provider.default_validators())
        return []

    # -------------------------------------------------------------------------
    # LISTING AND READ CONTRACT
    # -------------------------------------------------------------------------

    @abstractmethod
    async def list_files(self) -> List[str]:
        """Return POSIX paths, relative to the root, of every candidate file."""
        raise NotImplementedError

    @abstractmethod
    async def read_bytes(self, rel_path: str) -> bytes:
        raise NotImplementedError

    @abstractmethod
    def iter_lines(self, rel_path: str) -> AsyncIterator[str]:
        raise NotImplementedError

    @abstractmethod
    async def file_exists(self, rel_path: str) -> bool:
        raise NotImplementedError

    async def read_text(self, rel_path: str) -> str:
        data = await self.read_bytes(rel_path)
        return data.decode("utf-8", errors="replace")

    # -------------------------------------------------------------------------
    # NODE FACTORIES
    # -------------------------------------------------------------------------

    async def build_dir_node(self, rel_path: str, index: int, parent: Optional[DirNode]) -> DirNode:
        return DirNode(self, rel_path, index, parent)

    async def build_media_node(
            self,
            rel_path: str,
            index: int,
            parent: Optional[DirNode],
            media_type: MediaType,
    ) -> MediaNode:
        return MediaNode(self, rel_path, index, parent, media_type=media_type)

    def classify(self, file_name: str) -> Optional[str]:
        """Return the file kind for ``file_name`` or None when it is unknown."""
        ext = posixpath.splitext(file_name)[1].lower()
        kind = self.options.extension_mapping.get(ext)
        return kind if kind in FILE_KINDS else None

    async def extract_frontmatter(self, rel_path: str) -> Dict[str, Any]:
        opts = self.options
        return await extract_frontmatter(
            self.iter_lines(rel_path),
            marker=opts.frontmatter_marker,
            open_within=opts.frontmatter_open_within,
            max_lines=opts.frontmatter_max_lines,
            deserializer=opts.frontmatter_deserializer,
            rel_path=rel_path,
        )

    def url_for(self, node: Node) -> str:
        if self.url_extractor is not None:
            url = self.url_extractor(node)
            if url is not None:
                return url
        return node.rel_path

    # -------------------------------------------------------------------------
    # TREE MATERIALIZATION
    # -------------------------------------------------------------------------

    async def build_tree(self) -> DocTree:
        """
        List, skeletonize and materialize the whole source.

        Returns:
            DocTree: A tree whose only top-level node is the root directory,
            or an empty tree if the root itself was vetoed.

        Raises:
            InvariantViolation: A directory's parent was not registered.
            EnrichmentError: An enrichment returned an invalid value.
            OSError: Listing or reading failed.
        """
        paths = await self.list_files()
        self.logger.debug(f"Listed {len(paths)} files under '{self.root}'")

        skeleton = build_raw_tree(paths)
        pipeline = EnrichmentPipeline(self.enrichments)
        parents: Dict[str, DirNode] = {}
        roots: List[Node] = []

        queue: Deque[Tuple[RawDir, int]] = deque([(skeleton, 0)])
        while queue:
            batch = [queue.popleft() for _ in range(len(queue))]
            built = await asyncio.gather(
                *(self._materialize_dir(raw, index, parents, pipeline) for raw, index in batch)
            )

            for (raw, _), dir_node in zip(batch, built):
                if dir_node is None:
                    self.logger.debug(f"Directory '{raw.full_path}' removed by enrichment")
                    continue

                parents[raw.full_path] = dir_node
                if dir_node.parent is None:
                    roots.append(dir_node)
                else:
                    dir_node.parent.children.append(dir_node)

                # Subdirectories sort after the files of the same directory.
                offset = len(raw.files)
                queue.extend((child, offset + child.index) for child in raw.dirs)

        self.logger.info(f"Built tree with {len(parents)} directories")
        return DocTree(self, roots)

    async def _materialize_dir(
            self,
            raw: RawDir,
            index: int,
            parents: Dict[str, DirNode],
            pipeline: EnrichmentPipeline,
    ) -> Optional[DirNode]:
        parent: Optional[DirNode] = None
        if raw.level > 0:
            parent = parents.get(posixpath.dirname(raw.full_path))
            if parent is None:
                raise InvariantViolation(f"Failed to find parent for directory '{raw.full_path}'.")

        node = await self.build_dir_node(raw.full_path, index, parent)
        enriched = await pipeline.apply(node)
        if enriched is None:
            return None

        files = await asyncio.gather(
            *(self._materialize_file(enriched, name, i, pipeline) for i, name in enumerate(raw.files))
        )
        enriched.children.extend(f for f in files if f is not None)
        return enriched  # type: ignore[return-value]

    async def _materialize_file(
            self,
            parent: DirNode,
            file_name: str,
            index: int,
            pipeline: EnrichmentPipeline,
    ) -> Optional[Node]:
        kind = self.classify(file_name)
        if kind is None:
            return None

        rel_path = join_rel(parent.rel_path, file_name)
        node: Node
        if kind == "markdown":
            node = await self.provider.build_doc_node(self, rel_path, index, parent)
        else:
            node = await self.build_media_node(rel_path, index, parent, MediaType.from_kind(kind))

        return await pipeline.apply(node)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r}, root={self.root!r})"
