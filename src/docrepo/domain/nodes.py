from __future__ import annotations

"""
Repository Node Model.

Defines the three node variants a content tree is made of (directories,
documents and media files), their identity and ordering rules, and the
constrained metadata bag enrichments write into.

Identity inside one source is the relative path. Across sources the
``dedupe_id`` pair ``(source root, relative path)`` is the only merge key.
The sibling ``index`` orders nodes and never takes part in identity.
"""

import os
import posixpath
from collections import deque
from enum import Enum
from typing import TYPE_CHECKING, Any, Dict, Iterator, List, Optional, Tuple

from docrepo.domain.errors import DocNotLoadedError

if TYPE_CHECKING:
    from docrepo.core.source import Source
    from docrepo.providers.base import LoadedDoc, Provider

DedupeId = Tuple[str, str]


# -----------------------------------------------------------------------------
# ENUMERATIONS
# -----------------------------------------------------------------------------

class NodeType(str, Enum):
    DIRECTORY = "directory"
    DOCUMENT = "document"
    MEDIA = "media"


class MediaType(str, Enum):
    IMAGE = "image"
    VIDEO = "video"
    DOCUMENT = "document"
    UNKNOWN = "unknown"

    @classmethod
    def from_kind(cls, kind: str) -> "MediaType":
        try:
            return cls(kind)
        except ValueError:
            return cls.UNKNOWN


# -----------------------------------------------------------------------------
# METADATA BAG
# -----------------------------------------------------------------------------

class MetadataBag(dict):
    """
    String-keyed map restricted to a small set of value types.

    Accepted values are str, int, float, bool, nested maps of the same and
    lists of the same. Nested maps are stored as MetadataBag instances so
    the restriction holds at every depth.
    """

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        super().__init__()
        self.update(*args, **kwargs)

    def __setitem__(self, key: str, value: Any) -> None:
        if not isinstance(key, str):
            raise TypeError(f"Metadata keys must be str, received {type(key).__name__}.")
        super().__setitem__(key, _coerce_metadata_value(key, value))

    def update(self, *args: Any, **kwargs: Any) -> None:  # type: ignore[override]
        for key, value in dict(*args, **kwargs).items():
            self[key] = value

    def setdefault(self, key: str, default: Any = None) -> Any:  # type: ignore[override]
        if key not in self:
            self[key] = default
        return self[key]

    def to_dict(self) -> Dict[str, Any]:
        return {k: _plain(v) for k, v in self.items()}


def _coerce_metadata_value(key: str, value: Any) -> Any:
    if isinstance(value, MetadataBag):
        return value
    if isinstance(value, (str, bool, int, float)):
        return value
    if isinstance(value, dict):
        return MetadataBag(value)
    if isinstance(value, (list, tuple)):
        return [_coerce_metadata_value(key, item) for item in value]
    raise TypeError(
        f"Unsupported metadata value for '{key}': {type(value).__name__}. "
        f"Expected str, int, float, bool, map or list."
    )


def _plain(value: Any) -> Any:
    if isinstance(value, MetadataBag):
        return value.to_dict()
    if isinstance(value, list):
        return [_plain(v) for v in value]
    return value


# -----------------------------------------------------------------------------
# NODE BASE
# -----------------------------------------------------------------------------

class Node:
    """
    Common state shared by every node variant.

    Attributes:
        source: Owning source (non-owning reference).
        rel_path: POSIX path relative to the source root; "" for the root.
        index: Sibling ordering key.
        parent: Containing directory, None for a tree root.
        depth: 0 for a root, parent.depth + 1 otherwise.
        metadata: Enrichment-contributed data.
    """

    type: NodeType

    def __init__(
            self,
            source: "Source",
            rel_path: str,
            index: int,
            parent: Optional["DirNode"] = None,
    ) -> None:
        self.source = source
        self.rel_path = rel_path
        self.index = index
        self.parent = parent
        self.depth = 0 if parent is None else parent.depth + 1
        self.metadata = MetadataBag()

    @property
    def name(self) -> str:
        return posixpath.basename(self.rel_path)

    @property
    def stem(self) -> str:
        return posixpath.splitext(self.name)[0]

    @property
    def web_url(self) -> str:
        return self.source.url_for(self)

    def dedupe_id(self) -> DedupeId:
        return (self.source.root, self.rel_path)

    def physical_path(self) -> str:
        return os.path.join(self.source.root, *self.rel_path.split("/")) if self.rel_path else self.source.root

    def parents(self) -> List["DirNode"]:
        """Return the ancestor chain, nearest first."""
        chain: List[DirNode] = []
        current = self.parent
        while current is not None:
            chain.append(current)
            current = current.parent
        return chain

    def navigable(self) -> bool:
        return True

    def as_json(self) -> Dict[str, Any]:
        return {
            "type": self.type.value,
            "rel_path": self.rel_path,
            "index": self.index,
            "depth": self.depth,
            "metadata": self.metadata.to_dict(),
        }

    def __repr__(self) -> str:
        return f"{type(self).__name__}(rel_path={self.rel_path!r}, index={self.index})"


# -----------------------------------------------------------------------------
# NODE VARIANTS
# -----------------------------------------------------------------------------

class DirNode(Node):
    """A directory; owns its ordered children."""

    type = NodeType.DIRECTORY

    def __init__(
            self,
            source: "Source",
            rel_path: str,
            index: int,
            parent: Optional["DirNode"] = None,
    ) -> None:
        super().__init__(source, rel_path, index, parent)
        self.children: List[Node] = []
        self.nav_title: str = self.name or os.path.basename(os.path.normpath(source.root))
        self.hidden: bool = False

    @property
    def stem(self) -> str:
        # Directory names keep their dots ("v1.3 - Guide").
        return self.name

    def navigable(self) -> bool:
        """True if not hidden and a visible direct child document is an index doc."""
        if self.hidden:
            return False
        return any(
            isinstance(child, DocNode) and child.navigable() and child.index_doc
            for child in self.children
        )

    def nav_children(self) -> List[Node]:
        visible = [
            c for c in self.children
            if isinstance(c, (DirNode, DocNode)) and c.navigable()
        ]
        return sorted(visible, key=lambda c: c.index)

    def find_index_doc(self) -> Optional["DocNode"]:
        for child in self.children:
            if isinstance(child, DocNode) and child.index_doc:
                return child
        return None

    def walk_bfs(self) -> Iterator[Node]:
        """Yield every descendant breadth-first. Each call starts a fresh walk."""
        pending: deque = deque(self.children)
        while pending:
            node = pending.popleft()
            yield node
            if isinstance(node, DirNode):
                pending.extend(node.children)

    def as_json(self) -> Dict[str, Any]:
        data = super().as_json()
        data.update({
            "nav_title": self.nav_title,
            "hidden": self.hidden,
            "navigable": self.navigable(),
            "children": [c.as_json() for c in self.children],
        })
        return data


class DocNode(Node):
    """
    A markup document.

    Frontmatter is read eagerly at discovery. Parsing is deferred: ``load()``
    asks the provider for a LoadedDoc capability and keeps it on this same
    instance, after which ast(), links() and render calls become usable.
    """

    type = NodeType.DOCUMENT

    def __init__(
            self,
            source: "Source",
            rel_path: str,
            index: int,
            parent: Optional[DirNode],
            *,
            provider: "Provider",
            frontmatter: Optional[Dict[str, Any]] = None,
            index_doc_name: str = "index",
    ) -> None:
        super().__init__(source, rel_path, index, parent)
        self.provider = provider
        self.frontmatter: Dict[str, Any] = dict(frontmatter or {})
        fm = self.frontmatter
        self.title: str = str(fm.get("title") or self.stem)
        self.nav_title: str = str(fm.get("navTitle") or self.title)
        self.hidden: bool = _frontmatter_flag(fm.get("hidden"))
        tags = fm.get("tags") or []
        self.tags: List[str] = [str(t) for t in tags] if isinstance(tags, (list, tuple)) else [str(tags)]
        self.index_doc: bool = self.stem == index_doc_name
        self._loaded: Optional["LoadedDoc"] = None

    @property
    def provider_name(self) -> str:
        return self.provider.name

    @property
    def is_loaded(self) -> bool:
        return self._loaded is not None

    def navigable(self) -> bool:
        return not self.hidden

    async def read(self) -> str:
        return await self.source.read_text(self.rel_path)

    async def load(self) -> "DocNode":
        """Parse the document through its provider. Repeated calls are no-ops."""
        if self._loaded is None:
            self._loaded = await self.provider.load(self)
        return self

    @property
    def loaded(self) -> "LoadedDoc":
        if self._loaded is None:
            raise DocNotLoadedError(f"Document '{self.rel_path}' has not been loaded.")
        return self._loaded

    @property
    def render_target(self) -> str:
        return self.loaded.render_target

    def ast(self) -> Any:
        return self.loaded.ast()

    def links(self) -> List[Any]:
        return self.loaded.links()

    def local_links(self) -> List[Any]:
        return self.loaded.local_links()

    def as_markdown(self) -> str:
        return self.loaded.as_markdown()

    def extract_index(self) -> Dict[str, Any]:
        return self.loaded.extract_index()

    def as_json(self) -> Dict[str, Any]:
        data = super().as_json()
        data.update({
            "title": self.title,
            "nav_title": self.nav_title,
            "hidden": self.hidden,
            "tags": list(self.tags),
            "index_doc": self.index_doc,
            "provider": self.provider_name,
            "frontmatter": to_jsonable(self.frontmatter),
        })
        return data


class MediaNode(Node):
    """A non-markup asset (image, video, PDF...)."""

    type = NodeType.MEDIA

    def __init__(
            self,
            source: "Source",
            rel_path: str,
            index: int,
            parent: Optional[DirNode],
            *,
            media_type: MediaType = MediaType.UNKNOWN,
    ) -> None:
        super().__init__(source, rel_path, index, parent)
        self.media_type = media_type

    async def read(self) -> bytes:
        return await self.source.read_bytes(self.rel_path)

    def as_json(self) -> Dict[str, Any]:
        data = super().as_json()
        data["media_type"] = self.media_type.value
        return data


def to_jsonable(value: Any) -> Any:
    if isinstance(value, dict):
        return {str(k): to_jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_jsonable(v) for v in value]
    if value is None or isinstance(value, (str, int, float, bool)):
        return value
    return str(value)


def _frontmatter_flag(value: Any) -> bool:
    """Read a boolean frontmatter field; strings such as "false" or "no" count as False."""
    if isinstance(value, str):
        return value.strip().lower() in ("true", "1", "yes", "y", "on")
    return bool(value)
