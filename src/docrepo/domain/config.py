from __future__ import annotations

"""
Configuration Domain Models.

Typed configuration consumed by sources, repositories and the manager.
Values can be built directly in Python (callables and plugin instances are
allowed) or loaded from YAML/JSON files through
``docrepo.core.config_validator.load_manager_config``.
"""

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Union

# -----------------------------------------------------------------------------
# Constants & Defaults
# -----------------------------------------------------------------------------
DEFAULT_INDEX_DOC_NAME = "index"
DEFAULT_FRONTMATTER_MARKER = "---"
DEFAULT_FRONTMATTER_OPEN_WITHIN = 10
DEFAULT_FRONTMATTER_MAX_LINES = 100

DEFAULT_MARKDOWN_EXTENSIONS: List[str] = ["md"]

# Markdown patterns are derived from markdown_extensions per source.
DEFAULT_FILE_PATTERNS: List[str] = [
    "*.bmp", "*.gif", "*.jpg", "*.jpeg", "*.png", "*.svg",
    "*.tif", "*.tiff", "*.webp",
    "*.mp4",
    "*.pdf",
]

DEFAULT_EXTENSION_MAPPING: Dict[str, str] = {
    ".md": "markdown",
    ".mdoc": "markdown",
    ".mdx": "markdown",
    ".bmp": "image",
    ".gif": "image",
    ".jpg": "image",
    ".jpeg": "image",
    ".png": "image",
    ".svg": "image",
    ".tif": "image",
    ".tiff": "image",
    ".webp": "image",
    ".mp4": "video",
    ".pdf": "document",
}

# Matched against every path segment, same convention as directory pruning.
DEFAULT_EXCLUDE_PATTERNS: List[str] = [
    r"^(__pycache__|\.git|\.idea|\.vscode|node_modules)$",
]

FILE_KINDS = ("markdown", "image", "video", "document")

# A plugin reference: a registered name, {"name": ..., "options": {...}},
# a zero-argument factory, or a ready instance.
PluginRef = Union[str, Dict[str, Any], Callable[[], Any], Any]


# -----------------------------------------------------------------------------
# Configuration Models
# -----------------------------------------------------------------------------

@dataclass
class SourceOptions:
    """
    Discovery options of one source.

    Attributes:
        root: Directory the source reads from.
        markdown_extensions: Extensions (without dot) listed as documents.
        extra_file_patterns: Additional glob patterns (media and friends).
        exclude_patterns: Regexes; a path is skipped when any segment matches.
        extension_mapping: Extension to file kind (markdown/image/video/document).
        index_doc_name: File stem that marks a directory's index document.
        frontmatter_marker: Line delimiting the frontmatter block.
        frontmatter_open_within: Lines scanned for the opening marker.
        frontmatter_max_lines: Hard bound on lines consumed for the block.
        frontmatter_deserializer: Text to mapping function; YAML when None.
    """
    root: str = "."
    markdown_extensions: List[str] = field(default_factory=lambda: list(DEFAULT_MARKDOWN_EXTENSIONS))
    extra_file_patterns: List[str] = field(default_factory=lambda: list(DEFAULT_FILE_PATTERNS))
    exclude_patterns: List[str] = field(default_factory=lambda: list(DEFAULT_EXCLUDE_PATTERNS))
    extension_mapping: Dict[str, str] = field(default_factory=lambda: dict(DEFAULT_EXTENSION_MAPPING))
    index_doc_name: str = DEFAULT_INDEX_DOC_NAME
    frontmatter_marker: str = DEFAULT_FRONTMATTER_MARKER
    frontmatter_open_within: int = DEFAULT_FRONTMATTER_OPEN_WITHIN
    frontmatter_max_lines: int = DEFAULT_FRONTMATTER_MAX_LINES
    frontmatter_deserializer: Optional[Callable[[str], Any]] = None

    def file_patterns(self) -> List[str]:
        md = [f"*.{ext.lstrip('.')}" for ext in self.markdown_extensions]
        return md + list(self.extra_file_patterns)


@dataclass
class SourceConfig:
    """
    One configured origin of content.

    Attributes:
        source: "files", "git" (rejected) or a factory building a Source.
        options: Discovery options.
        flavor: "markdown" or a factory returning a Provider.
        enrichments: Extra enrichments, run before the provider defaults.
        enable_default_enrichments: Append the provider's default enrichments.
        enable_default_extractors: Expose the provider's default extractors.
        enable_default_validators: Expose the provider's default validators.
    """
    source: Union[str, Callable[..., Any]] = "files"
    options: SourceOptions = field(default_factory=SourceOptions)
    flavor: Union[str, Callable[[], Any]] = "markdown"
    enrichments: List[PluginRef] = field(default_factory=list)
    enable_default_enrichments: bool = False
    enable_default_extractors: bool = False
    enable_default_validators: bool = False


@dataclass
class RepoConfig:
    """
    A named repository assembled from one or more sources.

    Attributes:
        sources: Source configurations keyed by source name.
        extractors: Configured extractors.
        validators: Configured validators.
        url_extractor: Maps a node to its web URL; relative path when None.
    """
    sources: Dict[str, SourceConfig] = field(default_factory=dict)
    extractors: List[PluginRef] = field(default_factory=list)
    validators: List[PluginRef] = field(default_factory=list)
    url_extractor: Optional[Callable[[Any], Optional[str]]] = None


@dataclass
class ManagerConfig:
    """
    Top-level configuration.

    Attributes:
        repos: Repository configurations keyed by repository name.
        log_level: Level used by the CLI when bootstrapping logging.
        log_file: Optional log file for the CLI.
    """
    repos: Dict[str, RepoConfig] = field(default_factory=dict)
    log_level: str = "INFO"
    log_file: Optional[str] = None
