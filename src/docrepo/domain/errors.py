from __future__ import annotations

"""
Domain Exception Hierarchy.

Every failure the library raises on purpose derives from DocRepoError so
that callers can separate repository build defects from I/O problems,
which are left as native OSError instances.
"""


class DocRepoError(Exception):
    """Base class for all docrepo failures."""


class ConfigurationError(DocRepoError):
    """An unknown name, an invalid config file or an illegal source combination."""


class MergeConflictError(ConfigurationError):
    """Two nodes sharing one identity cannot be merged (e.g. two documents)."""


class InvariantViolation(DocRepoError):
    """An internal structural guarantee was broken while assembling a tree."""


class EnrichmentError(DocRepoError):
    """An enrichment hook returned neither a node nor the removal sentinel."""


class FrontmatterError(DocRepoError):
    """A closed frontmatter block could not be deserialized."""

    def __init__(self, rel_path: str, message: str) -> None:
        super().__init__(f"Invalid frontmatter in '{rel_path}': {message}")
        self.rel_path = rel_path


class DocNotLoadedError(DocRepoError):
    """A loaded-only capability was used before Document.load()."""


class RenderTargetError(DocRepoError):
    """A render call does not match the provider's declared render target."""
