from __future__ import annotations

"""
Repository Manager.

Entry point for configured builds: resolves every name in a ManagerConfig
(sources, flavors, enrichments, extractors, validators), builds the
sources of a repository concurrently and caches the resulting DocRepo for
the lifetime of the manager. All name resolution happens before any file
is listed, so a typo fails fast without partial work.
"""

import asyncio
from typing import Any, Dict, List, Optional

from docrepo.core.file_source import LocalFileSource
from docrepo.core.multi_source import MultiSource
from docrepo.core.registry import PluginRegistry
from docrepo.core.repo import DocRepo
from docrepo.core.source import Source
from docrepo.domain.config import ManagerConfig, RepoConfig, SourceConfig
from docrepo.domain.errors import ConfigurationError
from docrepo.infra.logging import ContextLogger, ensure_logger


class Manager:
    """
    Builds and caches repositories described by a ManagerConfig.

    Attributes:
        config: The manager configuration.
        registry: Name tables used to resolve plugin references.
    """

    def __init__(
            self,
            config: ManagerConfig,
            *,
            registry: Optional[PluginRegistry] = None,
            logger: Optional[Any] = None,
    ) -> None:
        self.config = config
        self.registry = registry or PluginRegistry()
        self.logger: ContextLogger = ensure_logger(logger)
        self._repos: Dict[str, DocRepo] = {}
        self._lock = asyncio.Lock()

    def registered_repos(self) -> List[str]:
        return list(self.config.repos)

    def clear_cache(self) -> None:
        self._repos.clear()

    async def build_repo(self, name: str) -> DocRepo:
        """
        Return the repository ``name``, building it on first use.

        Raises:
            ConfigurationError: Unknown repository or plugin name, or an
                illegal merge between sources.
            OSError: A source could not be listed or read.
        """
        async with self._lock:
            cached = self._repos.get(name)
            if cached is not None:
                return cached

            repo_config = self.config.repos.get(name)
            if repo_config is None:
                raise ConfigurationError(f"Repository '{name}' is not configured.")

            repo = await self._build(name, repo_config)
            self._repos[name] = repo
            return repo

    # -------------------------------------------------------------------------
    # PRIVATE HELPERS
    # -------------------------------------------------------------------------

    async def _build(self, name: str, repo_config: RepoConfig) -> DocRepo:
        log = self.logger.child(repo=name)

        extractors = self.registry.resolve_extractors(repo_config.extractors)
        validators = self.registry.resolve_validators(repo_config.validators)
        sources = [
            self._build_source(source_name, source_config, repo_config, log)
            for source_name, source_config in repo_config.sources.items()
        ]
        if not sources:
            raise ConfigurationError(f"Repository '{name}' has no sources.")

        log.info(f"Building repository from {len(sources)} source(s)")
        trees = await MultiSource(sources).build_trees()
        return DocRepo(name, trees, extractors=extractors, validators=validators, logger=self.logger)

    def _build_source(
            self,
            name: str,
            config: SourceConfig,
            repo_config: RepoConfig,
            log: ContextLogger,
    ) -> Source:
        provider = self.registry.resolve_flavor(config.flavor)
        enrichments = self.registry.resolve_enrichments(config.enrichments)
        kwargs: Dict[str, Any] = {
            "enrichments": enrichments,
            "url_extractor": repo_config.url_extractor,
            "logger": log,
        }

        kind = config.source
        if kind == "files":
            return LocalFileSource(name, config, provider, **kwargs)
        if kind == "git":
            raise ConfigurationError(f"Source '{name}': git sources are not supported.")
        if callable(kind):
            source = kind(name, config, provider, **kwargs)
            if not isinstance(source, Source):
                raise ConfigurationError(
                    f"Source '{name}': factory returned {type(source).__name__}, expected Source."
                )
            return source
        raise ConfigurationError(f"Source '{name}': unknown source type '{kind}'.")
