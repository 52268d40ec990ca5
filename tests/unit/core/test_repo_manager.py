from __future__ import annotations

"""
Unit tests for the repository manager and the plugin registry.

Verifies:
1. Repositories are built once and cached.
2. Unknown names fail before any file is listed.
3. Custom source factories and registered plugins.
"""

from pathlib import Path
from unittest.mock import patch

import pytest

from docrepo.core.enrichment import Enrichment
from docrepo.core.file_source import LocalFileSource
from docrepo.core.manager import Manager
from docrepo.core.memory_source import MemorySource
from docrepo.core.registry import PluginRegistry
from docrepo.domain.config import ManagerConfig, RepoConfig, SourceConfig, SourceOptions
from docrepo.domain.errors import ConfigurationError
from docrepo.plugins.enrichments.title_index_version import TitleIndexVersionEnrichment
from docrepo.plugins.validators.local_links import LocalLinkValidator


def _config(root: Path, **source_kwargs) -> ManagerConfig:
    source = SourceConfig(options=SourceOptions(root=str(root)), **source_kwargs)
    return ManagerConfig(repos={"docs": RepoConfig(sources={"main": source})})


@pytest.mark.asyncio
async def test_build_repo_caches(tmp_path: Path, write_files) -> None:
    """TC-01: A second request returns the cached repository."""
    write_files({"index.md": "# Home\n"})
    manager = Manager(_config(tmp_path))

    first = await manager.build_repo("docs")
    second = await manager.build_repo("docs")

    assert first is second
    assert [d.rel_path for d in first.docs()] == ["index.md"]

    manager.clear_cache()
    assert await manager.build_repo("docs") is not first


@pytest.mark.asyncio
async def test_unknown_repo(tmp_path: Path) -> None:
    manager = Manager(_config(tmp_path))
    assert manager.registered_repos() == ["docs"]
    with pytest.raises(ConfigurationError, match="nope"):
        await manager.build_repo("nope")


@pytest.mark.asyncio
async def test_unknown_enrichment_fails_before_listing(tmp_path: Path) -> None:
    """TC-02: Name resolution happens before any source is listed."""
    manager = Manager(_config(tmp_path, enrichments=["does-not-exist"]))
    with patch.object(LocalFileSource, "list_files") as listing:
        with pytest.raises(ConfigurationError, match="does-not-exist"):
            await manager.build_repo("docs")
    listing.assert_not_called()


@pytest.mark.asyncio
async def test_git_source_rejected(tmp_path: Path) -> None:
    manager = Manager(_config(tmp_path, source="git"))
    with pytest.raises(ConfigurationError, match="git"):
        await manager.build_repo("docs")


@pytest.mark.asyncio
async def test_unknown_source_type_and_flavor(tmp_path: Path) -> None:
    with pytest.raises(ConfigurationError, match="svn"):
        await Manager(_config(tmp_path, source="svn")).build_repo("docs")
    with pytest.raises(ConfigurationError, match="rst"):
        await Manager(_config(tmp_path, flavor="rst")).build_repo("docs")


@pytest.mark.asyncio
async def test_repo_without_sources() -> None:
    manager = Manager(ManagerConfig(repos={"empty": RepoConfig()}))
    with pytest.raises(ConfigurationError, match="no sources"):
        await manager.build_repo("empty")


@pytest.mark.asyncio
async def test_missing_root_propagates_os_error(tmp_path: Path) -> None:
    manager = Manager(_config(tmp_path / "missing"))
    with pytest.raises(FileNotFoundError):
        await manager.build_repo("docs")


@pytest.mark.asyncio
async def test_failed_build_is_not_cached(tmp_path: Path, write_files) -> None:
    missing = tmp_path / "later"
    manager = Manager(_config(missing))
    with pytest.raises(FileNotFoundError):
        await manager.build_repo("docs")

    write_files({"a.md": ""}, missing)
    repo = await manager.build_repo("docs")
    assert len(repo.docs()) == 1


@pytest.mark.asyncio
async def test_custom_source_factory() -> None:
    """TC-03: A callable source builds any Source subclass with the resolved pieces."""

    def factory(name, config, provider, **kwargs):
        return MemorySource(name, {"x/page.md": "# Page\n"}, provider, config=config, **kwargs)

    source = SourceConfig(source=factory, enrichments=["title-index-version"])
    manager = Manager(ManagerConfig(repos={"mem": RepoConfig(sources={"m": source})}))

    repo = await manager.build_repo("mem")
    assert [d.rel_path for d in repo.docs()] == ["x/page.md"]


@pytest.mark.asyncio
async def test_factory_returning_wrong_type() -> None:
    source = SourceConfig(source=lambda *a, **k: object())
    manager = Manager(ManagerConfig(repos={"bad": RepoConfig(sources={"s": source})}))
    with pytest.raises(ConfigurationError, match="expected Source"):
        await manager.build_repo("bad")


# -----------------------------------------------------------------------------
# Registry
# -----------------------------------------------------------------------------

def test_registry_resolves_names_and_options() -> None:
    """TC-04: Names, option mappings and instances resolve to plugin objects."""
    registry = PluginRegistry()

    by_name = registry.resolve_validators(["local-links"])[0]
    with_options = registry.resolve_validators([{"name": "local-links", "options": {"level": "warning"}}])[0]
    instance = LocalLinkValidator()

    assert isinstance(by_name, LocalLinkValidator)
    assert with_options.level.value == "warning"
    assert registry.resolve_validators([instance]) == [instance]
    assert [e.name for e in registry.resolve_extractors(["links", "search-index"])] == ["links", "search-index"]


def test_registry_errors() -> None:
    registry = PluginRegistry()
    with pytest.raises(ConfigurationError, match="Unknown extractor"):
        registry.resolve_extractors(["nope"])
    with pytest.raises(ConfigurationError, match="Invalid options"):
        registry.resolve_enrichments([{"name": "category", "options": {"bogus": 1}}])
    with pytest.raises(ConfigurationError, match="missing 'name'"):
        registry.resolve_enrichments([{"options": {}}])
    with pytest.raises(ConfigurationError):
        registry.resolve_enrichments([42])


def test_registry_custom_registration() -> None:
    class Marker(Enrichment):
        name = "marker"

    registry = PluginRegistry()
    registry.register_enrichment("marker", Marker)

    resolved = registry.resolve_enrichments(["marker", TitleIndexVersionEnrichment])
    assert isinstance(resolved[0], Marker)
    assert isinstance(resolved[1], TitleIndexVersionEnrichment)


def test_registry_rejects_wrong_product() -> None:
    registry = PluginRegistry()
    registry.register_validator("odd", lambda: "not a validator")
    with pytest.raises(ConfigurationError, match="expected Validator"):
        registry.resolve_validators(["odd"])
