from __future__ import annotations

"""
Unit tests for configuration validation and loading.

Verifies:
1. Defaults are filled for missing keys.
2. Lenient coercion produces warnings; strict mode raises.
3. YAML and JSON files load into ManagerConfig with roots resolved.
"""

import json
import os
from pathlib import Path

import pytest

from docrepo.core.config_validator import build_manager_config, load_manager_config, validate_config_dict
from docrepo.domain.config import DEFAULT_EXTENSION_MAPPING, DEFAULT_INDEX_DOC_NAME
from docrepo.domain.errors import ConfigurationError


def test_defaults_filled() -> None:
    """TC-01: A minimal source gets every default."""
    normalized, warnings = validate_config_dict({"repos": {"docs": {"sources": {"main": {}}}}})

    assert warnings == []
    source = normalized["repos"]["docs"]["sources"]["main"]
    assert source["source"] == "files"
    assert source["flavor"] == "markdown"
    assert source["enable_default_enrichments"] is False
    assert source["options"]["index_doc_name"] == DEFAULT_INDEX_DOC_NAME
    assert source["options"]["extension_mapping"] == DEFAULT_EXTENSION_MAPPING
    assert source["options"]["frontmatter_max_lines"] == 100
    assert normalized["log_level"] == "INFO"


def test_lenient_coercion_warns() -> None:
    """TC-02: Recoverable type mismatches are converted with a warning."""
    raw = {
        "log_level": "debug",
        "repos": {
            "docs": {
                "extractors": "tree-debug",
                "sources": {
                    "main": {
                        "enable_default_validators": "yes",
                        "options": {
                            "markdown_extensions": "md, mdx",
                            "frontmatter_open_within": "5",
                            "extension_mapping": {"RST": "markdown"},
                        },
                    }
                },
            }
        },
    }
    normalized, warnings = validate_config_dict(raw)

    repo = normalized["repos"]["docs"]
    source = repo["sources"]["main"]
    assert normalized["log_level"] == "DEBUG"
    assert repo["extractors"] == ["tree-debug"]
    assert source["enable_default_validators"] is True
    assert source["options"]["markdown_extensions"] == ["md", "mdx"]
    assert source["options"]["frontmatter_open_within"] == 5
    assert source["options"]["extension_mapping"] == {".rst": "markdown"}
    assert len(warnings) == 3


def test_unknown_keys_warn_or_raise() -> None:
    """TC-03: Unknown keys are warnings, or errors in strict mode."""
    raw = {"repos": {"docs": {"sources": {"main": {"colour": "blue"}}}}}

    _, warnings = validate_config_dict(raw)
    assert any("colour" in w for w in warnings)

    with pytest.raises(ConfigurationError, match="colour"):
        validate_config_dict(raw, strict=True)


def test_strict_rejects_coercion() -> None:
    raw = {"repos": {"docs": {"sources": {"main": {"enable_default_extractors": "yes"}}}}}
    with pytest.raises(ConfigurationError):
        validate_config_dict(raw, strict=True)


def test_invalid_values_fall_back() -> None:
    raw = {"repos": {"docs": {"sources": {"main": {"options": {"frontmatter_max_lines": -1, "root": []}}}}}}
    normalized, warnings = validate_config_dict(raw)
    options = normalized["repos"]["docs"]["sources"]["main"]["options"]
    assert options["frontmatter_max_lines"] == 100
    assert options["root"] == "."
    assert len(warnings) == 2


def test_non_mapping_config() -> None:
    normalized, warnings = validate_config_dict(["not", "a", "mapping"])
    assert normalized["repos"] == {}
    assert warnings


def test_plugin_references_with_options() -> None:
    raw = {"repos": {"docs": {"validators": [{"name": "local-links", "options": {"level": "warning"}}, 5]}}}
    normalized, warnings = validate_config_dict(raw)
    assert normalized["repos"]["docs"]["validators"] == [{"name": "local-links", "options": {"level": "warning"}}]
    assert len(warnings) == 1


def test_build_manager_config_resolves_relative_roots(tmp_path: Path) -> None:
    normalized, _ = validate_config_dict({
        "repos": {"docs": {"sources": {
            "rel": {"options": {"root": "content"}},
            "abs": {"options": {"root": str(tmp_path)}},
        }}}
    })
    config = build_manager_config(normalized, base_dir="/base")

    sources = config.repos["docs"].sources
    assert sources["rel"].options.root == os.path.join("/base", "content")
    assert sources["abs"].options.root == str(tmp_path)


def test_load_yaml_file(tmp_path: Path) -> None:
    """TC-04: YAML files load and relative roots resolve next to the file."""
    cfg = tmp_path / "docrepo.yaml"
    cfg.write_text(
        "repos:\n"
        "  handbook:\n"
        "    validators: [local-links]\n"
        "    sources:\n"
        "      main:\n"
        "        options:\n"
        "          root: docs\n"
        "        enrichments:\n"
        "          - title-index-version\n",
        encoding="utf-8",
    )

    config, warnings = load_manager_config(str(cfg))

    assert warnings == []
    repo = config.repos["handbook"]
    assert repo.validators == ["local-links"]
    assert repo.sources["main"].enrichments == ["title-index-version"]
    assert repo.sources["main"].options.root == str(tmp_path / "docs")


def test_load_json_file(tmp_path: Path) -> None:
    cfg = tmp_path / "docrepo.json"
    cfg.write_text(json.dumps({"repos": {"a": {"sources": {"s": {"flavor": "markdown"}}}}}), encoding="utf-8")
    config, _ = load_manager_config(str(cfg))
    assert list(config.repos) == ["a"]


def test_load_unparsable_file(tmp_path: Path) -> None:
    cfg = tmp_path / "broken.yaml"
    cfg.write_text("repos: [unclosed\n", encoding="utf-8")
    with pytest.raises(ConfigurationError, match="Cannot parse"):
        load_manager_config(str(cfg))


def test_load_missing_file(tmp_path: Path) -> None:
    with pytest.raises(OSError):
        load_manager_config(str(tmp_path / "missing.yaml"))
