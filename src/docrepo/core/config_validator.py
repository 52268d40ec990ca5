from __future__ import annotations

"""
Configuration Validation Service.

Validates raw configuration mappings (parsed from YAML or JSON files)
against the manager schema: coerces scalar types, fills defaults and
collects warnings. In strict mode every coercion or unknown key becomes a
ConfigurationError instead of a warning.
"""

import json
import logging
import os
from typing import Any, Dict, List, Optional, Tuple

import yaml

from docrepo.domain.config import (
    DEFAULT_EXCLUDE_PATTERNS,
    DEFAULT_EXTENSION_MAPPING,
    DEFAULT_FILE_PATTERNS,
    DEFAULT_FRONTMATTER_MARKER,
    DEFAULT_FRONTMATTER_MAX_LINES,
    DEFAULT_FRONTMATTER_OPEN_WITHIN,
    DEFAULT_INDEX_DOC_NAME,
    DEFAULT_MARKDOWN_EXTENSIONS,
    ManagerConfig,
    RepoConfig,
    SourceConfig,
    SourceOptions,
)
from docrepo.domain.errors import ConfigurationError

logger = logging.getLogger(__name__)

_TOP_KEYS = {"repos", "log_level", "log_file"}
_REPO_KEYS = {"sources", "extractors", "validators"}
_SOURCE_KEYS = {
    "source", "flavor", "options", "enrichments",
    "enable_default_enrichments", "enable_default_extractors", "enable_default_validators",
}
_OPTION_KEYS = {
    "root", "markdown_extensions", "extra_file_patterns", "exclude_patterns",
    "extension_mapping", "index_doc_name", "frontmatter_marker",
    "frontmatter_open_within", "frontmatter_max_lines",
}


# -----------------------------------------------------------------------------
# PUBLIC API
# -----------------------------------------------------------------------------

def load_manager_config(path: str, *, strict: bool = False) -> Tuple[ManagerConfig, List[str]]:
    """
    Read, validate and convert a YAML or JSON configuration file.

    Relative source roots are resolved against the file's directory.

    Args:
        path: Path to a .yaml/.yml/.json file.
        strict: Raise on any coercion instead of warning.

    Returns:
        Tuple[ManagerConfig, List[str]]: The configuration and the warnings.

    Raises:
        ConfigurationError: The file cannot be parsed or fails validation.
        OSError: The file cannot be read.
    """
    with open(path, "r", encoding="utf-8") as f:
        content = f.read()

    try:
        if path.lower().endswith(".json"):
            raw = json.loads(content)
        else:
            raw = yaml.safe_load(content)
    except (ValueError, yaml.YAMLError) as e:
        raise ConfigurationError(f"Cannot parse configuration file '{path}': {e}") from e

    normalized, warnings = validate_config_dict(raw, strict=strict)
    for w in warnings:
        logger.warning(f"Configuration: {w}")

    base_dir = os.path.dirname(os.path.abspath(path))
    return build_manager_config(normalized, base_dir=base_dir), warnings


def validate_config_dict(raw: Any, *, strict: bool = False) -> Tuple[Dict[str, Any], List[str]]:
    """
    Validate and normalize a raw configuration mapping.

    Args:
        raw: Parsed configuration (usually a dict).
        strict: Raise ConfigurationError on any problem instead of warning.

    Returns:
        Tuple[Dict[str, Any], List[str]]: Normalized configuration and warnings.
    """
    warnings: List[str] = []
    ctx = _Context(warnings, strict)

    if raw is None:
        raw = {}
    if not isinstance(raw, dict):
        ctx.fail(f"Invalid config type: expected mapping, received {type(raw).__name__}.")
        return {"repos": {}, "log_level": "INFO", "log_file": None}, warnings

    ctx.unknown_keys("config", raw, _TOP_KEYS)

    repos_raw = raw.get("repos") or {}
    if not isinstance(repos_raw, dict):
        ctx.fail(f"Invalid field 'repos': expected mapping, received {type(repos_raw).__name__}.")
        repos_raw = {}

    normalized: Dict[str, Any] = {
        "log_level": _as_str(raw.get("log_level"), "INFO", "log_level", ctx).upper(),
        "log_file": _as_optional_str(raw.get("log_file"), "log_file", ctx),
        "repos": {},
    }
    for repo_name, repo_raw in repos_raw.items():
        normalized["repos"][str(repo_name)] = _normalize_repo(str(repo_name), repo_raw, ctx)

    return normalized, warnings


def build_manager_config(normalized: Dict[str, Any], *, base_dir: Optional[str] = None) -> ManagerConfig:
    """Convert a normalized mapping into configuration dataclasses."""
    repos: Dict[str, RepoConfig] = {}
    for repo_name, repo in normalized.get("repos", {}).items():
        sources: Dict[str, SourceConfig] = {}
        for source_name, src in repo["sources"].items():
            opts = dict(src["options"])
            if base_dir and not os.path.isabs(os.path.expanduser(opts["root"])):
                opts["root"] = os.path.join(base_dir, opts["root"])
            sources[source_name] = SourceConfig(
                source=src["source"],
                flavor=src["flavor"],
                options=SourceOptions(**opts),
                enrichments=list(src["enrichments"]),
                enable_default_enrichments=src["enable_default_enrichments"],
                enable_default_extractors=src["enable_default_extractors"],
                enable_default_validators=src["enable_default_validators"],
            )
        repos[repo_name] = RepoConfig(
            sources=sources,
            extractors=list(repo["extractors"]),
            validators=list(repo["validators"]),
        )
    return ManagerConfig(
        repos=repos,
        log_level=normalized.get("log_level", "INFO"),
        log_file=normalized.get("log_file"),
    )


# -----------------------------------------------------------------------------
# PRIVATE HELPERS: SECTIONS
# -----------------------------------------------------------------------------

class _Context:
    def __init__(self, warnings: List[str], strict: bool) -> None:
        self.warnings = warnings
        self.strict = strict

    def fail(self, msg: str) -> None:
        if self.strict:
            raise ConfigurationError(msg)
        self.warnings.append(msg)

    def note(self, msg: str) -> None:
        self.warnings.append(msg)

    def unknown_keys(self, where: str, data: Dict[str, Any], allowed: set) -> None:
        for key in data:
            if key not in allowed:
                self.fail(f"Unknown key '{key}' in {where}; ignored.")


def _normalize_repo(name: str, raw: Any, ctx: _Context) -> Dict[str, Any]:
    where = f"repos.{name}"
    if not isinstance(raw, dict):
        ctx.fail(f"Invalid field '{where}': expected mapping, received {type(raw).__name__}.")
        raw = {}
    ctx.unknown_keys(where, raw, _REPO_KEYS)

    sources_raw = raw.get("sources") or {}
    if not isinstance(sources_raw, dict):
        ctx.fail(f"Invalid field '{where}.sources': expected mapping.")
        sources_raw = {}

    return {
        "sources": {
            str(src_name): _normalize_source(f"{where}.sources.{src_name}", src_raw, ctx)
            for src_name, src_raw in sources_raw.items()
        },
        "extractors": _as_plugin_list(raw.get("extractors"), f"{where}.extractors", ctx),
        "validators": _as_plugin_list(raw.get("validators"), f"{where}.validators", ctx),
    }


def _normalize_source(where: str, raw: Any, ctx: _Context) -> Dict[str, Any]:
    if not isinstance(raw, dict):
        ctx.fail(f"Invalid field '{where}': expected mapping, received {type(raw).__name__}.")
        raw = {}
    ctx.unknown_keys(where, raw, _SOURCE_KEYS)

    opts_raw = raw.get("options") or {}
    if not isinstance(opts_raw, dict):
        ctx.fail(f"Invalid field '{where}.options': expected mapping.")
        opts_raw = {}
    ctx.unknown_keys(f"{where}.options", opts_raw, _OPTION_KEYS)

    ow = f"{where}.options"
    options = {
        "root": _as_str(opts_raw.get("root"), ".", f"{ow}.root", ctx),
        "markdown_extensions": _as_list_str(
            opts_raw.get("markdown_extensions"), DEFAULT_MARKDOWN_EXTENSIONS, f"{ow}.markdown_extensions", ctx
        ),
        "extra_file_patterns": _as_list_str(
            opts_raw.get("extra_file_patterns"), DEFAULT_FILE_PATTERNS, f"{ow}.extra_file_patterns", ctx
        ),
        "exclude_patterns": _as_list_str(
            opts_raw.get("exclude_patterns"), DEFAULT_EXCLUDE_PATTERNS, f"{ow}.exclude_patterns", ctx
        ),
        "extension_mapping": _as_str_map(
            opts_raw.get("extension_mapping"), DEFAULT_EXTENSION_MAPPING, f"{ow}.extension_mapping", ctx
        ),
        "index_doc_name": _as_str(opts_raw.get("index_doc_name"), DEFAULT_INDEX_DOC_NAME, f"{ow}.index_doc_name", ctx),
        "frontmatter_marker": _as_str(
            opts_raw.get("frontmatter_marker"), DEFAULT_FRONTMATTER_MARKER, f"{ow}.frontmatter_marker", ctx
        ),
        "frontmatter_open_within": _as_positive_int(
            opts_raw.get("frontmatter_open_within"), DEFAULT_FRONTMATTER_OPEN_WITHIN,
            f"{ow}.frontmatter_open_within", ctx,
        ),
        "frontmatter_max_lines": _as_positive_int(
            opts_raw.get("frontmatter_max_lines"), DEFAULT_FRONTMATTER_MAX_LINES,
            f"{ow}.frontmatter_max_lines", ctx,
        ),
    }

    return {
        "source": _as_str(raw.get("source"), "files", f"{where}.source", ctx),
        "flavor": _as_str(raw.get("flavor"), "markdown", f"{where}.flavor", ctx),
        "enrichments": _as_plugin_list(raw.get("enrichments"), f"{where}.enrichments", ctx),
        "enable_default_enrichments": _as_bool(
            raw.get("enable_default_enrichments"), False, f"{where}.enable_default_enrichments", ctx
        ),
        "enable_default_extractors": _as_bool(
            raw.get("enable_default_extractors"), False, f"{where}.enable_default_extractors", ctx
        ),
        "enable_default_validators": _as_bool(
            raw.get("enable_default_validators"), False, f"{where}.enable_default_validators", ctx
        ),
        "options": options,
    }


# -----------------------------------------------------------------------------
# PRIVATE HELPERS: TYPE COERCION
# -----------------------------------------------------------------------------

def _as_str(value: Any, fallback: str, field: str, ctx: _Context) -> str:
    if value is None:
        return fallback
    if isinstance(value, str):
        v = value.strip()
        return v if v else fallback
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        ctx.note(f"Field '{field}' converted from number {value} to str.")
        return str(value)
    ctx.fail(f"Invalid field '{field}': expected str, received {type(value).__name__}. Using fallback.")
    return fallback


def _as_optional_str(value: Any, field: str, ctx: _Context) -> Optional[str]:
    if value is None:
        return None
    result = _as_str(value, "", field, ctx)
    return result or None


def _as_bool(value: Any, fallback: bool, field: str, ctx: _Context) -> bool:
    if isinstance(value, bool):
        return value
    if value is None:
        return fallback

    if not ctx.strict:
        if isinstance(value, (int, float)) and value in (0, 1):
            ctx.note(f"Field '{field}' converted from number {value} to bool.")
            return bool(value)
        if isinstance(value, str):
            s = value.strip().lower()
            if s in ("true", "1", "yes", "y", "on"):
                ctx.note(f"Field '{field}' converted from '{value}' to True.")
                return True
            if s in ("false", "0", "no", "n", "off"):
                ctx.note(f"Field '{field}' converted from '{value}' to False.")
                return False

    ctx.fail(f"Invalid field '{field}': expected bool, received {type(value).__name__}. Using fallback.")
    return fallback


def _as_positive_int(value: Any, fallback: int, field: str, ctx: _Context) -> int:
    if value is None:
        return fallback
    if isinstance(value, int) and not isinstance(value, bool) and value > 0:
        return value
    if not ctx.strict and isinstance(value, str) and value.strip().isdigit() and int(value) > 0:
        ctx.note(f"Field '{field}' converted from '{value}' to int.")
        return int(value)
    ctx.fail(f"Invalid field '{field}': expected positive int, received {value!r}. Using fallback.")
    return fallback


def _as_list_str(value: Any, fallback: List[str], field: str, ctx: _Context) -> List[str]:
    if value is None:
        return list(fallback)
    if isinstance(value, str):
        ctx.note(f"Field '{field}' converted from CSV string to list.")
        return [p.strip() for p in value.split(",") if p.strip()]
    if isinstance(value, (list, tuple)):
        out: List[str] = []
        for item in value:
            if isinstance(item, str) and item.strip():
                out.append(item.strip())
            else:
                ctx.fail(f"Invalid entry in '{field}': {item!r} dropped.")
        return out
    ctx.fail(f"Invalid field '{field}': expected list of str, received {type(value).__name__}. Using fallback.")
    return list(fallback)


def _as_str_map(value: Any, fallback: Dict[str, str], field: str, ctx: _Context) -> Dict[str, str]:
    if value is None:
        return dict(fallback)
    if not isinstance(value, dict):
        ctx.fail(f"Invalid field '{field}': expected mapping, received {type(value).__name__}. Using fallback.")
        return dict(fallback)
    out: Dict[str, str] = {}
    for k, v in value.items():
        if not isinstance(v, str):
            ctx.fail(f"Invalid entry in '{field}': {k!r} -> {v!r} dropped.")
            continue
        key = str(k).lower()
        out[key if key.startswith(".") else f".{key}"] = v
    return out


def _as_plugin_list(value: Any, field: str, ctx: _Context) -> List[Any]:
    """Plugin references from files: names or {"name": ..., "options": {...}} mappings."""
    if value is None:
        return []
    if isinstance(value, (str, dict)):
        value = [value]
    if not isinstance(value, (list, tuple)):
        ctx.fail(f"Invalid field '{field}': expected list, received {type(value).__name__}.")
        return []
    out: List[Any] = []
    for item in value:
        if isinstance(item, str) and item.strip():
            out.append(item.strip())
        elif isinstance(item, dict) and isinstance(item.get("name"), str):
            options = item.get("options") or {}
            if not isinstance(options, dict):
                ctx.fail(f"Invalid options for '{item['name']}' in '{field}'; ignored.")
                options = {}
            out.append({"name": item["name"], "options": dict(options)})
        else:
            ctx.fail(f"Invalid entry in '{field}': {item!r} dropped.")
    return out
