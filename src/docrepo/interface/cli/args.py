from __future__ import annotations

"""
CLI Argument Definition and Mapping.

Defines the command-line schema and translates the parsed namespace into
a plain options dictionary consumed by the CLI controller.
"""

import argparse
from typing import Any, Dict, List, Optional

# -----------------------------------------------------------------------------
# ARGUMENT DEFINITION
# -----------------------------------------------------------------------------

def build_parser() -> argparse.ArgumentParser:
    """
    Construct the argument parser for the docrepo CLI.

    Returns:
        argparse.ArgumentParser: Configured parser instance.
    """
    p = argparse.ArgumentParser(
        prog="docrepo",
        description="Discover content files, assemble a document repository and inspect it.",
    )

    # --- Repository selection ---
    target = p.add_mutually_exclusive_group()
    target.add_argument(
        "-c", "--config",
        dest="config_path",
        default=None,
        help="YAML or JSON manager configuration file.",
    )
    target.add_argument(
        "--root",
        dest="root",
        default=None,
        help="Build an ad-hoc repository from a single directory instead of a config file.",
    )
    p.add_argument(
        "-r", "--repo",
        dest="repo_name",
        default=None,
        help="Repository to build (defaults to the only configured one).",
    )

    # --- Actions ---
    p.add_argument(
        "--tree",
        action="store_true",
        help="Print the merged tree.",
    )
    p.add_argument(
        "--extract",
        dest="extractors",
        default=None,
        help="Comma-separated extractor names to run in addition to configured ones.",
    )
    p.add_argument(
        "--validate",
        action="store_true",
        help="Run validators; exit code 1 when an error-level finding is reported.",
    )
    p.add_argument(
        "--validators",
        dest="validators",
        default=None,
        help="Comma-separated validator names to run in addition to configured ones.",
    )

    # --- Ad-hoc source options ---
    p.add_argument(
        "--index-name",
        dest="index_doc_name",
        default=None,
        help="Index document stem for --root (default: index).",
    )
    p.add_argument(
        "--enrich",
        dest="enrichments",
        default=None,
        help="Comma-separated enrichment names for --root.",
    )

    # --- Output and diagnostics ---
    p.add_argument(
        "--json",
        dest="json_output",
        action="store_true",
        help="Emit machine readable JSON on stdout.",
    )
    p.add_argument(
        "--debug",
        action="store_true",
        help="Elevate logging verbosity to DEBUG.",
    )
    p.add_argument(
        "--log-file",
        dest="log_file",
        default=None,
        help="Also write logs to this rotating file.",
    )

    return p

# -----------------------------------------------------------------------------
# ARGUMENT MAPPING
# -----------------------------------------------------------------------------

def args_to_overrides(args: argparse.Namespace) -> Dict[str, Any]:
    """
    Translate the argparse Namespace into CLI options.

    Args:
        args: Parsed command-line arguments.

    Returns:
        Dict[str, Any]: Options for the CLI controller.
    """
    overrides: Dict[str, Any] = {
        "config_path": args.config_path,
        "root": args.root,
        "repo_name": args.repo_name,
        "print_tree": bool(args.tree),
        "validate": bool(args.validate),
        "extractors": _split_csv(args.extractors) or [],
        "validators": _split_csv(args.validators) or [],
        "enrichments": _split_csv(args.enrichments) or [],
        "json_output": bool(args.json_output),
        "log_level": "DEBUG" if args.debug else "INFO",
        "log_file": args.log_file,
    }
    if args.index_doc_name:
        overrides["index_doc_name"] = args.index_doc_name

    # Explicit validators imply a validation run.
    if overrides["validators"]:
        overrides["validate"] = True

    return overrides

# -----------------------------------------------------------------------------
# HELPERS
# -----------------------------------------------------------------------------

def _split_csv(value: Optional[str]) -> Optional[List[str]]:
    if value is None:
        return None
    parts = [x.strip() for x in value.split(",")]
    return [x for x in parts if x]
