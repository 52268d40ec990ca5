from __future__ import annotations

"""
Command Line Interface (CLI) Application Controller.

Orchestrates the CLI lifecycle: logging bootstrap, configuration loading
(file or ad-hoc --root), one asynchronous repository build, optional
extraction and validation, and result rendering. Exit codes: 0 success,
1 build failure or error-level validation findings, 2 invalid input or
configuration, 130 interrupted.
"""

import asyncio
import json
import os
import sys
from typing import Any, Dict, List, Optional, Tuple

from docrepo.core.collaborators import union_by_name
from docrepo.core.config_validator import load_manager_config
from docrepo.core.manager import Manager
from docrepo.domain.config import ManagerConfig, RepoConfig, SourceConfig, SourceOptions
from docrepo.domain.errors import ConfigurationError, DocRepoError
from docrepo.domain.models import ValidationError, ValidationLevel
from docrepo.infra.logging import LoggingConfig, configure_logging, context_logger, get_logger
from docrepo.interface.cli import args as cli_args
from docrepo.plugins.extractors.tree_debug import TreeDebugPrinter

logger = get_logger(__name__)

ADHOC_REPO_NAME = "default"

# -----------------------------------------------------------------------------
# ENTRYPOINT ORCHESTRATOR
# -----------------------------------------------------------------------------

def main(argv: Optional[List[str]] = None) -> int:
    """
    Execute the CLI workflow.

    Args:
        argv: Optional list of command line arguments. Defaults to sys.argv.

    Returns:
        int: Process exit code.
    """
    parser = cli_args.build_parser()
    args = parser.parse_args(argv)
    opts = cli_args.args_to_overrides(args)

    configure_logging(LoggingConfig(level=opts["log_level"], console=True, log_file=opts["log_file"]))
    logger.debug("CLI execution initiated. Resolving configuration...")

    if not opts["config_path"] and not opts["root"]:
        print("ERROR: one of --config or --root is required.", file=sys.stderr)
        return 2

    try:
        config, repo_name = _resolve_config(opts)
    except (ConfigurationError, OSError) as e:
        logger.error(f"Configuration failure: {e}")
        print(f"ERROR: {e}", file=sys.stderr)
        return 2

    try:
        report = asyncio.run(_run(config, repo_name, opts))
    except KeyboardInterrupt:
        print("Interrupted.", file=sys.stderr)
        return 130
    except ConfigurationError as e:
        logger.error(f"Configuration failure: {e}")
        print(f"ERROR: {e}", file=sys.stderr)
        return 2
    except (DocRepoError, OSError) as e:
        logger.critical(f"Repository build failed: {e}", exc_info=True)
        print(f"ERROR: {e}", file=sys.stderr)
        return 1

    if opts["json_output"]:
        print(json.dumps(report, ensure_ascii=False, indent=2))
    else:
        _print_human_summary(report)

    return 1 if report["failed"] else 0

# -----------------------------------------------------------------------------
# CONFIGURATION
# -----------------------------------------------------------------------------

def _resolve_config(opts: Dict[str, Any]) -> Tuple[ManagerConfig, str]:
    if opts["root"]:
        root = opts["root"]
        if not os.path.isdir(root):
            raise ConfigurationError(f"Root directory does not exist: '{root}'")
        options = SourceOptions(root=root)
        if opts.get("index_doc_name"):
            options.index_doc_name = opts["index_doc_name"]
        source = SourceConfig(options=options, enrichments=list(opts["enrichments"]))
        config = ManagerConfig(repos={ADHOC_REPO_NAME: RepoConfig(sources={"root": source})})
        return config, ADHOC_REPO_NAME

    config, warnings = load_manager_config(opts["config_path"])
    for w in warnings:
        logger.warning(f"Configuration Constraint: {w}")

    repo_name = opts["repo_name"]
    if repo_name is None:
        names = list(config.repos)
        if len(names) != 1:
            raise ConfigurationError(
                f"Select a repository with --repo; configured: {', '.join(names) or 'none'}."
            )
        repo_name = names[0]
    return config, repo_name

# -----------------------------------------------------------------------------
# EXECUTION
# -----------------------------------------------------------------------------

async def _run(config: ManagerConfig, repo_name: str, opts: Dict[str, Any]) -> Dict[str, Any]:
    manager = Manager(config, logger=context_logger("docrepo"))
    repo = await manager.build_repo(repo_name)

    report: Dict[str, Any] = {
        "repo": repo.name,
        "documents": len(repo.docs()),
        "media": len(repo.media()),
        "failed": False,
    }

    if opts["print_tree"]:
        tree = await repo.extract_set([TreeDebugPrinter()])
        report["tree"] = tree[TreeDebugPrinter.name].global_data

    extractors = union_by_name(manager.registry.resolve_extractors(opts["extractors"]), repo.extractors)
    if extractors:
        extractions = await repo.extract_set(extractors)
        report["extractions"] = {name: e.as_json() for name, e in extractions.items()}

    if opts["validate"]:
        validators = union_by_name(manager.registry.resolve_validators(opts["validators"]), repo.validators)
        findings = await repo.validate_set(validators)
        report["validation"] = [f.as_json() for f in findings]
        report["failed"] = _has_errors(findings)

    return report


def _has_errors(findings: List[ValidationError]) -> bool:
    return any(f.level.severity >= ValidationLevel.ERROR.severity for f in findings)

# -----------------------------------------------------------------------------
# VIEW RENDERING (HUMAN READABLE)
# -----------------------------------------------------------------------------

def _print_human_summary(report: Dict[str, Any]) -> None:
    print(f"Repository '{report['repo']}': {report['documents']} documents, {report['media']} media files")

    if "tree" in report:
        print(report["tree"])

    for name, extraction in report.get("extractions", {}).items():
        print(f"  - extractor {name}: {len(extraction['doc_data'])} documents")

    if "validation" in report:
        findings = report["validation"]
        if not findings:
            print("Validation passed.")
        for f in findings:
            loc = f["location"]
            where = loc["rel_path"] + (f":{loc['line']}" if loc["line"] else "")
            print(f"{f['level'].upper()} {where}: {f['message']} [{f['name']}]")

# -----------------------------------------------------------------------------
# CLI ENTRYPOINT
# -----------------------------------------------------------------------------

if __name__ == "__main__":
    sys.exit(main())
