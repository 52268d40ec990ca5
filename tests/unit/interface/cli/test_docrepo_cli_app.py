from __future__ import annotations

"""
Unit tests for the CLI controller.

Runs ``main()`` in-process with logging bootstrap patched out and checks
exit codes and rendered output.
"""

import json
from pathlib import Path
from unittest.mock import patch

import pytest

from docrepo.interface.cli import app


@pytest.fixture(autouse=True)
def no_logging_bootstrap():
    with patch.object(app, "configure_logging") as mocked:
        yield mocked


def test_requires_config_or_root(capsys) -> None:
    assert app.main([]) == 2
    assert "--config or --root" in capsys.readouterr().err


def test_missing_root_directory(tmp_path: Path, capsys) -> None:
    assert app.main(["--root", str(tmp_path / "nope")]) == 2
    assert "does not exist" in capsys.readouterr().err


def test_root_summary_and_tree(tmp_path: Path, write_files, capsys) -> None:
    """TC-01: An ad-hoc build prints a summary and the tree."""
    write_files({"index.md": "# Home\n", "guide/setup.md": "", "img/logo.png": ""})

    assert app.main(["--root", str(tmp_path), "--tree"]) == 0

    out = capsys.readouterr().out
    assert "Repository 'default': 2 documents, 1 media files" in out
    assert "Tree(default)" in out
    assert "document at 'guide/setup.md'" in out


def test_json_report_with_extractors(tmp_path: Path, write_files, capsys) -> None:
    write_files({"a.md": "---\ntitle: A\n---\n[b](b.md)\n", "b.md": ""})

    code = app.main(["--root", str(tmp_path), "--json", "--extract", "frontmatter,links"])

    assert code == 0
    report = json.loads(capsys.readouterr().out)
    assert report["documents"] == 2
    assert report["extractions"]["frontmatter"]["doc_data"]["a.md"] == {"title": "A"}
    assert report["extractions"]["links"]["global_data"]["backlinks"] == {"b.md": ["a.md"]}


def test_validation_errors_exit_one(tmp_path: Path, write_files, capsys) -> None:
    """TC-02: Error-level findings produce exit code 1."""
    write_files({"a.md": "[gone](gone.md)\n"})

    assert app.main(["--root", str(tmp_path), "--validators", "local-links"]) == 1
    assert "ERROR a.md:1" in capsys.readouterr().out


def test_warnings_only_exit_zero(tmp_path: Path, write_files, capsys) -> None:
    write_files({"guide/page.md": ""})
    assert app.main(["--root", str(tmp_path), "--validators", "index-docs"]) == 0
    assert "WARNING guide" in capsys.readouterr().out


def test_unknown_extractor_is_config_error(tmp_path: Path, write_files, capsys) -> None:
    write_files({"a.md": ""})
    assert app.main(["--root", str(tmp_path), "--extract", "nope"]) == 2
    assert "Unknown extractor" in capsys.readouterr().err


def test_merge_conflict_is_config_error(tmp_path: Path, write_files, capsys) -> None:
    """TC-03: Two sources providing one document fail with exit code 2."""
    write_files({"docs/a.md": ""})
    cfg = tmp_path / "docrepo.yaml"
    cfg.write_text(
        "repos:\n"
        "  site:\n"
        "    sources:\n"
        "      one: {options: {root: docs}}\n"
        "      two: {options: {root: docs}}\n",
        encoding="utf-8",
    )

    assert app.main(["--config", str(cfg)]) == 2
    assert "provided by both" in capsys.readouterr().err


def test_config_requires_repo_choice(tmp_path: Path, capsys) -> None:
    cfg = tmp_path / "docrepo.yaml"
    cfg.write_text("repos:\n  a: {}\n  b: {}\n", encoding="utf-8")

    assert app.main(["--config", str(cfg)]) == 2
    assert "--repo" in capsys.readouterr().err


def test_config_with_repo(tmp_path: Path, write_files, capsys) -> None:
    write_files({"content/x.md": ""})
    cfg = tmp_path / "docrepo.yaml"
    cfg.write_text(
        "repos:\n"
        "  a:\n"
        "    sources:\n"
        "      main: {options: {root: content}}\n"
        "  b: {}\n",
        encoding="utf-8",
    )

    assert app.main(["--config", str(cfg), "--repo", "a", "--json"]) == 0
    assert json.loads(capsys.readouterr().out)["documents"] == 1


def test_invalid_frontmatter_is_build_failure(tmp_path: Path, write_files, capsys) -> None:
    write_files({"bad.md": "---\ntitle: [oops\n---\n"})
    assert app.main(["--root", str(tmp_path)]) == 1
    assert "bad.md" in capsys.readouterr().err
