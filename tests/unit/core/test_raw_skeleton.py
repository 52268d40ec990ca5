from __future__ import annotations

"""
Unit tests for the raw skeleton builder.

Verifies:
1. One directory record per distinct path prefix.
2. First-encounter ordering of directories and files.
3. Path normalization and rejection of escaping paths.
"""

import pytest

from docrepo.core.discovery.skeleton import build_raw_tree
from docrepo.domain.errors import InvariantViolation


def test_root_record() -> None:
    """TC-01: The root has level 0 and an empty path."""
    root = build_raw_tree(["a.md"])
    assert root.level == 0
    assert root.full_path == ""
    assert root.files == ["a.md"]
    assert root.dirs == []


def test_one_record_per_prefix() -> None:
    """TC-02: Every distinct directory prefix appears exactly once."""
    root = build_raw_tree(["a/one.md", "a/two.md", "b/c/three.md", "a/d/four.md"])

    paths = [d.full_path for d in root.walk()]
    assert sorted(paths) == ["", "a", "a/d", "b", "b/c"]
    assert len(paths) == len(set(paths))


def test_first_encounter_order_and_indices() -> None:
    """TC-03: Directories are indexed in the order they are first seen."""
    root = build_raw_tree(["z/x.md", "a/y.md", "z/w.md"])

    assert [d.segment for d in root.dirs] == ["z", "a"]
    assert [d.index for d in root.dirs] == [0, 1]
    assert root.dirs[0].files == ["x.md", "w.md"]


def test_levels_match_segment_count() -> None:
    """TC-04: A record's level equals the number of segments in its path."""
    root = build_raw_tree(["a/b/c/d.md"])
    for record in root.walk():
        expected = len(record.full_path.split("/")) if record.full_path else 0
        assert record.level == expected


def test_duplicates_and_normalization() -> None:
    """TC-05: Duplicate and non-canonical spellings collapse into one entry."""
    root = build_raw_tree(["a/x.md", "./a/x.md", "a\\x.md", "a//x.md"])
    assert len(root.dirs) == 1
    assert root.dirs[0].files == ["x.md"]


def test_escaping_path_rejected() -> None:
    """TC-06: Paths leaving the root are invariant violations."""
    with pytest.raises(InvariantViolation):
        build_raw_tree(["../outside.md"])
    with pytest.raises(InvariantViolation):
        build_raw_tree(["/abs/path.md"])


def test_empty_listing() -> None:
    """TC-07: No paths yields a bare root."""
    root = build_raw_tree([])
    assert root.dirs == [] and root.files == []
