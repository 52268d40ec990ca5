from __future__ import annotations

"""
Unit tests for the node model.

Verifies:
1. Metadata bag value restrictions.
2. Depth, identity and parent chains.
3. Navigability and navigation ordering of directories.
4. Deferred loading of documents.
"""

import pytest

from docrepo.domain.errors import DocNotLoadedError
from docrepo.domain.nodes import DirNode, DocNode, MediaNode, MediaType, MetadataBag, NodeType
from docrepo.providers.markdown import MarkdownProvider


# -----------------------------------------------------------------------------
# Metadata bag
# -----------------------------------------------------------------------------

def test_metadata_accepts_supported_values() -> None:
    """TC-01: Scalars, nested maps and lists are accepted; maps become bags."""
    bag = MetadataBag()
    bag["s"] = "x"
    bag["n"] = 1.5
    bag["flag"] = True
    bag["nested"] = {"inner": [1, "two", {"deep": False}]}

    assert isinstance(bag["nested"], MetadataBag)
    assert isinstance(bag["nested"]["inner"][2], MetadataBag)
    assert bag.to_dict() == {
        "s": "x",
        "n": 1.5,
        "flag": True,
        "nested": {"inner": [1, "two", {"deep": False}]},
    }


@pytest.mark.parametrize("value", [None, object(), b"bytes", {"k": None}, [set()]])
def test_metadata_rejects_unsupported_values(value) -> None:
    """TC-02: Anything outside the allowed value types is a TypeError."""
    bag = MetadataBag()
    with pytest.raises(TypeError):
        bag["bad"] = value


def test_metadata_update_and_setdefault_validate() -> None:
    bag = MetadataBag()
    with pytest.raises(TypeError):
        bag.update({"bad": None})
    with pytest.raises(TypeError):
        bag.setdefault("bad", object())
    assert bag.setdefault("ok", 3) == 3


def test_metadata_rejects_non_string_keys() -> None:
    with pytest.raises(TypeError):
        MetadataBag({1: "x"})


# -----------------------------------------------------------------------------
# Structure
# -----------------------------------------------------------------------------

def _doc(source, rel_path, index, parent, **fm) -> DocNode:
    return DocNode(source, rel_path, index, parent, provider=MarkdownProvider(), frontmatter=fm)


def test_depth_and_parents(memory_source) -> None:
    """TC-03: Depth is the length of the parent chain."""
    src = memory_source([])
    root = DirNode(src, "", 0)
    a = DirNode(src, "a", 0, root)
    b = DirNode(src, "a/b", 0, a)
    doc = _doc(src, "a/b/c.md", 0, b)

    assert [n.depth for n in (root, a, b, doc)] == [0, 1, 2, 3]
    assert doc.parents() == [b, a, root]
    assert len(doc.parents()) == doc.depth


def test_dedupe_id_uses_root_and_path(memory_source) -> None:
    """TC-04: Identity ignores the sibling index."""
    src = memory_source([], root="r1")
    first = MediaNode(src, "img/a.png", 0, None, media_type=MediaType.IMAGE)
    second = MediaNode(src, "img/a.png", 7, None)
    assert first.dedupe_id() == second.dedupe_id() == ("r1", "img/a.png")


def test_doc_attributes_from_frontmatter(memory_source) -> None:
    """TC-05: Title, nav title, hidden and tags come from frontmatter with stem fallbacks."""
    src = memory_source([])
    plain = _doc(src, "guide/setup.md", 0, None)
    assert plain.type is NodeType.DOCUMENT
    assert plain.title == "setup"
    assert plain.nav_title == "setup"
    assert plain.hidden is False
    assert plain.index_doc is False

    rich = _doc(src, "guide/index.md", 0, None, title="Guide", navTitle="Start", hidden=True, tags="one")
    assert rich.title == "Guide"
    assert rich.nav_title == "Start"
    assert rich.hidden is True
    assert rich.tags == ["one"]
    assert rich.index_doc is True


@pytest.mark.parametrize("value,hidden", [
    ("false", False),
    ("No", False),
    ("0", False),
    ("true", True),
    (" yes ", True),
    (1, True),
    (0, False),
    (None, False),
])
def test_hidden_flag_coercion(memory_source, value, hidden: bool) -> None:
    src = memory_source([])
    assert _doc(src, "a.md", 0, None, hidden=value).hidden is hidden


def test_dir_navigability_requires_visible_index_child(memory_source) -> None:
    """TC-06: A directory is navigable only with a visible direct index document."""
    src = memory_source([])
    root = DirNode(src, "", 0)
    sub = DirNode(src, "sub", 1, root)
    deep = DirNode(src, "sub/deep", 0, sub)
    deep.children.append(_doc(src, "sub/deep/index.md", 0, deep))
    sub.children.append(deep)

    assert deep.navigable() is True
    assert sub.navigable() is False

    hidden_index = _doc(src, "sub/index.md", 0, sub, hidden=True)
    sub.children.append(hidden_index)
    assert sub.navigable() is False

    hidden_index.hidden = False
    assert sub.navigable() is True

    sub.hidden = True
    assert sub.navigable() is False


def test_nav_children_sorted_and_filtered(memory_source) -> None:
    """TC-07: Navigation children are visible docs and navigable dirs, by index."""
    src = memory_source([])
    root = DirNode(src, "", 0)
    late = _doc(src, "late.md", 5, root)
    early = _doc(src, "early.md", 1, root)
    hidden = _doc(src, "hidden.md", 0, root, hidden=True)
    empty_dir = DirNode(src, "empty", 2, root)
    media = MediaNode(src, "logo.png", 0, root)
    root.children.extend([late, early, hidden, empty_dir, media])

    assert root.nav_children() == [early, late]


def test_walk_bfs_restartable(memory_source) -> None:
    """TC-08: Each walk starts from scratch and visits level by level."""
    src = memory_source([])
    root = DirNode(src, "", 0)
    a = DirNode(src, "a", 0, root)
    leaf = _doc(src, "a/x.md", 0, a)
    top = _doc(src, "top.md", 1, root)
    a.children.append(leaf)
    root.children.extend([a, top])

    first = [n.rel_path for n in root.walk_bfs()]
    second = [n.rel_path for n in root.walk_bfs()]
    assert first == second == ["a", "top.md", "a/x.md"]


def test_root_dir_nav_title_uses_root_basename(memory_source) -> None:
    src = memory_source([], root="/tmp/handbook")
    assert DirNode(src, "", 0).nav_title == "handbook"
    assert DirNode(src, "chapter", 0).nav_title == "chapter"


# -----------------------------------------------------------------------------
# Loading
# -----------------------------------------------------------------------------

def test_loaded_only_members_fail_before_load(memory_source) -> None:
    """TC-09: ast, links and rendering require load()."""
    src = memory_source({"a.md": "# A\n"})
    doc = _doc(src, "a.md", 0, None)

    assert doc.is_loaded is False
    with pytest.raises(DocNotLoadedError):
        doc.ast()
    with pytest.raises(DocNotLoadedError):
        doc.links()
    with pytest.raises(DocNotLoadedError):
        _ = doc.render_target


@pytest.mark.asyncio
async def test_load_is_idempotent_and_in_place(memory_source) -> None:
    """TC-10: load() upgrades the same instance and does not re-parse."""
    src = memory_source({"a.md": "# A\n\n[b](b.md)\n"})
    doc = _doc(src, "a.md", 0, None)

    assert await doc.load() is doc
    capability = doc.loaded
    await doc.load()

    assert doc.loaded is capability
    assert [link.path for link in doc.links()] == ["b.md"]


@pytest.mark.asyncio
async def test_media_read_returns_bytes(memory_source) -> None:
    src = memory_source({"logo.png": "PNG"})
    node = MediaNode(src, "logo.png", 0, None, media_type=MediaType.IMAGE)
    assert await node.read() == b"PNG"
    assert node.as_json()["media_type"] == "image"


def test_media_type_from_kind() -> None:
    assert MediaType.from_kind("video") is MediaType.VIDEO
    assert MediaType.from_kind("audio") is MediaType.UNKNOWN
