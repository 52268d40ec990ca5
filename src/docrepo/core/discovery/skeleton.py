from __future__ import annotations

"""
Raw Skeleton Builder.

Turns a flat list of relative file paths into nested directory records
before any node is created. Directories only exist when some file needs
them; directories and files keep first-encounter order.
"""

from dataclasses import dataclass, field
from typing import Dict, Iterable, List

from docrepo.infra.fs import join_rel, split_rel_path


@dataclass
class RawDir:
    """
    One directory of the skeleton.

    Attributes:
        level: Number of path segments ("" root = 0).
        index: Position among sibling directories.
        segment: Last path segment ("" for the root).
        full_path: POSIX path relative to the source root.
        dirs: Child directory records, first-encounter order.
        files: File names directly inside, first-encounter order.
    """
    level: int
    index: int
    segment: str
    full_path: str
    dirs: List["RawDir"] = field(default_factory=list)
    files: List[str] = field(default_factory=list)
    _by_segment: Dict[str, "RawDir"] = field(default_factory=dict, repr=False, compare=False)

    def child(self, segment: str) -> "RawDir":
        """Return the child record for ``segment``, creating it on first use."""
        existing = self._by_segment.get(segment)
        if existing is not None:
            return existing
        created = RawDir(
            level=self.level + 1,
            index=len(self.dirs),
            segment=segment,
            full_path=join_rel(self.full_path, segment),
        )
        self.dirs.append(created)
        self._by_segment[segment] = created
        return created

    def add_file(self, name: str) -> None:
        if name not in self.files:
            self.files.append(name)

    def walk(self) -> Iterable["RawDir"]:
        yield self
        for d in self.dirs:
            yield from d.walk()


def build_raw_tree(paths: Iterable[str]) -> RawDir:
    """
    Build the skeleton for ``paths`` in a single pass per path.

    Duplicate paths are ignored. Paths are normalized to POSIX form first.
    """
    root = RawDir(level=0, index=0, segment="", full_path="")
    for path in paths:
        segments = split_rel_path(path)
        if not segments:
            continue
        current = root
        for segment in segments[:-1]:
            current = current.child(segment)
        current.add_file(segments[-1])
    return root
