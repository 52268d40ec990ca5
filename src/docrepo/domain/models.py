from __future__ import annotations

"""
Collaborator Result Models.

Plain data carriers exchanged between the repository facade and its
extractor and validator collaborators.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional


class ValidationLevel(str, Enum):
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"

    @property
    def severity(self) -> int:
        return _SEVERITY[self]


_SEVERITY: Dict[ValidationLevel, int] = {
    ValidationLevel.INFO: 0,
    ValidationLevel.WARNING: 1,
    ValidationLevel.ERROR: 2,
    ValidationLevel.CRITICAL: 3,
}


@dataclass(frozen=True)
class DocLocation:
    """
    Position of a finding inside the repository.

    Attributes:
        rel_path: Path of the node the finding refers to.
        line: Optional 1-based line number.
        column: Optional 1-based column number.
    """
    rel_path: str
    line: Optional[int] = None
    column: Optional[int] = None


@dataclass(frozen=True)
class ValidationError:
    """
    A single validator finding.

    This is a report record, not an exception: validators return lists of
    these and the repository flattens them.

    Attributes:
        name: Identifier of the validator that produced the finding.
        level: Severity of the finding.
        message: Human readable summary.
        details: Optional longer explanation.
        location: Where the finding applies.
    """
    name: str
    level: ValidationLevel
    message: str
    location: DocLocation
    details: str = ""

    def as_json(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "level": self.level.value,
            "message": self.message,
            "details": self.details,
            "location": {
                "rel_path": self.location.rel_path,
                "line": self.location.line,
                "column": self.location.column,
            },
        }


@dataclass
class Extraction:
    """
    Output of one extractor run.

    Attributes:
        extractor_name: Name of the producing extractor.
        global_data: Repository-wide data, if any.
        doc_data: Per-document data keyed by relative path.
    """
    extractor_name: str
    global_data: Any = None
    doc_data: Dict[str, Any] = field(default_factory=dict)

    def as_json(self) -> Dict[str, Any]:
        return {
            "extractor_name": self.extractor_name,
            "global_data": self.global_data,
            "doc_data": self.doc_data,
        }


class LinkKind(str, Enum):
    EXTERNAL = "external"
    ANCHOR = "anchor"
    ID = "id"
    ABSOLUTE = "absolute"
    RELATIVE = "relative"


@dataclass(frozen=True)
class OutLink:
    """
    A link found in a document body.

    Attributes:
        raw: Link target exactly as written.
        kind: Classification of the target.
        path: Repository-relative target path for local links, else "".
        anchor: Fragment after '#', if any.
        line: 1-based line where the link appears.
    """
    raw: str
    kind: LinkKind
    path: str = ""
    anchor: str = ""
    line: Optional[int] = None

    @property
    def is_local(self) -> bool:
        return self.kind in (LinkKind.ABSOLUTE, LinkKind.RELATIVE)

    def as_json(self) -> Dict[str, Any]:
        return {
            "raw": self.raw,
            "kind": self.kind.value,
            "path": self.path,
            "anchor": self.anchor,
            "line": self.line,
        }
