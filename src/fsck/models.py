"""
Findings and the per-invocation verification state.
"""

from __future__ import annotations

import threading
from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any


class FatalScanError(RuntimeError):
    """Raised when a feed reports an error that is not a per-entry finding."""


class FindingKind(str, Enum):
    """Every recoverable finding the checker can report."""

    CORRUPT_OBJECT = "corruptObject"
    OPEN_ERROR = "openError"
    NON_CANONICAL_POINTER = "nonCanonicalPointer"
    UNEXPECTED_GIT_OBJECT = "unexpectedGitObject"

    @property
    def category(self) -> str:
        if self in (FindingKind.CORRUPT_OBJECT, FindingKind.OPEN_ERROR):
            return "objects"
        return "pointer"


@dataclass(frozen=True)
class Finding:
    """A single corruption finding; fields unused by a kind stay empty."""

    kind: FindingKind
    message: str
    blob_oid: str = ""
    tree_oid: str = ""
    oid: str = ""
    path: str = ""

    def __str__(self) -> str:
        return f"{self.kind.value}: {self.message}"

    def report_line(self) -> str:
        return f"{self.kind.category}: {self}"

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["kind"] = self.kind.value
        return data


@dataclass
class VerificationRun:
    """Accumulates findings for one invocation.

    ``corrupt_oids`` holds each corrupt object's oid once, in discovery
    order. Appends are serialized so worker threads may report directly.
    """

    dry_run: bool = False
    corrupt_oids: list[str] = field(default_factory=list)
    object_findings: list[Finding] = field(default_factory=list)
    corrupt_pointers: list[Finding] = field(default_factory=list)
    _seen: set[str] = field(default_factory=set, init=False, repr=False)
    _lock: threading.Lock = field(default_factory=threading.Lock, init=False, repr=False)

    def add_object_finding(self, finding: Finding) -> bool:
        """Record an object finding; False when its oid was already recorded."""
        with self._lock:
            if finding.oid in self._seen:
                return False
            self._seen.add(finding.oid)
            self.corrupt_oids.append(finding.oid)
            self.object_findings.append(finding)
            return True

    def add_pointer_finding(self, finding: Finding) -> None:
        with self._lock:
            self.corrupt_pointers.append(finding)

    @property
    def ok(self) -> bool:
        return not self.corrupt_oids and not self.corrupt_pointers

    @property
    def should_quarantine(self) -> bool:
        """Only object corruption is repaired; pointer findings are metadata issues."""
        return not self.dry_run and bool(self.corrupt_oids)

    def to_dict(self) -> dict[str, Any]:
        with self._lock:
            return {
                "dry_run": self.dry_run,
                "ok": self.ok,
                "corrupt_oids": list(self.corrupt_oids),
                "findings": [finding.to_dict() for finding in self.object_findings + self.corrupt_pointers],
            }
