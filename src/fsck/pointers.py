"""
Check that pointers are canonical and that LFS paths hold pointers.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, Optional

from fsck.models import FatalScanError, Finding, FindingKind, VerificationRun
from fsck.report import Reporter
from gitscan.scanner import PointerScanError, ScanResult


@dataclass
class PointerCheckStats:
    examined: int = 0
    findings: int = 0


class PointerChecker:
    """Classify pointer well-formedness, independently of object content."""

    def __init__(self, reporter: Reporter, logger: Optional[logging.Logger] = None) -> None:
        self.reporter = reporter
        self.logger = logger or logging.getLogger("lfs_fsck")

    def check(self, results: Iterable[ScanResult], run: VerificationRun) -> PointerCheckStats:
        """Drain ``results`` and record every pointer finding in ``run``."""
        stats = PointerCheckStats()
        for result in results:
            stats.examined += 1
            finding = self.classify(result)
            if finding is None:
                continue
            stats.findings += 1
            run.add_pointer_finding(finding)
            self.reporter.finding(finding)
        self.logger.info("Pointer pass: examined=%s findings=%s", stats.examined, stats.findings)
        return stats

    def classify(self, result: ScanResult) -> Optional[Finding]:
        pointer = result.pointer
        if pointer is not None:
            self.logger.debug("Examining %s (%s)", pointer.oid, pointer.name)
            if pointer.canonical:
                return None
            return Finding(
                kind=FindingKind.NON_CANONICAL_POINTER,
                message=f"Pointer for {pointer.oid} (blob {pointer.blob_oid}) was not canonical",
                blob_oid=pointer.blob_oid,
                oid=pointer.oid,
                path=pointer.name,
            )
        error = result.error
        if isinstance(error, PointerScanError):
            return Finding(
                kind=FindingKind.UNEXPECTED_GIT_OBJECT,
                message=f"\"{error.path}\" (treeish {error.tree_oid}) should have been a pointer but was not",
                tree_oid=error.tree_oid,
                path=error.path,
            )
        if error is not None:
            raise FatalScanError(f"Error checking Git LFS files: {error}") from error
        return None
