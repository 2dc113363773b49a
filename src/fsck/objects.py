"""
Recompute the content hash of every stored object a pointer references.
"""

from __future__ import annotations

import logging
from concurrent.futures import ALL_COMPLETED, FIRST_COMPLETED, Future, ThreadPoolExecutor, wait
from dataclasses import dataclass
from typing import Iterable, Optional

from fsck.models import FatalScanError, Finding, FindingKind, VerificationRun
from fsck.report import Reporter
from gitscan.scanner import PointerRecord, ScanResult
from hashing.hasher import Hasher
from lfsstore.layout import ObjectStore
from utils import ResourceMonitor


@dataclass
class ObjectCheckStats:
    """Counters for one object pass."""

    examined: int = 0
    skipped_duplicates: int = 0
    findings: int = 0


class ObjectVerifier:
    """Hash stored objects and classify them against their pointers."""

    def __init__(
        self,
        store: ObjectStore,
        hasher: Hasher,
        reporter: Reporter,
        threads: int = 1,
        monitor: Optional[ResourceMonitor] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.store = store
        self.hasher = hasher
        self.reporter = reporter
        self.threads = max(int(threads), 1)
        self.monitor = monitor
        self.logger = logger or logging.getLogger("lfs_fsck")

    def verify(self, results: Iterable[ScanResult], run: VerificationRun) -> ObjectCheckStats:
        """Drain ``results`` and record every object finding in ``run``."""
        stats = ObjectCheckStats()
        if self.threads <= 1:
            for pointer in self._unique_pointers(results, stats):
                self._handle(self.check_object(pointer), run, stats)
        else:
            self._verify_threaded(results, run, stats)
        self.logger.info(
            "Object pass: examined=%s duplicates=%s findings=%s",
            stats.examined,
            stats.skipped_duplicates,
            stats.findings,
        )
        return stats

    def check_object(self, pointer: PointerRecord) -> Optional[Finding]:
        """Return a finding for the object behind ``pointer``, or None when intact.

        I/O errors after the object was opened propagate as ObjectReadError.
        """
        path = self.store.object_path(pointer.oid)
        self.logger.debug("Examining %s (%s)", pointer.name, path)
        try:
            handle = path.open("rb")
        except (FileNotFoundError, NotADirectoryError) as exc:
            if pointer.size == 0:
                return None
            return self._open_error(pointer, exc)
        except OSError as exc:
            return self._open_error(pointer, exc)

        with handle:
            digest = self.hasher.compute_stream(handle, name=str(path))
        if digest == pointer.oid:
            return None
        return Finding(
            kind=FindingKind.CORRUPT_OBJECT,
            message=f"{pointer.name} ({pointer.oid}) is corrupt",
            oid=pointer.oid,
            path=pointer.name,
        )

    def _open_error(self, pointer: PointerRecord, exc: OSError) -> Finding:
        reason = exc.strerror or str(exc)
        return Finding(
            kind=FindingKind.OPEN_ERROR,
            message=f"{pointer.name} ({pointer.oid}) could not be checked: {reason}",
            oid=pointer.oid,
            path=pointer.name,
        )

    def _unique_pointers(self, results: Iterable[ScanResult], stats: ObjectCheckStats) -> Iterable[PointerRecord]:
        seen: set[str] = set()
        for result in results:
            if result.error is not None:
                raise FatalScanError(f"Error checking Git LFS files: {result.error}") from result.error
            pointer = result.pointer
            if pointer is None:
                continue
            if pointer.oid in seen:
                stats.skipped_duplicates += 1
                continue
            seen.add(pointer.oid)
            stats.examined += 1
            yield pointer

    def _handle(self, finding: Optional[Finding], run: VerificationRun, stats: ObjectCheckStats) -> None:
        if finding is None:
            return
        if run.add_object_finding(finding):
            stats.findings += 1
            self.reporter.finding(finding)

    def _verify_threaded(self, results: Iterable[ScanResult], run: VerificationRun, stats: ObjectCheckStats) -> None:
        max_pending = self.threads * 2
        pending: set[Future] = set()
        executor = ThreadPoolExecutor(max_workers=self.threads, thread_name_prefix="fsck-objects")
        try:
            for pointer in self._unique_pointers(results, stats):
                if self.monitor is not None:
                    self.monitor.throttle()
                pending.add(executor.submit(self.check_object, pointer))
                if len(pending) >= max_pending:
                    pending = self._drain(pending, run, stats, FIRST_COMPLETED)
            self._drain(pending, run, stats)
        except BaseException:
            executor.shutdown(wait=True, cancel_futures=True)
            raise
        executor.shutdown(wait=True)

    def _drain(
        self,
        pending: set[Future],
        run: VerificationRun,
        stats: ObjectCheckStats,
        return_when: str = ALL_COMPLETED,
    ) -> set[Future]:
        done, remaining = wait(pending, return_when=return_when)
        for future in done:
            self._handle(future.result(), run, stats)
        return set(remaining)
