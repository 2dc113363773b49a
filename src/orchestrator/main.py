"""
Command-line entry point wiring the fsck passes together.
"""

from __future__ import annotations

import argparse
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Sequence, TextIO

from config import AppConfig, ConfigError
from fsck import (
    FatalScanError,
    ObjectVerifier,
    PointerChecker,
    QuarantineError,
    QuarantineMover,
    Reporter,
    ScanRange,
    ScanRangeError,
    VerificationRun,
    resolve_scan_range,
    write_json_report,
)
from gitscan import GitCommandError, GitRepository, GitScanner, PathFilter
from hashing import DEFAULT_CHUNK_BYTES, Hasher, ObjectReadError
from lfsstore import InvalidOidError, ObjectStore
from utils import InstanceLockError, ResourceMonitor, setup_logging

EXIT_OK = 0
EXIT_CORRUPT = 1
EXIT_FATAL = 2

FATAL_ERRORS = (
    GitCommandError,
    FatalScanError,
    ObjectReadError,
    QuarantineError,
    InstanceLockError,
    InvalidOidError,
    ConfigError,
    ScanRangeError,
    FileNotFoundError,
)


@dataclass(frozen=True)
class FsckOptions:
    """Parsed command-line options."""

    refs: tuple[str, ...] = ()
    dry_run: bool = False
    objects: bool = False
    pointers: bool = False
    report_path: Optional[Path] = None

    @property
    def check_objects(self) -> bool:
        return self.objects or not self.pointers

    @property
    def check_pointers(self) -> bool:
        return self.pointers or not self.objects


class FsckOrchestrator:
    """Resolve the scan range, run the requested passes, and repair."""

    def __init__(
        self,
        config: AppConfig,
        repository: GitRepository,
        reporter: Optional[Reporter] = None,
        loggers: Optional[dict[str, logging.Logger]] = None,
    ) -> None:
        self.config = config
        self.repository = repository
        self.reporter = reporter or Reporter()
        loggers = loggers or {}
        self.logger = loggers.get("main") or logging.getLogger("lfs_fsck")
        self.movement_logger = loggers.get("movement") or logging.getLogger("lfs_fsck.movement")
        self.store = ObjectStore.for_repository(repository, config)
        chunk_bytes = config.get_int("verification", "chunk_bytes", default=DEFAULT_CHUNK_BYTES)
        if chunk_bytes <= 0:
            raise ConfigError(f"verification.chunk_bytes must be positive, got {chunk_bytes}")
        self.hasher = Hasher(chunk_bytes=chunk_bytes)
        self.object_verifier = ObjectVerifier(
            self.store,
            self.hasher,
            self.reporter,
            threads=config.get_int("verification", "threads", default=1),
            monitor=ResourceMonitor.from_config(config),
            logger=self.logger,
        )
        self.pointer_checker = PointerChecker(self.reporter, logger=self.logger)
        self.quarantine = QuarantineMover(self.store, logger=self.logger, movement_logger=self.movement_logger)

    def run(self, options: FsckOptions) -> int:
        scan_range = resolve_scan_range(options.refs, self.repository)
        self.logger.info("Checking %s (storage %s)", scan_range.describe(), self.store.storage_dir)
        run = VerificationRun(dry_run=options.dry_run)

        if options.check_objects:
            self.object_verifier.verify(self._object_feed(scan_range), run)
        if options.check_pointers:
            self.pointer_checker.check(self._pointer_feed(scan_range), run)

        if options.report_path is not None:
            report = write_json_report(options.report_path, run, scan_range)
            self.logger.info("Report written to %s", report)

        if run.ok:
            self.reporter.success()
            return EXIT_OK
        if not run.should_quarantine:
            return EXIT_CORRUPT

        self.reporter.line(f"objects: repair: moving corrupt objects to {self.store.bad_dir}")
        self.quarantine.run(run.corrupt_oids)
        return EXIT_CORRUPT

    def fetch_exclude_filter(self) -> PathFilter:
        """Paths deliberately not fetched, from config or ``lfs.fetchexclude``."""
        patterns = self.config.get_list("lfs", "fetch_exclude")
        if patterns is None:
            value = self.repository.config_get("lfs.fetchexclude") or ""
            patterns = [item.strip() for item in value.split(",") if item.strip()]
        return PathFilter(exclude=patterns)

    def _object_feed(self, scan_range: ScanRange):
        scanner = GitScanner(self.repository, path_filter=self.fetch_exclude_filter(), logger=self.logger)
        if scan_range.start is None:
            yield from scanner.scan_ref(scan_range.end)
        else:
            yield from scanner.scan_ref_range(scan_range.start, scan_range.end)
        if scan_range.use_index:
            yield from scanner.scan_index("HEAD")

    def _pointer_feed(self, scan_range: ScanRange):
        scanner = GitScanner(self.repository, logger=self.logger)
        if scan_range.start is None:
            return scanner.scan_ref_by_tree(scan_range.end)
        return scanner.scan_ref_range_by_tree(scan_range.start, scan_range.end)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="lfs-fsck",
        description="Check Git LFS objects and pointers for corruption.",
    )
    parser.add_argument("ref", nargs="?", default=None, help="Ref or <ref1>..<ref2> range (default: HEAD and index)")
    parser.add_argument("-d", "--dry-run", action="store_true", help="List corrupt objects without moving them")
    parser.add_argument("--objects", action="store_true", help="Check object contents")
    parser.add_argument("--pointers", action="store_true", help="Check pointers")
    parser.add_argument("--config", default=None, help="Optional config path override")
    parser.add_argument("--report", default=None, help="Write a JSON report to this path")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log debug output to stderr")
    return parser


def main(
    argv: Optional[Sequence[str]] = None,
    repository_root: Optional[Path] = None,
    stdout: Optional[TextIO] = None,
) -> int:
    """CLI entry point; returns the process exit status."""
    args = build_parser().parse_args(argv)
    options = FsckOptions(
        refs=(args.ref,) if args.ref else (),
        dry_run=args.dry_run,
        objects=args.objects,
        pointers=args.pointers,
        report_path=Path(args.report) if args.report else None,
    )

    loggers = setup_logging(verbose=args.verbose)
    logger = loggers["main"]
    try:
        config = AppConfig.load(Path(args.config) if args.config else None)
        log_dir = config.optional_path("paths", "logs")
        if log_dir is not None:
            loggers = setup_logging(log_dir, verbose=args.verbose)
        orchestrator = FsckOrchestrator(
            config,
            GitRepository(repository_root, logger=logger),
            reporter=Reporter(stdout),
            loggers=loggers,
        )
        return orchestrator.run(options)
    except FATAL_ERRORS as exc:
        logger.debug("Fatal error", exc_info=True)
        logger.error("%s", exc)
        return EXIT_FATAL


if __name__ == "__main__":
    raise SystemExit(main())
