"""
Lazy feeds of pointer records over git history and the index.

Two shapes of feed are offered. The by-blob feed (``scan_ref``,
``scan_ref_range``, ``scan_index``) lists every reachable blob small enough
to be a pointer and yields the ones that decode. The by-tree feed
(``scan_ref_by_tree``, ``scan_ref_range_by_tree``) walks the tree of each
commit and additionally surfaces LFS-tracked entries that are not pointers
as PointerScanError values.
"""

from __future__ import annotations

import logging
import posixpath
from dataclasses import dataclass
from typing import Iterator, Optional

from gitscan.attributes import LfsAttributes
from gitscan.catfile import CatFileBatch
from gitscan.filter import PathFilter
from gitscan.pointer import MAX_POINTER_SIZE, NotAPointerError, decode_pointer, is_canonical
from gitscan.repository import GitRepository

GITLINK_MODE = "160000"
ATTRIBUTES_FILE = ".gitattributes"


@dataclass(frozen=True)
class PointerRecord:
    """A pointer found in a blob, with the path it was found under."""

    name: str
    blob_oid: str
    oid: str
    size: int
    canonical: bool


class PointerScanError(Exception):
    """A tree entry expected to be a pointer was some other git object."""

    def __init__(self, tree_oid: str, path: str) -> None:
        self.tree_oid = tree_oid
        self.path = path
        super().__init__(f"{path!r} (treeish {tree_oid}) should have been a pointer but was not")


@dataclass(frozen=True)
class ScanResult:
    """One item of a feed: a pointer, or an error about one entry."""

    pointer: Optional[PointerRecord] = None
    error: Optional[Exception] = None


@dataclass(frozen=True)
class _TreeEntry:
    mode: str
    type: str
    oid: str
    size: Optional[int]
    path: str


class GitScanner:
    """Produce pointer feeds for one repository."""

    def __init__(
        self,
        repository: GitRepository,
        path_filter: Optional[PathFilter] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.repository = repository
        self.path_filter = path_filter
        self.logger = logger or logging.getLogger("lfs_fsck")

    # by-blob feeds

    def scan_ref(self, end: str) -> Iterator[ScanResult]:
        """Yield pointers in every blob reachable from ``end``."""
        return self._scan_rev_list([end])

    def scan_ref_range(self, start: str, end: str) -> Iterator[ScanResult]:
        """Yield pointers in blobs reachable from ``end`` but not from ``start``."""
        return self._scan_rev_list([end, f"^{start}"])

    def scan_index(self, ref: str = "HEAD") -> Iterator[ScanResult]:
        """Yield pointers staged in the index.

        ``ref`` names the commit the index is compared against in log output
        only; every staged blob is examined.
        """
        self.logger.debug("Scanning index (against %s)", ref)
        candidates = self._iter_index_entries()
        return self._read_pointers(candidates)

    # by-tree feeds

    def scan_ref_by_tree(self, end: str) -> Iterator[ScanResult]:
        return self._scan_trees([end])

    def scan_ref_range_by_tree(self, start: str, end: str) -> Iterator[ScanResult]:
        return self._scan_trees(self._iter_commits([end, f"^{start}"]))

    def _scan_rev_list(self, revisions: list[str]) -> Iterator[ScanResult]:
        self.logger.debug("Scanning objects of %s", " ".join(revisions))
        return self._read_pointers(self._iter_small_blobs(revisions))

    def _iter_small_blobs(self, revisions: list[str]) -> Iterator[tuple[str, str]]:
        seen: set[str] = set()
        with CatFileBatch(self.repository) as check:
            for record in self.repository.stream("rev-list", "--objects", *revisions, "--"):
                line = record.decode("utf-8", errors="surrogateescape")
                oid, _, path = line.partition(" ")
                if not path or oid in seen:
                    continue
                if not self._allowed(path) or not self._is_small_blob(check, oid):
                    continue
                seen.add(oid)
                yield oid, path

    def _iter_index_entries(self) -> Iterator[tuple[str, str]]:
        seen: set[str] = set()
        with CatFileBatch(self.repository) as check:
            for record in self.repository.stream("ls-files", "--stage", "-z", separator=b"\0"):
                meta, _, path_bytes = record.partition(b"\t")
                fields = meta.decode("ascii").split()
                if len(fields) != 3 or fields[0] == GITLINK_MODE:
                    continue
                oid = fields[1]
                path = path_bytes.decode("utf-8", errors="surrogateescape")
                if oid in seen or not self._allowed(path):
                    continue
                if not self._is_small_blob(check, oid):
                    continue
                seen.add(oid)
                yield oid, path

    @staticmethod
    def _is_small_blob(check: CatFileBatch, oid: str) -> bool:
        """Header-only test so large blobs are never read into memory."""
        info = check.info(oid)
        return info is not None and info.type == "blob" and info.size < MAX_POINTER_SIZE

    def _read_pointers(self, candidates: Iterator[tuple[str, str]]) -> Iterator[ScanResult]:
        with CatFileBatch(self.repository, contents=True) as batch:
            for oid, path in candidates:
                info, data = batch.read(oid)
                if info is None or info.type != "blob" or info.size >= MAX_POINTER_SIZE:
                    continue
                record = self._decode(oid, path, data)
                if record is not None:
                    yield ScanResult(pointer=record)

    def _iter_commits(self, revisions: list[str]) -> Iterator[str]:
        for record in self.repository.stream("rev-list", *revisions, "--"):
            commit = record.decode("ascii").strip()
            if commit:
                yield commit

    def _scan_trees(self, commits) -> Iterator[ScanResult]:
        seen_pointers: set[str] = set()
        seen_errors: set[tuple[str, str]] = set()
        with CatFileBatch(self.repository, contents=True) as batch:
            for commit in commits:
                self.logger.debug("Scanning tree of %s", commit)
                attributes = self._load_attributes(commit, batch)
                for entry in self._iter_tree(commit):
                    if not self._allowed(entry.path):
                        continue
                    if entry.oid in seen_pointers or (entry.oid, entry.path) in seen_errors:
                        continue
                    result = self._classify_entry(entry, attributes, batch)
                    if result is None:
                        continue
                    if result.pointer is not None:
                        seen_pointers.add(entry.oid)
                    else:
                        seen_errors.add((entry.oid, entry.path))
                    yield result

    def _classify_entry(
        self, entry: _TreeEntry, attributes: LfsAttributes, batch: CatFileBatch
    ) -> Optional[ScanResult]:
        if entry.type == "blob" and entry.size is not None and entry.size < MAX_POINTER_SIZE:
            _, data = batch.read(entry.oid)
            record = self._decode(entry.oid, entry.path, data)
            if record is not None:
                return ScanResult(pointer=record)
        if attributes.is_tracked(entry.path):
            return ScanResult(error=PointerScanError(entry.oid, entry.path))
        return None

    def _load_attributes(self, commit: str, batch: CatFileBatch) -> LfsAttributes:
        attributes = LfsAttributes()
        for entry in self._iter_tree(commit):
            if entry.type == "blob" and posixpath.basename(entry.path) == ATTRIBUTES_FILE:
                _, data = batch.read(entry.oid)
                attributes.add_file(entry.path, data)
        return attributes

    def _iter_tree(self, commit: str) -> Iterator[_TreeEntry]:
        for record in self.repository.stream("ls-tree", "-r", "-l", "-z", "--full-tree", commit, separator=b"\0"):
            if not record:
                continue
            meta, _, path_bytes = record.partition(b"\t")
            fields = meta.decode("ascii").split()
            if len(fields) != 4:
                continue
            mode, obj_type, oid, size = fields
            yield _TreeEntry(
                mode=mode,
                type=obj_type,
                oid=oid,
                size=int(size) if size.isdigit() else None,
                path=path_bytes.decode("utf-8", errors="surrogateescape"),
            )

    def _decode(self, blob_oid: str, path: str, data: bytes) -> Optional[PointerRecord]:
        try:
            pointer = decode_pointer(data)
        except NotAPointerError:
            return None
        return PointerRecord(
            name=path,
            blob_oid=blob_oid,
            oid=pointer.oid,
            size=pointer.size,
            canonical=is_canonical(data, pointer),
        )

    def _allowed(self, path: str) -> bool:
        return self.path_filter is None or self.path_filter.allows(path)
