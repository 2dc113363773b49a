"""
Relocate corrupt objects out of the live store.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Optional

from config import ensure_directories
from lfsstore.layout import ObjectStore
from utils import acquire_instance_lock, concurrency_allowed


class QuarantineError(RuntimeError):
    """Raised when a corrupt object cannot be moved into quarantine."""


@dataclass
class QuarantineStats:
    """Summary of one relocation run."""

    bad_dir: Path
    moved: list[str] = field(default_factory=list)


class QuarantineMover:
    """Move corrupt objects to ``<storage>/bad/<oid>``.

    Moves are plain renames inside the storage directory. The first failure
    aborts the run; objects already moved stay in quarantine.
    """

    def __init__(
        self,
        store: ObjectStore,
        logger: Optional[logging.Logger] = None,
        movement_logger: Optional[logging.Logger] = None,
    ) -> None:
        self.store = store
        self.logger = logger or logging.getLogger("lfs_fsck")
        self.movement_logger = movement_logger or logging.getLogger("lfs_fsck.movement")

    def run(self, oids: Iterable[str]) -> QuarantineStats:
        if concurrency_allowed():
            return self._move_all(oids)
        with acquire_instance_lock(self.store.lock_path):
            return self._move_all(oids)

    def _move_all(self, oids: Iterable[str]) -> QuarantineStats:
        bad_dir = self.store.bad_dir
        try:
            ensure_directories([bad_dir])
        except OSError as exc:
            raise QuarantineError(f"Could not create quarantine directory {bad_dir}: {exc}") from exc

        stats = QuarantineStats(bad_dir=bad_dir)
        for oid in oids:
            source = self.store.object_path(oid)
            destination = self.store.quarantine_path(oid)
            try:
                os.rename(source, destination)
            except OSError as exc:
                self.movement_logger.error("Quarantine move failed: %s -> %s (%s)", source, destination, exc)
                raise QuarantineError(f"Could not move {source} to {destination}: {exc}") from exc
            stats.moved.append(oid)
            self.movement_logger.info("Corrupt object moved: %s -> %s", source, destination)

        self.logger.info("Quarantined %s object(s) into %s", len(stats.moved), bad_dir)
        return stats
