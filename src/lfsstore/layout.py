"""
On-disk layout of the local LFS object store.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from config import AppConfig
from gitscan.pointer import is_valid_oid
from gitscan.repository import GitRepository

BAD_DIR_NAME = "bad"
LOCK_FILE_NAME = "fsck.lock"


class InvalidOidError(ValueError):
    """Raised when an oid cannot address a store object."""


@dataclass(frozen=True)
class ObjectStore:
    """Paths of objects under ``<storage_dir>/objects/aa/bb/<oid>``."""

    storage_dir: Path

    @classmethod
    def for_repository(cls, repository: GitRepository, config: Optional[AppConfig] = None) -> "ObjectStore":
        """Locate the store: config ``lfs.storage_dir``, then git ``lfs.storage``, then ``<git-dir>/lfs``."""
        if config is not None:
            configured = config.optional_path("lfs", "storage_dir")
            if configured is not None:
                return cls(configured)
        git_dir = repository.git_dir()
        storage = repository.config_get("lfs.storage")
        if storage:
            path = Path(storage).expanduser()
            if not path.is_absolute():
                path = git_dir / path
            return cls(path)
        return cls(git_dir / "lfs")

    @property
    def objects_dir(self) -> Path:
        return self.storage_dir / "objects"

    @property
    def bad_dir(self) -> Path:
        """Quarantine directory for objects that failed verification."""
        return self.storage_dir / BAD_DIR_NAME

    @property
    def lock_path(self) -> Path:
        return self.storage_dir / LOCK_FILE_NAME

    def object_path(self, oid: str) -> Path:
        if not is_valid_oid(oid):
            raise InvalidOidError(f"Invalid object id: {oid!r}")
        return self.objects_dir / oid[0:2] / oid[2:4] / oid

    def quarantine_path(self, oid: str) -> Path:
        if not is_valid_oid(oid):
            raise InvalidOidError(f"Invalid object id: {oid!r}")
        return self.bad_dir / oid
