"""
Hashing utilities for LFS object content.
"""

from __future__ import annotations

import hashlib
from pathlib import Path
from typing import BinaryIO

DEFAULT_CHUNK_BYTES = 4 * 1024 * 1024


class ObjectReadError(OSError):
    """Raised when an opened object cannot be read to the end."""


class Hasher:
    """Compute streaming SHA-256 digests, the algorithm that keys the store."""

    algorithm = "sha256"

    def __init__(self, chunk_bytes: int = DEFAULT_CHUNK_BYTES) -> None:
        if chunk_bytes <= 0:
            raise ValueError(f"chunk_bytes must be positive, got {chunk_bytes}")
        self.chunk_bytes = chunk_bytes

    def compute(self, path: Path) -> str:
        """Hash a file by path. Open errors propagate unchanged."""
        with path.open("rb") as handle:
            return self.compute_stream(handle, name=str(path))

    def compute_stream(self, handle: BinaryIO, name: str = "<stream>") -> str:
        """Hash an already opened stream to its end.

        Any OSError raised while reading is re-raised as ObjectReadError, since
        a partial read cannot be classified as either intact or corrupt.
        """
        hasher = hashlib.sha256()
        try:
            while True:
                data = handle.read(self.chunk_bytes)
                if not data:
                    break
                hasher.update(data)
        except OSError as exc:
            raise ObjectReadError(f"Error reading {name}: {exc.strerror or exc}") from exc
        return hasher.hexdigest()
