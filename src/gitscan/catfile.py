"""
Long-running ``git cat-file`` batch processes.
"""

from __future__ import annotations

import subprocess
from dataclasses import dataclass
from typing import Optional

from gitscan.repository import GitCommandError, GitRepository


@dataclass(frozen=True)
class ObjectInfo:
    """Type and size of one git object."""

    oid: str
    type: str
    size: int


class CatFileBatch:
    """Answer object queries one at a time over a single git process.

    ``contents=False`` runs ``--batch-check`` (headers only); ``contents=True``
    runs ``--batch`` and also returns the object bytes.
    """

    def __init__(self, repository: GitRepository, contents: bool = False) -> None:
        self.repository = repository
        self.contents = contents
        mode = "--batch" if contents else "--batch-check"
        self._args = ["cat-file", mode]
        self._process = subprocess.Popen(
            ["git", *self._args],
            cwd=repository.root,
            stdin=subprocess.PIPE,
            stdout=subprocess.PIPE,
            stderr=subprocess.DEVNULL,
        )

    def info(self, oid: str) -> Optional[ObjectInfo]:
        """Return the object's header, or None when git does not have it."""
        info, _ = self._request(oid)
        return info

    def read(self, oid: str) -> tuple[Optional[ObjectInfo], bytes]:
        if not self.contents:
            raise ValueError("read() needs a --batch process")
        return self._request(oid)

    def _request(self, oid: str) -> tuple[Optional[ObjectInfo], bytes]:
        process = self._process
        assert process.stdin is not None and process.stdout is not None
        try:
            process.stdin.write(oid.encode("ascii") + b"\n")
            process.stdin.flush()
        except BrokenPipeError as exc:
            raise GitCommandError(self._args, process.poll() or -1, "cat-file exited early") from exc
        header = process.stdout.readline()
        if not header:
            raise GitCommandError(self._args, process.poll() or -1, "unexpected end of cat-file output")
        fields = header.decode("ascii", errors="replace").split()
        if len(fields) == 2 and fields[1] == "missing":
            return None, b""
        if len(fields) != 3:
            raise GitCommandError(self._args, 0, f"malformed cat-file header: {header!r}")
        info = ObjectInfo(oid=fields[0], type=fields[1], size=int(fields[2]))
        if not self.contents:
            return info, b""
        data = process.stdout.read(info.size)
        process.stdout.read(1)
        if len(data) != info.size:
            raise GitCommandError(self._args, 0, f"short read for {info.oid}")
        return info, data

    def close(self) -> None:
        process = self._process
        if process.stdin is not None and not process.stdin.closed:
            process.stdin.close()
        if process.stdout is not None:
            process.stdout.read()
            process.stdout.close()
        process.wait()

    def __enter__(self) -> "CatFileBatch":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
