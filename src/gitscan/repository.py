"""
Thin wrapper around the ``git`` binary for one repository.
"""

from __future__ import annotations

import logging
import subprocess
import tempfile
from pathlib import Path
from typing import Iterator, Optional, Sequence


class GitCommandError(RuntimeError):
    """Raised when a git subprocess exits with a non-zero status."""

    def __init__(self, args: Sequence[str], returncode: int, stderr: str) -> None:
        self.command = list(args)
        self.returncode = returncode
        self.stderr = stderr.strip()
        detail = self.stderr or f"exit status {returncode}"
        super().__init__(f"git {' '.join(self.command)} failed: {detail}")


class RefResolutionError(GitCommandError):
    """Raised when a ref expression does not name a commit."""

    def __init__(self, ref: str, stderr: str = "") -> None:
        self.ref = ref
        super().__init__(["rev-parse", "--verify", ref], 128, stderr or f"unknown revision {ref!r}")


class GitRepository:
    """Run git commands against the repository containing ``root``."""

    def __init__(self, root: Optional[Path] = None, logger: Optional[logging.Logger] = None) -> None:
        self.root = Path(root) if root is not None else Path.cwd()
        self.logger = logger or logging.getLogger("lfs_fsck")

    def run(self, *args: str, check: bool = True) -> str:
        """Run git and return its decoded stdout."""
        self.logger.debug("git %s", " ".join(args))
        result = subprocess.run(
            ["git", *args],
            cwd=self.root,
            capture_output=True,
            check=False,
        )
        stdout = result.stdout.decode("utf-8", errors="surrogateescape")
        if check and result.returncode != 0:
            raise GitCommandError(args, result.returncode, result.stderr.decode("utf-8", errors="replace"))
        return stdout

    def stream(self, *args: str, separator: bytes = b"\n") -> Iterator[bytes]:
        """Yield records of a git command's stdout without buffering it whole.

        The exit status is checked once the output is exhausted; a failure
        raises GitCommandError after the records already yielded.
        """
        self.logger.debug("git %s", " ".join(args))
        with tempfile.TemporaryFile() as errors:
            process = subprocess.Popen(["git", *args], cwd=self.root, stdout=subprocess.PIPE, stderr=errors)
            assert process.stdout is not None
            completed = False
            try:
                buffer = b""
                for chunk in iter(lambda: process.stdout.read(64 * 1024), b""):
                    buffer += chunk
                    *records, buffer = buffer.split(separator)
                    yield from records
                if buffer:
                    yield buffer
                completed = True
            finally:
                if not completed:
                    process.kill()
                process.stdout.close()
                returncode = process.wait()
            if returncode != 0:
                errors.seek(0)
                raise GitCommandError(args, returncode, errors.read().decode("utf-8", errors="replace"))

    def git_dir(self) -> Path:
        value = self.run("rev-parse", "--absolute-git-dir").strip()
        return Path(value)

    def config_get(self, key: str) -> Optional[str]:
        """Return a git config value, or None when it is unset."""
        result = subprocess.run(
            ["git", "config", "--get", key],
            cwd=self.root,
            capture_output=True,
            check=False,
        )
        if result.returncode == 1:
            return None
        if result.returncode != 0:
            raise GitCommandError(
                ["config", "--get", key], result.returncode, result.stderr.decode("utf-8", errors="replace")
            )
        return result.stdout.decode("utf-8", errors="surrogateescape").strip()

    def resolve_current_ref(self) -> str:
        """Return the commit HEAD points at."""
        return self._resolve_commit("HEAD")

    def resolve_refs(self, exprs: Sequence[str]) -> list[str]:
        """Resolve each expression to a commit; the first failure is raised."""
        return [self._resolve_commit(expr) for expr in exprs]

    def _resolve_commit(self, expr: str) -> str:
        result = subprocess.run(
            ["git", "rev-parse", "--verify", "--quiet", f"{expr}^{{commit}}"],
            cwd=self.root,
            capture_output=True,
            check=False,
        )
        if result.returncode != 0:
            raise RefResolutionError(expr, result.stderr.decode("utf-8", errors="replace"))
        return result.stdout.decode("utf-8").strip()
