from __future__ import annotations

import hashlib
import shutil
import subprocess
from pathlib import Path

import pytest


def pointer_bytes(oid: str, size: int) -> bytes:
    return f"version https://git-lfs.github.com/spec/v1\noid sha256:{oid}\nsize {size}\n".encode("utf-8")


class LfsRepo:
    """Throwaway git repository with an LFS object store under .git/lfs."""

    def __init__(self, root: Path) -> None:
        self.root = root

    @property
    def storage_dir(self) -> Path:
        return self.root / ".git" / "lfs"

    @property
    def bad_dir(self) -> Path:
        return self.storage_dir / "bad"

    def git(self, *args: str) -> str:
        result = subprocess.run(["git", *args], cwd=self.root, check=True, capture_output=True, text=True)
        return result.stdout.strip()

    def write(self, path: str, data: bytes) -> Path:
        target = self.root / path
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(data)
        return target

    def object_path(self, oid: str) -> Path:
        return self.storage_dir / "objects" / oid[0:2] / oid[2:4] / oid

    def add_lfs_file(self, path: str, content: bytes, store: bool = True, pointer: bytes | None = None) -> str:
        """Write a pointer at ``path`` and, when ``store`` is set, its object."""
        oid = hashlib.sha256(content).hexdigest()
        self.write(path, pointer if pointer is not None else pointer_bytes(oid, len(content)))
        if store:
            target = self.object_path(oid)
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_bytes(content)
        return oid

    def commit(self, message: str = "commit") -> str:
        self.git("add", "-A")
        self.git("commit", "-q", "-m", message)
        return self.git("rev-parse", "HEAD")

    def store_listing(self) -> dict[str, bytes]:
        return {
            str(path.relative_to(self.storage_dir)): path.read_bytes()
            for path in sorted(self.storage_dir.rglob("*"))
            if path.is_file()
        }


@pytest.fixture
def lfs_repo(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> LfsRepo:
    if shutil.which("git") is None:
        pytest.skip("git is not installed")
    monkeypatch.setenv("GIT_CONFIG_GLOBAL", str(tmp_path / "gitconfig"))
    monkeypatch.setenv("GIT_CONFIG_NOSYSTEM", "1")
    monkeypatch.setenv("GIT_AUTHOR_NAME", "Test")
    monkeypatch.setenv("GIT_AUTHOR_EMAIL", "test@example.com")
    monkeypatch.setenv("GIT_COMMITTER_NAME", "Test")
    monkeypatch.setenv("GIT_COMMITTER_EMAIL", "test@example.com")
    monkeypatch.delenv("LFS_FSCK_CONFIG", raising=False)
    monkeypatch.delenv("LFS_FSCK_ALLOW_CONCURRENT", raising=False)

    root = tmp_path / "repo"
    root.mkdir()
    repo = LfsRepo(root)
    repo.git("init", "-q")
    repo.write(".gitattributes", b"*.bin filter=lfs diff=lfs merge=lfs -text\n")
    monkeypatch.chdir(root)
    return repo
