from pathlib import Path

import pytest

from config import AppConfig
from gitscan import GitRepository
from lfsstore import InvalidOidError, ObjectStore

OID = "4d7a214614ab2935c943f9e0ff69d22eadbb8f32b1258daaa5e2ca24d17e2393"


def test_object_and_quarantine_paths(tmp_path: Path) -> None:
    store = ObjectStore(tmp_path / "lfs")

    assert store.object_path(OID) == tmp_path / "lfs" / "objects" / "4d" / "7a" / OID
    assert store.quarantine_path(OID) == tmp_path / "lfs" / "bad" / OID
    assert store.lock_path.parent == store.storage_dir


@pytest.mark.parametrize("oid", ["", "../../etc/passwd", OID.upper(), OID[:-1]])
def test_invalid_oids_are_rejected(tmp_path: Path, oid: str) -> None:
    store = ObjectStore(tmp_path)

    with pytest.raises(InvalidOidError):
        store.object_path(oid)
    with pytest.raises(InvalidOidError):
        store.quarantine_path(oid)


def test_default_storage_is_inside_git_dir(lfs_repo) -> None:
    store = ObjectStore.for_repository(GitRepository(lfs_repo.root))

    assert store.storage_dir.resolve() == lfs_repo.storage_dir.resolve()


def test_git_config_storage_is_relative_to_git_dir(lfs_repo) -> None:
    lfs_repo.git("config", "lfs.storage", "shared-lfs")

    store = ObjectStore.for_repository(GitRepository(lfs_repo.root))

    assert store.storage_dir.resolve() == (lfs_repo.root / ".git" / "shared-lfs").resolve()


def test_config_file_overrides_git(lfs_repo, tmp_path: Path) -> None:
    lfs_repo.git("config", "lfs.storage", "shared-lfs")
    config = AppConfig(root_dir=tmp_path, raw={"lfs": {"storage_dir": "store"}})

    store = ObjectStore.for_repository(GitRepository(lfs_repo.root), config)

    assert store.storage_dir == config.resolve_path("lfs", "storage_dir")
