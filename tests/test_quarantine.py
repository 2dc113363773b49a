import hashlib
from pathlib import Path

import pytest

from fsck.quarantine import QuarantineError, QuarantineMover
from lfsstore.layout import ObjectStore
from utils import InstanceLockError, acquire_instance_lock


def put_object(store: ObjectStore, content: bytes) -> str:
    oid = hashlib.sha256(content).hexdigest()
    path = store.object_path(oid)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(content)
    return oid


@pytest.fixture(autouse=True)
def exclusive_lock(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("LFS_FSCK_ALLOW_CONCURRENT", raising=False)


def test_moves_every_corrupt_object(tmp_path: Path) -> None:
    store = ObjectStore(tmp_path / "lfs")
    oids = [put_object(store, f"payload {index}".encode("utf-8")) for index in range(3)]
    keep = put_object(store, b"healthy")

    stats = QuarantineMover(store).run(oids)

    assert stats.moved == oids
    assert sorted(path.name for path in store.bad_dir.iterdir()) == sorted(oids)
    assert all(not store.object_path(oid).exists() for oid in oids)
    assert store.object_path(keep).exists()


def test_missing_source_is_fatal(tmp_path: Path) -> None:
    store = ObjectStore(tmp_path / "lfs")
    oid = put_object(store, b"moved once")
    mover = QuarantineMover(store)
    mover.run([oid])

    with pytest.raises(QuarantineError):
        mover.run([oid])


def test_held_lock_blocks_repair(tmp_path: Path) -> None:
    store = ObjectStore(tmp_path / "lfs")
    oid = put_object(store, b"locked")

    with acquire_instance_lock(store.lock_path):
        with pytest.raises(InstanceLockError):
            QuarantineMover(store).run([oid])

    assert store.object_path(oid).exists()


def test_lock_can_be_bypassed(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("LFS_FSCK_ALLOW_CONCURRENT", "1")
    store = ObjectStore(tmp_path / "lfs")
    oid = put_object(store, b"unlocked")

    with acquire_instance_lock(store.lock_path):
        QuarantineMover(store).run([oid])

    assert (store.bad_dir / oid).exists()
