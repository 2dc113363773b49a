import hashlib

from gitscan.catfile import CatFileBatch
from gitscan.filter import PathFilter
from gitscan.repository import GitRepository
from gitscan.pointer import MAX_POINTER_SIZE
from gitscan.scanner import GitScanner, PointerScanError

from conftest import pointer_bytes


def pointers(results):
    return {result.pointer.name: result.pointer for result in results if result.pointer is not None}


def errors(results):
    return [result.error for result in results if result.error is not None]


def test_scan_ref_yields_pointers_only(lfs_repo) -> None:
    oid = lfs_repo.add_lfs_file("model.bin", b"weights")
    lfs_repo.write("README.md", b"# readme\n")
    head = lfs_repo.commit()

    found = pointers(GitScanner(GitRepository(lfs_repo.root)).scan_ref(head))

    assert list(found) == ["model.bin"]
    record = found["model.bin"]
    assert (record.oid, record.size, record.canonical) == (oid, 7, True)
    assert record.blob_oid == lfs_repo.git("rev-parse", "HEAD:model.bin")


def test_scan_ref_range_skips_older_history(lfs_repo) -> None:
    lfs_repo.add_lfs_file("old.bin", b"old")
    first = lfs_repo.commit("first")
    lfs_repo.add_lfs_file("new.bin", b"new")
    second = lfs_repo.commit("second")

    found = pointers(GitScanner(GitRepository(lfs_repo.root)).scan_ref_range(first, second))

    assert list(found) == ["new.bin"]


def test_scan_index_sees_staged_pointers(lfs_repo) -> None:
    lfs_repo.commit("initial")
    lfs_repo.add_lfs_file("staged.bin", b"staged")
    lfs_repo.git("add", "staged.bin")

    found = pointers(GitScanner(GitRepository(lfs_repo.root)).scan_index())

    assert "staged.bin" in found


def test_path_filter_excludes_paths(lfs_repo) -> None:
    lfs_repo.add_lfs_file("keep/a.bin", b"a")
    lfs_repo.add_lfs_file("skip/b.bin", b"b")
    head = lfs_repo.commit()
    scanner = GitScanner(GitRepository(lfs_repo.root), path_filter=PathFilter(exclude=["skip"]))

    assert list(pointers(scanner.scan_ref(head))) == ["keep/a.bin"]


def test_tree_scan_flags_tracked_non_pointers(lfs_repo) -> None:
    lfs_repo.write("data.bin", b"\x00plain binary, not a pointer")
    lfs_repo.write("notes.txt", b"untracked text")
    head = lfs_repo.commit()

    results = list(GitScanner(GitRepository(lfs_repo.root)).scan_ref_by_tree(head))

    assert pointers(results) == {}
    [error] = errors(results)
    assert isinstance(error, PointerScanError)
    assert error.path == "data.bin"
    assert error.tree_oid == lfs_repo.git("rev-parse", "HEAD:data.bin")


def test_tree_scan_honours_nested_attributes(lfs_repo) -> None:
    lfs_repo.write("sub/.gitattributes", b"*.dat filter=lfs\n")
    lfs_repo.write("sub/raw.dat", b"raw")
    lfs_repo.write("raw.dat", b"raw at root")
    head = lfs_repo.commit()

    results = list(GitScanner(GitRepository(lfs_repo.root)).scan_ref_by_tree(head))

    assert [error.path for error in errors(results)] == ["sub/raw.dat"]


def test_tree_scan_reports_non_canonical_pointers(lfs_repo) -> None:
    oid = hashlib.sha256(b"content").hexdigest()
    lfs_repo.write("loose.bin", pointer_bytes(oid, 7) + b"\n")
    lfs_repo.add_lfs_file("tidy.bin", b"tidy")
    head = lfs_repo.commit()

    found = pointers(GitScanner(GitRepository(lfs_repo.root)).scan_ref_by_tree(head))

    assert found["loose.bin"].canonical is False
    assert found["tidy.bin"].canonical is True


def test_tree_range_scan_walks_each_commit(lfs_repo) -> None:
    lfs_repo.add_lfs_file("base.bin", b"base")
    first = lfs_repo.commit("first")
    lfs_repo.write("broken.bin", b"not a pointer")
    second = lfs_repo.commit("second")
    lfs_repo.git("rm", "-q", "broken.bin")
    third = lfs_repo.commit("third")

    results = list(GitScanner(GitRepository(lfs_repo.root)).scan_ref_range_by_tree(first, third))

    assert [error.path for error in errors(results)] == ["broken.bin"]
    assert second != third


def test_large_blobs_are_never_read_whole(lfs_repo, monkeypatch) -> None:
    lfs_repo.add_lfs_file("model.bin", b"weights")
    lfs_repo.write("big.dat", b"\0" * (MAX_POINTER_SIZE * 50))
    head = lfs_repo.commit("initial")
    lfs_repo.write("staged.dat", b"\1" * (MAX_POINTER_SIZE * 50))
    lfs_repo.git("add", "staged.dat")
    read_sizes = []
    original_read = CatFileBatch.read

    def spy_read(self, oid):
        info, data = original_read(self, oid)
        read_sizes.append(len(data))
        return info, data

    monkeypatch.setattr(CatFileBatch, "read", spy_read)
    scanner = GitScanner(GitRepository(lfs_repo.root))

    found = pointers(list(scanner.scan_ref(head)) + list(scanner.scan_index()))

    assert set(found) == {"model.bin"}
    assert read_sizes
    assert max(read_sizes) < MAX_POINTER_SIZE


def test_empty_tracked_file_is_the_empty_pointer(lfs_repo) -> None:
    lfs_repo.write("empty.bin", b"")
    head = lfs_repo.commit()

    results = list(GitScanner(GitRepository(lfs_repo.root)).scan_ref_by_tree(head))

    assert errors(results) == []
    record = pointers(results)["empty.bin"]
    assert (record.oid, record.size, record.canonical) == (hashlib.sha256(b"").hexdigest(), 0, True)
