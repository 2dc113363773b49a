from gitscan.attributes import LfsAttributes
from gitscan.filter import PathFilter


def test_exclude_patterns_match_names_directories_and_globs() -> None:
    path_filter = PathFilter(exclude=["videos", "*.iso", "assets/raw/*"])

    assert not path_filter.allows("videos/intro.mp4")
    assert not path_filter.allows("media/videos/intro.mp4")
    assert not path_filter.allows("disk/image.iso")
    assert not path_filter.allows("assets/raw/tree.psd")
    assert path_filter.allows("assets/final/tree.png")
    assert path_filter.allows("videos.txt")


def test_include_patterns_narrow_the_filter() -> None:
    path_filter = PathFilter(include=["data/"], exclude=["data/tmp"])

    assert path_filter.allows("data/model.bin")
    assert not path_filter.allows("data/tmp/model.bin")
    assert not path_filter.allows("other/model.bin")


def test_empty_filter_allows_everything() -> None:
    path_filter = PathFilter(exclude=["", "  "])

    assert not path_filter
    assert path_filter.allows("anything/at/all.bin")


def test_lfs_attributes_follow_file_depth_and_order() -> None:
    attributes = LfsAttributes()
    attributes.add_file(".gitattributes", b"# comment\n*.bin filter=lfs diff=lfs merge=lfs -text\n*.txt text\n")
    attributes.add_file("docs/.gitattributes", b"*.bin -filter\n/local.dat filter=lfs\n")

    assert attributes.is_tracked("data.bin")
    assert attributes.is_tracked("deep/nested/data.bin")
    assert not attributes.is_tracked("docs/manual.bin")
    assert attributes.is_tracked("docs/local.dat")
    assert not attributes.is_tracked("docs/sub/local.dat")
    assert not attributes.is_tracked("notes.txt")


def test_lfs_attributes_path_patterns() -> None:
    attributes = LfsAttributes()
    attributes.add_file(".gitattributes", b"assets/**/*.psd filter=lfs\nbig/* filter=lfs\n")

    assert attributes.is_tracked("assets/tree.psd")
    assert attributes.is_tracked("assets/a/b/tree.psd")
    assert attributes.is_tracked("big/file")
    assert not attributes.is_tracked("tree.psd")
