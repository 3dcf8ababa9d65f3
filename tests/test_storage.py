from pathlib import Path, PurePosixPath

import pytest

from treeops.storage import LocalStorage, MemoryStorage


def test_local_storage_primitives(tmp_path: Path) -> None:
    storage = LocalStorage()
    root = storage.canonicalize(tmp_path / "x" / ".." / "root")

    assert root == (tmp_path / "root").resolve()
    assert not storage.exists(root)

    storage.make_dir(root)
    with storage.open_write(root / "a.bin") as handle:
        handle.write(b"abc")
    with storage.open_read(root / "a.bin") as handle:
        assert handle.read() == b"abc"

    assert storage.is_dir(root)
    assert not storage.is_dir(root / "a.bin")
    assert [child.name for child in storage.list_children(root)] == ["a.bin"]

    with pytest.raises(FileExistsError):
        storage.make_dir(root)
    with pytest.raises(OSError):
        storage.remove(root)

    storage.remove(root / "a.bin")
    storage.remove(root)
    assert not storage.exists(root)


def test_memory_storage_canonicalizes_relative_segments() -> None:
    storage = MemoryStorage()

    assert storage.canonicalize("a/./b/../c") == PurePosixPath("/a/c")
    assert storage.canonicalize("/") == PurePosixPath("/")


def test_memory_storage_lists_children_in_insertion_order() -> None:
    storage = MemoryStorage()
    storage.add_file("/d/zeta.txt")
    storage.add_file("/d/alpha.txt")
    storage.add_file("/d/nested/inner.txt")

    names = [child.name for child in storage.list_children(PurePosixPath("/d"))]

    assert names == ["zeta.txt", "alpha.txt", "nested"]


def test_memory_storage_write_requires_parent_directory() -> None:
    storage = MemoryStorage()

    with pytest.raises(FileNotFoundError):
        storage.open_write(PurePosixPath("/missing/file.txt"))


def test_memory_storage_refuses_to_remove_non_empty_directory() -> None:
    storage = MemoryStorage()
    storage.add_file("/d/a.txt")

    with pytest.raises(OSError):
        storage.remove(PurePosixPath("/d"))

    storage.remove(PurePosixPath("/d/a.txt"))
    storage.remove(PurePosixPath("/d"))
    assert not storage.exists(PurePosixPath("/d"))


def test_memory_storage_simulated_failure() -> None:
    storage = MemoryStorage()
    storage.add_file("/d/a.txt", b"a")
    storage.fail_on("read", "/d/a.txt")

    with pytest.raises(OSError, match="simulated read failure"):
        storage.open_read(PurePosixPath("/d/a.txt"))
