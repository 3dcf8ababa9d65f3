from pathlib import PurePosixPath

import pytest

from treeops.errors import NameCollisionError
from treeops.naming import candidate_name, resolve_destination_name
from treeops.storage import MemoryStorage


@pytest.mark.parametrize(
    ("name", "is_dir", "expected"),
    [
        ("note.txt", False, "note (1).txt"),
        ("archive.tar.gz", False, "archive.tar (1).gz"),
        ("Makefile", False, "Makefile (1)"),
        (".env", False, " (1).env"),
        ("logs", True, "logs (1)"),
        ("release.v2", True, "release.v2 (1)"),
    ],
)
def test_candidate_name(name: str, is_dir: bool, expected: str) -> None:
    assert candidate_name(name, 1, is_dir) == expected


def test_candidate_name_is_built_from_original_name() -> None:
    assert candidate_name("note.txt", 3, False) == "note (3).txt"


def test_resolve_destination_name_without_collision_keeps_name() -> None:
    storage = MemoryStorage()
    source = storage.add_file("/src/data.csv")
    destination = storage.add_dir("/dest")

    assert resolve_destination_name(storage, source, destination) == "data.csv"


def test_resolve_destination_name_skips_every_taken_candidate() -> None:
    storage = MemoryStorage()
    source = storage.add_dir("/src/logs")
    destination = storage.add_dir("/dest")
    storage.add_dir("/dest/logs")
    storage.add_dir("/dest/logs (1)")
    storage.add_file("/dest/logs (2)")

    assert resolve_destination_name(storage, source, destination) == "logs (3)"


def test_resolve_destination_name_cap_raises() -> None:
    storage = MemoryStorage()
    source = storage.add_file("/src/a.txt")
    destination = storage.add_dir("/dest")
    storage.add_file("/dest/a.txt")

    with pytest.raises(NameCollisionError) as excinfo:
        resolve_destination_name(storage, source, destination, max_attempts=0)

    assert excinfo.value.path == PurePosixPath("/dest/a.txt")
    assert excinfo.value.operation == "rename"
