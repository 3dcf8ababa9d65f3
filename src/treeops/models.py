from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import PurePath


class EntryKind(str, Enum):
    FILE = "file"
    DIRECTORY = "directory"


@dataclass(slots=True)
class CountResult:
    dirs: int = 0
    files: int = 0

    @property
    def total(self) -> int:
        return self.dirs + self.files


@dataclass(slots=True)
class OperationCounters:
    copied_dirs: int = 0
    copied_files: int = 0
    removed_dirs: int = 0
    removed_files: int = 0

    def record_copy(self, kind: EntryKind) -> None:
        if kind is EntryKind.DIRECTORY:
            self.copied_dirs += 1
        else:
            self.copied_files += 1

    def record_removal(self, kind: EntryKind) -> None:
        if kind is EntryKind.DIRECTORY:
            self.removed_dirs += 1
        else:
            self.removed_files += 1


@dataclass(slots=True)
class TransferResult:
    source: PurePath
    destination: PurePath
    moved: bool = False
    counters: OperationCounters = field(default_factory=OperationCounters)
