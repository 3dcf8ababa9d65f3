from __future__ import annotations

import errno
import io
import os
from pathlib import Path, PurePath, PurePosixPath
import posixpath
from typing import BinaryIO, Protocol


class StorageDriver(Protocol):
    def canonicalize(self, path: PurePath | str) -> PurePath: ...

    def exists(self, path: PurePath) -> bool: ...

    def is_dir(self, path: PurePath) -> bool: ...

    def list_children(self, path: PurePath) -> list[PurePath]: ...

    def open_read(self, path: PurePath) -> BinaryIO: ...

    def open_write(self, path: PurePath) -> BinaryIO: ...

    def make_dir(self, path: PurePath) -> None: ...

    def remove(self, path: PurePath) -> None: ...


class LocalStorage:
    def canonicalize(self, path: PurePath | str) -> Path:
        return Path(path).resolve()

    def exists(self, path: PurePath) -> bool:
        return Path(path).exists()

    def is_dir(self, path: PurePath) -> bool:
        return Path(path).is_dir()

    def list_children(self, path: PurePath) -> list[PurePath]:
        return list(Path(path).iterdir())

    def open_read(self, path: PurePath) -> BinaryIO:
        return Path(path).open("rb")

    def open_write(self, path: PurePath) -> BinaryIO:
        return Path(path).open("wb")

    def make_dir(self, path: PurePath) -> None:
        Path(path).mkdir()

    def remove(self, path: PurePath) -> None:
        target = Path(path)
        # Directories only; a symlink to a directory is unlinked, never rmdir'd.
        if target.is_dir() and not target.is_symlink():
            target.rmdir()
        else:
            target.unlink()


class _MemoryWriter(io.BytesIO):
    def __init__(self, storage: MemoryStorage, path: PurePosixPath) -> None:
        super().__init__()
        self._storage = storage
        self._path = path

    def close(self) -> None:
        if not self.closed:
            self._storage._entries[self._path] = self.getvalue()
        super().close()


class MemoryStorage:
    # Directories map to None, files to their bytes; children list in insertion order.

    ROOT = PurePosixPath("/")

    def __init__(self) -> None:
        self._entries: dict[PurePosixPath, bytes | None] = {self.ROOT: None}
        self._failures: set[tuple[str, PurePosixPath]] = set()

    def add_dir(self, path: PurePath | str) -> PurePosixPath:
        target = self.canonicalize(path)
        for parent in reversed(target.parents):
            self._entries.setdefault(parent, None)
        self._entries.setdefault(target, None)
        return target

    def add_file(self, path: PurePath | str, content: bytes = b"") -> PurePosixPath:
        target = self.canonicalize(path)
        self.add_dir(target.parent)
        self._entries[target] = content
        return target

    def read_bytes(self, path: PurePath | str) -> bytes:
        content = self._entries[self.canonicalize(path)]
        if content is None:
            raise IsADirectoryError(errno.EISDIR, os.strerror(errno.EISDIR), str(path))
        return content

    def fail_on(self, operation: str, path: PurePath | str) -> None:
        self._failures.add((operation, self.canonicalize(path)))

    def canonicalize(self, path: PurePath | str) -> PurePosixPath:
        return PurePosixPath(posixpath.normpath(posixpath.join("/", str(path))))

    def exists(self, path: PurePath) -> bool:
        return PurePosixPath(path) in self._entries

    def is_dir(self, path: PurePath) -> bool:
        key = PurePosixPath(path)
        return key in self._entries and self._entries[key] is None

    def list_children(self, path: PurePath) -> list[PurePath]:
        key = self._require(path, "list")
        if self._entries[key] is not None:
            raise NotADirectoryError(errno.ENOTDIR, os.strerror(errno.ENOTDIR), str(key))
        return [entry for entry in self._entries if entry != self.ROOT and entry.parent == key]

    def open_read(self, path: PurePath) -> BinaryIO:
        key = self._require(path, "read")
        content = self._entries[key]
        if content is None:
            raise IsADirectoryError(errno.EISDIR, os.strerror(errno.EISDIR), str(key))
        return io.BytesIO(content)

    def open_write(self, path: PurePath) -> BinaryIO:
        key = PurePosixPath(path)
        self._check_failure("write", key)
        if not self.is_dir(key.parent):
            raise FileNotFoundError(errno.ENOENT, os.strerror(errno.ENOENT), str(key))
        if self.is_dir(key):
            raise IsADirectoryError(errno.EISDIR, os.strerror(errno.EISDIR), str(key))
        self._entries[key] = b""
        return _MemoryWriter(self, key)

    def make_dir(self, path: PurePath) -> None:
        key = PurePosixPath(path)
        self._check_failure("make_dir", key)
        if key in self._entries:
            raise FileExistsError(errno.EEXIST, os.strerror(errno.EEXIST), str(key))
        if not self.is_dir(key.parent):
            raise FileNotFoundError(errno.ENOENT, os.strerror(errno.ENOENT), str(key))
        self._entries[key] = None

    def remove(self, path: PurePath) -> None:
        key = self._require(path, "remove")
        if self._entries[key] is None and any(entry.parent == key for entry in self._entries if entry != key):
            raise OSError(errno.ENOTEMPTY, os.strerror(errno.ENOTEMPTY), str(key))
        del self._entries[key]

    def _require(self, path: PurePath, operation: str) -> PurePosixPath:
        key = PurePosixPath(path)
        self._check_failure(operation, key)
        if key not in self._entries:
            raise FileNotFoundError(errno.ENOENT, os.strerror(errno.ENOENT), str(key))
        return key

    def _check_failure(self, operation: str, key: PurePosixPath) -> None:
        if (operation, key) in self._failures:
            raise OSError(errno.EIO, f"simulated {operation} failure", str(key))
