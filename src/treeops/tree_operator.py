from __future__ import annotations

import logging
from pathlib import PurePath

from treeops.config import OperatorConfig
from treeops.errors import InvalidArgumentError, NotFoundError, StorageIOError
from treeops.models import CountResult, EntryKind, OperationCounters, TransferResult
from treeops.naming import resolve_destination_name
from treeops.storage import LocalStorage, StorageDriver

logger = logging.getLogger(__name__)


class TreeOperator:
    def __init__(
        self,
        config: OperatorConfig | None = None,
        storage: StorageDriver | None = None,
    ) -> None:
        self.config = config or OperatorConfig()
        self.storage: StorageDriver = storage or LocalStorage()
        self.counters = OperationCounters()

    def count(self, root: PurePath | str) -> CountResult:
        root_path = self.storage.canonicalize(root)
        if not self.storage.exists(root_path):
            raise NotFoundError(f"Root does not exist: {root}", path=root_path, operation="count")

        result = CountResult()
        self._count_node(root_path, result)
        return result

    def copy(self, source: PurePath | str, destination: PurePath | str) -> TransferResult:
        return self._paste(source, destination, is_move=False)

    def move(self, source: PurePath | str, destination: PurePath | str) -> TransferResult:
        return self._paste(source, destination, is_move=True)

    def delete(self, root: PurePath | str) -> OperationCounters:
        root_path = self.storage.canonicalize(root)
        if not self.storage.exists(root_path):
            raise NotFoundError(f"Does not exist: {root}", path=root_path, operation="delete")

        self.counters = OperationCounters()
        self._trace("[Initiating removal: root='%s']", root_path)
        self._delete_subtree(root_path)
        return self.counters

    def _paste(self, source: PurePath | str, destination: PurePath | str, is_move: bool) -> TransferResult:
        operation = "move" if is_move else "copy"
        src = self.storage.canonicalize(source)
        dst = self.storage.canonicalize(destination)

        if not self.storage.exists(src):
            raise NotFoundError(f"Source path does not exist: {src}", path=src, operation=operation)
        if not self.storage.exists(dst):
            raise NotFoundError(f"Destination path does not exist: {dst}", path=dst, operation=operation)
        # Plain string prefix, so /a/b2 is also rejected for a source of /a/b.
        if str(dst).startswith(str(src)):
            raise InvalidArgumentError(
                "Destination path is a subpath of the source path", path=dst, operation=operation
            )
        if not self.storage.is_dir(dst):
            raise InvalidArgumentError(
                f"Destination path is not a directory: {dst}", path=dst, operation=operation
            )

        final_name = resolve_destination_name(
            self.storage,
            src,
            dst,
            max_attempts=self.config.max_rename_attempts,
            trace=self.config.debug_trace,
        )
        target = dst / final_name

        self.counters = OperationCounters()
        self._trace("[Initiating %s:]", operation)
        self._trace("[\tsrc='%s']", src)
        self._trace("[\tdst='%s']", target)

        self._copy_subtree(src, target)
        if is_move:
            self._delete_subtree(src)

        return TransferResult(source=src, destination=target, moved=is_move, counters=self.counters)

    def _count_node(self, node: PurePath, result: CountResult) -> None:
        if self.storage.is_dir(node):
            result.dirs += 1
            for child in self._children(node, "count"):
                self._count_node(child, result)
        else:
            result.files += 1

    def _copy_subtree(self, src: PurePath, dst: PurePath) -> None:
        kind = self._copy_entry(src, dst)
        if kind is EntryKind.DIRECTORY:
            for child in self._children(src, "copy"):
                self._copy_subtree(child, dst / child.name)

    def _delete_subtree(self, node: PurePath) -> None:
        kind = self._kind(node)
        if kind is EntryKind.DIRECTORY:
            for child in self._children(node, "delete"):
                self._delete_subtree(child)
        self._remove_entry(node, kind)

    def _copy_entry(self, src: PurePath, dst: PurePath) -> EntryKind:
        kind = self._kind(src)
        self._trace("%5s:  '%s'", "mkdir" if kind is EntryKind.DIRECTORY else "cp", dst)

        if kind is EntryKind.DIRECTORY:
            try:
                self.storage.make_dir(dst)
            except OSError as exc:
                raise StorageIOError(f"Cannot create directory: {dst}", path=dst, operation="mkdir") from exc
        else:
            self._stream_copy(src, dst)

        self.counters.record_copy(kind)
        return kind

    def _stream_copy(self, src: PurePath, dst: PurePath) -> None:
        buffer_size = self.config.buffer_size
        failing = src
        try:
            with self.storage.open_read(src) as reader:
                failing = dst
                with self.storage.open_write(dst) as writer:
                    while True:
                        failing = src
                        chunk = reader.read(buffer_size)
                        if not chunk:
                            break
                        failing = dst
                        writer.write(chunk)
                    failing = dst
        except OSError as exc:
            raise StorageIOError(
                f"Cannot copy file '{src}' to '{dst}': {exc}", path=failing, operation="cp"
            ) from exc

    def _remove_entry(self, node: PurePath, kind: EntryKind) -> None:
        self._trace("%5s:  '%s'", "rmdir" if kind is EntryKind.DIRECTORY else "rm", node)
        self.counters.record_removal(kind)
        if not self.config.deletion_enabled:
            return
        try:
            self.storage.remove(node)
        except OSError as exc:
            raise StorageIOError(
                f"Cannot remove {kind.value}: '{node}'",
                path=node,
                operation="rmdir" if kind is EntryKind.DIRECTORY else "rm",
            ) from exc

    def _kind(self, node: PurePath) -> EntryKind:
        return EntryKind.DIRECTORY if self.storage.is_dir(node) else EntryKind.FILE

    def _children(self, node: PurePath, operation: str) -> list[PurePath]:
        try:
            return self.storage.list_children(node)
        except OSError as exc:
            raise StorageIOError(f"Cannot list directory: {node}", path=node, operation=operation) from exc

    def _trace(self, message: str, *args: object) -> None:
        if self.config.debug_trace:
            logger.debug(message, *args)
