from __future__ import annotations

from pathlib import PurePath


class TreeOpsError(Exception):
    def __init__(
        self,
        message: str,
        *,
        path: PurePath | str | None = None,
        operation: str | None = None,
    ) -> None:
        super().__init__(message)
        self.path = path
        self.operation = operation


class NotFoundError(TreeOpsError):
    pass


class InvalidArgumentError(TreeOpsError, ValueError):
    pass


class NameCollisionError(InvalidArgumentError):
    pass


class StorageIOError(TreeOpsError):
    pass
