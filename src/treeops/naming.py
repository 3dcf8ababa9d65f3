from __future__ import annotations

import logging
from pathlib import PurePath

from treeops.errors import NameCollisionError
from treeops.storage import StorageDriver

logger = logging.getLogger(__name__)


def candidate_name(name: str, attempt: int, is_dir: bool) -> str:
    if is_dir:
        return f"{name} ({attempt})"

    dot_index = name.rfind(".")
    if dot_index == -1:
        return f"{name} ({attempt})"
    return f"{name[:dot_index]} ({attempt}){name[dot_index:]}"


def resolve_destination_name(
    storage: StorageDriver,
    source: PurePath,
    destination_dir: PurePath,
    max_attempts: int | None = None,
    trace: bool = False,
) -> str:
    original = source.name
    is_dir = storage.is_dir(source)
    name = original
    attempt = 0

    while storage.exists(destination_dir / name):
        if trace:
            logger.debug("Already exists in dst dir: %s", name)
        attempt += 1
        if max_attempts is not None and attempt > max_attempts:
            raise NameCollisionError(
                f"No free name for '{original}' after {max_attempts} attempt(s) in {destination_dir}",
                path=destination_dir / original,
                operation="rename",
            )
        name = candidate_name(original, attempt, is_dir)

    return name
