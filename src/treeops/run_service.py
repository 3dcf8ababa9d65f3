from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
import logging

from treeops.config import OperatorConfig
from treeops.errors import InvalidArgumentError, NotFoundError, TreeOpsError
from treeops.models import CountResult, OperationCounters, TransferResult
from treeops.storage import StorageDriver
from treeops.tree_operator import TreeOperator


EXIT_SUCCESS = 0
EXIT_IO_ERROR = 1
EXIT_INVALID_ARGUMENT = 2
EXIT_NOT_FOUND = 3

ACTIONS = ("mv", "cp", "rm", "count")


@dataclass(slots=True)
class OperationRequest:
    action: str
    source: Path
    destination: Path | None = None


@dataclass(slots=True)
class RunOutcome:
    action: str
    count: CountResult | None = None
    transfer: TransferResult | None = None
    removal: OperationCounters | None = None
    error: TreeOpsError | None = None


def exit_code_for(exc: TreeOpsError) -> int:
    if isinstance(exc, NotFoundError):
        return EXIT_NOT_FOUND
    if isinstance(exc, InvalidArgumentError):
        return EXIT_INVALID_ARGUMENT
    return EXIT_IO_ERROR


def _dispatch(operator: TreeOperator, request: OperationRequest, outcome: RunOutcome) -> None:
    if request.action == "count":
        outcome.count = operator.count(request.source)
        return
    if request.action == "rm":
        outcome.removal = operator.delete(request.source)
        return
    if request.destination is None:
        raise InvalidArgumentError(f"--{request.action} requires a destination path", operation=request.action)
    if request.action == "cp":
        outcome.transfer = operator.copy(request.source, request.destination)
    elif request.action == "mv":
        outcome.transfer = operator.move(request.source, request.destination)
    else:
        raise InvalidArgumentError(f"Invalid action: {request.action}", operation=request.action)


def run_operation(
    request: OperationRequest,
    config: OperatorConfig | None = None,
    storage: StorageDriver | None = None,
    logger: logging.Logger | None = None,
) -> tuple[int, RunOutcome]:
    log = logger or logging.getLogger("treeops.run")
    operator = TreeOperator(config=config, storage=storage)
    outcome = RunOutcome(action=request.action)

    try:
        _dispatch(operator, request, outcome)
    except TreeOpsError as exc:
        outcome.error = exc
        log.error("%s failed for %s: %s", exc.operation or request.action, exc.path or request.source, exc)
        return exit_code_for(exc), outcome

    return EXIT_SUCCESS, outcome
