from __future__ import annotations

import argparse
import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path
import sys
from typing import NoReturn

from treeops.config import OperatorConfig, load_config
from treeops.errors import InvalidArgumentError
from treeops.run_service import (
    ACTIONS,
    EXIT_INVALID_ARGUMENT,
    EXIT_SUCCESS,
    OperationRequest,
    RunOutcome,
    run_operation,
)


APP_VERSION = "0.2.0"

_OPTION_FLAGS = {"-h", "--help", "-d", "--debug", "-s", "--safe", "--config"}

_EPILOG = f"""\
Note:       The source/root path specified will also be included in the operation
Version:    {APP_VERSION}"""


class _ArgumentParser(argparse.ArgumentParser):
    def error(self, message: str) -> NoReturn:
        raise InvalidArgumentError(message, operation="parse")


def _build_parser() -> argparse.ArgumentParser:
    parser = _ArgumentParser(
        prog="treeops",
        description="Does count, copy, move and delete of files and directory trees",
        epilog=_EPILOG,
        formatter_class=argparse.RawDescriptionHelpFormatter,
        add_help=False,
        allow_abbrev=False,
    )
    parser.add_argument("-h", "--help", action="store_true", help="Shows this help message")
    parser.add_argument("-d", "--debug", action="store_true", help="Shows debug info while progressing")
    parser.add_argument(
        "-s",
        "--safe",
        action="store_true",
        help="Disables deletion (safe guard against any fatal file system changes)",
    )
    parser.add_argument("--config", type=Path, help="YAML or JSON settings file")

    actions = parser.add_mutually_exclusive_group()
    actions.add_argument("--mv", nargs=2, metavar=("SRC", "DST"), help="Moves source path into destination directory")
    actions.add_argument("--cp", nargs=2, metavar=("SRC", "DST"), help="Copies source path into destination directory")
    actions.add_argument("--rm", metavar="ROOT", help="Deletes root path")
    actions.add_argument("--count", metavar="ROOT", help="Counts the files & directories under a root path")

    return parser


def _split_at_action(tokens: list[str]) -> tuple[list[str], list[str]]:
    action_flags = {f"--{action}" for action in ACTIONS}
    for index, token in enumerate(tokens):
        if token in action_flags:
            return tokens[:index], tokens[index:]
    return tokens, []


def _reject_trailing_options(trailing: list[str]) -> None:
    for token in trailing[1:]:
        if token.split("=", 1)[0] in _OPTION_FLAGS:
            raise InvalidArgumentError(
                f"option {token} must precede the action flag {trailing[0]}", operation="parse"
            )


def build_request(args: argparse.Namespace) -> OperationRequest:
    if args.mv is not None:
        return OperationRequest(action="mv", source=Path(args.mv[0]), destination=Path(args.mv[1]))
    if args.cp is not None:
        return OperationRequest(action="cp", source=Path(args.cp[0]), destination=Path(args.cp[1]))
    if args.rm is not None:
        return OperationRequest(action="rm", source=Path(args.rm))
    if args.count is not None:
        return OperationRequest(action="count", source=Path(args.count))
    raise InvalidArgumentError("one of --mv, --cp, --rm, --count is required", operation="parse")


def _configure_logging(config: OperatorConfig) -> None:
    logger = logging.getLogger("treeops")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    logger.setLevel(logging.DEBUG if config.debug_trace else logging.WARNING)
    logger.propagate = False

    stream_handler = logging.StreamHandler(sys.stderr)
    stream_handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(stream_handler)

    if config.log_file is not None:
        config.log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(config.log_file, maxBytes=1_000_000, backupCount=3, encoding="utf-8")
        file_handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(message)s"))
        logger.addHandler(file_handler)


def _print_outcome(outcome: RunOutcome, config: OperatorConfig) -> None:
    if outcome.count is not None:
        count = outcome.count
        print(f"Count: dirs={count.dirs}, files={count.files}, total={count.total}")

    if not config.debug_trace:
        return

    if outcome.transfer is not None:
        counters = outcome.transfer.counters
        print(f"Copied:  dirs={counters.copied_dirs}, files={counters.copied_files}")
        if outcome.transfer.moved:
            print(f"Removed: dirs={counters.removed_dirs}, files={counters.removed_files}")
    if outcome.removal is not None:
        print(f"Removed: dirs={outcome.removal.removed_dirs}, files={outcome.removal.removed_files}")


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    tokens = list(sys.argv[1:] if argv is None else argv)
    leading, trailing = _split_at_action(tokens)

    if "-h" in leading or "--help" in leading:
        parser.print_help()
        return EXIT_SUCCESS

    try:
        _reject_trailing_options(trailing)
        args = parser.parse_args(tokens)
    except InvalidArgumentError as exc:
        print(f"Invalid arguments: {exc}", file=sys.stderr)
        return EXIT_INVALID_ARGUMENT

    try:
        config = load_config(args.config) if args.config else OperatorConfig()
    except InvalidArgumentError as exc:
        print(f"Invalid config: {exc}", file=sys.stderr)
        return EXIT_INVALID_ARGUMENT
    config = config.with_flags(debug=args.debug, safe=args.safe)

    try:
        request = build_request(args)
    except InvalidArgumentError as exc:
        print(f"Invalid arguments: {exc}", file=sys.stderr)
        return EXIT_INVALID_ARGUMENT

    _configure_logging(config)
    exit_code, outcome = run_operation(request, config)
    if exit_code == EXIT_SUCCESS:
        _print_outcome(outcome, config)
    return exit_code


if __name__ == "__main__":
    raise SystemExit(main())
