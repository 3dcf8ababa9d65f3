from __future__ import annotations

from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any

import json
import yaml

from treeops.errors import InvalidArgumentError


DEFAULT_BUFFER_SIZE = 8192


@dataclass(slots=True, frozen=True)
class OperatorConfig:
    debug_trace: bool = False
    deletion_enabled: bool = True
    buffer_size: int = DEFAULT_BUFFER_SIZE
    max_rename_attempts: int | None = None
    log_file: Path | None = None

    def with_flags(self, debug: bool = False, safe: bool = False) -> "OperatorConfig":
        return replace(
            self,
            debug_trace=self.debug_trace or debug,
            deletion_enabled=self.deletion_enabled and not safe,
        )


def _as_bool(value: Any, field_name: str, default: bool) -> bool:
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    raise InvalidArgumentError(f"{field_name} must be a boolean", operation="config")


def _as_positive_int(value: Any, field_name: str, default: int | None) -> int | None:
    if value is None:
        return default
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        raise InvalidArgumentError(f"{field_name} must be a positive integer", operation="config")
    return value


def _as_optional_path(value: Any, field_name: str) -> Path | None:
    if value is None:
        return None
    if not isinstance(value, str) or not value.strip():
        raise InvalidArgumentError(f"{field_name} must be a non-empty string path", operation="config")
    return Path(value).expanduser()


def _load_raw_settings(config_path: Path) -> dict[str, Any]:
    if not config_path.exists():
        raise InvalidArgumentError(
            f"Config file does not exist: {config_path}", path=config_path, operation="config"
        )

    suffix = config_path.suffix.lower()
    text = config_path.read_text(encoding="utf-8")
    try:
        if suffix in {".yml", ".yaml"}:
            loaded = yaml.safe_load(text)
        elif suffix == ".json":
            loaded = json.loads(text)
        else:
            raise InvalidArgumentError(
                "Config file must be .yaml/.yml or .json", path=config_path, operation="config"
            )
    except (yaml.YAMLError, json.JSONDecodeError) as exc:
        raise InvalidArgumentError(
            f"Cannot parse config file {config_path}: {exc}", path=config_path, operation="config"
        ) from exc

    if loaded is None:
        return {}
    if not isinstance(loaded, dict):
        raise InvalidArgumentError("Config root must be an object", path=config_path, operation="config")
    return loaded


def load_config(config_path: Path) -> OperatorConfig:
    raw = _load_raw_settings(config_path)

    unknown = sorted(set(raw) - {"debug", "safe", "bufferSize", "maxRenameAttempts", "logFile"})
    if unknown:
        raise InvalidArgumentError(
            f"Unknown config key(s): {', '.join(unknown)}", path=config_path, operation="config"
        )

    return OperatorConfig(
        debug_trace=_as_bool(raw.get("debug"), "debug", default=False),
        deletion_enabled=not _as_bool(raw.get("safe"), "safe", default=False),
        buffer_size=_as_positive_int(raw.get("bufferSize"), "bufferSize", default=DEFAULT_BUFFER_SIZE),
        max_rename_attempts=_as_positive_int(raw.get("maxRenameAttempts"), "maxRenameAttempts", default=None),
        log_file=_as_optional_path(raw.get("logFile"), "logFile"),
    )
