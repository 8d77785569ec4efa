# Copyright (c) 2025 Arye Kogan
# SPDX-License-Identifier: MIT

"""Checks that emitted lines follow the ECS wire format."""

from __future__ import annotations

import json
from collections.abc import Mapping
from pathlib import Path
from typing import Any, get_args

import pandas as pd

from ecs_logger.event import LogLevel

REQUIRED_FIELDS: tuple[str, ...] = (
    "@timestamp",
    "log.level",
    "message",
    "ecs.version",
    "log.origin",
)

_LEVELS = frozenset(get_args(LogLevel))


def _null_paths(value: Any, prefix: str) -> list[str]:
    if value is None:
        return [prefix]
    if isinstance(value, Mapping):
        paths: list[str] = []
        for key, item in value.items():
            paths.extend(_null_paths(item, f"{prefix}.{key}"))
        return paths
    return []


def _check_timestamp(value: Any) -> str | None:
    if not isinstance(value, str):
        return "@timestamp must be a string"
    if not value.endswith("Z"):
        return f"@timestamp must be a UTC instant ending in 'Z': {value}"
    try:
        pd.Timestamp(value)
    except ValueError:
        return f"@timestamp is not an RFC 3339 instant: {value}"
    return None


def _check_origin(origin: Any) -> list[str]:
    if not isinstance(origin, Mapping):
        return ["log.origin must be an object"]

    errors = [f"{path} must be omitted, not null" for path in _null_paths(origin, "log.origin")]

    file_info = origin.get("file")
    if not isinstance(file_info, Mapping):
        errors.append("log.origin.file must be an object")
    else:
        line = file_info.get("line")
        if line is not None and (
            not isinstance(line, int) or isinstance(line, bool) or line < 0
        ):
            errors.append("log.origin.file.line must be a non-negative integer")
        name = file_info.get("name")
        if name is not None and not isinstance(name, str):
            errors.append("log.origin.file.name must be a string")

    detail = origin.get("origin")
    if not isinstance(detail, Mapping):
        errors.append("log.origin.origin must be an object")
    elif not isinstance(detail.get("target"), str):
        errors.append("log.origin.origin.target must be a string")

    return errors


def validate_event(payload: Mapping[str, Any]) -> list[str]:
    """Return a list of problems with an already decoded event (empty when valid)."""

    missing = [key for key in REQUIRED_FIELDS if key not in payload]
    if missing:
        return [f"missing field: {key}" for key in missing]

    errors: list[str] = []

    timestamp_error = _check_timestamp(payload["@timestamp"])
    if timestamp_error:
        errors.append(timestamp_error)

    if payload["log.level"] not in _LEVELS:
        errors.append(f"log.level is not one of {sorted(_LEVELS)}: {payload['log.level']!r}")

    if not isinstance(payload["message"], str):
        errors.append("message must be a string")

    if not isinstance(payload["ecs.version"], str):
        errors.append("ecs.version must be a string")

    errors.extend(_check_origin(payload["log.origin"]))
    return errors


def validate_line(line: str) -> list[str]:
    """Validate one serialized log line."""

    try:
        payload = json.loads(line)
    except json.JSONDecodeError as exc:
        return [f"invalid JSON: {exc.msg}"]

    if not isinstance(payload, dict):
        return ["line is not a JSON object"]
    return validate_event(payload)


def validate_log_file(path: Path) -> dict[int, list[str]]:
    """Validate every non-empty line of ``path``, keyed by 1-based line number."""

    problems: dict[int, list[str]] = {}
    with path.open("r", encoding="utf-8") as handle:
        for number, raw_line in enumerate(handle, start=1):
            line = raw_line.rstrip("\n")
            if not line.strip():
                continue
            errors = validate_line(line)
            if errors:
                problems[number] = errors
    return problems


__all__ = ["REQUIRED_FIELDS", "validate_event", "validate_line", "validate_log_file"]
