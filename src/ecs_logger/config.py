# Copyright (c) 2025 Arye Kogan
# SPDX-License-Identifier: MIT

"""Settings loader for ECS logging installation."""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping, MutableMapping
from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, ConfigDict, field_validator

from ecs_logger.event import TRACE

LEVEL_ENV_VAR = "ECS_LOG_LEVEL"

_LEVELS: dict[str, int] = {
    "TRACE": TRACE,
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARN": logging.WARNING,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
    "OFF": logging.CRITICAL + 10,
}


def parse_level(name: str) -> int:
    """Return the numeric level for ``name`` (case-insensitive)."""

    try:
        return _LEVELS[name.strip().upper()]
    except KeyError:
        choices = ", ".join(_LEVELS)
        raise ValueError(f"Unknown log level {name!r}; expected one of {choices}") from None


class LoggerSettings(BaseModel):
    """Installation settings for the ECS handler."""

    model_config = ConfigDict(extra="forbid")

    level: str = "INFO"
    stream: Literal["stderr", "stdout"] = "stderr"
    log_path: Path | None = None
    extra_fields: dict[str, Any] | None = None

    @field_validator("level")
    @classmethod
    def check_level(cls, value: str) -> str:
        parse_level(value)
        return value.strip().upper()


def resolve_level(
    settings: LoggerSettings, environ: Mapping[str, str] | None = None
) -> int:
    """Return the minimum severity, letting ``ECS_LOG_LEVEL`` override settings."""

    env = os.environ if environ is None else environ
    override = env.get(LEVEL_ENV_VAR, "").strip()
    if override:
        return parse_level(override)
    return parse_level(settings.level)


def load_settings(path: str | Path) -> LoggerSettings:
    """Load settings from the YAML file at ``path``."""

    config_path = Path(path).expanduser()
    if not config_path.is_file():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with config_path.open("r", encoding="utf-8") as handle:
        payload_raw = yaml.safe_load(handle) or {}

    if not isinstance(payload_raw, MutableMapping):
        raise ValueError("Configuration file must contain a mapping at the top level.")

    payload: dict[str, Any] = dict(payload_raw)

    raw_log_path = payload.get("log_path")
    if raw_log_path is not None:
        log_path = Path(str(raw_log_path)).expanduser()
        if not log_path.is_absolute():
            log_path = config_path.parent / log_path
        payload["log_path"] = log_path.resolve()

    settings = LoggerSettings.model_validate(payload)

    if settings.log_path is not None:
        settings.log_path.parent.mkdir(parents=True, exist_ok=True)

    return settings


__all__ = [
    "LEVEL_ENV_VAR",
    "LoggerSettings",
    "load_settings",
    "parse_level",
    "resolve_level",
]
