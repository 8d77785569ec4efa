# Copyright (c) 2025 Arye Kogan
# SPDX-License-Identifier: MIT

"""Elastic Common Schema (ECS) event model.

The JSON layout follows the ECS logging spec
(https://github.com/elastic/ecs-logging/tree/main/spec)::

    {"@timestamp": ..., "log.level": ..., "message": ...,
     "ecs.version": ..., "log.origin": {"file": {...}, "origin": {...}}}

Optional fields are omitted when absent instead of being written as
``null``; ingestion pipelines reject the latter.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import PurePath
from typing import Any, Final, Literal

import pandas as pd
from pydantic import BaseModel, ConfigDict, Field, field_serializer

from ecs_logger.timestamp import format_rfc3339

ECS_VERSION: Final = "1.12.1"

TRACE: Final = 5

LogLevel = Literal["ERROR", "WARN", "INFO", "DEBUG", "TRACE"]

_UNKNOWN_FILE = "(unknown file)"
_UNKNOWN_MODULE = "Unknown module"


def level_name(levelno: int) -> LogLevel:
    """Map a :mod:`logging` level number onto the ECS level names."""

    if levelno >= logging.ERROR:
        return "ERROR"
    if levelno >= logging.WARNING:
        return "WARN"
    if levelno >= logging.INFO:
        return "INFO"
    if levelno >= logging.DEBUG:
        return "DEBUG"
    return "TRACE"


@dataclass(frozen=True, slots=True)
class CallSite:
    """Where a log call originated."""

    target: str
    module_path: str | None = None
    file_path: str | None = None
    line: int | None = None

    @classmethod
    def from_record(cls, record: logging.LogRecord) -> CallSite:
        target = getattr(record, "target", None)
        module = record.module if record.module != _UNKNOWN_MODULE else None
        pathname = record.pathname if record.pathname != _UNKNOWN_FILE else None
        return cls(
            target=str(target) if target else record.name,
            module_path=module or None,
            file_path=pathname or None,
            line=record.lineno or None,
        )

    @property
    def file_name(self) -> str | None:
        if not self.file_path:
            return None
        return PurePath(self.file_path).name or None


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")


class LogOriginFile(_Frozen):
    """Source file which logged the message (``log.origin.file``)."""

    line: int | None = Field(default=None, ge=0)
    name: str | None = None


class LogOriginDetail(_Frozen):
    """Logging target and location details (``log.origin.origin``)."""

    target: str
    module_path: str | None = None
    file_path: str | None = None


class LogOrigin(_Frozen):
    """Information about the code which logged the message (``log.origin``)."""

    file: LogOriginFile = Field(default_factory=LogOriginFile)
    origin: LogOriginDetail


class Event(_Frozen):
    """One ECS log event."""

    model_config = ConfigDict(frozen=True, extra="forbid", arbitrary_types_allowed=True)

    timestamp: pd.Timestamp = Field(serialization_alias="@timestamp")
    log_level: LogLevel = Field(serialization_alias="log.level")
    message: str
    ecs_version: str = Field(default=ECS_VERSION, serialization_alias="ecs.version")
    log_origin: LogOrigin = Field(serialization_alias="log.origin")

    @field_serializer("timestamp")
    def serialize_timestamp(self, value: pd.Timestamp) -> str:
        return format_rfc3339(value)

    @classmethod
    def from_call_site(
        cls,
        timestamp: pd.Timestamp,
        level: LogLevel,
        message: str,
        call_site: CallSite,
    ) -> Event:
        return cls(
            timestamp=timestamp,
            log_level=level,
            message=message,
            log_origin=LogOrigin(
                file=LogOriginFile(line=call_site.line, name=call_site.file_name),
                origin=LogOriginDetail(
                    target=call_site.target,
                    module_path=call_site.module_path,
                    file_path=call_site.file_path,
                ),
            ),
        )

    @classmethod
    def from_record(cls, timestamp: pd.Timestamp, record: logging.LogRecord) -> Event:
        """Create an event from a :class:`logging.LogRecord`."""

        return cls.from_call_site(
            timestamp,
            level_name(record.levelno),
            record.getMessage(),
            CallSite.from_record(record),
        )

    def to_json_map(self) -> dict[str, Any]:
        """Dump to JSON-compatible data keyed by the ECS field names."""

        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


__all__ = [
    "CallSite",
    "ECS_VERSION",
    "Event",
    "LogLevel",
    "LogOrigin",
    "LogOriginDetail",
    "LogOriginFile",
    "TRACE",
    "level_name",
]
