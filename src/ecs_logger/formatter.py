# Copyright (c) 2025 Arye Kogan
# SPDX-License-Identifier: MIT

"""Formatter and handler writing ECS events as JSON lines."""

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path
from typing import Any, TextIO, cast

from ecs_logger.event import Event
from ecs_logger.extra_fields import ExtraFields
from ecs_logger.timestamp import Clock, utc_now


class EcsFormatter(logging.Formatter):
    """Serialize log records as ECS JSON documents with extra fields merged in."""

    def __init__(
        self, extra_fields: ExtraFields | None = None, *, clock: Clock = utc_now
    ) -> None:
        super().__init__()
        self.extra_fields = extra_fields if extra_fields is not None else ExtraFields()
        self._clock = clock

    def build_event(self, record: logging.LogRecord) -> Event:
        return Event.from_record(self._clock(), record)

    def to_json_map(self, record: logging.LogRecord) -> dict[str, Any]:
        payload = self.build_event(record).to_json_map()
        return self.extra_fields.merge_into(payload)

    def format(self, record: logging.LogRecord) -> str:  # noqa: D401 - override
        return json.dumps(
            self.to_json_map(record), separators=(",", ":"), ensure_ascii=False
        )

    def write(self, sink: TextIO, record: logging.LogRecord) -> None:
        """Write ``record`` to ``sink`` as one newline-terminated JSON document.

        Errors raised by the sink are not caught.
        """

        sink.write(self.format(record) + "\n")


class EcsHandler(logging.Handler):
    """Write records through an :class:`EcsFormatter` to a text stream.

    Failures while writing propagate to the logging call instead of going
    through :meth:`logging.Handler.handleError`.
    """

    def __init__(
        self,
        stream: TextIO | None = None,
        *,
        formatter: EcsFormatter | None = None,
        level: int = logging.NOTSET,
    ) -> None:
        super().__init__(level)
        self.stream: TextIO = stream if stream is not None else sys.stderr
        self.setFormatter(formatter if formatter is not None else EcsFormatter())
        self._owns_stream = False

    @classmethod
    def for_path(
        cls,
        path: Path,
        *,
        formatter: EcsFormatter | None = None,
        level: int = logging.NOTSET,
    ) -> EcsHandler:
        """Append to ``path`` through a line-buffered UTF-8 file owned by the handler."""

        path.parent.mkdir(parents=True, exist_ok=True)
        stream = path.open("a", encoding="utf-8", buffering=1)
        handler = cls(stream, formatter=formatter, level=level)
        handler._owns_stream = True
        return handler

    @property
    def ecs_formatter(self) -> EcsFormatter:
        return cast(EcsFormatter, self.formatter)

    def setFormatter(self, fmt: logging.Formatter | None) -> None:  # noqa: N802
        if not isinstance(fmt, EcsFormatter):
            raise TypeError("EcsHandler requires an EcsFormatter")
        super().setFormatter(fmt)

    def emit(self, record: logging.LogRecord) -> None:
        self.ecs_formatter.write(self.stream, record)
        self.stream.flush()

    def close(self) -> None:
        self.acquire()
        try:
            if self._owns_stream and not self.stream.closed:
                self.stream.close()
        finally:
            self.release()
            super().close()


__all__ = ["EcsFormatter", "EcsHandler"]
