# Copyright (c) 2025 Arye Kogan
# SPDX-License-Identifier: MIT

"""Install the ECS formatter as the process log handler.

Example::

    import logging
    import ecs_logger

    ecs_logger.init()
    ecs_logger.set_extra_fields({"service": {"name": "orders"}})

    logging.getLogger(__name__).error("Hello %s!", "world")
    ecs_logger.clear_extra_fields()
"""

from __future__ import annotations

import contextlib
import logging
import sys
from collections.abc import Iterator
from typing import Any, TextIO

from ecs_logger.config import LoggerSettings, resolve_level
from ecs_logger.event import TRACE
from ecs_logger.extra_fields import ExtraFields, JsonObject, to_json_object
from ecs_logger.formatter import EcsFormatter, EcsHandler
from ecs_logger.timestamp import Clock, utc_now

_DEFAULT_EXTRA_FIELDS = ExtraFields()


class LoggerAlreadyInitializedError(RuntimeError):
    """Raised when :func:`init` runs while an ECS handler is installed."""


def default_extra_fields() -> ExtraFields:
    """Return the process-wide store used when none is injected."""

    return _DEFAULT_EXTRA_FIELDS


def set_extra_fields(value: Any) -> None:
    """Replace the process-wide extra fields.

    May be called before or after :func:`init`, any number of times; fields
    set earlier are discarded.
    """

    _DEFAULT_EXTRA_FIELDS.set(value)


def clear_extra_fields() -> None:
    """Clear the process-wide extra fields."""

    _DEFAULT_EXTRA_FIELDS.clear()


def _build_handlers(
    settings: LoggerSettings, formatter: EcsFormatter, stream: TextIO | None
) -> list[EcsHandler]:
    if stream is None:
        stream = sys.stdout if settings.stream == "stdout" else sys.stderr

    handlers = [EcsHandler(stream, formatter=formatter)]
    if settings.log_path is not None:
        handlers.append(EcsHandler.for_path(settings.log_path, formatter=formatter))
    return handlers


def _settings_fields(settings: LoggerSettings) -> JsonObject | None:
    if settings.extra_fields is None:
        return None
    return to_json_object(settings.extra_fields)


def _restore_fields(store: ExtraFields, fields: JsonObject | None) -> None:
    if fields is None:
        store.clear()
    else:
        store.set(fields)


def init(
    settings: LoggerSettings | None = None,
    *,
    extra_fields: ExtraFields | None = None,
    clock: Clock = utc_now,
) -> EcsFormatter:
    """Install ECS handlers on the root logger and return their formatter.

    Nothing is changed when the settings cannot be applied.
    """

    settings = settings or LoggerSettings()
    root_logger = logging.getLogger()
    if any(isinstance(handler, EcsHandler) for handler in root_logger.handlers):
        raise LoggerAlreadyInitializedError("ECS logging is already initialized")

    level = resolve_level(settings)
    fields = _settings_fields(settings)
    store = extra_fields if extra_fields is not None else _DEFAULT_EXTRA_FIELDS
    formatter = EcsFormatter(store, clock=clock)
    handlers = _build_handlers(settings, formatter, None)

    if fields is not None:
        store.set(fields)
    logging.addLevelName(TRACE, "TRACE")
    for handler in handlers:
        root_logger.addHandler(handler)
    root_logger.setLevel(level)
    return formatter


@contextlib.contextmanager
def ecs_logging(
    settings: LoggerSettings | None = None,
    *,
    stream: TextIO | None = None,
    extra_fields: ExtraFields | None = None,
    clock: Clock = utc_now,
) -> Iterator[EcsFormatter]:
    """Route root logging through ECS handlers for the duration of the block.

    Root handlers, root level and the extra fields replaced from ``settings``
    are restored on exit.
    """

    settings = settings or LoggerSettings()
    level = resolve_level(settings)
    fields = _settings_fields(settings)
    store = extra_fields if extra_fields is not None else _DEFAULT_EXTRA_FIELDS
    formatter = EcsFormatter(store, clock=clock)
    handlers = _build_handlers(settings, formatter, stream)
    logging.addLevelName(TRACE, "TRACE")

    root_logger = logging.getLogger()
    previous_level = root_logger.level
    previous_handlers = root_logger.handlers[:]
    previous_fields = store.snapshot()

    try:
        for handler in previous_handlers:
            root_logger.removeHandler(handler)
        if fields is not None:
            store.set(fields)
        for handler in handlers:
            root_logger.addHandler(handler)
        root_logger.setLevel(level)

        yield formatter
    finally:
        for handler in handlers:
            root_logger.removeHandler(handler)
            handler.close()

        for handler in previous_handlers:
            root_logger.addHandler(handler)
        root_logger.setLevel(previous_level)

        if fields is not None:
            _restore_fields(store, previous_fields)


__all__ = [
    "LoggerAlreadyInitializedError",
    "clear_extra_fields",
    "default_extra_fields",
    "ecs_logging",
    "init",
    "set_extra_fields",
]
