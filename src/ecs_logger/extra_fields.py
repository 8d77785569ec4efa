# Copyright (c) 2025 Arye Kogan
# SPDX-License-Identifier: MIT

"""Extra fields deep-merged into every emitted log event.

Example::

    from ecs_logger import ExtraFields, EcsFormatter

    fields = ExtraFields({"service": {"name": "orders"}})
    formatter = EcsFormatter(fields)
    fields.set({"service": {"name": "orders", "version": "1.4.0"}})
    fields.clear()
"""

from __future__ import annotations

import contextlib
import copy
import json
import logging
import threading
from collections.abc import Iterator, Mapping
from typing import Any

from pydantic_core import PydanticSerializationError, to_jsonable_python

JsonObject = dict[str, Any]

_LOGGER = logging.getLogger(__name__)


class SetExtraFieldsError(ValueError):
    """Raised when a value cannot be installed as extra fields."""


class InvalidJsonError(SetExtraFieldsError):
    """The value cannot be converted into JSON."""


class NotObjectError(SetExtraFieldsError):
    """The value converts to JSON, but not to a JSON object."""


class _ReadWriteLock:
    """Shared-reader/exclusive-writer lock that lets waiting writers go first."""

    def __init__(self) -> None:
        self._condition = threading.Condition(threading.Lock())
        self._readers = 0
        self._writing = False
        self._writers_waiting = 0

    @contextlib.contextmanager
    def read(self) -> Iterator[None]:
        with self._condition:
            while self._writing or self._writers_waiting:
                self._condition.wait()
            self._readers += 1
        try:
            yield
        finally:
            with self._condition:
                self._readers -= 1
                if self._readers == 0:
                    self._condition.notify_all()

    @contextlib.contextmanager
    def write(self) -> Iterator[None]:
        with self._condition:
            self._writers_waiting += 1
            try:
                while self._writing or self._readers:
                    self._condition.wait()
            finally:
                self._writers_waiting -= 1
            self._writing = True
        try:
            yield
        finally:
            with self._condition:
                self._writing = False
                self._condition.notify_all()


def to_json_object(value: Any) -> JsonObject:
    """Convert ``value`` into a freshly allocated JSON object."""

    try:
        encoded = json.dumps(to_jsonable_python(value), allow_nan=False)
    except (PydanticSerializationError, TypeError, ValueError) as exc:
        raise InvalidJsonError(f"the data cannot be converted into JSON: {exc}") from exc

    decoded = json.loads(encoded)
    if not isinstance(decoded, dict):
        raise NotObjectError(
            "the data cannot be converted into a JSON object "
            f"(got {type(decoded).__name__})"
        )
    return decoded


def deep_merge(base: JsonObject, overlay: Mapping[str, Any]) -> JsonObject:
    """Deep merge ``overlay`` into ``base`` and return ``base``.

    Nested objects present on both sides are merged key by key. Any other
    collision is resolved by the overlay value replacing the base value
    outright, so arrays are replaced rather than concatenated and an overlay
    scalar may replace a base object (and the reverse). Values taken from
    ``overlay`` are copied; ``overlay`` itself is left untouched.
    """

    for key, value in overlay.items():
        current = base.get(key)
        if isinstance(current, dict) and isinstance(value, Mapping):
            deep_merge(current, value)
        else:
            base[key] = copy.deepcopy(value)
    return base


class ExtraFields:
    """Replaceable set of fields appended to every log event.

    The held object is published wholesale and never mutated afterwards, so
    a snapshot stays consistent after the read lock is released.
    """

    def __init__(self, initial: Any = None) -> None:
        self._lock = _ReadWriteLock()
        self._fields: JsonObject | None = None
        if initial is not None:
            self._fields = to_json_object(initial)

    def set(self, value: Any) -> None:
        """Replace all current extra fields with ``value``.

        Raises :class:`InvalidJsonError` or :class:`NotObjectError` and keeps
        the previous fields when ``value`` is unusable.
        """

        fields = to_json_object(value)
        with self._lock.write():
            self._fields = fields
        _LOGGER.debug("extra fields replaced: %s", ", ".join(sorted(fields)))

    def clear(self) -> None:
        """Remove all extra fields."""

        with self._lock.write():
            self._fields = None
        _LOGGER.debug("extra fields cleared")

    def snapshot(self) -> JsonObject | None:
        with self._lock.read():
            return self._fields

    def merge_into(self, payload: JsonObject) -> JsonObject:
        """Deep merge the current extra fields into ``payload``."""

        fields = self.snapshot()
        if fields is None:
            return payload
        return deep_merge(payload, fields)

    def __repr__(self) -> str:
        return f"ExtraFields({self.snapshot()!r})"


__all__ = [
    "ExtraFields",
    "InvalidJsonError",
    "JsonObject",
    "NotObjectError",
    "SetExtraFieldsError",
    "deep_merge",
    "to_json_object",
]
