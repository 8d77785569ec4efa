# Copyright (c) 2025 Arye Kogan
# SPDX-License-Identifier: MIT

"""Clock sources for event timestamps."""

from __future__ import annotations

import time
from collections.abc import Callable

import pandas as pd

Clock = Callable[[], pd.Timestamp]

MOCK_TIMESTAMP = "2000-01-23T01:23:45.678901200Z"


def utc_now() -> pd.Timestamp:
    """Return the current wall-clock instant in UTC with nanosecond precision."""

    return pd.Timestamp(time.time_ns(), unit="ns", tz="UTC")


def to_utc(value: pd.Timestamp | str) -> pd.Timestamp:
    """Coerce ``value`` to a UTC timestamp; naive values are taken as UTC."""

    timestamp = pd.Timestamp(value)
    if timestamp.tzinfo is None:
        return timestamp.tz_localize("UTC")
    return timestamp.tz_convert("UTC")


class FixedClock:
    """Clock that always reports the same instant."""

    def __init__(self, value: pd.Timestamp | str = MOCK_TIMESTAMP) -> None:
        self._value = to_utc(value)

    def __call__(self) -> pd.Timestamp:
        return self._value

    def __repr__(self) -> str:
        return f"FixedClock({format_rfc3339(self._value)!r})"


def format_rfc3339(value: pd.Timestamp) -> str:
    """Render ``value`` as an RFC 3339 UTC instant with a ``Z`` suffix.

    The fractional part is dropped when the instant falls on a whole second
    and otherwise uses 3, 6 or 9 digits, whichever renders it exactly.
    """

    timestamp = to_utc(value)
    seconds = timestamp.strftime("%Y-%m-%dT%H:%M:%S")
    nanos = timestamp.microsecond * 1_000 + timestamp.nanosecond

    if nanos == 0:
        fraction = ""
    elif nanos % 1_000_000 == 0:
        fraction = f".{nanos // 1_000_000:03d}"
    elif nanos % 1_000 == 0:
        fraction = f".{nanos // 1_000:06d}"
    else:
        fraction = f".{nanos:09d}"
    return f"{seconds}{fraction}Z"


__all__ = ["Clock", "FixedClock", "MOCK_TIMESTAMP", "format_rfc3339", "to_utc", "utc_now"]
