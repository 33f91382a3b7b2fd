# SPDX-License-Identifier: BSL-1.1
# Copyright (c) 2026 MuVeraAI Corporation

"""
Time helpers.

All decay and weighting arithmetic works on integer milliseconds since the
Unix epoch. ISO 8601 strings appear only at the serialisation boundary.
"""

from __future__ import annotations

import time
from datetime import datetime, timezone
from typing import Annotated, Callable

from pydantic import BeforeValidator, PlainSerializer

Clock = Callable[[], int]
"""A zero-argument callable returning the current time in epoch milliseconds."""

MS_PER_SECOND: int = 1000
MS_PER_MINUTE: int = 60 * MS_PER_SECOND
MS_PER_HOUR: int = 60 * MS_PER_MINUTE
MS_PER_DAY: int = 24 * MS_PER_HOUR


def now_ms() -> int:
    """Return the current wall-clock time in milliseconds since Unix epoch."""
    return int(time.time() * 1000)


def ms_to_iso(timestamp_ms: int) -> str:
    """Convert a millisecond Unix timestamp to an ISO 8601 string (UTC)."""
    return datetime.fromtimestamp(timestamp_ms / 1000.0, tz=timezone.utc).isoformat(
        timespec="milliseconds"
    )


def to_epoch_ms(value: str | datetime | int | float) -> int:
    """
    Normalise a timestamp to epoch milliseconds.

    Accepts ISO 8601 strings (a trailing ``Z`` is understood), datetimes
    (naive values are taken as UTC) and numeric epoch milliseconds.

    Raises:
        ValueError: If a string cannot be parsed as ISO 8601.
        TypeError:  If *value* is of an unsupported type.
    """
    if isinstance(value, bool):
        raise TypeError("Timestamp must not be a boolean.")
    if isinstance(value, (int, float)):
        return int(value)
    if isinstance(value, str):
        text = value.strip()
        if text.endswith(("Z", "z")):
            text = text[:-1] + "+00:00"
        value = datetime.fromisoformat(text)
    if isinstance(value, datetime):
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return int(round(value.timestamp() * 1000))
    raise TypeError(f"Unsupported timestamp type {type(value).__name__!r}.")


def _coerce_timestamp(value: object) -> object:
    if isinstance(value, (str, datetime, float)) and not isinstance(value, bool):
        return to_epoch_ms(value)
    return value


TimestampMs = Annotated[
    int,
    BeforeValidator(_coerce_timestamp),
    PlainSerializer(ms_to_iso, return_type=str, when_used="json"),
]
"""
Pydantic field type for timestamps: stored as epoch ms, accepts ISO strings
and datetimes on input, and serialises to ISO 8601 in JSON mode.
"""
