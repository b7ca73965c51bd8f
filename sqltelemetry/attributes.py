"""Conversion of database values into telemetry attributes."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta
from typing import Any

MAX_STRING_VALUE_LENGTH = 256
SHORTENED_PATTERN = "... (more than 256 chars)"

DB_INSTANCE = "db.instance"
DB_NAME = "db.name"
DB_SQL_STATUS = "db.sql.status"
DB_SQL_ERROR = "db.sql.error"
DB_SQL_ROWS_NEXT_SUCCESS_COUNT = "db.sql.rows_next.success_count"
DB_SQL_ROWS_NEXT_LATENCY_AVG = "db.sql.rows_next.latency_avg"

_NANOS_PER_MICRO = 1_000
_NANOS_PER_MILLI = 1_000_000
_NANOS_PER_SECOND = 1_000_000_000
_NANOS_PER_MINUTE = 60 * _NANOS_PER_SECOND
_NANOS_PER_HOUR = 60 * _NANOS_PER_MINUTE


@dataclass(frozen=True)
class KeyValue:
    """A single attribute: a key and its value."""

    key: str
    value: Any


@dataclass(frozen=True)
class NamedValue:
    """An argument passed to a statement, by name or by position."""

    name: str = ""
    ordinal: int = 0
    value: Any = None


DB_SQL_STATUS_OK = KeyValue(DB_SQL_STATUS, "OK")
DB_SQL_STATUS_ERROR = KeyValue(DB_SQL_STATUS, "ERROR")


def key_from_named_value(arg: NamedValue) -> str:
    """Return the attribute key for a statement argument."""
    suffix = arg.name if arg.name else str(arg.ordinal)
    return f"db.sql.args.{suffix}"


def from_named_value(arg: NamedValue) -> KeyValue:
    """Convert a statement argument into an attribute."""
    return key_value(key_from_named_value(arg), arg.value)


def _homogeneous_sequence(value: list | tuple) -> tuple | None:
    items = tuple(value)
    if all(isinstance(item, bool) for item in items):
        return items
    if all(isinstance(item, int) and not isinstance(item, bool) for item in items):
        return items
    if all(isinstance(item, float) for item in items):
        return items
    return None


def key_value(key: str, value: Any) -> KeyValue:
    """Build an attribute from an arbitrary value."""
    if value is None:
        return KeyValue(key, "")
    if isinstance(value, (bool, int, float)):
        return KeyValue(key, value)
    if isinstance(value, (bytes, bytearray, memoryview)):
        return KeyValue(key, shorten_string(bytes(value).decode("utf-8", errors="replace")))
    if isinstance(value, str):
        return KeyValue(key, shorten_string(value))
    if isinstance(value, (list, tuple)):
        items = _homogeneous_sequence(value)
        if items is not None:
            return KeyValue(key, items)
    if isinstance(value, timedelta):
        return key_value_duration(key, value)
    return KeyValue(key, shorten_string(str(value)))


def _to_nanoseconds(duration: timedelta | int) -> int:
    if isinstance(duration, timedelta):
        return (
            (duration.days * 86_400 + duration.seconds) * _NANOS_PER_SECOND
            + duration.microseconds * _NANOS_PER_MICRO
        )
    return int(duration)


def _with_fraction(value: int, scale: int) -> str:
    whole, frac = divmod(value, scale)
    if not frac:
        return str(whole)
    digits = len(str(scale)) - 1
    return f"{whole}." + str(frac).zfill(digits).rstrip("0")


def _format_duration(nanos: int) -> str:
    if nanos == 0:
        return "0s"
    sign = "-" if nanos < 0 else ""
    magnitude = abs(nanos)
    if magnitude < _NANOS_PER_SECOND:
        if magnitude < _NANOS_PER_MICRO:
            return f"{sign}{magnitude}ns"
        if magnitude < _NANOS_PER_MILLI:
            return sign + _with_fraction(magnitude, _NANOS_PER_MICRO) + "\u00b5s"
        return sign + _with_fraction(magnitude, _NANOS_PER_MILLI) + "ms"
    hours, rest = divmod(magnitude, _NANOS_PER_HOUR)
    minutes, rest = divmod(rest, _NANOS_PER_MINUTE)
    text = sign
    if hours:
        text += f"{hours}h"
    if hours or minutes:
        text += f"{minutes}m"
    return text + _with_fraction(rest, _NANOS_PER_SECOND) + "s"


def key_value_duration(key: str, duration: timedelta | int) -> KeyValue:
    """Build an attribute from a duration (a timedelta or integer nanoseconds)."""
    nanos = _to_nanoseconds(duration)
    if _NANOS_PER_MICRO <= nanos < _NANOS_PER_MILLI:
        return KeyValue(key, f"{nanos // _NANOS_PER_MICRO}us")
    return KeyValue(key, _format_duration(nanos))


def shorten_string(text: str) -> str:
    """Cut a string longer than the attribute limit and mark it as shortened."""
    if len(text) <= MAX_STRING_VALUE_LENGTH:
        return text
    end = MAX_STRING_VALUE_LENGTH - len(SHORTENED_PATTERN)
    return text[:end] + SHORTENED_PATTERN