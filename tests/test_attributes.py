from datetime import timedelta

import pytest

from sqltelemetry.attributes import (
    DB_SQL_STATUS_ERROR,
    DB_SQL_STATUS_OK,
    KeyValue,
    NamedValue,
    from_named_value,
    key_from_named_value,
    key_value,
    key_value_duration,
    shorten_string,
)

KEY = "key"
PATTERN = "xMROXgoHsB8Y5yTH"
LONG_STRING = PATTERN * 17
SHORTENED_STRING = LONG_STRING[0:231] + "... (more than 256 chars)"


def test_from_named_value_with_name():
    actual = from_named_value(NamedValue(name="country", value="US"))
    assert actual == KeyValue("db.sql.args.country", "US")


def test_from_named_value_with_ordinal():
    actual = from_named_value(NamedValue(ordinal=42, value="US"))
    assert actual == KeyValue("db.sql.args.42", "US")


def test_key_from_named_value_prefers_name():
    assert key_from_named_value(NamedValue(name="id", ordinal=3)) == "db.sql.args.id"


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        (None, KeyValue(KEY, "")),
        (10, KeyValue(KEY, 10)),
        (42, KeyValue(KEY, 42)),
        (3.14, KeyValue(KEY, 3.14)),
        (LONG_STRING.encode(), KeyValue(KEY, SHORTENED_STRING)),
        (b"foobar", KeyValue(KEY, "foobar")),
        (LONG_STRING, KeyValue(KEY, SHORTENED_STRING)),
        ("foobar", KeyValue(KEY, "foobar")),
        ([10], KeyValue(KEY, (10,))),
        ([3.14], KeyValue(KEY, (3.14,))),
        (timedelta(seconds=1), KeyValue(KEY, "1s")),
    ],
)
def test_key_value(value, expected):
    assert key_value(KEY, value) == expected


def test_key_value_bool_keeps_type():
    actual = key_value(KEY, True)
    assert actual == KeyValue(KEY, True)
    assert type(actual.value) is bool


def test_key_value_bool_slice_keeps_type():
    actual = key_value(KEY, [True])
    assert actual == KeyValue(KEY, (True,))
    assert type(actual.value[0]) is bool


def test_key_value_other_uses_str():
    class Custom:
        def __str__(self):
            return "custom value"

    assert key_value(KEY, Custom()) == KeyValue(KEY, "custom value")


@pytest.mark.parametrize(
    ("duration", "expected"),
    [
        (timedelta(0), "0s"),
        (timedelta(seconds=1), "1s"),
        (timedelta(minutes=1, seconds=10), "1m10s"),
        (116, "116ns"),
        (timedelta(microseconds=110), "110us"),
        (timedelta(milliseconds=117), "117ms"),
    ],
)
def test_key_value_duration(duration, expected):
    assert key_value_duration(KEY, duration) == KeyValue(KEY, expected)


def test_shorten_string_limit():
    exact = "a" * 256
    assert shorten_string(exact) == exact
    shortened = shorten_string("a" * 257)
    assert len(shortened) == 256
    assert shortened.endswith("... (more than 256 chars)")


def test_status_attributes():
    assert DB_SQL_STATUS_OK == KeyValue("db.sql.status", "OK")
    assert DB_SQL_STATUS_ERROR == KeyValue("db.sql.status", "ERROR")