from datetime import timedelta

import pytest

from sqltelemetry.attributes import KeyValue
from sqltelemetry.options import (
    DriverOption,
    DriverOptions,
    Option,
    StatsOption,
    StatsOptions,
    allow_root,
    convert_error_to_span_status,
    trace_last_insert_id,
    trace_ping,
    trace_query,
    trace_rows_affected,
    trace_rows_close,
    trace_rows_next,
    with_database_name,
    with_default_attributes,
    with_instance_name,
    with_meter_provider,
    with_minimum_read_db_stats_interval,
    with_span_name_formatter,
    with_system,
    with_tracer_provider,
)


def apply_driver(*opts):
    options = DriverOptions()
    for opt in opts:
        opt.apply_driver_options(options)
    return options


def apply_stats(*opts):
    options = StatsOptions()
    for opt in opts:
        opt.apply_stats_options(options)
    return options


def test_defaults_are_off():
    trace = DriverOptions().trace
    flags = [trace.allow_root, trace.ping, trace.rows_next, trace.rows_close,
             trace.rows_affected, trace.last_insert_id]
    assert flags == [False] * 6


def test_meter_provider_applies_to_both():
    provider = object()
    opt = with_meter_provider(provider)
    assert isinstance(opt, Option)
    assert isinstance(opt, DriverOption) and isinstance(opt, StatsOption)
    assert apply_driver(opt).meter_provider is provider
    assert apply_stats(opt).meter_provider is provider


def test_tracer_provider():
    provider = object()
    assert apply_driver(with_tracer_provider(provider)).tracer_provider is provider


def test_default_attributes_accumulate():
    first = KeyValue("a", 1)
    second = KeyValue("b", 2)
    opts = (with_default_attributes(first), with_default_attributes(second))
    assert apply_driver(*opts).default_attributes == [first, second]
    assert apply_stats(*opts).default_attributes == [first, second]


def test_named_attribute_helpers():
    system = KeyValue("db.system", "postgresql")
    options = apply_driver(
        with_database_name("test"),
        with_instance_name("default"),
        with_system(system),
    )
    assert options.default_attributes == [
        KeyValue("db.name", "test"),
        KeyValue("db.instance", "default"),
        system,
    ]


def test_trace_functions_are_stored():
    def formatter(ctx, op):
        return f"custom:sql:{op}"

    def converter(err):
        return err

    def tracer(ctx, query, args):
        return [KeyValue("q", query)]

    trace = apply_driver(
        with_span_name_formatter(formatter),
        convert_error_to_span_status(converter),
        trace_query(tracer),
    ).trace
    assert trace.span_name_formatter is formatter
    assert trace.error_to_span_status is converter
    assert trace.query_tracer is tracer


@pytest.mark.parametrize(
    ("factory", "flag"),
    [
        (allow_root, "allow_root"),
        (trace_ping, "ping"),
        (trace_rows_next, "rows_next"),
        (trace_rows_close, "rows_close"),
        (trace_rows_affected, "rows_affected"),
        (trace_last_insert_id, "last_insert_id"),
    ],
)
def test_trace_flags(factory, flag):
    trace = apply_driver(factory()).trace
    assert getattr(trace, flag) is True
    others = {name: value for name, value in vars(trace).items()
              if isinstance(value, bool) and name != flag}
    assert not any(others.values())


def test_minimum_read_db_stats_interval():
    interval = timedelta(milliseconds=50)
    assert apply_stats(with_minimum_read_db_stats_interval(interval)).minimum_read_db_stats_interval == interval


def test_driver_only_option_is_not_stats_option():
    ping = trace_ping()
    assert isinstance(ping, StatsOption) is False
    assert apply_driver(ping).trace.ping is True

    interval = timedelta(milliseconds=25)
    stats_only = with_minimum_read_db_stats_interval(interval)
    assert isinstance(stats_only, DriverOption) is False
    assert apply_stats(stats_only).minimum_read_db_stats_interval == interval