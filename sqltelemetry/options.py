"""Functional options for configuring instrumentation."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import timedelta
from typing import Any, Callable

from .attributes import DB_INSTANCE, DB_NAME, KeyValue


@dataclass
class TraceOptions:
    """Switches that enable spans on database calls."""

    span_name_formatter: Callable[..., str] | None = None
    error_to_span_status: Callable[..., Any] | None = None
    query_tracer: Callable[..., list] | None = None
    allow_root: bool = False
    ping: bool = False
    rows_next: bool = False
    rows_close: bool = False
    rows_affected: bool = False
    last_insert_id: bool = False


@dataclass
class DriverOptions:
    """Configuration of a wrapped driver."""

    tracer_provider: Any = None
    meter_provider: Any = None
    trace: TraceOptions = field(default_factory=TraceOptions)
    default_attributes: list[KeyValue] = field(default_factory=list)


@dataclass
class StatsOptions:
    """Configuration of database statistics recording."""

    meter_provider: Any = None
    minimum_read_db_stats_interval: timedelta = timedelta(0)
    default_attributes: list[KeyValue] = field(default_factory=list)


class DriverOption:
    """An option that changes driver configuration."""

    def __init__(self, apply: Callable[[DriverOptions], None]) -> None:
        self._apply_driver = apply

    def apply_driver_options(self, options: DriverOptions) -> None:
        self._apply_driver(options)


class StatsOption:
    """An option that changes statistics configuration."""

    def __init__(self, apply: Callable[[StatsOptions], None]) -> None:
        self._apply_stats = apply

    def apply_stats_options(self, options: StatsOptions) -> None:
        self._apply_stats(options)


class Option(DriverOption, StatsOption):
    """An option valid for both driver and statistics configuration."""

    def __init__(
        self,
        apply_driver: Callable[[DriverOptions], None],
        apply_stats: Callable[[StatsOptions], None],
    ) -> None:
        self._apply_driver = apply_driver
        self._apply_stats = apply_stats

    def apply_driver_options(self, options: DriverOptions) -> None:
        self._apply_driver(options)

    def apply_stats_options(self, options: StatsOptions) -> None:
        self._apply_stats(options)


def with_meter_provider(provider: Any) -> Option:
    """Set the meter provider."""

    def apply(options: DriverOptions | StatsOptions) -> None:
        options.meter_provider = provider

    return Option(apply, apply)


def with_tracer_provider(provider: Any) -> DriverOption:
    """Set the tracer provider."""

    def apply(options: DriverOptions) -> None:
        options.tracer_provider = provider

    return DriverOption(apply)


def with_default_attributes(*args: KeyValue) -> Option:
    """Add attributes set on every span and metric."""
    attrs = list(args)

    def apply(options: DriverOptions | StatsOptions) -> None:
        options.default_attributes.extend(attrs)

    return Option(apply, apply)


def with_instance_name(instance_name: str) -> Option:
    """Set the database instance name."""
    return with_default_attributes(KeyValue(DB_INSTANCE, instance_name))


def with_system(system: KeyValue) -> Option:
    """Set the database system attribute."""
    return with_default_attributes(system)


def with_database_name(name: str) -> Option:
    """Set the database name."""
    return with_default_attributes(KeyValue(DB_NAME, name))


def _trace_setter(apply: Callable[[TraceOptions], None]) -> DriverOption:
    return DriverOption(lambda options: apply(options.trace))


def with_span_name_formatter(formatter: Callable[..., str]) -> DriverOption:
    """Set the function that names spans."""

    def apply(trace: TraceOptions) -> None:
        trace.span_name_formatter = formatter

    return _trace_setter(apply)


def convert_error_to_span_status(converter: Callable[..., Any]) -> DriverOption:
    """Set a custom error to span status converter."""

    def apply(trace: TraceOptions) -> None:
        trace.error_to_span_status = converter

    return _trace_setter(apply)


def trace_query(tracer: Callable[..., list]) -> DriverOption:
    """Set the function that turns a query and its arguments into span attributes."""

    def apply(trace: TraceOptions) -> None:
        trace.query_tracer = tracer

    return _trace_setter(apply)


def _enable(flag: str) -> DriverOption:
    return _trace_setter(lambda trace: setattr(trace, flag, True))


def allow_root() -> DriverOption:
    """Allow root spans when no parent span exists."""
    return _enable("allow_root")


def trace_ping() -> DriverOption:
    """Create spans on ping calls."""
    return _enable("ping")


def trace_rows_next() -> DriverOption:
    """Create spans on row iteration."""
    return _enable("rows_next")


def trace_rows_close() -> DriverOption:
    """Create spans on closing rows."""
    return _enable("rows_close")


def trace_rows_affected() -> DriverOption:
    """Create spans on rows-affected calls."""
    return _enable("rows_affected")


def trace_last_insert_id() -> DriverOption:
    """Create spans on last-insert-id calls."""
    return _enable("last_insert_id")


def with_minimum_read_db_stats_interval(interval: timedelta) -> StatsOption:
    """Set the minimum interval between reads of database statistics."""

    def apply(options: StatsOptions) -> None:
        options.minimum_read_db_stats_interval = interval

    return StatsOption(apply)