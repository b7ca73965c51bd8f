"""Instrumentation middlewares for ping, begin and exec calls."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Iterable, Protocol, Sequence

from .attributes import KeyValue, NamedValue
from .context import Context, context_with_query
from .options import DriverOptions

METRIC_METHOD_PING = "go.sql.ping"
TRACE_METHOD_PING = "ping"
METRIC_METHOD_BEGIN = "go.sql.begin"
TRACE_METHOD_BEGIN = "begin_transaction"
METRIC_METHOD_EXEC = "go.sql.exec"
TRACE_METHOD_EXEC = "exec"

PingFunc = Callable[[Context], None]
BeginFunc = Callable[[Context, "TxOptions"], Any]
ExecContextFunc = Callable[[Context, str, Sequence[NamedValue]], Any]
QueryTracer = Callable[[Context, str, Sequence[NamedValue]], Iterable[KeyValue]]

_SKIP_MESSAGE = "driver: skip fast-path; continue as if unimplemented"


class SkipError(Exception):
    """Raised when a driver does not support a fast path and the caller should fall back."""

    def __init__(self, message: str = _SKIP_MESSAGE, *, query: str | None = None) -> None:
        super().__init__(message)
        self.query = query


@dataclass(frozen=True)
class TxOptions:
    """Options for starting a transaction."""

    isolation: int = 0
    read_only: bool = False


class MethodRecorder(Protocol):
    """Records metrics of a method call."""

    def record(self, ctx: Context, method: str) -> Callable[[BaseException | None], None]:
        ...


class MethodTracer(Protocol):
    """Creates spans for method calls."""

    def trace(
        self, ctx: Context, method: str
    ) -> tuple[Context, Callable[..., None]]:
        ...

    def should_trace(self, ctx: Context) -> tuple[bool, bool]:
        ...


def _require_context(ctx: Any) -> None:
    if ctx is not None and not isinstance(ctx, Context):
        raise TypeError(f"expected a Context, got {type(ctx).__name__}")


def _require_query(query: Any) -> None:
    if not isinstance(query, str):
        raise TypeError(f"expected a query string, got {type(query).__name__}")


def _observe(end: Callable[..., None], call: Callable[[], Any],
             attributes: Callable[[], Iterable[KeyValue]] = tuple) -> Any:
    """Run call and report its outcome to end, re-raising any error."""
    try:
        result = call()
    except Exception as exc:
        end(exc, *attributes())
        raise
    end(None, *attributes())
    return result


# Ping


def nop_ping(ctx: Context) -> None:
    """Ping nothing; only the context is checked."""
    _require_context(ctx)


def ping_stats(recorder: MethodRecorder) -> Callable[[PingFunc], PingFunc]:
    """Record metrics of ping calls."""

    def middleware(next_ping: PingFunc) -> PingFunc:
        def ping(ctx: Context) -> None:
            end = recorder.record(ctx, METRIC_METHOD_PING)
            return _observe(end, lambda: next_ping(ctx))

        return ping

    return middleware


def ping_trace(tracer: MethodTracer) -> Callable[[PingFunc], PingFunc]:
    """Create spans for ping calls."""

    def middleware(next_ping: PingFunc) -> PingFunc:
        def ping(ctx: Context) -> None:
            span_ctx, end = tracer.trace(ctx, TRACE_METHOD_PING)
            return _observe(end, lambda: next_ping(span_ctx))

        return ping

    return middleware


def make_ping_func_middlewares(
    recorder: MethodRecorder, tracer: MethodTracer | None
) -> list[Callable[[PingFunc], PingFunc]]:
    """Build the ping middlewares; tracing is added only when a tracer is given."""
    middlewares = [ping_stats(recorder)]
    if tracer is not None:
        middlewares.append(ping_trace(tracer))
    return middlewares


# Begin


def nop_begin(ctx: Context, opts: TxOptions) -> None:
    """Begin nothing and return no transaction; only the arguments are checked."""
    _require_context(ctx)
    if opts is not None and not isinstance(opts, TxOptions):
        raise TypeError(f"expected TxOptions, got {type(opts).__name__}")


def ensure_begin(conn: Any) -> BeginFunc:
    """Return a context-aware begin function for a connection."""
    begin_tx = getattr(conn, "begin_tx", None)
    if callable(begin_tx):
        return begin_tx

    def begin(ctx: Context, opts: TxOptions) -> Any:
        return conn.begin()

    return begin


def begin_stats(recorder: MethodRecorder) -> Callable[[BeginFunc], BeginFunc]:
    """Record metrics of begin calls."""

    def middleware(next_begin: BeginFunc) -> BeginFunc:
        def begin(ctx: Context, opts: TxOptions) -> Any:
            end = recorder.record(ctx, METRIC_METHOD_BEGIN)
            return _observe(end, lambda: next_begin(ctx, opts))

        return begin

    return middleware


def begin_trace(tracer: MethodTracer) -> Callable[[BeginFunc], BeginFunc]:
    """Create spans for begin calls."""

    def middleware(next_begin: BeginFunc) -> BeginFunc:
        def begin(ctx: Context, opts: TxOptions) -> Any:
            span_ctx, end = tracer.trace(ctx, TRACE_METHOD_BEGIN)
            return _observe(end, lambda: next_begin(span_ctx, opts))

        return begin

    return middleware


# Exec


def nop_exec_context(ctx: Context, query: str, args: Sequence[NamedValue]) -> None:
    """Execute nothing and return no result; only the arguments are checked."""
    _require_context(ctx)
    _require_query(query)


def skipped_exec_context(ctx: Context, query: str, args: Sequence[NamedValue]) -> Any:
    """Always signal that the fast path is unsupported for the given query."""
    _require_context(ctx)
    raise SkipError(query=query)


def exec_stats(recorder: MethodRecorder, method: str) -> Callable[[ExecContextFunc], ExecContextFunc]:
    """Record metrics of exec calls under the given method name."""

    def middleware(next_exec: ExecContextFunc) -> ExecContextFunc:
        def execute(ctx: Context, query: str, args: Sequence[NamedValue]) -> Any:
            end = recorder.record(ctx, method)
            return _observe(end, lambda: next_exec(ctx, query, args))

        return execute

    return middleware


def exec_trace(
    tracer: MethodTracer, trace_query: QueryTracer, method: str
) -> Callable[[ExecContextFunc], ExecContextFunc]:
    """Create spans for exec calls, attaching the query to the context."""

    def middleware(next_exec: ExecContextFunc) -> ExecContextFunc:
        def execute(ctx: Context, query: str, args: Sequence[NamedValue]) -> Any:
            query_ctx = context_with_query(ctx, query)
            span_ctx, end = tracer.trace(query_ctx, method)
            return _observe(
                end,
                lambda: next_exec(span_ctx, query, args),
                lambda: list(trace_query(span_ctx, query, args)),
            )

        return execute

    return middleware


@dataclass(frozen=True)
class ExecConfig:
    """Settings of exec instrumentation."""

    metric_method: str
    trace_method: str
    trace_query: QueryTracer | None = None
    trace_last_insert_id: bool = False
    trace_rows_affected: bool = False


def new_exec_config(options: DriverOptions, metric_method: str, trace_method: str) -> ExecConfig:
    """Build the exec configuration from driver options."""
    return ExecConfig(
        metric_method=metric_method,
        trace_method=trace_method,
        trace_query=options.trace.query_tracer,
        trace_last_insert_id=options.trace.last_insert_id,
        trace_rows_affected=options.trace.rows_affected,
    )