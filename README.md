# sqltelemetry

Building blocks for adding tracing and metrics to SQL database calls.
The package has no dependencies outside the standard library.

## Modules

### `sqltelemetry.attributes`

Turns query arguments into span attributes.

- `KeyValue(key, value)` is a frozen attribute pair.
- `NamedValue(name="", ordinal=0, value=None)` is a statement argument, given by name or by position.
- `key_from_named_value(arg)` returns `db.sql.args.<name>`. Without a name it returns `db.sql.args.<ordinal>`.
- `from_named_value(arg)` builds a `KeyValue` from an argument.
- `key_value(key, value)` converts a value into a `KeyValue`:
  - `None` becomes `""`.
  - Numbers and booleans are kept as they are.
  - Bytes and strings are shortened.
  - Lists and tuples of all-int, all-float or all-bool items become tuples.
  - A `timedelta` is formatted as a duration.
  - Any other value becomes its shortened `str()`.
- `key_value_duration(key, duration)` accepts a `timedelta` or integer nanoseconds. It writes durations such as `0s`, `116ns`, `110us`, `117ms` or `1m10s`.
- `shorten_string(text)` cuts text longer than 256 characters. The result is 256 characters long and ends with `... (more than 256 chars)`.

### `sqltelemetry.context`

- `Context()` is an empty, immutable context.
  - `Context.with_value(key, value)` returns a child context.
  - `Context.value(key)` looks the key up through the chain and returns `None` if the key is absent.
- `context_with_query(ctx, query)` attaches the SQL text of a call.
- `query_from_context(ctx)` returns that text, or `""` when there is none.

### `sqltelemetry.middleware`

`chain_middlewares(middlewares, last)` wraps `last` in the given middlewares. The first middleware in the list is the outermost. An empty list or `None` returns `last` unchanged.

### `sqltelemetry.options`

Functional options applied to `DriverOptions` (which holds `TraceOptions`) and `StatsOptions`:

- `DriverOption` objects provide `apply_driver_options`.
- `StatsOption` objects provide `apply_stats_options`.
- `Option` objects provide both.

The option functions are:

- Switches that turn on a `TraceOptions` flag: `allow_root`, `trace_ping`, `trace_rows_next`, `trace_rows_close`, `trace_rows_affected`, `trace_last_insert_id`.
- Functions that set a `TraceOptions` callable: `with_span_name_formatter`, `convert_error_to_span_status`, `trace_query`.
- `with_tracer_provider` sets the tracer provider.
- `with_meter_provider` sets the meter provider.
- Default attributes:
  - `with_default_attributes(*attrs)` appends the given attributes.
  - `with_instance_name` adds `db.instance`.
  - `with_database_name` adds `db.name`.
  - `with_system` adds the given attribute.
- `with_minimum_read_db_stats_interval(interval)` sets `StatsOptions.minimum_read_db_stats_interval`.

### `sqltelemetry.operations`

Stats and trace middlewares for ping, begin and exec calls.

**Recorders and tracers.** The caller supplies both:

- A recorder has `record(ctx, method)`. It returns `end(error)`.
- A tracer has `trace(ctx, method)`. It returns `(ctx, end)`.

**Ping.**

- `nop_ping` does nothing.
- `ping_stats` records metrics under `go.sql.ping`.
- `ping_trace` creates spans named `ping`.
- `make_ping_func_middlewares(recorder, tracer)` always adds the stats middleware. It adds tracing only when `tracer` is not `None`.

**Begin.**

- `nop_begin` returns `None`.
- `ensure_begin(conn)` uses `conn.begin_tx` when the connection has it, and otherwise calls `conn.begin()`.
- `begin_stats` records metrics under `go.sql.begin`.
- `begin_trace` creates spans named `begin_transaction`.
- `TxOptions` holds `isolation` and `read_only`.

**Exec.**

- `nop_exec_context` returns `None`.
- `skipped_exec_context` always raises `SkipError`, with the query set on the exception.
- `exec_stats(recorder, method)` records metrics under the given method name.
- `exec_trace(tracer, trace_query, method)` attaches the query to the context before tracing. It passes the attributes from `trace_query(ctx, query, args)` to `end`.
- `new_exec_config(options, metric_method, trace_method)` builds an `ExecConfig` from `DriverOptions`.

**Errors.** Every middleware reports the outcome to `end`, with `None` on success. If the wrapped call raises, the middleware reports the exception to `end` and raises it again.

## Example

```python
from sqltelemetry.context import Context
from sqltelemetry.middleware import chain_middlewares
from sqltelemetry.operations import exec_stats, METRIC_METHOD_EXEC

class PrintRecorder:
    def record(self, ctx, method):
        def end(error):
            print(method, "ERROR" if error else "OK")
        return end

execute = chain_middlewares(
    [exec_stats(PrintRecorder(), METRIC_METHOD_EXEC)],
    lambda ctx, query, args: len(args),
)
execute(Context(), "DELETE FROM data WHERE country = $1", ["US"])
```

## What it does not do

This package provides only the middleware pieces. It does not:

- wrap or register database drivers;
- wrap connections, statements, transactions, results or rows;
- supply tracer or meter providers;
- record database pool statistics.

You supply the recorder and tracer objects and compose them with `chain_middlewares`.

## Running the tests

```
pip install -e ".[test]"
pytest
```