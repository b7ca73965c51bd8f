"""An immutable chain of request-scoped values."""

from __future__ import annotations

from typing import Any


class Context:
    """Immutable key-value context; a bare Context() is the empty background."""

    __slots__ = ("_parent", "_key", "_value", "_has_value")

    def __init__(self) -> None:
        self._parent: Context | None = None
        self._key: Any = None
        self._value: Any = None
        self._has_value = False

    def with_value(self, key: Any, value: Any) -> Context:
        """Return a child context that carries value under key."""
        child = Context()
        child._parent = self
        child._key = key
        child._value = value
        child._has_value = True
        return child

    def value(self, key: Any) -> Any:
        """Return the value stored under key in this context or its ancestors."""
        node: Context | None = self
        while node is not None:
            if node._has_value and node._key == key:
                return node._value
            node = node._parent
        return None


class _QueryKey:
    __slots__ = ()

    def __eq__(self, other: object) -> bool:
        return isinstance(other, _QueryKey)

    def __hash__(self) -> int:
        return hash(_QueryKey)


_QUERY_KEY = _QueryKey()


def query_from_context(ctx: Context) -> str:
    """Return the query attached to the context, or an empty string."""
    query = ctx.value(_QUERY_KEY)
    return query if isinstance(query, str) else ""


def context_with_query(ctx: Context, query: str) -> Context:
    """Attach a query to the parent context."""
    return ctx.with_value(_QUERY_KEY, query)