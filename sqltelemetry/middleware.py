"""Composition of call middlewares."""

from __future__ import annotations

from functools import reduce
from typing import Callable, Sequence, TypeVar

T = TypeVar("T")


def chain_middlewares(middlewares: Sequence[Callable[[T], T]] | None, last: T) -> T:
    """Wrap last so that the first middleware is the outermost one."""
    if not middlewares:
        return last
    return reduce(lambda handler, middleware: middleware(handler), reversed(middlewares), last)