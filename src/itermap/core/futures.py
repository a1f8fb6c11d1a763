"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Adapters turning map-function outputs into ``asyncio.Future`` objects.
"""

from __future__ import annotations

import asyncio
import concurrent.futures
import inspect
from typing import Any


class MultiResult(tuple):
    """
    Success payload carrying several values.

    A mapped future resolving to a ``MultiResult`` has every value spread as
    its own positional argument to the reduce function.
    """

    __slots__ = ()

    def __repr__(self) -> str:
        return f"MultiResult{tuple.__repr__(self)}"


def multi(*values: Any) -> MultiResult:
    """Build a multi-value success payload."""
    return MultiResult(values)


def payload_of(result: Any) -> tuple[Any, ...]:
    """Return the positional reduce arguments for one future result."""
    if isinstance(result, MultiResult):
        return tuple(result)
    return (result,)


def normalize(
    value: Any,
    *,
    loop: asyncio.AbstractEventLoop,
) -> asyncio.Future[Any] | None:
    """
    Normalize a map-function output into a future bound to ``loop``.

    - ``None`` means "no work" and returns ``None``.
    - asyncio futures and tasks pass through unchanged.
    - ``concurrent.futures.Future`` objects are wrapped.
    - Coroutines and other awaitables are scheduled as tasks.
    - Any other value becomes an already-completed future.
    """
    if value is None:
        return None
    if asyncio.isfuture(value):
        return value
    if isinstance(value, concurrent.futures.Future):
        return asyncio.wrap_future(value, loop=loop)
    if inspect.isawaitable(value):
        return asyncio.ensure_future(value, loop=loop)
    return completed(value, loop=loop)


def completed(value: Any, *, loop: asyncio.AbstractEventLoop) -> asyncio.Future[Any]:
    """Return a future already resolved with ``value``."""
    future = loop.create_future()
    future.set_result(value)
    return future


def failed(
    error: BaseException, *, loop: asyncio.AbstractEventLoop
) -> asyncio.Future[Any]:
    """Return a future already failed with ``error``."""
    future = loop.create_future()
    future.set_exception(error)
    return future
