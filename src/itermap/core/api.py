"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

One-call entry point for running an iterative map/reduce to completion.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from .coordinator import IterativeCoordinator
from .types import EndFn, MapFn, ReduceFn


async def iterate(
    keys: Iterable[Any],
    map_fn: MapFn,
    reduce_fn: ReduceFn | None = None,
    *,
    initial: Any = None,
    end_fn: EndFn | None = None,
    **options: Any,
) -> Any:
    """
    Build, start and await an ``IterativeCoordinator``.

    Args:
        keys: Initial keys.
        map_fn: Maps a key to an awaitable, a value or ``None``.
        reduce_fn: Folds each successful result into the accumulator. Without
            one, results are buffered and the process cannot settle through
            the end step unless no key produces work.
        initial: Accumulator seed.
        end_fn: Called on quiescence; may remap keys or settle the process.
        **options: Forwarded to ``IterativeCoordinator`` (``equals``, ``name``,
            ``config``, ``metrics``, ``telemetry``).

    Returns:
        The value the process resolved with.
    """
    coordinator = IterativeCoordinator(**options).init(initial)
    if reduce_fn is not None:
        coordinator.reduce(reduce_fn)
    if end_fn is not None:
        coordinator.end(end_fn)
    coordinator.map(map_fn).start(keys)
    return await coordinator
