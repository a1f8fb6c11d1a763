"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Iterative, self-feeding asynchronous map/reduce.

Quick start::

    from itermap import iterate

    async def neighbours(node):
        ...

    def visit(seen, edges, remap, node, resolved, rejected):
        for other in edges:
            remap(other)
        return seen | {node}

    reachable = await iterate([start], neighbours, visit, initial=frozenset())
"""

from .core import (
    CoordinatorConfig,
    CoordinatorConfigurationError,
    CoordinatorRejectedError,
    CoordinatorSnapshot,
    IterativeCoordinator,
    IterativeCoordinatorError,
    MapFunctionNotConfiguredError,
    MultiResult,
    iterate,
    multi,
)

__all__ = [
    "IterativeCoordinator",
    "iterate",
    "multi",
    "MultiResult",
    "CoordinatorConfig",
    "CoordinatorSnapshot",
    "IterativeCoordinatorError",
    "CoordinatorConfigurationError",
    "MapFunctionNotConfiguredError",
    "CoordinatorRejectedError",
]
