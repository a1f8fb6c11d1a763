"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Core coordinator exports.
"""

from .api import iterate
from .config import CoordinatorConfig, DuplicateRemapPolicy
from .coordinator import IterativeCoordinator
from .errors import (
    CoordinatorConfigurationError,
    CoordinatorRejectedError,
    IterativeCoordinatorError,
    MapFunctionNotConfiguredError,
)
from .futures import MultiResult, multi, normalize
from .registry import KeyEquality, KeyRegistry, default_equals
from .types import (
    CoordinatorSnapshot,
    CoordinatorState,
    EndFn,
    MapFn,
    ReduceFn,
    RemapFn,
)

__all__ = [
    "IterativeCoordinator",
    "iterate",
    "CoordinatorConfig",
    "DuplicateRemapPolicy",
    "IterativeCoordinatorError",
    "CoordinatorConfigurationError",
    "MapFunctionNotConfiguredError",
    "CoordinatorRejectedError",
    "MultiResult",
    "multi",
    "normalize",
    "KeyEquality",
    "KeyRegistry",
    "default_equals",
    "CoordinatorSnapshot",
    "CoordinatorState",
    "MapFn",
    "ReduceFn",
    "EndFn",
    "RemapFn",
]
