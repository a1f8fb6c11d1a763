"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Error types raised by the iterative coordinator.
"""

from __future__ import annotations

from typing import Any


class IterativeCoordinatorError(RuntimeError):
    """Base class for iterative coordinator failures."""


class CoordinatorConfigurationError(IterativeCoordinatorError, ValueError):
    """Raised when a coordinator is configured or started incorrectly."""


class MapFunctionNotConfiguredError(CoordinatorConfigurationError):
    """Raised when keys must be mapped but no map function is set."""


class CoordinatorRejectedError(IterativeCoordinatorError):
    """
    Raised from an awaited coordinator rejected with a non-exception reason.

    The value passed to ``reject`` is kept on ``reason``.
    """

    def __init__(self, reason: Any) -> None:
        super().__init__(f"Iterative process rejected: {reason!r}")
        self.reason = reason
