"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Coordinator behaviour settings and explicit env loading.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Literal, cast

from .errors import CoordinatorConfigurationError

DuplicateRemapPolicy = Literal["recheck", "stall"]

_DUPLICATE_REMAP_POLICIES: tuple[str, ...] = ("recheck", "stall")
_TRUE = ("1", "true", "yes", "on")
_FALSE = ("0", "false", "no", "off")


def _env_first(*names: str, default: str | None = None) -> str | None:
    """
    Return the first non-empty environment variable in `names`.

    Args:
        *names: Environment variable names to check in order.
        default: Value returned if no non-empty variable is found.
    """
    for name in names:
        raw = os.getenv(name)
        if raw is None:
            continue
        value = raw.strip()
        if value:
            return value
    return default


def _env_bool(name: str, default: bool) -> bool:
    raw = _env_first(name)
    if raw is None:
        return default
    value = raw.lower()
    if value in _TRUE:
        return True
    if value in _FALSE:
        return False
    raise CoordinatorConfigurationError(
        f"{name} must be a boolean flag, got '{raw}'"
    )


@dataclass(frozen=True, slots=True)
class CoordinatorConfig:
    """
    Behaviour switches for ``IterativeCoordinator``.

    Attributes:
        resolve_without_end: Auto-resolve on quiescence when no end function
            has been set by the next event-loop iteration.
        duplicate_remap_policy: What to do when keys handed back by the end
            function start no new work. ``recheck`` re-runs the end step while
            new keys keep being registered and resolves once every returned
            key is a duplicate; ``stall`` leaves the process pending.
        reject_on_hook_error: Reject the coordinator when the reduce or end
            function raises, unless the hook already settled the process, in
            which case that result stands. When False the error propagates to
            the caller or to the event loop exception handler, and the
            termination check for that step is skipped. A reduce step that
            fails inside a completion callback for the last in-flight key
            therefore leaves the process pending until ``resolve`` or
            ``reject`` is called.
        telemetry_backend: Telemetry backend id used when no sink is given.
    """

    resolve_without_end: bool = True
    duplicate_remap_policy: DuplicateRemapPolicy = "recheck"
    reject_on_hook_error: bool = True
    telemetry_backend: str = "null"

    def __post_init__(self) -> None:
        if self.duplicate_remap_policy not in _DUPLICATE_REMAP_POLICIES:
            raise CoordinatorConfigurationError(
                "duplicate_remap_policy must be one of "
                f"{', '.join(_DUPLICATE_REMAP_POLICIES)}; "
                f"got '{self.duplicate_remap_policy}'"
            )
        if not self.telemetry_backend.strip():
            raise CoordinatorConfigurationError("telemetry_backend must be non-empty")

    @staticmethod
    def from_env() -> "CoordinatorConfig":
        """Load settings from `ITERMAP_*` environment variables."""
        policy = (
            _env_first("ITERMAP_DUPLICATE_REMAP_POLICY", default="recheck") or "recheck"
        ).lower()
        return CoordinatorConfig(
            resolve_without_end=_env_bool("ITERMAP_RESOLVE_WITHOUT_END", True),
            duplicate_remap_policy=cast(DuplicateRemapPolicy, policy),
            reject_on_hook_error=_env_bool("ITERMAP_REJECT_ON_HOOK_ERROR", True),
            telemetry_backend=(
                _env_first("ITERMAP_TELEMETRY_BACKEND", default="null") or "null"
            ).lower(),
        )
