"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Public callable signatures and state views for the iterative coordinator.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any, Literal, TypeAlias

from pydantic import BaseModel, ConfigDict, Field

CoordinatorState = Literal["pending", "resolved", "rejected"]

# remap(key) -> bool in reduce, remap(key) -> None in end
RemapFn: TypeAlias = Callable[[Any], Any]

MapFn: TypeAlias = Callable[[Any], Any]

# reduce(previous, *payload, remap, key, resolved, rejected) -> next
ReduceFn: TypeAlias = Callable[..., Any]

# end(result, remap, resolved, rejected) -> None
EndFn: TypeAlias = Callable[
    [Any, RemapFn, tuple[Any, ...], tuple[Any, ...]], Any
]


class CoordinatorSnapshot(BaseModel):
    """Point-in-time counters describing one coordinator."""

    model_config = ConfigDict(frozen=True)

    coordinator_id: str
    name: str | None = None
    state: CoordinatorState = "pending"
    started: bool = False
    end_due: bool = False
    in_flight: int = Field(default=0, ge=0)
    mapped: int = Field(default=0, ge=0)
    resolved: int = Field(default=0, ge=0)
    rejected: int = Field(default=0, ge=0)
    pending_reduces: int = Field(default=0, ge=0)
    cycles: int = Field(default=0, ge=0)

    @property
    def settled(self) -> int:
        """Number of mapped keys whose future completed."""
        return self.resolved + self.rejected
