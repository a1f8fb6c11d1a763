"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Append-only ledger of mapped keys with pluggable equality.
"""

from __future__ import annotations

from collections.abc import Callable, Hashable, Iterator
from typing import Any

KeyEquality = Callable[[Any, Any], bool]


def default_equals(key1: Any, key2: Any) -> bool:
    """Identity first, then ``==``."""
    return key1 is key2 or bool(key1 == key2)


class KeyRegistry:
    """
    Ordered, append-only set of keys compared with an equality predicate.

    With the default predicate hashable keys are tracked in a set and only
    unhashable ones are scanned. A custom predicate always scans every key
    in insertion order, since it may not agree with ``__hash__``.
    """

    def __init__(self, *, equals: KeyEquality | None = None) -> None:
        self._equals = equals
        self._keys: list[Any] = []
        self._hashed: set[Any] = set()
        self._unhashable: list[Any] = []

    def add(self, key: Any) -> bool:
        """Register ``key`` and return True, or return False for a duplicate."""
        if self.contains(key):
            return False
        self._keys.append(key)
        if self._equals is None:
            if isinstance(key, Hashable):
                try:
                    self._hashed.add(key)
                except TypeError:
                    self._unhashable.append(key)
            else:
                self._unhashable.append(key)
        return True

    def contains(self, key: Any) -> bool:
        if self._equals is not None:
            return any(self._equals(key, other) for other in self._keys)
        try:
            if key in self._hashed:
                return True
        except TypeError:
            pass
        return any(default_equals(key, other) for other in self._unhashable) or (
            not isinstance(key, Hashable) and self._scan_hashed(key)
        )

    def _scan_hashed(self, key: Any) -> bool:
        # Unhashable keys may still compare equal to hashable ones.
        return any(default_equals(key, other) for other in self._hashed)

    def keys(self) -> tuple[Any, ...]:
        """Snapshot of registered keys in insertion order."""
        return tuple(self._keys)

    def __contains__(self, key: object) -> bool:
        return self.contains(key)

    def __len__(self) -> int:
        return len(self._keys)

    def __iter__(self) -> Iterator[Any]:
        return iter(tuple(self._keys))
