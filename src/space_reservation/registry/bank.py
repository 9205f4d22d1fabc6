# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""SpaceBank: the fixed-length inventory of spaces for one conference."""

from __future__ import annotations

import threading
from collections import Counter
from collections.abc import Iterator

from ..types.space import Space, SpaceState


class SpaceBank:
    """
    Ordered, fixed-length collection of spaces for one conference.

    Layout at creation (index order is meaningful):
        [0, not_in_use)                        NOT_IN_USE
        [not_in_use, not_in_use + premium)     FREE, premium
        [not_in_use + premium, max_size)       FREE

    The bank never grows or shrinks. Only the fields of individual spaces
    change, and only while ``lock`` is held by the engine.

    Thread Safety:
        ``lock`` is a reentrant lock guarding every read-decide-write
        sequence on this bank, including the free-count check that gates
        new reservations.
    """

    def __init__(self, max_size: int, not_in_use: int = 0, premium: int = 0):
        self._max_size = max_size
        self._not_in_use = not_in_use
        self._premium = premium

        spaces = [Space(state=SpaceState.NOT_IN_USE) for _ in range(not_in_use)]
        spaces.extend(Space(premium=True) for _ in range(premium))
        spaces.extend(Space() for _ in range(max_size - not_in_use - premium))
        self._spaces: tuple[Space, ...] = tuple(spaces)

        self.lock = threading.RLock()

    @property
    def max_size(self) -> int:
        return self._max_size

    @property
    def not_in_use(self) -> int:
        """Number of spaces created as NOT_IN_USE."""
        return self._not_in_use

    @property
    def premium(self) -> int:
        """Number of spaces created as premium."""
        return self._premium

    def __len__(self) -> int:
        return len(self._spaces)

    def __getitem__(self, index: int) -> Space:
        return self._spaces[index]

    def __iter__(self) -> Iterator[Space]:
        return iter(self._spaces)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, SpaceBank):
            return NotImplemented
        return (
            self._not_in_use == other._not_in_use
            and self._premium == other._premium
            and self._spaces == other._spaces
        )

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return (
            f"SpaceBank(max_size={self._max_size}, not_in_use={self._not_in_use}, "
            f"premium={self._premium}, free={self.free_count()})"
        )

    def free_count(self) -> int:
        """Count FREE spaces across the whole bank, premium included."""
        return sum(1 for space in self._spaces if space.state is SpaceState.FREE)

    def count(self, state: SpaceState) -> int:
        return sum(1 for space in self._spaces if space.state is state)

    def state_counts(self) -> dict[SpaceState, int]:
        """Return the number of spaces in every state (zero counts included)."""
        counts = Counter(space.state for space in self._spaces)
        return {state: counts.get(state, 0) for state in SpaceState}

    def snapshot(self) -> tuple[Space, ...]:
        """Return detached copies of every space, in index order."""
        with self.lock:
            return tuple(space.copy() for space in self._spaces)


__all__ = ["SpaceBank"]
