# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""
Space types.

This module defines the lifecycle states of a single allocatable space
and the Space record that carries its ownership metadata.
"""

from dataclasses import dataclass, replace
from enum import Enum

NO_OWNER = 0
"""Sentinel owner id for spaces nobody holds."""


class SpaceState(Enum):
    """
    Lifecycle state of a space.

    Transitions:
        * **FREE** -> RESERVED (reserve) or PURCHASED (buy)
        * **RESERVED** -> PURCHASED (buy by owner) or FREE (return, expiry)
        * **PURCHASED** is terminal
        * **NOT_IN_USE** is fixed at creation and never changes
    """

    FREE = "free"
    RESERVED = "reserved"
    PURCHASED = "purchased"
    NOT_IN_USE = "not_in_use"


@dataclass
class Space:
    """
    A single allocatable unit within a bank.

    Equality is by value over every field, so two spaces compare equal only
    if premium flag, state, owner and reservation time all match.

    Attributes:
        premium: Premium spaces can be bought but never reserved
        state: Current lifecycle state
        owner_id: Customer holding the space, NO_OWNER when unowned
        reserved_at: Unix timestamp of the reservation, None unless RESERVED
    """

    premium: bool = False
    state: SpaceState = SpaceState.FREE
    owner_id: int = NO_OWNER
    reserved_at: float | None = None

    @property
    def is_free(self) -> bool:
        return self.state is SpaceState.FREE

    def is_owned_by(self, customer: int) -> bool:
        """Return True if the space is reserved or purchased by ``customer``."""
        return (
            self.state in (SpaceState.RESERVED, SpaceState.PURCHASED)
            and self.owner_id == customer
        )

    def is_expired(self, cutoff: float) -> bool:
        """Return True if this is a reservation made before ``cutoff``."""
        return (
            self.state is SpaceState.RESERVED
            and self.reserved_at is not None
            and self.reserved_at < cutoff
        )

    def reserve(self, customer: int, now: float) -> None:
        self.state = SpaceState.RESERVED
        self.owner_id = customer
        self.reserved_at = now

    def purchase(self, customer: int) -> None:
        # A purchase supersedes any reservation timestamp
        self.state = SpaceState.PURCHASED
        self.owner_id = customer
        self.reserved_at = None

    def release(self) -> None:
        self.state = SpaceState.FREE
        self.owner_id = NO_OWNER
        self.reserved_at = None

    def copy(self) -> "Space":
        """Return a detached snapshot of this space."""
        return replace(self)


__all__ = [
    "NO_OWNER",
    "Space",
    "SpaceState",
]
