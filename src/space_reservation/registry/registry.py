# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""
ReservationRegistry for holding every conference's SpaceBank.

The registry is built once, fully, from per-conference layout counts and
never gains or loses a bank afterwards. It is the single owned aggregate
handed to a ReservationEngine; nothing in the library keeps registry state
at module level.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator, Sequence

from ..exceptions import ConferenceNotFoundError, InvalidConfigurationError
from ..types.space import NO_OWNER, Space, SpaceState
from .bank import SpaceBank

logger = logging.getLogger(__name__)


def _is_int(value: object) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def validate_dimensions(max_size: int, reserved_floor: int) -> None:
    """
    Validate the bank size and reserved floor shared by every conference.

    Args:
        max_size: Number of spaces per bank
        reserved_floor: Minimum number of free spaces every bank must keep

    Raises:
        InvalidConfigurationError: If max_size is not positive or
            reserved_floor is outside [0, max_size]
    """
    if not _is_int(max_size) or max_size <= 0:
        raise InvalidConfigurationError(
            f"max_size must be a positive integer, got {max_size!r}"
        )
    if not _is_int(reserved_floor) or not 0 <= reserved_floor <= max_size:
        raise InvalidConfigurationError(
            f"reserved_floor must be between 0 and {max_size}, got {reserved_floor!r}"
        )


def validate_layout(
    max_size: int,
    reserved_floor: int,
    conference_names: Sequence[str],
    not_in_use_spaces: Sequence[int],
    premium_spaces: Sequence[int],
) -> None:
    """
    Validate a full registry layout before any bank is built.

    Raises:
        InvalidConfigurationError: On the first violated rule
    """
    validate_dimensions(max_size, reserved_floor)

    if not conference_names:
        raise InvalidConfigurationError("conference_names must not be empty")
    if not len(conference_names) == len(not_in_use_spaces) == len(premium_spaces):
        raise InvalidConfigurationError(
            "conference_names, not_in_use_spaces and premium_spaces must be the "
            f"same length (got {len(conference_names)}, {len(not_in_use_spaces)}, "
            f"{len(premium_spaces)})"
        )

    usable = max_size - reserved_floor
    for name, not_in_use, premium in zip(
        conference_names, not_in_use_spaces, premium_spaces
    ):
        if not isinstance(name, str):
            raise InvalidConfigurationError(
                f"conference names must be strings, got {name!r}"
            )
        if not _is_int(not_in_use) or not_in_use < 0:
            raise InvalidConfigurationError(
                f"not_in_use count for {name} must be a non-negative integer, "
                f"got {not_in_use!r}"
            )
        if not _is_int(premium) or premium < 0:
            raise InvalidConfigurationError(
                f"premium count for {name} must be a non-negative integer, "
                f"got {premium!r}"
            )
        if not_in_use + premium > usable:
            raise InvalidConfigurationError(
                f"{name}: not_in_use ({not_in_use}) + premium ({premium}) exceeds "
                f"max_size - reserved_floor ({usable})"
            )


class ReservationRegistry:
    """
    Name-keyed collection of SpaceBanks, one per conference.

    Invariants:
        - every bank has exactly ``max_size`` spaces
        - reservations never push a bank below ``reserved_floor`` free spaces
          (purchases may)

    Duplicate conference names collapse to a single bank: the first layout
    given for a name wins and later ones are ignored with a warning.

    Example:
        >>> registry = ReservationRegistry(10, 3, ["pycon"], [1], [1])
        >>> registry.get("pycon").free_count()
        9
    """

    def __init__(
        self,
        max_size: int,
        reserved_floor: int,
        conference_names: Sequence[str],
        not_in_use_spaces: Sequence[int],
        premium_spaces: Sequence[int],
    ):
        """
        Build every bank of the registry.

        Args:
            max_size: Number of spaces in each bank
            reserved_floor: Free spaces every bank keeps back from reservations
            conference_names: Unique conference names
            not_in_use_spaces: NOT_IN_USE space count per conference
            premium_spaces: Premium space count per conference

        Raises:
            InvalidConfigurationError: If the layout is invalid. Nothing is
                built in that case.
        """
        validate_layout(
            max_size, reserved_floor, conference_names, not_in_use_spaces, premium_spaces
        )

        self._max_size = max_size
        self._reserved_floor = reserved_floor

        banks: dict[str, SpaceBank] = {}
        for name, not_in_use, premium in zip(
            conference_names, not_in_use_spaces, premium_spaces
        ):
            if name in banks:
                logger.warning(
                    "Duplicate conference name %r ignored; keeping the first layout",
                    name,
                )
                continue
            banks[name] = SpaceBank(max_size, not_in_use, premium)
        self._banks = banks

    @property
    def max_size(self) -> int:
        return self._max_size

    @property
    def reserved_floor(self) -> int:
        return self._reserved_floor

    @property
    def conference_names(self) -> list[str]:
        return list(self._banks)

    def get(self, conference: str) -> SpaceBank:
        """
        Look up the bank for a conference.

        Raises:
            ConferenceNotFoundError: If no bank has that name
        """
        try:
            return self._banks[conference]
        except (KeyError, TypeError):
            raise ConferenceNotFoundError(conference) from None

    def __contains__(self, conference: object) -> bool:
        try:
            return conference in self._banks
        except TypeError:
            return False

    def __len__(self) -> int:
        return len(self._banks)

    def __iter__(self) -> Iterator[tuple[str, SpaceBank]]:
        return iter(self._banks.items())

    def snapshot(self) -> dict[str, tuple[Space, ...]]:
        """Return detached copies of every space, keyed by conference."""
        return {name: bank.snapshot() for name, bank in self._banks.items()}

    def check_invariants(self) -> list[str]:
        """
        Check every structural invariant of the registry.

        Returns:
            Human-readable descriptions of each violation. Empty when the
            registry is consistent.

        Note:
            The reserved floor is not checked here since purchases may
            legitimately take a bank below it.
        """
        violations: list[str] = []
        for name, bank in self._banks.items():
            with bank.lock:
                if len(bank) != self._max_size:
                    violations.append(
                        f"{name}: bank has {len(bank)} spaces, expected {self._max_size}"
                    )
                for index, space in enumerate(bank):
                    violations.extend(
                        f"{name}[{index}]: {problem}"
                        for problem in _space_violations(bank, index, space)
                    )
        return violations


def _space_violations(bank: SpaceBank, index: int, space: Space) -> list[str]:
    problems = []
    owned = space.state in (SpaceState.RESERVED, SpaceState.PURCHASED)
    if (space.owner_id != NO_OWNER) != owned:
        problems.append(f"owner {space.owner_id} inconsistent with {space.state.value}")
    if (space.reserved_at is not None) != (space.state is SpaceState.RESERVED):
        problems.append(
            f"reserved_at {space.reserved_at} inconsistent with {space.state.value}"
        )
    if (index < bank.not_in_use) != (space.state is SpaceState.NOT_IN_USE):
        problems.append(f"state {space.state.value} outside the creation layout")
    expected_premium = bank.not_in_use <= index < bank.not_in_use + bank.premium
    if space.premium != expected_premium:
        problems.append(f"premium flag {space.premium} outside the creation layout")
    return problems


__all__ = [
    "ReservationRegistry",
    "validate_dimensions",
    "validate_layout",
]
