# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""Exception classes for the space reservation library.

This module defines the exception hierarchy used throughout the library.
All exceptions inherit from ReservationError, making it easy to catch
every rejected operation with a single except clause.

A raised exception always means the request itself was rejected and no
space was modified. Operations that return ``False`` are reporting a valid
request for a space held by another customer, which is not an error.
"""


class ReservationError(Exception):
    """Base exception for all space reservation errors.

    Example:
        try:
            engine.reserve_space("pycon", 4, customer=17)
        except ReservationError as e:
            logger.error(f"Reservation rejected: {e}")
    """

    pass


class InvalidConfigurationError(ReservationError, ValueError):
    """Raised when engine or registry configuration is invalid.

    Only raised at construction time. No partial registry is produced.

    Common causes include:
    - Non-positive max_size
    - reserved_floor outside [0, max_size]
    - Empty conference name list
    - Conference names and space counts of different lengths
    - not_in_use + premium exceeding max_size - reserved_floor
    """

    pass


class InvalidCustomerError(ReservationError, ValueError):
    """Raised when a customer id collides with the no-owner sentinel.

    Attributes:
        customer: The rejected customer id.
    """

    def __init__(self, customer: int):
        super().__init__(
            f"Customer id {customer} is reserved for unowned spaces"
        )
        self.customer = customer


class IndexOutOfRangeError(ReservationError):
    """Raised when a space index falls outside ``[0, max_size)``.

    Attributes:
        index: The requested index.
        max_size: The number of spaces in every bank.
    """

    def __init__(self, index: int, max_size: int):
        super().__init__(
            f"Space index {index} out of range (must be 0 <= index < {max_size})"
        )
        self.index = index
        self.max_size = max_size


class ConferenceNotFoundError(ReservationError):
    """Raised when a conference name has no bank in the registry.

    Attributes:
        conference: The name that was looked up.
    """

    def __init__(self, conference: str):
        super().__init__(f"Conference not found: {conference}")
        self.conference = conference


class CapacityExceededError(ReservationError):
    """Raised when a reservation would eat into the reserved floor.

    New reservations are only granted while a bank holds more free spaces
    than the configured floor. Purchases are never subject to this check.

    Attributes:
        conference: The bank that is at its floor.
        available: Free spaces in the bank at the time of the request.
        floor: The configured reserved floor.

    Example:
        try:
            engine.reserve_space("pycon", 12, customer=3)
        except CapacityExceededError as e:
            # Fall back to an outright purchase
            engine.buy_space(e.conference, 12, customer=3)
    """

    def __init__(self, conference: str, available: int, floor: int):
        super().__init__(
            f"No more spaces can be reserved for {conference}: "
            f"{available} free, floor is {floor}"
        )
        self.conference = conference
        self.available = available
        self.floor = floor


class PremiumRestrictedError(ReservationError):
    """Raised when reserving (not buying) a premium space."""

    def __init__(self, conference: str, index: int):
        super().__init__(f"Cannot reserve premium space {index} in {conference}")
        self.conference = conference
        self.index = index


class SpaceNotInUseError(ReservationError):
    """Raised when any operation targets a space that is permanently out of use."""

    def __init__(self, conference: str, index: int):
        super().__init__(f"Space {index} in {conference} is not in use")
        self.conference = conference
        self.index = index


class OwnershipConflictError(ReservationError):
    """Raised when a customer returns a space reserved by someone else.

    Attributes:
        conference: The bank holding the space.
        index: The space index.
        customer: The customer that attempted the return.
        owner: The customer currently holding the reservation.
    """

    def __init__(self, conference: str, index: int, customer: int, owner: int):
        super().__init__(
            f"Space {index} in {conference} is reserved by a different customer"
        )
        self.conference = conference
        self.index = index
        self.customer = customer
        self.owner = owner


class PurchaseIrreversibleError(ReservationError):
    """Raised when returning a purchased space. Purchases cannot be undone by anyone."""

    def __init__(self, conference: str, index: int):
        super().__init__(f"Cannot return purchased space {index} in {conference}")
        self.conference = conference
        self.index = index

