# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""Space Reservation - capacity-constrained reservation of per-conference spaces.

This library tracks a fixed pool of spaces per conference through the
lifecycle free -> reserved -> purchased, with a reserved floor that gates
new reservations, premium spaces that can only be bought, spaces that are
permanently out of use, and a time-based sweep that releases stale
reservations.

Key Features:
    - Per-bank locking so concurrent callers never race on a space
    - Typed errors for every rejected request
    - Caller-driven expiry sweep, with an optional asyncio watcher
    - Prometheus metrics for operations, rejections and free capacity

Quick Start:
    >>> from space_reservation import create_engine
    >>>
    >>> engine = create_engine(
    ...     max_size=10,
    ...     reserved_floor=3,
    ...     conference_names=["pycon"],
    ...     not_in_use_spaces=[1],
    ...     premium_spaces=[1],
    ... )
    >>> engine.reserve_space("pycon", 2, customer=1)
    True
    >>> engine.buy_space("pycon", 2, customer=1)
    True
    >>> engine.check_availability("pycon")
    8

Main Exports:
    - ReservationEngine, create_engine: Core operations
    - ReservationRegistry, SpaceBank: Inventory model
    - EngineConfig: Configuration options
    - ExpiryWatcher: Background expiry sweep
    - ReservationError and subclasses: Error taxonomy

Version: 1.0.0
"""

__version__ = "1.0.0"

from .engine import (
    EngineConfig,
    ExpiryWatcher,
    ReservationEngine,
    create_engine,
)
from .exceptions import (
    CapacityExceededError,
    ConferenceNotFoundError,
    IndexOutOfRangeError,
    InvalidConfigurationError,
    InvalidCustomerError,
    OwnershipConflictError,
    PremiumRestrictedError,
    PurchaseIrreversibleError,
    ReservationError,
    SpaceNotInUseError,
)
from .observability import MetricsCollector, get_metrics_collector
from .registry import ReservationRegistry, SpaceBank
from .types import NO_OWNER, Space, SpaceState

__all__ = [
    "NO_OWNER",
    "CapacityExceededError",
    "ConferenceNotFoundError",
    # Config
    "EngineConfig",
    # Engine
    "ExpiryWatcher",
    "IndexOutOfRangeError",
    "InvalidConfigurationError",
    "InvalidCustomerError",
    # Observability
    "MetricsCollector",
    "OwnershipConflictError",
    "PremiumRestrictedError",
    "PurchaseIrreversibleError",
    "ReservationEngine",
    # Exceptions
    "ReservationError",
    # Registry
    "ReservationRegistry",
    # Types
    "Space",
    "SpaceBank",
    "SpaceNotInUseError",
    "SpaceState",
    "create_engine",
    "get_metrics_collector",
]
