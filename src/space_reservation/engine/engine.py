# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""
ReservationEngine: the public operation surface over a ReservationRegistry.

Every mutating operation locates one space, then holds that space's bank
lock for the whole read-decide-write sequence, so concurrent callers can
never both observe the same FREE space or jointly breach the reserved
floor. The expiry sweep takes the same lock bank by bank.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Sequence
from dataclasses import replace
from typing import Any, TypeVar

from ..exceptions import (
    CapacityExceededError,
    IndexOutOfRangeError,
    InvalidConfigurationError,
    InvalidCustomerError,
    OwnershipConflictError,
    PremiumRestrictedError,
    PurchaseIrreversibleError,
    ReservationError,
    SpaceNotInUseError,
)
from ..observability.collector import MetricsCollector, get_metrics_collector
from ..observability.constants import (
    EXPIRED_RESERVATIONS_TOTAL,
    FREE_SPACES,
    OPERATIONS_TOTAL,
    OUTCOME_GRANTED,
    OUTCOME_REFUSED,
    OUTCOME_REJECTED,
    REJECTIONS_TOTAL,
    SWEEP_DURATION_SECONDS,
)
from ..registry.bank import SpaceBank
from ..registry.registry import ReservationRegistry
from ..types.space import NO_OWNER, Space, SpaceState
from .config import DEFAULT_RESERVATION_TTL, EngineConfig

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Label used for conferences that are not in the registry, so that
# arbitrary caller input cannot grow metric cardinality.
UNKNOWN_CONFERENCE = "unknown"


class ReservationEngine:
    """
    Enforces the space lifecycle rules against a registry.

    Operations:
        reserve_space: FREE -> RESERVED for non-premium spaces, above the floor
        buy_space: FREE or own RESERVED -> PURCHASED, ignores the floor
        return_space: own RESERVED -> FREE
        cancel_reservations: release every reservation older than the TTL
        check_availability: count FREE spaces in a bank
        check_customer: owner id of a space

    ``reserve_space`` and ``buy_space`` return False only for a valid request
    on a space held by another customer. Malformed requests always raise a
    ReservationError subclass and leave every space untouched.

    Example:
        >>> engine = create_engine(10, 3, ["pycon"], [1], [1])
        >>> engine.reserve_space("pycon", 2, customer=1)
        True
        >>> engine.check_customer("pycon", 2)
        1
    """

    def __init__(
        self,
        registry: ReservationRegistry,
        config: EngineConfig | None = None,
        clock: Callable[[], float] | None = None,
        metrics_collector: MetricsCollector | None = None,
    ):
        """
        Initialize the engine.

        Args:
            registry: The registry this engine operates on
            config: Engine configuration. Defaults to the registry's
                dimensions with default TTL.
            clock: Returns the current Unix time. Defaults to time.time.
            metrics_collector: Collector for operation metrics. Defaults to
                the global collector when metrics are enabled.

        Raises:
            InvalidConfigurationError: If config and registry disagree on
                max_size or reserved_floor
        """
        if config is None:
            config = EngineConfig(
                max_size=registry.max_size,
                reserved_floor=registry.reserved_floor,
            )
        elif (config.max_size, config.reserved_floor) != (
            registry.max_size,
            registry.reserved_floor,
        ):
            raise InvalidConfigurationError(
                f"config dimensions ({config.max_size}, {config.reserved_floor}) "
                f"do not match registry ({registry.max_size}, {registry.reserved_floor})"
            )

        self._registry = registry
        self._config = config
        self._clock = clock or time.time

        self._metrics: MetricsCollector | None = None
        if config.metrics_enabled:
            self._metrics = metrics_collector or get_metrics_collector()

        for name, bank in registry:
            self._update_free_gauge(name, bank.free_count())

        logger.info(
            "ReservationEngine ready: %d conferences, max_size=%d, "
            "reserved_floor=%d, reservation_ttl=%.1fs",
            len(registry),
            registry.max_size,
            registry.reserved_floor,
            config.reservation_ttl,
        )

    # === Properties ===

    @property
    def registry(self) -> ReservationRegistry:
        return self._registry

    @property
    def config(self) -> EngineConfig:
        return self._config

    @property
    def max_size(self) -> int:
        return self._registry.max_size

    @property
    def reserved_floor(self) -> int:
        return self._registry.reserved_floor

    @property
    def reservation_ttl(self) -> float:
        return self._config.reservation_ttl

    @property
    def metrics_collector(self) -> MetricsCollector | None:
        """The collector receiving operation metrics, None when disabled."""
        return self._metrics

    # === Mutating Operations ===

    def reserve_space(self, conference: str, index: int, customer: int) -> bool:
        """
        Reserve a non-premium space for a customer.

        Args:
            conference: Conference name
            index: Space index within the bank
            customer: Opaque customer id, never 0

        Returns:
            True if the space is now reserved or purchased by ``customer``,
            False if another customer holds it

        Raises:
            IndexOutOfRangeError: If index is outside [0, max_size)
            ConferenceNotFoundError: If the conference does not exist
            InvalidCustomerError: If customer is the no-owner id 0
            CapacityExceededError: If the bank has no free space above the floor
            PremiumRestrictedError: If the space is premium
            SpaceNotInUseError: If the space is not in use
        """
        return self._run("reserve", conference, self._reserve, conference, index, customer)

    def buy_space(self, conference: str, index: int, customer: int) -> bool:
        """
        Buy a space that is free or already reserved by the customer.

        Buying is never blocked by the reserved floor and premium spaces can
        be bought.

        Returns:
            True if the space is now purchased by ``customer``, False if
            another customer holds it

        Raises:
            IndexOutOfRangeError: If index is outside [0, max_size)
            ConferenceNotFoundError: If the conference does not exist
            InvalidCustomerError: If customer is the no-owner id 0
            SpaceNotInUseError: If the space is not in use
        """
        return self._run("buy", conference, self._buy, conference, index, customer)

    def return_space(self, conference: str, index: int, customer: int) -> None:
        """
        Release a reservation held by the customer.

        Returning a FREE space is a no-op.

        Raises:
            IndexOutOfRangeError: If index is outside [0, max_size)
            ConferenceNotFoundError: If the conference does not exist
            InvalidCustomerError: If customer is the no-owner id 0
            OwnershipConflictError: If another customer holds the reservation
            PurchaseIrreversibleError: If the space has been purchased
            SpaceNotInUseError: If the space is not in use
        """
        self._run("return", conference, self._return, conference, index, customer)

    def cancel_reservations(self) -> None:
        """Release every reservation older than the TTL, across all banks."""
        self.expire_stale()

    def expire_stale(self) -> dict[str, int]:
        """
        Release every reservation older than the TTL and report what was freed.

        Only RESERVED spaces whose reservation is older than
        ``now - reservation_ttl`` change. Safe to call at any time and any
        number of times.

        Returns:
            Number of reservations released, per conference
        """
        started = time.perf_counter()
        cutoff = self._clock() - self._config.reservation_ttl
        released: dict[str, int] = {}

        for name, bank in self._registry:
            with bank.lock:
                count = 0
                for space in bank:
                    if space.is_expired(cutoff):
                        space.release()
                        count += 1
                if count:
                    self._update_free_gauge(name, bank.free_count())
            released[name] = count
            if count:
                if self._metrics:
                    self._metrics.inc_counter(
                        EXPIRED_RESERVATIONS_TOTAL, count, labels={"conference": name}
                    )

        total = sum(released.values())
        if total > 0:
            logger.info(
                "Released %d expired reservations (older than %.1f seconds)",
                total,
                self._config.reservation_ttl,
            )
        if self._metrics:
            self._metrics.observe_histogram(
                SWEEP_DURATION_SECONDS, time.perf_counter() - started
            )
        return released

    # === Queries ===

    def check_availability(self, conference: str) -> int:
        """
        Count FREE spaces in a conference, including those under the floor.

        Raises:
            ConferenceNotFoundError: If the conference does not exist
        """
        bank = self._registry.get(conference)
        with bank.lock:
            return bank.free_count()

    def check_customer(self, conference: str, index: int) -> int:
        """
        Return the owner id of a space, 0 if nobody holds it.

        Raises:
            IndexOutOfRangeError: If index is outside [0, max_size)
            ConferenceNotFoundError: If the conference does not exist
        """
        bank, space = self._locate(conference, index)
        with bank.lock:
            return space.owner_id

    def get_stats(self) -> dict[str, Any]:
        """
        Get a JSON-serializable summary of every bank.

        Returns:
            {"max_size": ..., "reserved_floor": ..., "reservation_ttl": ...,
             "conferences": {name: {"free": n, "reserved": n, "purchased": n,
                                    "not_in_use": n, "premium": n,
                                    "reservable": n}}}
        """
        conferences: dict[str, dict[str, int]] = {}
        for name, bank in self._registry:
            with bank.lock:
                counts = bank.state_counts()
            stats = {state.value: count for state, count in counts.items()}
            stats["premium"] = bank.premium
            stats["reservable"] = max(
                0, counts[SpaceState.FREE] - self._registry.reserved_floor
            )
            conferences[name] = stats

        return {
            "max_size": self._registry.max_size,
            "reserved_floor": self._registry.reserved_floor,
            "reservation_ttl": self._config.reservation_ttl,
            "conferences": conferences,
        }

    # === Transitions ===

    def _reserve(self, conference: str, index: int, customer: int) -> bool:
        bank, space = self._locate(conference, index, customer)
        with bank.lock:
            available = bank.free_count()
            if available <= self._registry.reserved_floor:
                raise CapacityExceededError(
                    conference, available, self._registry.reserved_floor
                )
            if space.premium:
                raise PremiumRestrictedError(conference, index)

            if space.state is SpaceState.NOT_IN_USE:
                raise SpaceNotInUseError(conference, index)
            if space.state is SpaceState.FREE:
                space.reserve(customer, self._clock())
                logger.debug(
                    "Reserved space: conference=%s, index=%d, customer=%s",
                    conference,
                    index,
                    customer,
                )
                self._update_free_gauge(conference, available - 1)
                return True
            return space.owner_id == customer

    def _buy(self, conference: str, index: int, customer: int) -> bool:
        bank, space = self._locate(conference, index, customer)
        with bank.lock:
            if space.state is SpaceState.NOT_IN_USE:
                raise SpaceNotInUseError(conference, index)
            if space.state is SpaceState.PURCHASED:
                return space.owner_id == customer
            if space.state is SpaceState.RESERVED and space.owner_id != customer:
                return False

            was_free = space.is_free
            space.purchase(customer)
            logger.debug(
                "Purchased space: conference=%s, index=%d, customer=%s, from=%s",
                conference,
                index,
                customer,
                "free" if was_free else "reserved",
            )
            if was_free:
                self._update_free_gauge(conference, bank.free_count())
            return True

    def _return(self, conference: str, index: int, customer: int) -> None:
        bank, space = self._locate(conference, index, customer)
        with bank.lock:
            if space.state is SpaceState.FREE:
                return
            if space.state is SpaceState.NOT_IN_USE:
                raise SpaceNotInUseError(conference, index)
            if space.state is SpaceState.PURCHASED:
                raise PurchaseIrreversibleError(conference, index)
            if space.owner_id != customer:
                raise OwnershipConflictError(conference, index, customer, space.owner_id)

            space.release()
            logger.debug(
                "Returned space: conference=%s, index=%d, customer=%s",
                conference,
                index,
                customer,
            )
            self._update_free_gauge(conference, bank.free_count())

    # === Helpers ===

    def _locate(
        self, conference: str, index: int, customer: int | None = None
    ) -> tuple[SpaceBank, Space]:
        """Validate index, conference and customer, in that order, and return the space."""
        if not 0 <= index < self._registry.max_size:
            raise IndexOutOfRangeError(index, self._registry.max_size)
        bank = self._registry.get(conference)
        if customer == NO_OWNER:
            raise InvalidCustomerError(customer)
        return bank, bank[index]

    def _run(
        self,
        operation: str,
        conference: str,
        func: Callable[..., T],
        *args: Any,
    ) -> T:
        """Run one operation, recording its outcome and re-raising rejections."""
        label = conference if conference in self._registry else UNKNOWN_CONFERENCE
        try:
            result = func(*args)
        except ReservationError as e:
            logger.debug(
                "Rejected %s on %s: %s (%s)", operation, label, e, type(e).__name__
            )
            if self._metrics:
                self._metrics.inc_counter(
                    OPERATIONS_TOTAL,
                    labels={
                        "conference": label,
                        "operation": operation,
                        "outcome": OUTCOME_REJECTED,
                    },
                )
                self._metrics.inc_counter(
                    REJECTIONS_TOTAL,
                    labels={"conference": label, "reason": type(e).__name__},
                )
            raise

        if self._metrics:
            outcome = OUTCOME_REFUSED if result is False else OUTCOME_GRANTED
            self._metrics.inc_counter(
                OPERATIONS_TOTAL,
                labels={"conference": label, "operation": operation, "outcome": outcome},
            )
        return result

    def _update_free_gauge(self, conference: str, free: int) -> None:
        if self._metrics:
            self._metrics.set_gauge(FREE_SPACES, free, labels={"conference": conference})


def create_engine(
    max_size: int,
    reserved_floor: int,
    conference_names: Sequence[str],
    not_in_use_spaces: Sequence[int],
    premium_spaces: Sequence[int],
    *,
    reservation_ttl: float | None = None,
    clock: Callable[[], float] | None = None,
    metrics_collector: MetricsCollector | None = None,
    config: EngineConfig | None = None,
    **kwargs: Any,
) -> ReservationEngine:
    """
    Factory function to build the registry and engine in one call.

    Args:
        max_size: Number of spaces per conference
        reserved_floor: Free spaces each bank keeps back from reservations
        conference_names: Unique conference names
        not_in_use_spaces: NOT_IN_USE count per conference
        premium_spaces: Premium count per conference
        reservation_ttl: Reservation lifetime in seconds. Overrides
            config.reservation_ttl when given.
        clock: Optional time source, defaults to time.time
        metrics_collector: Optional metrics collector
        config: Optional engine config (will create default if not provided).
            Its dimensions must match max_size and reserved_floor.
        **kwargs: EngineConfig fields to override (sweep_interval, metrics_enabled)

    Returns:
        Configured ReservationEngine instance

    Raises:
        InvalidConfigurationError: If any argument is invalid or config
            disagrees with max_size or reserved_floor
    """
    if config is None:
        config = EngineConfig(
            max_size=max_size,
            reserved_floor=reserved_floor,
            reservation_ttl=DEFAULT_RESERVATION_TTL,
        )

    overrides = dict(kwargs)
    if reservation_ttl is not None:
        overrides["reservation_ttl"] = reservation_ttl
    if overrides:
        try:
            config = replace(config, **overrides)
        except TypeError as e:
            raise InvalidConfigurationError(f"Unknown engine option: {e}") from e

    registry = ReservationRegistry(
        max_size, reserved_floor, conference_names, not_in_use_spaces, premium_spaces
    )
    return ReservationEngine(
        registry,
        config=config,
        clock=clock,
        metrics_collector=metrics_collector,
    )


__all__ = [
    "UNKNOWN_CONFERENCE",
    "ReservationEngine",
    "create_engine",
]
