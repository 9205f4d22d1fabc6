# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""
Engine Configuration for the space reservation engine.

This module provides the configuration dataclass shared by the engine and
its optional expiry watcher.
"""

from dataclasses import dataclass

from ..exceptions import InvalidConfigurationError
from ..registry.registry import validate_dimensions

DEFAULT_RESERVATION_TTL = 2 * 24 * 60 * 60.0
"""Two days, in seconds."""


@dataclass
class EngineConfig:
    """
    Configuration for a ReservationEngine.

    The per-conference layout (names, not-in-use and premium counts) is not
    part of the config; it is given to the ReservationRegistry.
    """

    # === Bank Dimensions ===

    max_size: int
    """Number of spaces in every conference bank."""

    reserved_floor: int = 0
    """Free spaces each bank keeps back from new reservations."""

    # === Expiry ===

    reservation_ttl: float = DEFAULT_RESERVATION_TTL
    """Age in seconds after which an unpurchased reservation is released."""

    sweep_interval: float = 60.0
    """Interval between sweeps when an ExpiryWatcher drives expiry."""

    # === Metrics and Monitoring ===

    metrics_enabled: bool = True
    """Record operation metrics."""

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        validate_dimensions(self.max_size, self.reserved_floor)
        if self.reservation_ttl <= 0:
            raise InvalidConfigurationError("reservation_ttl must be positive")
        if self.sweep_interval <= 0:
            raise InvalidConfigurationError("sweep_interval must be positive")


__all__ = [
    "DEFAULT_RESERVATION_TTL",
    "EngineConfig",
]
