# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""
Reservation engine and its configuration.

This module provides:
- EngineConfig: Configuration for engine behavior
- ReservationEngine: reserve, buy, return, expire and query operations
- create_engine: Factory building registry and engine together
- ExpiryWatcher: Optional asyncio task running the expiry sweep
"""

from .config import DEFAULT_RESERVATION_TTL, EngineConfig
from .engine import UNKNOWN_CONFERENCE, ReservationEngine, create_engine
from .watcher import ExpiryWatcher

__all__ = [
    "DEFAULT_RESERVATION_TTL",
    # Config
    "EngineConfig",
    # Watcher
    "ExpiryWatcher",
    # Engine
    "ReservationEngine",
    "UNKNOWN_CONFERENCE",
    "create_engine",
]
