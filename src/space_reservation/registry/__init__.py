# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""
Registry of per-conference space banks.

Exports:
    SpaceBank: Fixed-length inventory of spaces for one conference
    ReservationRegistry: Name-keyed collection of banks with shared dimensions
    validate_dimensions: Validate bank size and reserved floor
    validate_layout: Validate a full per-conference layout
"""

from .bank import SpaceBank
from .registry import ReservationRegistry, validate_dimensions, validate_layout

__all__ = [
    "ReservationRegistry",
    "SpaceBank",
    "validate_dimensions",
    "validate_layout",
]
