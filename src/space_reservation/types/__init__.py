# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""Type definitions and constants."""

from .space import NO_OWNER, Space, SpaceState

__all__ = [
    "NO_OWNER",
    "Space",
    "SpaceState",
]
