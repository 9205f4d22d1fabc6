# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""
Metric name constants following Prometheus naming conventions.

All metric names use the `space_reservation_` prefix.

Naming Conventions:
    - Counter metrics end with `_total`
    - Histogram metrics for time end with `_seconds`
    - Gauges use present-tense descriptive names

Label Best Practices:
    To prevent label cardinality explosion, use only:
    - `conference` - Bank name (fixed at engine construction)
    - `operation` - Engine operation (reserve, buy, return)
    - `outcome` - granted, refused, rejected
    - `reason` - Error kind of a rejected operation

    NEVER use:
    - `customer` - Unique per customer (unbounded!)
    - `index` - One series per space
"""


METRIC_PREFIX = "space_reservation"
"""Prefix for all Prometheus metrics in this library."""


# =============================================================================
# Operation Metrics (engine/engine.py)
# =============================================================================

OPERATIONS_TOTAL = f"{METRIC_PREFIX}_operations_total"
"""Total engine operations by conference, operation and outcome."""

REJECTIONS_TOTAL = f"{METRIC_PREFIX}_rejections_total"
"""Total operations rejected with an error, by reason."""

FREE_SPACES = f"{METRIC_PREFIX}_free_spaces"
"""Current number of FREE spaces per conference."""


# =============================================================================
# Expiry Metrics (engine/engine.py, engine/watcher.py)
# =============================================================================

EXPIRED_RESERVATIONS_TOTAL = f"{METRIC_PREFIX}_expired_reservations_total"
"""Total reservations released by the expiry sweep."""

SWEEP_DURATION_SECONDS = f"{METRIC_PREFIX}_sweep_duration_seconds"
"""Duration of a full expiry sweep over the registry."""

SWEEP_ERRORS_TOTAL = f"{METRIC_PREFIX}_sweep_errors_total"
"""Total sweeps that failed inside the background watcher."""


# =============================================================================
# Label values
# =============================================================================

OUTCOME_GRANTED = "granted"
OUTCOME_REFUSED = "refused"
OUTCOME_REJECTED = "rejected"


# =============================================================================
# Histogram Buckets
# =============================================================================

SWEEP_DURATION_BUCKETS = [0.0001, 0.0005, 0.001, 0.005, 0.01, 0.05, 0.1, 0.5, 1.0]
"""Buckets for sweep duration (seconds)."""


__all__ = [
    "EXPIRED_RESERVATIONS_TOTAL",
    "FREE_SPACES",
    "METRIC_PREFIX",
    "OPERATIONS_TOTAL",
    "OUTCOME_GRANTED",
    "OUTCOME_REFUSED",
    "OUTCOME_REJECTED",
    "REJECTIONS_TOTAL",
    "SWEEP_DURATION_BUCKETS",
    "SWEEP_DURATION_SECONDS",
    "SWEEP_ERRORS_TOTAL",
]
