# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""
Observability and metrics for the space reservation engine.

Classes:
    MetricsCollector: Thread-safe collector mirroring metrics to Prometheus.
    MetricDefinition: Schema of a pre-defined metric.

Functions:
    get_metrics_collector: Get the global metrics collector singleton.
    reset_metrics_collector: Reset the global metrics collector singleton.

Constants:
    All metric name constants from constants module.
"""

from .collector import (
    METRIC_DEFINITIONS,
    MetricDefinition,
    MetricsCollector,
    get_metrics_collector,
    reset_metrics_collector,
)
from .constants import (
    EXPIRED_RESERVATIONS_TOTAL,
    FREE_SPACES,
    METRIC_PREFIX,
    OPERATIONS_TOTAL,
    OUTCOME_GRANTED,
    OUTCOME_REFUSED,
    OUTCOME_REJECTED,
    REJECTIONS_TOTAL,
    SWEEP_DURATION_BUCKETS,
    SWEEP_DURATION_SECONDS,
    SWEEP_ERRORS_TOTAL,
)

__all__ = [
    "EXPIRED_RESERVATIONS_TOTAL",
    "FREE_SPACES",
    "METRIC_DEFINITIONS",
    "METRIC_PREFIX",
    "OPERATIONS_TOTAL",
    "OUTCOME_GRANTED",
    "OUTCOME_REFUSED",
    "OUTCOME_REJECTED",
    "REJECTIONS_TOTAL",
    "SWEEP_DURATION_BUCKETS",
    "SWEEP_DURATION_SECONDS",
    "SWEEP_ERRORS_TOTAL",
    "MetricDefinition",
    "MetricsCollector",
    "get_metrics_collector",
    "reset_metrics_collector",
]
