# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""
Metrics collector backed by prometheus_client with a dict-based mirror.

The MetricsCollector class is the single source of truth for metrics in
the space-reservation library.

Features:
    1. Thread-safe counter/gauge/histogram operations
    2. Lazy Prometheus metric registration against an injectable registry
    3. Dict-based mirror for JSON export and assertions in tests
    4. Label cardinality protection (max 1000 unique combinations per metric)
    5. Optional HTTP server for Prometheus scraping

Usage:
    >>> from space_reservation.observability.collector import get_metrics_collector
    >>> collector = get_metrics_collector()
    >>> collector.inc_counter('space_reservation_operations_total',
    ...                       labels={'conference': 'pycon', 'operation': 'reserve',
    ...                               'outcome': 'granted'})
    >>> metrics = collector.get_metrics()
"""

from __future__ import annotations

import logging
import threading
from collections import defaultdict
from dataclasses import dataclass
from typing import Any, ClassVar

from prometheus_client import (
    REGISTRY,
    CollectorRegistry,
    Counter,
    Gauge,
    Histogram,
    start_http_server,
)

from .constants import (
    EXPIRED_RESERVATIONS_TOTAL,
    FREE_SPACES,
    OPERATIONS_TOTAL,
    REJECTIONS_TOTAL,
    SWEEP_DURATION_BUCKETS,
    SWEEP_DURATION_SECONDS,
    SWEEP_ERRORS_TOTAL,
)

logger = logging.getLogger(__name__)


@dataclass
class MetricDefinition:
    """
    Definition for a metric that can be instantiated.

    This dataclass defines the schema for metrics, including their type,
    description, labels, and histogram buckets.
    """

    name: str
    metric_type: str  # 'counter', 'gauge', 'histogram'
    description: str
    label_names: tuple[str, ...] = ()
    buckets: list[float] | None = None


METRIC_DEFINITIONS: dict[str, MetricDefinition] = {
    OPERATIONS_TOTAL: MetricDefinition(
        OPERATIONS_TOTAL,
        "counter",
        "Total engine operations",
        ("conference", "operation", "outcome"),
    ),
    REJECTIONS_TOTAL: MetricDefinition(
        REJECTIONS_TOTAL,
        "counter",
        "Total operations rejected with an error",
        ("conference", "reason"),
    ),
    EXPIRED_RESERVATIONS_TOTAL: MetricDefinition(
        EXPIRED_RESERVATIONS_TOTAL,
        "counter",
        "Total reservations released by the expiry sweep",
        ("conference",),
    ),
    SWEEP_ERRORS_TOTAL: MetricDefinition(
        SWEEP_ERRORS_TOTAL,
        "counter",
        "Total failed background sweeps",
        (),
    ),
    FREE_SPACES: MetricDefinition(
        FREE_SPACES,
        "gauge",
        "Current free spaces",
        ("conference",),
    ),
    SWEEP_DURATION_SECONDS: MetricDefinition(
        SWEEP_DURATION_SECONDS,
        "histogram",
        "Duration of an expiry sweep",
        (),
        buckets=SWEEP_DURATION_BUCKETS,
    ),
}


class MetricsCollector:
    """
    Thread-safe metrics collector mirroring every update to Prometheus.

    Thread Safety:
        All dict updates use an RLock. Prometheus client objects are
        thread-safe on their own.

    Cardinality Protection:
        At most MAX_LABEL_COMBINATIONS unique label combinations are tracked
        per metric; further combinations are dropped with a warning.

    Example:
        >>> from prometheus_client import CollectorRegistry
        >>> collector = MetricsCollector(registry=CollectorRegistry())
        >>> collector.set_gauge('space_reservation_free_spaces', 7,
        ...                     labels={'conference': 'pycon'})
    """

    MAX_LABEL_COMBINATIONS: ClassVar[int] = 1000

    def __init__(
        self,
        enable_prometheus: bool = True,
        registry: CollectorRegistry | None = None,
    ) -> None:
        """
        Initialize the metrics collector.

        Args:
            enable_prometheus: Whether to register Prometheus metrics
            registry: Optional CollectorRegistry, defaults to the global one
        """
        self._enable_prometheus = enable_prometheus
        self._registry = registry if registry is not None else REGISTRY

        self._counters: dict[str, dict[str, float]] = defaultdict(
            lambda: defaultdict(float)
        )
        self._gauges: dict[str, dict[str, float]] = defaultdict(
            lambda: defaultdict(float)
        )
        self._histograms: dict[str, dict[str, list[float]]] = defaultdict(
            lambda: defaultdict(list)
        )

        self._lock = threading.RLock()

        # Prometheus metric instances (lazy initialized)
        self._prom_metrics: dict[str, Any] = {}

        self._label_combinations: dict[str, set[str]] = defaultdict(set)

        self._server_running = False

        logger.debug(
            "MetricsCollector initialized (prometheus=%s)",
            "enabled" if self._enable_prometheus else "disabled",
        )

    def _labels_to_key(self, labels: dict[str, str] | None) -> str:
        """Convert labels dict to a stable string key."""
        if not labels:
            return ""
        return ",".join(f"{k}={v}" for k, v in sorted(labels.items()))

    def _check_cardinality(self, name: str, label_key: str) -> bool:
        if label_key in self._label_combinations[name]:
            return True
        if len(self._label_combinations[name]) >= self.MAX_LABEL_COMBINATIONS:
            logger.warning(
                "Cardinality limit (%d) reached for metric %s. "
                "Dropping label combination: %s",
                self.MAX_LABEL_COMBINATIONS,
                name,
                label_key,
            )
            return False
        self._label_combinations[name].add(label_key)
        return True

    def _get_or_create_prom_metric(self, name: str, metric_type: str) -> Any | None:
        """Get or create the Prometheus object backing ``name``."""
        if not self._enable_prometheus:
            return None

        with self._lock:
            if name not in self._prom_metrics:
                defn = METRIC_DEFINITIONS.get(name)
                if defn is None or defn.metric_type != metric_type:
                    defn = MetricDefinition(name, metric_type, f"Dynamic {metric_type}: {name}")
                try:
                    if metric_type == "counter":
                        metric: Any = Counter(
                            name,
                            defn.description,
                            list(defn.label_names),
                            registry=self._registry,
                        )
                    elif metric_type == "gauge":
                        metric = Gauge(
                            name,
                            defn.description,
                            list(defn.label_names),
                            registry=self._registry,
                        )
                    else:
                        metric = Histogram(
                            name,
                            defn.description,
                            list(defn.label_names),
                            buckets=defn.buckets or SWEEP_DURATION_BUCKETS,
                            registry=self._registry,
                        )
                except ValueError as e:
                    # Already registered by another collector on the same registry
                    logger.warning(
                        "Failed to create Prometheus %s %s: %s", metric_type, name, e
                    )
                    self._prom_metrics[name] = None
                    return None
                self._prom_metrics[name] = metric

            return self._prom_metrics[name]

    # === Counter Operations ===

    def inc_counter(
        self,
        name: str,
        value: float = 1,
        labels: dict[str, str] | None = None,
    ) -> None:
        """
        Increment a counter metric.

        Args:
            name: Metric name (should follow Prometheus naming convention)
            value: Value to increment by (must be non-negative)
            labels: Optional labels dict

        Raises:
            ValueError: If value is negative
        """
        if value < 0:
            raise ValueError("Counter increment must be non-negative")

        label_key = self._labels_to_key(labels)

        with self._lock:
            if not self._check_cardinality(name, label_key):
                return
            self._counters[name][label_key] += value

        prom_counter = self._get_or_create_prom_metric(name, "counter")
        if prom_counter is not None:
            try:
                if labels:
                    prom_counter.labels(**labels).inc(value)
                else:
                    prom_counter.inc(value)
            except Exception as e:
                logger.debug("Prometheus counter update failed for %s: %s", name, e)

    # === Gauge Operations ===

    def set_gauge(
        self,
        name: str,
        value: float,
        labels: dict[str, str] | None = None,
    ) -> None:
        """Set a gauge metric to a specific value."""
        label_key = self._labels_to_key(labels)

        with self._lock:
            if not self._check_cardinality(name, label_key):
                return
            self._gauges[name][label_key] = value

        prom_gauge = self._get_or_create_prom_metric(name, "gauge")
        if prom_gauge is not None:
            try:
                if labels:
                    prom_gauge.labels(**labels).set(value)
                else:
                    prom_gauge.set(value)
            except Exception as e:
                logger.debug("Prometheus gauge update failed for %s: %s", name, e)

    # === Histogram Operations ===

    def observe_histogram(
        self,
        name: str,
        value: float,
        labels: dict[str, str] | None = None,
    ) -> None:
        """Record an observation in a histogram."""
        label_key = self._labels_to_key(labels)

        with self._lock:
            if not self._check_cardinality(name, label_key):
                return
            observations = self._histograms[name][label_key]
            observations.append(value)
            # Keep only recent observations to prevent memory growth
            if len(observations) > 10000:
                del observations[:-5000]

        prom_histogram = self._get_or_create_prom_metric(name, "histogram")
        if prom_histogram is not None:
            try:
                if labels:
                    prom_histogram.labels(**labels).observe(value)
                else:
                    prom_histogram.observe(value)
            except Exception as e:
                logger.debug("Prometheus histogram update failed for %s: %s", name, e)

    # === Snapshot Operations ===

    def get_counter(self, name: str, labels: dict[str, str] | None = None) -> float:
        """Return the current value of one counter series (0 if never incremented)."""
        with self._lock:
            return self._counters.get(name, {}).get(self._labels_to_key(labels), 0)

    def get_gauge(
        self, name: str, labels: dict[str, str] | None = None
    ) -> float | None:
        """Return the current value of one gauge series, or None if never set."""
        with self._lock:
            return self._gauges.get(name, {}).get(self._labels_to_key(labels))

    def get_metrics(self) -> dict[str, Any]:
        """
        Get a snapshot of all metrics.

        Returns a dict suitable for JSON serialization with structure:
        {
            "counters": {"metric_name": {"label_key": value, ...}, ...},
            "gauges": {"metric_name": {"label_key": value, ...}, ...},
            "histograms": {"metric_name": {"label_key": {...}, ...}, ...}
        }
        """
        with self._lock:
            counters = {
                name: dict(label_values)
                for name, label_values in self._counters.items()
            }
            gauges = {
                name: dict(label_values) for name, label_values in self._gauges.items()
            }

            histograms: dict[str, dict[str, dict[str, Any]]] = {}
            for name, label_values in self._histograms.items():
                histograms[name] = {}
                for label_key, observations in label_values.items():
                    if observations:
                        histograms[name][label_key] = {
                            "count": len(observations),
                            "sum": sum(observations),
                            "avg": sum(observations) / len(observations),
                            "min": min(observations),
                            "max": max(observations),
                        }

        return {
            "counters": counters,
            "gauges": gauges,
            "histograms": histograms,
        }

    # === Lifecycle ===

    def reset(self) -> None:
        """Reset the dict-based mirror. Prometheus series are left untouched."""
        with self._lock:
            self._counters.clear()
            self._gauges.clear()
            self._histograms.clear()
            self._label_combinations.clear()

        logger.debug("Metrics collector reset")

    # === Prometheus HTTP Server ===

    def start_http_server(self, host: str = "127.0.0.1", port: int = 9090) -> bool:
        """
        Start the Prometheus HTTP server for metrics scraping.

        Args:
            host: Host to bind to (default: 127.0.0.1 for localhost only)
            port: Port to bind to

        Returns:
            True if the server is running, False if it could not be started
        """
        if self._server_running:
            logger.warning("Prometheus server already running")
            return True

        try:
            # start_http_server runs in a daemon thread
            start_http_server(port, addr=host, registry=self._registry)
        except OSError as e:
            logger.error("Failed to start Prometheus server: %s", e)
            return False

        self._server_running = True
        logger.info("Prometheus metrics server started on %s:%d", host, port)
        return True

    @property
    def prometheus_enabled(self) -> bool:
        return self._enable_prometheus

    @property
    def server_running(self) -> bool:
        return self._server_running


# =============================================================================
# Singleton Pattern
# =============================================================================

_global_collector: MetricsCollector | None = None
_collector_lock = threading.Lock()


def get_metrics_collector(enable_prometheus: bool = True) -> MetricsCollector:
    """
    Get or create the global metrics collector singleton.

    Args:
        enable_prometheus: Whether to enable Prometheus metrics
            (only used on first call)
    """
    global _global_collector

    if _global_collector is None:
        with _collector_lock:
            if _global_collector is None:
                _global_collector = MetricsCollector(
                    enable_prometheus=enable_prometheus
                )

    return _global_collector


def reset_metrics_collector() -> None:
    """
    Reset the global metrics collector singleton (mainly for testing).

    Warning:
        Prometheus metrics already registered with the global registry stay
        registered. A new singleton reuses nothing and logs a warning for
        each name it cannot register again.
    """
    global _global_collector
    with _collector_lock:
        if _global_collector:
            _global_collector.reset()
        _global_collector = None


__all__ = [
    "METRIC_DEFINITIONS",
    "MetricDefinition",
    "MetricsCollector",
    "get_metrics_collector",
    "reset_metrics_collector",
]
