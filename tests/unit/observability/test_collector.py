"""
Unit tests for MetricsCollector.

Tests cover:
- Counter, gauge and histogram operations
- Prometheus registration against a private registry
- Label cardinality protection
- Singleton lifecycle
"""

from __future__ import annotations

import logging
import threading
from unittest.mock import patch

import pytest
from prometheus_client import CollectorRegistry

from space_reservation.observability.collector import (
    METRIC_DEFINITIONS,
    MetricsCollector,
    get_metrics_collector,
    reset_metrics_collector,
)
from space_reservation.observability.constants import (
    FREE_SPACES,
    OPERATIONS_TOTAL,
    SWEEP_DURATION_SECONDS,
)


@pytest.fixture
def registry() -> CollectorRegistry:
    return CollectorRegistry()


@pytest.fixture
def collector(registry: CollectorRegistry) -> MetricsCollector:
    return MetricsCollector(registry=registry)


# =============================================================================
# Initialization Tests
# =============================================================================


class TestInitialization:
    """Test MetricsCollector initialization."""

    def test_prometheus_enabled_by_default(self, registry: CollectorRegistry) -> None:
        collector = MetricsCollector(registry=registry)
        assert collector.prometheus_enabled is True
        assert collector.server_running is False

    def test_prometheus_disabled(self) -> None:
        collector = MetricsCollector(enable_prometheus=False)
        collector.inc_counter(OPERATIONS_TOTAL)
        assert collector.get_counter(OPERATIONS_TOTAL) == 1
        assert collector._prom_metrics == {}

    def test_lock_is_reentrant(self, collector: MetricsCollector) -> None:
        assert isinstance(collector._lock, type(threading.RLock()))

    def test_definitions_cover_labels(self) -> None:
        assert METRIC_DEFINITIONS[OPERATIONS_TOTAL].label_names == (
            "conference",
            "operation",
            "outcome",
        )
        assert METRIC_DEFINITIONS[SWEEP_DURATION_SECONDS].metric_type == "histogram"


# =============================================================================
# Counter Operations Tests
# =============================================================================


class TestCounterOperations:
    """Test counter operations."""

    def test_inc_counter(self, collector: MetricsCollector) -> None:
        labels = {"conference": "a", "operation": "buy", "outcome": "granted"}
        collector.inc_counter(OPERATIONS_TOTAL, labels=labels)
        collector.inc_counter(OPERATIONS_TOTAL, 2, labels=labels)

        assert collector.get_counter(OPERATIONS_TOTAL, labels) == 3

    def test_counter_exported_to_prometheus(
        self, collector: MetricsCollector, registry: CollectorRegistry
    ) -> None:
        labels = {"conference": "a", "operation": "buy", "outcome": "granted"}
        collector.inc_counter(OPERATIONS_TOTAL, labels=labels)

        assert registry.get_sample_value(OPERATIONS_TOTAL, labels) == 1.0

    def test_negative_increment_rejected(self, collector: MetricsCollector) -> None:
        with pytest.raises(ValueError, match="non-negative"):
            collector.inc_counter(OPERATIONS_TOTAL, -1)

    def test_unknown_counter_series_is_zero(self, collector: MetricsCollector) -> None:
        assert collector.get_counter("nothing_total") == 0

    def test_dynamic_counter(
        self, collector: MetricsCollector, registry: CollectorRegistry
    ) -> None:
        collector.inc_counter("space_reservation_custom_total")
        assert registry.get_sample_value("space_reservation_custom_total") == 1.0


# =============================================================================
# Gauge and Histogram Tests
# =============================================================================


class TestGaugeOperations:
    """Test gauge operations."""

    def test_set_gauge(
        self, collector: MetricsCollector, registry: CollectorRegistry
    ) -> None:
        collector.set_gauge(FREE_SPACES, 7, labels={"conference": "a"})
        collector.set_gauge(FREE_SPACES, 5, labels={"conference": "a"})

        assert collector.get_gauge(FREE_SPACES, {"conference": "a"}) == 5
        assert registry.get_sample_value(FREE_SPACES, {"conference": "a"}) == 5.0

    def test_unset_gauge_is_none(self, collector: MetricsCollector) -> None:
        assert collector.get_gauge(FREE_SPACES, {"conference": "a"}) is None


class TestHistogramOperations:
    """Test histogram operations."""

    def test_observe_histogram(
        self, collector: MetricsCollector, registry: CollectorRegistry
    ) -> None:
        collector.observe_histogram(SWEEP_DURATION_SECONDS, 0.002)
        collector.observe_histogram(SWEEP_DURATION_SECONDS, 0.004)

        summary = collector.get_metrics()["histograms"][SWEEP_DURATION_SECONDS][""]
        assert summary["count"] == 2
        assert summary["min"] == 0.002
        assert summary["max"] == 0.004
        assert registry.get_sample_value(f"{SWEEP_DURATION_SECONDS}_count") == 2.0

    def test_observations_are_bounded(self) -> None:
        collector = MetricsCollector(enable_prometheus=False)
        for _ in range(10001):
            collector.observe_histogram(SWEEP_DURATION_SECONDS, 0.001)

        summary = collector.get_metrics()["histograms"][SWEEP_DURATION_SECONDS][""]
        assert summary["count"] == 5000


# =============================================================================
# Cardinality and Registration Tests
# =============================================================================


class TestCardinality:
    """Label cardinality protection."""

    def test_combinations_beyond_limit_dropped(self) -> None:
        collector = MetricsCollector(enable_prometheus=False)
        with patch.object(MetricsCollector, "MAX_LABEL_COMBINATIONS", 2):
            for name in ("a", "b", "c"):
                collector.set_gauge(FREE_SPACES, 1, labels={"conference": name})

        gauges = collector.get_metrics()["gauges"][FREE_SPACES]
        assert set(gauges) == {"conference=a", "conference=b"}


class TestRegistration:
    """Two collectors sharing one Prometheus registry."""

    def test_duplicate_registration_falls_back_to_dict_only(
        self, registry: CollectorRegistry, caplog: pytest.LogCaptureFixture
    ) -> None:
        first = MetricsCollector(registry=registry)
        second = MetricsCollector(registry=registry)

        first.set_gauge(FREE_SPACES, 3, labels={"conference": "a"})
        second.set_gauge(FREE_SPACES, 4, labels={"conference": "a"})

        assert second.get_gauge(FREE_SPACES, {"conference": "a"}) == 4
        assert registry.get_sample_value(FREE_SPACES, {"conference": "a"}) == 3.0
        assert "Failed to create Prometheus gauge" in caplog.text


class TestLabelMismatch:
    """Label sets that do not fit the Prometheus definition."""

    def test_missing_labels_on_labelled_counter(
        self,
        collector: MetricsCollector,
        registry: CollectorRegistry,
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        with caplog.at_level(
            logging.DEBUG, logger="space_reservation.observability.collector"
        ):
            collector.inc_counter(OPERATIONS_TOTAL)

        assert collector.get_counter(OPERATIONS_TOTAL) == 1
        assert registry.get_sample_value(OPERATIONS_TOTAL) is None
        assert "Prometheus counter update failed" in caplog.text

    def test_wrong_labels_on_labelled_gauge(
        self, collector: MetricsCollector, registry: CollectorRegistry
    ) -> None:
        collector.set_gauge(FREE_SPACES, 4, labels={"bank": "a"})

        assert collector.get_gauge(FREE_SPACES, {"bank": "a"}) == 4
        assert registry.get_sample_value(FREE_SPACES, {"bank": "a"}) is None

    def test_labels_on_unlabelled_histogram(
        self, collector: MetricsCollector, registry: CollectorRegistry
    ) -> None:
        collector.observe_histogram(
            SWEEP_DURATION_SECONDS, 0.01, labels={"conference": "a"}
        )

        summary = collector.get_metrics()["histograms"][SWEEP_DURATION_SECONDS]
        assert summary["conference=a"]["count"] == 1
        assert registry.get_sample_value(f"{SWEEP_DURATION_SECONDS}_count") == 0.0

    def test_valid_update_after_mismatch(
        self, collector: MetricsCollector, registry: CollectorRegistry
    ) -> None:
        labels = {"conference": "a", "operation": "reserve", "outcome": "granted"}
        collector.inc_counter(OPERATIONS_TOTAL)
        collector.inc_counter(OPERATIONS_TOTAL, labels=labels)

        assert registry.get_sample_value(OPERATIONS_TOTAL, labels) == 1.0


class TestSnapshotAndReset:
    """get_metrics and reset."""

    def test_reset_clears_mirror(self, collector: MetricsCollector) -> None:
        collector.inc_counter(OPERATIONS_TOTAL)
        collector.set_gauge(FREE_SPACES, 1)
        collector.reset()

        assert collector.get_metrics() == {
            "counters": {},
            "gauges": {},
            "histograms": {},
        }


class TestSingleton:
    """Global collector lifecycle."""

    def test_singleton_reused_until_reset(self) -> None:
        reset_metrics_collector()
        try:
            first = get_metrics_collector(enable_prometheus=False)
            assert get_metrics_collector() is first

            reset_metrics_collector()
            assert get_metrics_collector(enable_prometheus=False) is not first
        finally:
            reset_metrics_collector()


class TestHttpServer:
    """Prometheus HTTP server startup."""

    def test_start_http_server(self, collector: MetricsCollector) -> None:
        with patch(
            "space_reservation.observability.collector.start_http_server"
        ) as start:
            assert collector.start_http_server(port=9999) is True
            assert collector.start_http_server(port=9999) is True

        start.assert_called_once_with(9999, addr="127.0.0.1", registry=collector._registry)
        assert collector.server_running

    def test_start_http_server_failure(self, collector: MetricsCollector) -> None:
        with patch(
            "space_reservation.observability.collector.start_http_server",
            side_effect=OSError("address in use"),
        ):
            assert collector.start_http_server(port=9999) is False
        assert not collector.server_running
