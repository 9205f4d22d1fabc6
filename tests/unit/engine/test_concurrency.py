"""Concurrent access tests: per-bank locking keeps every invariant."""

import threading
from concurrent.futures import ThreadPoolExecutor

import pytest
from prometheus_client import CollectorRegistry

from space_reservation.engine import create_engine
from space_reservation.exceptions import CapacityExceededError
from space_reservation.observability import MetricsCollector

THREADS = 32


@pytest.fixture
def collector():
    return MetricsCollector(registry=CollectorRegistry())


def run_together(count, func):
    """Run func(i) for i in range(count) on threads released at the same time."""
    barrier = threading.Barrier(count)

    def worker(i):
        barrier.wait()
        try:
            return func(i)
        except CapacityExceededError as e:
            return e

    with ThreadPoolExecutor(max_workers=count) as pool:
        return list(pool.map(worker, range(count)))


class TestConcurrentReservations:
    """Races on a single space and on the floor."""

    def test_one_winner_per_space(self, collector):
        engine = create_engine(10, 0, ["a"], [0], [0], metrics_collector=collector)

        results = run_together(
            THREADS, lambda i: engine.reserve_space("a", 0, customer=i + 1)
        )

        assert results.count(True) == 1
        assert results.count(False) == THREADS - 1
        winner = results.index(True) + 1
        assert engine.check_customer("a", 0) == winner

    def test_floor_never_breached(self, collector):
        engine = create_engine(
            THREADS, 8, ["a"], [0], [0], metrics_collector=collector
        )

        results = run_together(
            THREADS, lambda i: engine.reserve_space("a", i, customer=i + 1)
        )

        granted = [r for r in results if r is True]
        rejected = [r for r in results if isinstance(r, CapacityExceededError)]
        assert len(granted) == THREADS - 8
        assert len(rejected) == 8
        assert engine.check_availability("a") == 8

    def test_concurrent_buy_and_reserve(self, collector):
        engine = create_engine(10, 0, ["a"], [0], [0], metrics_collector=collector)

        def contend(i):
            if i % 2:
                return engine.buy_space("a", 3, customer=i + 1)
            return engine.reserve_space("a", 3, customer=i + 1)

        results = run_together(THREADS, contend)

        assert results.count(True) == 1
        assert engine.registry.check_invariants() == []
        owner = engine.check_customer("a", 3)
        assert owner != 0

    def test_sweep_races_with_operations(self, collector):
        now = [0.0]
        engine = create_engine(
            THREADS,
            0,
            ["a"],
            [0],
            [0],
            reservation_ttl=1.0,
            clock=lambda: now[0],
            metrics_collector=collector,
        )
        for index in range(THREADS):
            engine.reserve_space("a", index, customer=index + 1)
        now[0] = 10.0

        def contend(i):
            if i % 4 == 0:
                engine.cancel_reservations()
                return None
            return engine.buy_space("a", i, customer=i + 1)

        run_together(THREADS, contend)

        assert engine.registry.check_invariants() == []
        for index in range(THREADS):
            if index % 4:
                assert engine.check_customer("a", index) == index + 1
