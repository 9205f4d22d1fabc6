"""
Shared fixtures for the space reservation test suite.

The default layout mirrors the reference scenario: ten spaces per
conference, the first not in use, the second premium, and a reserved
floor of three.
"""

import pytest
from prometheus_client import CollectorRegistry

from space_reservation.engine import EngineConfig, ReservationEngine
from space_reservation.observability import MetricsCollector
from space_reservation.registry import ReservationRegistry

CONFERENCE = "pycon"
OTHER_CONFERENCE = "europython"
MAX_SIZE = 10
RESERVED_FLOOR = 3
TTL = 10.0


class FakeClock:
    """Manually advanced time source for TTL tests."""

    def __init__(self, start: float = 1_700_000_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock():
    """Create a fake clock frozen at a fixed instant."""
    return FakeClock()


@pytest.fixture
def collector():
    """Create a collector bound to a private Prometheus registry."""
    return MetricsCollector(registry=CollectorRegistry())


@pytest.fixture
def registry():
    """Create a two-conference registry with the reference layout."""
    return ReservationRegistry(
        MAX_SIZE,
        RESERVED_FLOOR,
        [CONFERENCE, OTHER_CONFERENCE],
        [1, 1],
        [1, 1],
    )


@pytest.fixture
def engine(registry, clock, collector):
    """Create an engine with a ten second TTL over the reference registry."""
    config = EngineConfig(
        max_size=MAX_SIZE,
        reserved_floor=RESERVED_FLOOR,
        reservation_ttl=TTL,
        sweep_interval=0.01,
    )
    return ReservationEngine(
        registry, config=config, clock=clock, metrics_collector=collector
    )
