# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""ExpiryWatcher for running the expiry sweep on a fixed interval."""

from __future__ import annotations

import asyncio
import contextlib
import logging

from ..exceptions import InvalidConfigurationError
from ..observability.constants import SWEEP_ERRORS_TOTAL
from .engine import ReservationEngine

logger = logging.getLogger(__name__)


class ExpiryWatcher:
    """
    Periodically calls ``engine.expire_stale()`` from an asyncio task.

    The engine never starts a watcher on its own; expiry stays caller-driven.
    Services that want hands-off expiry create one and call ``start()``.

    Each sweep runs in a worker thread via ``asyncio.to_thread``.

    Example:
        watcher = ExpiryWatcher(engine)
        async with watcher:
            await serve_forever()
    """

    def __init__(self, engine: ReservationEngine, interval: float | None = None):
        """
        Initialize the watcher.

        Args:
            engine: The engine to sweep
            interval: Seconds between sweeps (default: engine.config.sweep_interval)
        """
        self._engine = engine
        self._interval = interval if interval is not None else engine.config.sweep_interval
        if self._interval <= 0:
            raise InvalidConfigurationError("interval must be positive")

        self._task: asyncio.Task[None] | None = None
        self._running = False
        self._sweeps = 0

    @property
    def interval(self) -> float:
        return self._interval

    @property
    def running(self) -> bool:
        return self._running

    @property
    def sweep_count(self) -> int:
        """Number of sweeps completed since creation."""
        return self._sweeps

    async def start(self) -> None:
        """Start the background sweep task."""
        if self._running:
            return

        self._running = True
        self._task = asyncio.create_task(self._sweep_loop())
        logger.debug("ExpiryWatcher started (interval=%.1fs)", self._interval)

    async def stop(self) -> None:
        """Stop the background sweep task."""
        if not self._running:
            return

        self._running = False
        if self._task:
            self._task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._task
            self._task = None
        logger.debug("ExpiryWatcher stopped")

    async def __aenter__(self) -> ExpiryWatcher:
        await self.start()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.stop()

    async def sweep_once(self) -> dict[str, int]:
        """Run a single sweep off the event loop and return what it released."""
        released = await asyncio.to_thread(self._engine.expire_stale)
        self._sweeps += 1
        return released

    async def _sweep_loop(self) -> None:
        while self._running:
            try:
                await asyncio.sleep(self._interval)
                if self._running:
                    await self.sweep_once()
            except asyncio.CancelledError:
                break
            except Exception as e:
                logger.exception("Error in expiry sweep: %s", e)
                metrics = self._engine.metrics_collector
                if metrics:
                    metrics.inc_counter(SWEEP_ERRORS_TOTAL)


__all__ = ["ExpiryWatcher"]
