"""Fixed-cadence tick scheduler that publishes snapshots to consumers."""

import asyncio
import contextlib
import logging
from typing import Callable, Iterable

from telesim.simulation.race import RaceEngine, RaceSnapshot

logger = logging.getLogger(__name__)

Subscriber = Callable[[RaceSnapshot], None]


class TickScheduler:
    """Owns the clock and drives a RaceEngine.

    Each tick advances the engine by the fixed period, replaces the current
    snapshot, then notifies subscribers. Consumers can also poll
    ``snapshot``. ``step``/``run_ticks`` advance synchronously, which is
    how tests feed synthetic dt values.
    """

    def __init__(self, engine: RaceEngine, period_ms: int | None = None):
        """Initialize the scheduler.

        Args:
            engine: Engine to drive
            period_ms: Tick period in milliseconds (defaults to the engine config)
        """
        self.engine = engine
        self.period = (period_ms or engine.config.tick_period_ms) / 1000.0
        self._snapshot = engine.initial_snapshot()
        self._subscribers: list[Subscriber] = []
        self._running = False
        self._paused = False
        self._task: asyncio.Task | None = None

    @property
    def snapshot(self) -> RaceSnapshot:
        """Most recently published snapshot."""
        return self._snapshot

    @property
    def running(self) -> bool:
        return self._running

    @property
    def paused(self) -> bool:
        return self._paused

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """Register a callback for every published snapshot.

        Returns:
            Function that removes the subscription
        """
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def step(self, dt: float | None = None) -> RaceSnapshot:
        """Advance one tick now and publish the result."""
        self._snapshot = self.engine.advance(self._snapshot, self.period if dt is None else dt)
        self._publish(self._snapshot)
        return self._snapshot

    def run_ticks(self, count: int, dt: float | None = None) -> RaceSnapshot:
        """Advance ``count`` ticks synchronously."""
        for _ in range(count):
            self.step(dt)
        return self._snapshot

    def run_sequence(self, dts: Iterable[float]) -> RaceSnapshot:
        """Advance one tick per dt value."""
        for dt in dts:
            self.step(dt)
        return self._snapshot

    def _publish(self, snapshot: RaceSnapshot) -> None:
        for callback in list(self._subscribers):
            try:
                callback(snapshot)
            except Exception:
                logger.exception("Snapshot subscriber %r failed", callback)

    async def start(self) -> None:
        """Start ticking in the background."""
        if self._running:
            return

        self._running = True
        self._paused = False
        self._task = asyncio.create_task(self._tick_loop())
        logger.info("Scheduler started (period %.0f ms)", self.period * 1000)

    async def stop(self) -> None:
        """Stop ticking. No further snapshots are published."""
        self._running = False
        if self._task:
            self._task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._task
            self._task = None
            logger.info("Scheduler stopped at tick %d", self._snapshot.tick)

    def pause(self) -> None:
        """Hold the simulation; the clock keeps running."""
        if self._running and not self._paused:
            self._paused = True
            logger.info("Scheduler paused at tick %d", self._snapshot.tick)

    def resume(self) -> None:
        if self._paused:
            self._paused = False
            logger.info("Scheduler resumed at tick %d", self._snapshot.tick)

    async def _tick_loop(self) -> None:
        loop = asyncio.get_running_loop()
        next_tick = loop.time() + self.period

        while self._running:
            delay = next_tick - loop.time()
            if delay > 0:
                await asyncio.sleep(delay)
            else:
                await asyncio.sleep(0)
                if delay < -self.period:
                    # Fell behind; drop missed ticks instead of bursting
                    next_tick = loop.time()
            next_tick += self.period

            if self._paused:
                continue
            self.step()
