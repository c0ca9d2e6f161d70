# Area: Sync
"""
gameshow_sync._sync.timer — Shared countdown coordination
=========================================================

The countdown is one shared field pair (timer, is_timer_running).
Any client may start or stop it through the reconciler; concurrent
starts and stops resolve last-write-wins like every other field.

Exactly one client per session drives the countdown: it runs the
driver task, which dispatches TICK_TIMER once per tick interval while
the timer runs and broadcasts the result. Everyone else just renders
what arrives. Accuracy is whole seconds, best effort.
"""

import asyncio
import logging
from typing import Optional

from .._core.actions import StartTimer, StopTimer, TickTimer
from .._core.state import GameState
from .._shared.config import TICK_INTERVAL_SECONDS
from ..errors import GameShowError
from .reconciler import Reconciler

logger = logging.getLogger("gameshow_sync.sync.timer")


class TimerCoordinator:
    """
    Starts, stops and (on the driving client) ticks the shared timer.

    Args:
        reconciler: Path for local changes (dispatch + broadcast)
        tick_interval: Seconds between ticks on the driving client
    """

    def __init__(self, reconciler: Reconciler, tick_interval: float = TICK_INTERVAL_SECONDS):
        self.reconciler = reconciler
        self.tick_interval = tick_interval
        self._driver_task: Optional[asyncio.Task] = None

    @property
    def driving(self) -> bool:
        return self._driver_task is not None and not self._driver_task.done()

    def start(self, duration: int) -> GameState:
        logger.info(f"Timer started: {duration}s")
        return self.reconciler.apply_local(StartTimer(duration=duration))

    def stop(self) -> GameState:
        logger.info("Timer stopped")
        return self.reconciler.apply_local(StopTimer())

    def tick(self) -> GameState:
        """Advance the countdown one step if it is running."""
        state = self.reconciler.store.state
        if not state.is_timer_running:
            return state
        state = self.reconciler.apply_local(TickTimer())
        if not state.is_timer_running:
            logger.info("Timer reached zero")
        return state

    async def run_driver(self) -> None:
        """Tick forever at the configured interval (cancel to stop)."""
        while True:
            await asyncio.sleep(self.tick_interval)
            try:
                self.tick()
            except GameShowError as e:
                logger.warning(f"Tick rejected: {e}")

    def start_driver(self) -> None:
        """Start the driver task. No-op if already driving."""
        if self.driving:
            return
        self._driver_task = asyncio.create_task(self.run_driver(), name="timer-driver")
        logger.debug(f"Timer driver running every {self.tick_interval}s")

    async def stop_driver(self) -> None:
        """Cancel and await the driver task. Safe to call repeatedly."""
        task, self._driver_task = self._driver_task, None
        if task is None:
            return
        if not task.done():
            task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
        logger.debug("Timer driver stopped")
