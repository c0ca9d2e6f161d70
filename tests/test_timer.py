# Area: Sync Tests
"""Tests for TimerCoordinator."""

import asyncio

from gameshow_sync._core.store import GameStore
from gameshow_sync._sync.memory_transport import InMemoryHub, InMemorySyncChannel
from gameshow_sync._sync.reconciler import Reconciler
from gameshow_sync._sync.timer import TimerCoordinator


def _coordinator(hub=None, participant_id="host-desktop", tick_interval=0.01):
    hub = hub or InMemoryHub()
    reconciler = Reconciler(GameStore(), InMemorySyncChannel(hub, "G1", participant_id))
    return TimerCoordinator(reconciler, tick_interval=tick_interval)


class TestTimerCommands:
    """start/stop/tick without the driver."""

    def test_start_sets_running(self):
        async def scenario():
            timer = _coordinator()
            return timer.start(30)

        state = asyncio.run(scenario())
        assert state.timer == 30
        assert state.is_timer_running is True

    def test_tick_counts_down_to_zero(self):
        async def scenario():
            timer = _coordinator()
            timer.start(2)
            timer.tick()
            last = timer.tick()
            return last, timer.reconciler._outbound.qsize()

        state, queued = asyncio.run(scenario())
        assert state.timer == 0
        assert state.is_timer_running is False
        assert queued == 3

    def test_tick_when_not_running_is_noop(self):
        async def scenario():
            timer = _coordinator()
            timer.tick()
            return timer.reconciler._outbound.qsize()

        assert asyncio.run(scenario()) == 0

    def test_stop_zeroes_timer(self):
        async def scenario():
            timer = _coordinator()
            timer.start(10)
            return timer.stop()

        state = asyncio.run(scenario())
        assert state.timer == 0
        assert state.is_timer_running is False


class TestTimerDriver:
    """The driving client ticks and broadcasts; others render."""

    def test_driver_runs_countdown_and_peer_follows(self):
        async def scenario():
            hub = InMemoryHub()
            driver = _coordinator(hub, "host-desktop")
            viewer = Reconciler(GameStore(), InMemorySyncChannel(hub, "G1", "player-a"))
            await driver.reconciler.start()
            await viewer.start()

            driver.start(3)
            driver.start_driver()
            driver.start_driver()
            for _ in range(200):
                if not driver.reconciler.store.state.is_timer_running:
                    break
                await asyncio.sleep(0.01)
            await driver.stop_driver()
            await driver.stop_driver()
            for _ in range(3):
                await asyncio.sleep(0.01)
                await driver.reconciler.drain()
                await viewer.drain()
            await driver.reconciler.stop()
            await viewer.stop()
            return driver, viewer

        driver, viewer = asyncio.run(scenario())
        assert driver.driving is False
        assert driver.reconciler.store.state.timer == 0
        assert viewer.store.state.timer == 0
        assert viewer.store.state.is_timer_running is False

    def test_remote_stop_halts_driver_ticks(self):
        """A stop from another client wins; the driver stops ticking."""
        async def scenario():
            hub = InMemoryHub()
            driver = _coordinator(hub, "host-desktop", tick_interval=0.02)
            other = _coordinator(hub, "host-mobile")
            await driver.reconciler.start()
            await other.reconciler.start()

            driver.start(100)
            driver.start_driver()
            await asyncio.sleep(0.05)
            other.stop()
            for _ in range(5):
                await asyncio.sleep(0.01)
                await other.reconciler.drain()
                await driver.reconciler.drain()
            stopped_at = driver.reconciler.store.state
            await asyncio.sleep(0.06)
            after = driver.reconciler.store.state
            await driver.stop_driver()
            await driver.reconciler.stop()
            await other.reconciler.stop()
            return stopped_at, after

        stopped_at, after = asyncio.run(scenario())
        assert stopped_at.is_timer_running is False
        assert after == stopped_at
