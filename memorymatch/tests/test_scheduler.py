"""
Tests for the scheduler implementations.
"""

import asyncio

import pytest

from ..engine_core import AsyncioScheduler, VirtualScheduler


class TestVirtualScheduler:
    """Tests for VirtualScheduler."""

    def test_once_fires_at_due_time(self):
        """One-shot callback fires when its delay has elapsed."""
        scheduler = VirtualScheduler()
        fired = []
        scheduler.schedule_once(100, lambda: fired.append(scheduler.now_ms))

        scheduler.advance(99)
        assert fired == []
        scheduler.advance(1)
        assert fired == [100]

        scheduler.advance(500)
        assert fired == [100]

    def test_repeating(self):
        """Repeating callback fires once per interval."""
        scheduler = VirtualScheduler()
        fired = []
        scheduler.schedule_repeating(1000, lambda: fired.append(scheduler.now_ms))

        scheduler.advance(3500)
        assert fired == [1000, 2000, 3000]

    def test_order_by_due_time_then_schedule_order(self):
        """Callbacks fire in due order, ties in scheduling order."""
        scheduler = VirtualScheduler()
        fired = []
        scheduler.schedule_once(200, lambda: fired.append("b"))
        scheduler.schedule_once(100, lambda: fired.append("a"))
        scheduler.schedule_once(200, lambda: fired.append("c"))

        scheduler.advance(200)
        assert fired == ["a", "b", "c"]

    def test_cancel(self):
        """Cancelled timers never fire."""
        scheduler = VirtualScheduler()
        fired = []
        once = scheduler.schedule_once(100, lambda: fired.append("once"))
        every = scheduler.schedule_repeating(50, lambda: fired.append("every"))

        once.cancel()
        every.cancel()
        every.cancel()
        scheduler.advance(1000)

        assert fired == []
        assert once.cancelled
        assert scheduler.pending_count() == 0

    def test_cancel_from_own_callback(self):
        """A repeating timer can stop itself."""
        scheduler = VirtualScheduler()
        fired = []

        def callback():
            fired.append(scheduler.now_ms)
            if len(fired) == 2:
                handle.cancel()

        handle = scheduler.schedule_repeating(10, callback)
        scheduler.advance(100)
        assert fired == [10, 20]

    def test_callback_can_schedule(self):
        """Timers scheduled inside a callback fire in the same advance."""
        scheduler = VirtualScheduler()
        fired = []
        scheduler.schedule_once(
            10, lambda: scheduler.schedule_once(10, lambda: fired.append(scheduler.now_ms)),
        )
        scheduler.advance(30)
        assert fired == [20]

    def test_advance_backwards_rejected(self):
        with pytest.raises(ValueError):
            VirtualScheduler().advance(-1)


class TestAsyncioScheduler:
    """Tests for AsyncioScheduler on a real event loop."""

    def test_once_and_cancel(self):
        """One-shot fires; cancelled one does not."""
        fired = []

        async def scenario():
            scheduler = AsyncioScheduler()
            scheduler.schedule_once(10, lambda: fired.append("kept"))
            dropped = scheduler.schedule_once(10, lambda: fired.append("dropped"))
            dropped.cancel()
            await asyncio.sleep(0.05)

        asyncio.run(scenario())
        assert fired == ["kept"]

    def test_repeating_stops_on_cancel(self):
        """Repeating timer fires until cancelled."""
        fired = []

        async def scenario():
            scheduler = AsyncioScheduler()
            handle = scheduler.schedule_repeating(10, lambda: fired.append(1))
            await asyncio.sleep(0.055)
            handle.cancel()
            count = len(fired)
            await asyncio.sleep(0.05)
            return count

        count = asyncio.run(scenario())
        assert count >= 2
        assert len(fired) == count

    def test_requires_running_loop(self):
        """Without a loop, scheduling fails loudly."""
        with pytest.raises(RuntimeError):
            AsyncioScheduler().schedule_once(10, lambda: None)
