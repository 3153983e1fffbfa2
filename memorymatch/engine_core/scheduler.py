"""
Scheduler - Injected clock source for timed transitions.

The engine never sleeps. It asks a Scheduler to call it back:
- once, after a resolution delay (match/mismatch)
- repeatedly, once per tick while the session clock runs

Every call returns a TimerHandle that can be cancelled.

Implementations:
- VirtualScheduler: virtual time advanced explicitly (tests, terminal play)
- AsyncioScheduler: event loop call_later (HTTP service)
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Callable
import asyncio
import heapq
import itertools
import logging

logger = logging.getLogger(__name__)

Callback = Callable[[], None]


class TimerHandle(ABC):
    """Cancellation token for a scheduled callback."""

    @abstractmethod
    def cancel(self) -> None:
        """Prevent any further invocation. Safe to call more than once."""

    @property
    @abstractmethod
    def cancelled(self) -> bool:
        ...


class Scheduler(ABC):
    """
    Port interface for timed callbacks.

    Delays and intervals are in milliseconds.
    """

    @abstractmethod
    def schedule_once(self, delay_ms: int, callback: Callback) -> TimerHandle:
        """Call callback once after delay_ms."""

    @abstractmethod
    def schedule_repeating(self, interval_ms: int, callback: Callback) -> TimerHandle:
        """Call callback every interval_ms until cancelled."""


# =============================================================================
# Virtual time
# =============================================================================

@dataclass
class _VirtualTimer(TimerHandle):
    due_ms: int
    callback: Callback
    interval_ms: int | None = None
    _cancelled: bool = False

    def cancel(self) -> None:
        self._cancelled = True

    @property
    def cancelled(self) -> bool:
        return self._cancelled


@dataclass
class VirtualScheduler(Scheduler):
    """
    Deterministic scheduler driven by advance().

    Usage:
        scheduler = VirtualScheduler()
        engine = GameEngine(scheduler)
        engine.flip(0)
        engine.flip(1)
        scheduler.advance(750)  # resolution fires
    """
    now_ms: int = 0
    _queue: list[tuple[int, int, _VirtualTimer]] = field(default_factory=list)
    _seq: itertools.count = field(default_factory=itertools.count)

    def schedule_once(self, delay_ms: int, callback: Callback) -> TimerHandle:
        timer = _VirtualTimer(due_ms=self.now_ms + delay_ms, callback=callback)
        self._push(timer)
        return timer

    def schedule_repeating(self, interval_ms: int, callback: Callback) -> TimerHandle:
        if interval_ms <= 0:
            raise ValueError("interval_ms must be > 0")
        timer = _VirtualTimer(
            due_ms=self.now_ms + interval_ms,
            callback=callback,
            interval_ms=interval_ms,
        )
        self._push(timer)
        return timer

    def advance(self, ms: int) -> int:
        """
        Move virtual time forward by ms, firing everything that comes due.

        Callbacks fire in due-time order (ties in scheduling order), with
        now_ms set to each callback's due time. Returns number fired.
        """
        if ms < 0:
            raise ValueError("Cannot move virtual time backwards")
        target = self.now_ms + ms
        fired = 0

        while self._queue and self._queue[0][0] <= target:
            due, _, timer = heapq.heappop(self._queue)
            if timer.cancelled:
                continue
            self.now_ms = due
            if timer.interval_ms is not None:
                timer.due_ms = due + timer.interval_ms
                self._push(timer)
            timer.callback()
            fired += 1

        self.now_ms = target
        return fired

    def pending_count(self) -> int:
        """Number of live (not cancelled) timers."""
        return sum(1 for _, _, timer in self._queue if not timer.cancelled)

    def _push(self, timer: _VirtualTimer) -> None:
        heapq.heappush(self._queue, (timer.due_ms, next(self._seq), timer))


# =============================================================================
# Event loop
# =============================================================================

class _AsyncioTimer(TimerHandle):
    def __init__(self):
        self._handle: asyncio.TimerHandle | None = None
        self._cancelled = False

    def cancel(self) -> None:
        self._cancelled = True
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    @property
    def cancelled(self) -> bool:
        return self._cancelled


class AsyncioScheduler(Scheduler):
    """
    Scheduler backed by an asyncio event loop.

    Must be used from within the loop's thread. If no loop is given,
    the running loop is looked up at scheduling time.
    """

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None):
        self._loop = loop

    def _get_loop(self) -> asyncio.AbstractEventLoop:
        return self._loop or asyncio.get_running_loop()

    def schedule_once(self, delay_ms: int, callback: Callback) -> TimerHandle:
        timer = _AsyncioTimer()

        def fire():
            timer._handle = None
            if not timer.cancelled:
                callback()

        timer._handle = self._get_loop().call_later(delay_ms / 1000, fire)
        return timer

    def schedule_repeating(self, interval_ms: int, callback: Callback) -> TimerHandle:
        if interval_ms <= 0:
            raise ValueError("interval_ms must be > 0")
        loop = self._get_loop()
        timer = _AsyncioTimer()
        start = loop.time()
        ticks = itertools.count(1)

        def fire():
            if timer.cancelled:
                return
            # Re-arm against the start time so ticks do not drift
            next_due = start + (next(ticks) + 1) * interval_ms / 1000
            timer._handle = loop.call_at(next_due, fire)
            callback()

        timer._handle = loop.call_at(start + interval_ms / 1000, fire)
        return timer
