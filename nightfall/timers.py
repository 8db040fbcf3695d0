"""Cooperative timers: a clock abstraction, the text reveal and the scare flag."""

from __future__ import annotations

import asyncio
import heapq
import itertools
from typing import Callable, List, Optional, Protocol, Tuple

from nightfall.timekeeping import SCARE_DURATION_MS, normalize_duration

Callback = Callable[[], None]


class TimerHandle:
    """Cancellable reference to one scheduled callback."""

    __slots__ = ("due", "callback", "cancelled", "_native")

    def __init__(self, due: int, callback: Callback) -> None:
        self.due = due
        self.callback = callback
        self.cancelled = False
        self._native: Optional[asyncio.TimerHandle] = None

    def cancel(self) -> None:
        self.cancelled = True
        if self._native is not None:
            self._native.cancel()


class Clock(Protocol):
    def schedule(self, delay: int, callback: Callback) -> TimerHandle: ...

    def cancel(self, handle: Optional[TimerHandle]) -> None: ...


class ManualClock:
    """Logical clock that only moves when ``advance`` is called."""

    def __init__(self) -> None:
        self.now = 0
        self._queue: List[Tuple[int, int, TimerHandle]] = []
        self._counter = itertools.count()

    def schedule(self, delay: int, callback: Callback) -> TimerHandle:
        handle = TimerHandle(self.now + normalize_duration(delay), callback)
        heapq.heappush(self._queue, (handle.due, next(self._counter), handle))
        return handle

    def cancel(self, handle: Optional[TimerHandle]) -> None:
        if handle is not None:
            handle.cancel()

    @property
    def pending(self) -> int:
        return sum(1 for _, _, handle in self._queue if not handle.cancelled)

    def advance(self, delta: int) -> None:
        """Fire every callback due within ``delta`` ms, in order, one at a time."""
        target = self.now + normalize_duration(delta)
        while self._queue and self._queue[0][0] <= target:
            due, _, handle = heapq.heappop(self._queue)
            self.now = due
            if not handle.cancelled:
                handle.callback()
        self.now = target

    def run_until_idle(self, limit: int = 1_000_000) -> None:
        while self._queue and self._queue[0][0] - self.now <= limit:
            self.advance(self._queue[0][0] - self.now)


class AsyncioClock:
    """Schedules callbacks on a running asyncio loop via ``call_later``."""

    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None) -> None:
        self._loop = loop

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is None:
            self._loop = asyncio.get_running_loop()
        return self._loop

    def schedule(self, delay: int, callback: Callback) -> TimerHandle:
        delay = normalize_duration(delay)
        handle = TimerHandle(int(self.loop.time() * 1000) + delay, callback)
        handle._native = self.loop.call_later(delay / 1000.0, callback)
        return handle

    def cancel(self, handle: Optional[TimerHandle]) -> None:
        if handle is not None:
            handle.cancel()


class TextReveal:
    """Reveals text one character per interval; a new start cancels the old one."""

    def __init__(
        self,
        clock: Clock,
        interval: int,
        *,
        on_update: Optional[Callback] = None,
        on_complete: Optional[Callback] = None,
    ) -> None:
        self.clock = clock
        self.interval = interval
        self.on_update = on_update
        self.on_complete = on_complete
        self.text = ""
        self.shown = 0
        self._handle: Optional[TimerHandle] = None

    @property
    def displayed(self) -> str:
        return self.text[: self.shown]

    @property
    def revealing(self) -> bool:
        return self._handle is not None

    def start(self, text: str) -> None:
        self.cancel()
        self.text = text
        self.shown = 0
        if self.interval <= 0 or not text:
            self.shown = len(text)
            self._finish()
            return
        self._handle = self.clock.schedule(self.interval, self._tick)

    def cancel(self) -> None:
        self.clock.cancel(self._handle)
        self._handle = None

    def _tick(self) -> None:
        self._handle = None
        self.shown += 1
        if self.shown < len(self.text):
            self._handle = self.clock.schedule(self.interval, self._tick)
            if self.on_update:
                self.on_update()
            return
        self._finish()

    def _finish(self) -> None:
        if self.on_update:
            self.on_update()
        if self.on_complete:
            self.on_complete()


class ScareFlag:
    """Transient presentation flag; at most one clear timer is ever pending."""

    def __init__(
        self,
        clock: Clock,
        duration: int = SCARE_DURATION_MS,
        *,
        on_change: Optional[Callback] = None,
    ) -> None:
        self.clock = clock
        self.duration = duration
        self.on_change = on_change
        self.active = False
        self._clear_handle: Optional[TimerHandle] = None
        self._pending: Optional[TimerHandle] = None

    def trigger(self) -> bool:
        if self.active:
            return False
        self.active = True
        self._clear_handle = self.clock.schedule(self.duration, self._clear)
        if self.on_change:
            self.on_change()
        return True

    def trigger_later(self, delay: int) -> None:
        self.clock.cancel(self._pending)
        self._pending = self.clock.schedule(delay, self._fire_pending)

    def drop_pending(self) -> None:
        self.clock.cancel(self._pending)
        self._pending = None

    def reset(self) -> None:
        self.drop_pending()
        self.clock.cancel(self._clear_handle)
        self._clear_handle = None
        self.active = False

    def _fire_pending(self) -> None:
        self._pending = None
        self.trigger()

    def _clear(self) -> None:
        self._clear_handle = None
        self.active = False
        if self.on_change:
            self.on_change()
