"""Cancellable timers for playback.

Two interchangeable schedulers:
  - ManualScheduler    — virtual clock advanced explicitly (tests, headless CLI)
  - ThreadingScheduler — wall-clock ``threading.Timer`` per callback (API server)

Both hand back a TimerHandle that can be cancelled; a cancelled handle's
callback never runs.
"""

from __future__ import annotations

import heapq
import itertools
import logging
import threading
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Protocol

logger = logging.getLogger(__name__)


@dataclass(order=True, slots=True)
class TimerHandle:
    due: float
    seq: int
    callback: Callable[[], None] = field(compare=False)
    cancelled: bool = field(default=False, compare=False)
    _timer: Any = field(default=None, compare=False, repr=False)


class Scheduler(Protocol):
    def call_later(self, delay: float, callback: Callable[[], None]) -> TimerHandle: ...

    def cancel(self, handle: TimerHandle) -> None: ...


class ManualScheduler:
    """Deterministic scheduler driven by :meth:`advance`.

    Callbacks fire in (due time, scheduling order); callbacks scheduled while
    advancing run in the same call if they fall due inside the window.
    """

    __slots__ = ("_now", "_queue", "_seq")

    def __init__(self) -> None:
        self._now = 0.0
        self._queue: list[TimerHandle] = []
        self._seq = itertools.count()

    @property
    def now(self) -> float:
        return self._now

    @property
    def pending(self) -> int:
        return sum(1 for h in self._queue if not h.cancelled)

    def call_later(self, delay: float, callback: Callable[[], None]) -> TimerHandle:
        handle = TimerHandle(self._now + max(0.0, delay), next(self._seq), callback)
        heapq.heappush(self._queue, handle)
        return handle

    def cancel(self, handle: TimerHandle) -> None:
        handle.cancelled = True

    def advance(self, seconds: float) -> int:
        """Move the clock forward, firing due callbacks. Returns how many fired."""
        target = self._now + seconds
        fired = 0
        while self._queue and self._queue[0].due <= target + 1e-9:
            handle = heapq.heappop(self._queue)
            if handle.cancelled:
                continue
            self._now = handle.due
            handle.callback()
            fired += 1
        self._now = target
        return fired

    def run_until_idle(self, max_callbacks: int = 100_000) -> int:
        """Fire callbacks until nothing is pending."""
        fired = 0
        while self._queue and fired < max_callbacks:
            handle = heapq.heappop(self._queue)
            if handle.cancelled:
                continue
            self._now = handle.due
            handle.callback()
            fired += 1
        return fired


class ThreadingScheduler:
    """Wall-clock scheduler; each callback runs on its own timer thread.

    Callers are responsible for serializing what the callbacks touch (the
    PlaybackController holds its lock while handling a timer).
    """

    __slots__ = ("_lock", "_live", "_seq")

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._live: set[int] = set()
        self._seq = itertools.count()

    @property
    def pending(self) -> int:
        with self._lock:
            return len(self._live)

    def call_later(self, delay: float, callback: Callable[[], None]) -> TimerHandle:
        handle = TimerHandle(time.monotonic() + delay, next(self._seq), callback)
        timer = threading.Timer(max(0.0, delay), self._fire, args=(handle,))
        timer.daemon = True
        handle._timer = timer
        with self._lock:
            self._live.add(handle.seq)
        timer.start()
        return handle

    def cancel(self, handle: TimerHandle) -> None:
        handle.cancelled = True
        if handle._timer is not None:
            handle._timer.cancel()
        with self._lock:
            self._live.discard(handle.seq)

    def _fire(self, handle: TimerHandle) -> None:
        with self._lock:
            self._live.discard(handle.seq)
        if handle.cancelled:
            return
        try:
            handle.callback()
        except Exception:
            logger.exception("Scheduled callback #%d failed", handle.seq)
