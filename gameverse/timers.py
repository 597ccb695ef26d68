"""
Timer schedulers and the single pending-timer slot.

ThreadingTimerScheduler runs callbacks on threading.Timer threads;
AsyncioTimerScheduler runs them on an event loop via loop.call_later.
TimerSlot holds at most one pending timer: scheduling replaces (cancels)
whatever was pending, so a restart can never be scheduled twice.
"""

import asyncio
import logging
import threading
import time
from typing import Any, Callable, Optional

from gameverse.capabilities import TimerHandle, TimerScheduler

logger = logging.getLogger(__name__)


class _ThreadingHandle(TimerHandle):
    def __init__(self, timer: threading.Timer):
        self._timer = timer

    def cancel(self) -> None:
        self._timer.cancel()


class ThreadingTimerScheduler(TimerScheduler):
    def call_later(self, delay: float, callback: Callable[[], Any]) -> TimerHandle:
        timer = threading.Timer(max(0.0, delay), callback)
        timer.daemon = True
        timer.start()
        return _ThreadingHandle(timer)

    def time(self) -> float:
        return time.monotonic()


class _AsyncioHandle(TimerHandle):
    def __init__(self, handle: asyncio.TimerHandle):
        self._handle = handle

    def cancel(self) -> None:
        self._handle.cancel()


class AsyncioTimerScheduler(TimerScheduler):
    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None):
        self._loop = loop

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is None:
            self._loop = asyncio.get_running_loop()
        return self._loop

    def call_later(self, delay: float, callback: Callable[[], Any]) -> TimerHandle:
        return _AsyncioHandle(self.loop.call_later(max(0.0, delay), callback))

    def time(self) -> float:
        return self.loop.time()


class TimerSlot:
    """
    One owned timer. schedule() cancels the previous one first.

    Bookkeeping is guarded by a lock because thread timers fire on their own
    thread. An owner that passes its own lock gets its callbacks run while
    that lock is held, so a callback replaced under the owner's lock can
    never run afterwards.
    """

    def __init__(
        self,
        scheduler: TimerScheduler,
        name: str = "timer",
        lock: Optional[Any] = None,
    ):
        self.scheduler = scheduler
        self.name = name
        self._lock = lock if lock is not None else threading.RLock()
        self._owner_lock = lock is not None
        self._handle: Optional[TimerHandle] = None
        self.deadline: Optional[float] = None
        self._generation = 0

    @property
    def pending(self) -> bool:
        return self._handle is not None

    def schedule(self, delay: float, callback: Callable[[], Any]) -> None:
        with self._lock:
            self._cancel()
            self._generation += 1
            generation = self._generation
            self.deadline = self.scheduler.time() + delay
            self._handle = self.scheduler.call_later(delay, lambda: self._fire(generation, callback))
        logger.debug(f"[TIMER] {self.name} scheduled in {delay:.2f}s")

    def cancel(self) -> None:
        with self._lock:
            self._cancel()

    def _cancel(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            logger.debug(f"[TIMER] {self.name} cancelled")
        self._handle = None
        self.deadline = None
        self._generation += 1

    def _fire(self, generation: int, callback: Callable[[], Any]) -> None:
        with self._lock:
            # A replaced timer that fires anyway (thread race) is ignored.
            if generation != self._generation:
                return
            self._handle = None
            self.deadline = None
            if self._owner_lock:
                callback()
                return
        callback()
