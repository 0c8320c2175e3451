"""
Frame scheduler - delayed, cancellable callbacks polled from the game loop
"""

import heapq
import itertools
import time
from typing import Callable, List, Optional


def monotonic_ms() -> float:
    """Default time source: monotonic clock in milliseconds"""
    return time.monotonic() * 1000


class TimerHandle:
    """
    Handle returned by FrameScheduler.after().

    Cancelling is safe at any point before the callback fires, and
    a no-op afterwards.
    """

    def __init__(self, due_ms: float, seq: int, callback: Callable[[], None], name: str):
        self.due_ms = due_ms
        self.seq = seq
        self.callback = callback
        self.name = name
        self.cancelled = False
        self.fired = False

    @property
    def active(self) -> bool:
        """True while the callback is still waiting to fire"""
        return not (self.cancelled or self.fired)

    def cancel(self) -> None:
        self.cancelled = True

    def __lt__(self, other: 'TimerHandle') -> bool:
        return (self.due_ms, self.seq) < (other.due_ms, other.seq)

    def __repr__(self) -> str:
        state = "cancelled" if self.cancelled else ("fired" if self.fired else "pending")
        return f"TimerHandle(name={self.name!r}, due_ms={self.due_ms:.0f}, {state})"


class FrameScheduler:
    """
    Single-threaded timer queue driven by run_due() once per frame.

    Callbacks run in due-time order (ties in scheduling order). A timer
    scheduled from inside a callback is measured from the due time of the
    timer that is firing, not from the wall clock, so chains of steps keep
    their nominal spacing even when frames run late.

    Example:
        scheduler = FrameScheduler()
        handle = scheduler.after(500, lambda: print("half a second later"))

        # In update loop (runs every frame):
        scheduler.run_due()
    """

    def __init__(self, time_source_ms: Callable[[], float] = monotonic_ms, logger=None):
        """
        Args:
            time_source_ms: Clock returning the current time in milliseconds
            logger: Optional ClassLogger for debug output
        """
        self._time_source_ms = time_source_ms
        self._logger = logger
        self._queue: List[TimerHandle] = []
        self._counter = itertools.count()
        self._dispatch_time_ms: Optional[float] = None

    def now_ms(self) -> float:
        """Current scheduling time (due time of the firing timer while dispatching)"""
        if self._dispatch_time_ms is not None:
            return self._dispatch_time_ms
        return self._time_source_ms()

    def after(self, duration_ms: float, callback: Callable[[], None], name: str = "timer") -> TimerHandle:
        """
        Schedule callback to run duration_ms from now.

        Args:
            duration_ms: Delay in milliseconds (negative values count as 0)
            callback: Callable with no arguments
            name: Label used in logs and repr

        Returns:
            TimerHandle that can be passed to cancel()
        """
        handle = TimerHandle(
            due_ms=self.now_ms() + max(0.0, duration_ms),
            seq=next(self._counter),
            callback=callback,
            name=name
        )
        heapq.heappush(self._queue, handle)
        return handle

    def cancel(self, handle: Optional[TimerHandle]) -> None:
        """Cancel a pending timer (None and already-fired handles are ignored)"""
        if handle is not None:
            handle.cancel()

    def run_due(self) -> int:
        """
        Fire every timer whose due time has been reached.

        Returns:
            Number of callbacks executed
        """
        now = self._time_source_ms()
        fired = 0
        while self._queue and self._queue[0].due_ms <= now:
            handle = heapq.heappop(self._queue)
            if handle.cancelled:
                continue
            handle.fired = True
            self._dispatch_time_ms = handle.due_ms
            try:
                handle.callback()
            finally:
                self._dispatch_time_ms = None
            fired += 1
        self._drop_cancelled_head()
        return fired

    def _drop_cancelled_head(self) -> None:
        while self._queue and self._queue[0].cancelled:
            heapq.heappop(self._queue)

    @property
    def pending_count(self) -> int:
        """Number of timers that have neither fired nor been cancelled"""
        return sum(1 for handle in self._queue if handle.active)

    def next_due_ms(self) -> Optional[float]:
        """Due time of the earliest active timer, or None"""
        active = [handle.due_ms for handle in self._queue if handle.active]
        return min(active) if active else None

    def clear(self) -> None:
        """Cancel every pending timer"""
        for handle in self._queue:
            handle.cancel()
        self._queue.clear()
        if self._logger:
            self._logger.debug("Scheduler cleared")
