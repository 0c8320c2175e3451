"""
Timing utility for throttling execution in game loops
"""

import time
from typing import Callable, Optional


class OnceInMs:
    """
    Throttle for running code at most once per interval inside a frame loop.

    Example:
        self._memory_monitor = OnceInMs(60000)  # Once per minute

        # In update loop (runs every frame):
        if self._memory_monitor.should_execute():
            self._log_memory_usage()
    """

    def __init__(self, interval_ms: int, time_source_ms: Optional[Callable[[], float]] = None):
        """
        Args:
            interval_ms: Minimum milliseconds between executions
            time_source_ms: Clock returning milliseconds (defaults to monotonic time)
        """
        self.interval_ms = interval_ms
        self._now_ms = time_source_ms or (lambda: time.monotonic() * 1000)
        self.last_execution: Optional[float] = None

    def should_execute(self) -> bool:
        """True once per interval (the first call always executes)"""
        current = self._now_ms()
        if self.last_execution is None or current - self.last_execution >= self.interval_ms:
            self.last_execution = current
            return True
        return False

    def reset(self) -> None:
        """Force next should_execute() call to return True"""
        self.last_execution = None

    def remaining_ms(self) -> float:
        """Milliseconds until next execution (0 when due)"""
        if self.last_execution is None:
            return 0.0
        return max(0.0, self.interval_ms - (self._now_ms() - self.last_execution))
