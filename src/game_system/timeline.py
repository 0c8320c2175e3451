"""
Timeline - an ordered, cancellable series of timed steps on a FrameScheduler
"""

from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence, TYPE_CHECKING

if TYPE_CHECKING:
    from .scheduler import FrameScheduler, TimerHandle
    from utils import ClassLogger


@dataclass(frozen=True)
class TimelineStep:
    """Wait delay_ms, then run action (None = pure pause)"""
    delay_ms: int
    action: Optional[Callable[[], None]] = None


class Timeline:
    """
    Runs steps strictly one after another and calls on_complete at the end.

    Before every step the liveness check is evaluated; if it fails the
    timeline aborts: nothing else runs and on_complete is never called.
    Cancellation is cooperative - an action may cancel its own timeline
    (e.g. by starting a replacement) and the remaining steps are dropped.
    Only one step is scheduled at any moment.
    """

    def __init__(self,
                 scheduler: 'FrameScheduler',
                 steps: Sequence[TimelineStep],
                 name: str,
                 is_alive: Callable[[], bool] = lambda: True,
                 on_complete: Optional[Callable[[], None]] = None,
                 logger: Optional['ClassLogger'] = None):
        self._scheduler = scheduler
        self._steps: List[TimelineStep] = list(steps)
        self.name = name
        self._is_alive = is_alive
        self._on_complete = on_complete
        self._logger = logger
        self._index = 0
        self._handle: Optional['TimerHandle'] = None
        self.started = False
        self.cancelled = False
        self.aborted = False
        self.completed = False

    @property
    def running(self) -> bool:
        return self.started and not (self.cancelled or self.aborted or self.completed)

    @property
    def steps_run(self) -> int:
        return self._index

    def start(self) -> 'Timeline':
        if self.started:
            raise RuntimeError(f"Timeline '{self.name}' already started")
        self.started = True
        self._schedule_next()
        return self

    def cancel(self) -> None:
        if not self.running:
            return
        self.cancelled = True
        self._scheduler.cancel(self._handle)
        self._handle = None
        if self._logger:
            self._logger.debug(f"Timeline '{self.name}' cancelled after {self._index}/{len(self._steps)} steps")

    def _schedule_next(self) -> None:
        if self._index >= len(self._steps):
            self._finish()
            return
        step = self._steps[self._index]
        self._handle = self._scheduler.after(step.delay_ms, self._run_step, name=f"{self.name}[{self._index}]")

    def _run_step(self) -> None:
        self._handle = None
        if not self.running:
            return

        if not self._is_alive():
            self.aborted = True
            if self._logger:
                self._logger.debug(f"Timeline '{self.name}' aborted at step {self._index} (not alive)")
            return

        step = self._steps[self._index]
        self._index += 1
        if step.action is not None:
            step.action()

        # The action may have cancelled us
        if self.running:
            self._schedule_next()

    def _finish(self) -> None:
        self.completed = True
        if self._on_complete is not None:
            self._on_complete()
