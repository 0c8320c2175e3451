"""
Shared fixtures: a manual millisecond clock and a fully wired GameSession
"""

import logging
from typing import Iterable, Optional

import pytest

from audio_system import MockSoundController
from game_system import (
    FrameScheduler,
    GameSession,
    MemorySettingsStore,
    PersistedSettings,
    ScriptedSignalSource,
    SessionTimings,
    Signal,
)
from utils import HybridLogger


class ManualClock:
    """Time source that only moves when told to"""

    def __init__(self, start_ms: float = 0):
        self.now = start_ms

    def __call__(self) -> float:
        return self.now

    def advance(self, ms: float) -> None:
        self.now += ms


class SessionHarness:
    """A GameSession plus the clock, scheduler and fakes around it"""

    def __init__(self, session, clock, scheduler, feedback, store):
        self.session = session
        self.clock = clock
        self.scheduler = scheduler
        self.feedback = feedback
        self.store = store

    @property
    def state(self):
        return self.session.state

    @property
    def timings(self) -> SessionTimings:
        return self.session.timings

    def advance(self, ms: float) -> None:
        self.clock.advance(ms)
        self.scheduler.run_due()

    def playback_ms(self, length: Optional[int] = None) -> int:
        """Time from the start of a playback until the player's turn"""
        if length is None:
            length = len(self.state.sequence)
        t = self.timings
        return t.playback_lead_in_ms + length * (t.playback_lit_ms + t.playback_gap_ms)

    def finish_playback(self) -> None:
        self.advance(self.playback_ms())

    def tap(self, signal: Signal) -> None:
        self.session.on_button_event(signal, True)
        self.session.on_button_event(signal, False)

    def repeat_sequence(self) -> None:
        for signal in self.state.sequence:
            self.tap(signal)

    def play_round(self) -> None:
        """Repeat the current sequence and wait until the next one is shown"""
        self.repeat_sequence()
        self.advance(self.timings.next_level_delay_ms)
        self.finish_playback()


@pytest.fixture
def hybrid_logger(tmp_path):
    main_logger = HybridLogger("simon_test", log_dir=str(tmp_path / "logs"), console=False)
    yield main_logger
    main_logger.cleanup()


@pytest.fixture
def logger(hybrid_logger):
    return hybrid_logger.get_class_logger("Test", logging.DEBUG)


@pytest.fixture
def clock():
    return ManualClock()


@pytest.fixture
def scheduler(clock, logger):
    return FrameScheduler(time_source_ms=clock, logger=logger)


@pytest.fixture
def feedback(logger):
    return MockSoundController(logger)


@pytest.fixture
def make_session(clock, scheduler, feedback, logger):
    """
    Build a SessionHarness.

    Signals are scripted (cycling) so games are deterministic.
    """

    def _make(signals: Iterable[Signal] = (Signal.GREEN, Signal.RED, Signal.YELLOW, Signal.BLUE),
              settings: Optional[PersistedSettings] = None,
              startup_animation: bool = False,
              timings: Optional[SessionTimings] = None,
              feedback_port=None,
              start: bool = True) -> SessionHarness:
        store = MemorySettingsStore(settings)
        port = feedback_port if feedback_port is not None else feedback
        session = GameSession(
            scheduler=scheduler,
            feedback=port,
            settings_store=store,
            logger=logger,
            signal_source=ScriptedSignalSource(signals, cycle=True),
            timings=timings,
            play_startup_animation=startup_animation,
        )
        harness = SessionHarness(session, clock, scheduler, port, store)
        if start:
            session.start()
        return harness

    return _make


@pytest.fixture
def harness(make_session):
    return make_session()
