"""
GameSession - the Simon game state machine
"""

import enum
from functools import partial
from typing import Callable, List, Optional, TYPE_CHECKING

from .config import SessionTimings
from .observable import StateStream
from .sequence_tracker import MatchResult, RandomSignalSource, SequenceTracker, SignalSource
from .settings_store import PersistedSettings, SettingsStore
from .signals import Signal, SoundPack
from .states import GameSessionState, SessionPhase
from .timeline import Timeline, TimelineStep

if TYPE_CHECKING:
    from audio_system.interfaces import IFeedbackPort
    from utils import ClassLogger
    from .scheduler import FrameScheduler, TimerHandle


REASON_WRONG_BUTTON = "Wrong button pressed"
REASON_TOO_MANY_BUTTONS = "Player entered too many buttons"
REASON_INVALID_INDEX = "Invalid player sequence index"

_GAME_OVER_REASONS = {
    MatchResult.MISMATCH: REASON_WRONG_BUTTON,
    MatchResult.OUT_OF_RANGE: REASON_TOO_MANY_BUTTONS,
    MatchResult.INVALID_INDEX: REASON_INVALID_INDEX,
}


def timeout_reason(timeout_ms: int) -> str:
    return f"Timeout - no button pressed for {timeout_ms // 1000} seconds"


class PendingTransition(enum.Enum):
    """Transition decided but not yet shown to the player"""
    NEXT_ROUND = "next_round"
    GAME_OVER = "game_over"


class GameSession:
    """
    Owns the game state and reacts to player input, timers and lifecycle.

    Everything runs on the caller's thread: public methods and scheduler
    callbacks mutate state one after another. Timed behaviour goes through
    three owned slots, each holding at most one pending item:
    - the timeline (sequence playback, delays, startup and game-over flashes)
    - the player timeout
    - the clearing of a player-press light

    Starting something in a slot cancels what was there. Nothing fires while
    the session is in the background.

    Example:
        session = GameSession(scheduler, feedback, store, logger)
        session.subscribe(lambda state: print(state))
        session.start()

        # In update loop (runs every frame):
        scheduler.run_due()
    """

    def __init__(self,
                 scheduler: 'FrameScheduler',
                 feedback: 'IFeedbackPort',
                 settings_store: SettingsStore,
                 logger: 'ClassLogger',
                 signal_source: Optional[SignalSource] = None,
                 timings: Optional[SessionTimings] = None,
                 play_startup_animation: bool = True):
        """
        Args:
            scheduler: FrameScheduler polled by the game loop
            feedback: Port playing tones and vibration
            settings_store: Persistence of high score and settings
            logger: ClassLogger instance for logging
            signal_source: Randomness port (uniform random by default)
            timings: Durations (reference values by default)
            play_startup_animation: Light every button once before the first game
        """
        self.scheduler = scheduler
        self.feedback = feedback
        self.settings_store = settings_store
        self.logger = logger
        self.timings = timings if timings is not None else SessionTimings()
        self.play_startup_animation = play_startup_animation
        self.tracker = SequenceTracker(signal_source or RandomSignalSource(), logger=logger)

        self._stream: StateStream[GameSessionState] = StateStream(GameSessionState(), logger=logger)

        self.is_foreground = True
        self._started = False
        self._closed = False

        self._timeline: Optional[Timeline] = None
        self._timeout_handle: Optional['TimerHandle'] = None
        self._lit_handle: Optional['TimerHandle'] = None

        self._pending: Optional[PendingTransition] = None
        self._pending_reason: Optional[str] = None
        self._phase_before_settings: Optional[SessionPhase] = None
        self._phase_before_background: Optional[SessionPhase] = None

    # ------------------------------------------------------------------
    # Observable state
    # ------------------------------------------------------------------

    @property
    def state(self) -> GameSessionState:
        return self._stream.value

    def subscribe(self, observer: Callable[[GameSessionState], None], replay: bool = True) -> Callable[[], None]:
        """Observe every state change; returns an unsubscribe function"""
        return self._stream.subscribe(observer, replay=replay)

    def _update(self, **changes) -> None:
        self._stream.set(self._stream.value.copy_with(**changes))

    # ------------------------------------------------------------------
    # Session lifecycle
    # ------------------------------------------------------------------

    def start(self) -> None:
        """Load settings, play the startup animation (if enabled) and start the first game"""
        if self._started:
            self.logger.warning("Session already started")
            return
        self._started = True
        self.logger.info("Starting game session")

        self._load_settings()

        if self.play_startup_animation and self.is_foreground:
            self._play_startup_animation()
        else:
            self._initialize_new_game()

    def close(self) -> None:
        """Cancel all timers, flush settings and release feedback resources"""
        if self._closed:
            return
        self._closed = True
        self.logger.info("Closing game session")
        self._cancel_all_timers()
        self._save_settings()
        self._feedback("cleanup")

    def start_new_game(self) -> None:
        """Start over at level 1 (high score and settings are kept)"""
        if self._closed:
            return
        self.logger.info("Starting new game")
        self._phase_before_settings = None
        self._initialize_new_game()

    # ------------------------------------------------------------------
    # Player input
    # ------------------------------------------------------------------

    def on_button_event(self, signal: Signal, is_press: bool) -> None:
        """
        Handle a press or release of a colored button.

        Only the first press of a gesture counts: while one button is held,
        further presses are tracked for their release but do not play.
        """
        if self._closed:
            return
        if not self.is_foreground:
            self.logger.debug(f"Background, ignoring {signal.name} {'press' if is_press else 'release'}")
            return

        state = self.state

        if not is_press:
            if signal in state.active_presses:
                self._update(active_presses=state.active_presses - {signal})
            return

        if not self._input_open():
            self.logger.debug(f"{signal.name} press ignored - not accepting input in {state.phase}")
            return

        is_first_press = not state.active_presses
        self._update(active_presses=state.active_presses | {signal})

        if not is_first_press:
            self.logger.debug(f"{signal.name} press ignored - another button is held")
            return

        self._restart_timeout()

        player_sequence = state.player_sequence + (signal,)
        self._update(player_sequence=player_sequence, currently_lit=signal)
        self._feedback("play_signal_tone", signal, True)
        self._schedule_lit_clear(signal)

        self._check_match(player_sequence)

    def _input_open(self) -> bool:
        """Player presses count only in PLAYER_REPEATING with nothing else pending"""
        if self.state.phase is not SessionPhase.PLAYER_REPEATING:
            return False
        return self._timeline is None or not self._timeline.running

    def _check_match(self, player_sequence) -> None:
        sequence = self.state.sequence
        result = self.tracker.check(player_sequence, sequence)

        if result.ends_game:
            reason = _GAME_OVER_REASONS[result]
            if result is MatchResult.MISMATCH:
                index = len(player_sequence) - 1
                self.logger.info(f"Wrong button! Expected {sequence[index].name}, got {player_sequence[index].name}")
            else:
                self.logger.error(
                    f"{reason}: player sequence={len(player_sequence)}, game sequence={len(sequence)}"
                )
            self._cancel_timeout()
            self._schedule_game_over(reason)

        elif result is MatchResult.ROUND_COMPLETE:
            self.logger.info(f"Sequence of {len(sequence)} completed!")
            self._cancel_timeout()
            self._advance_to_next_level()

        else:
            self.logger.debug(f"Correct: {SequenceTracker.describe(player_sequence, sequence)}")

    def _schedule_lit_clear(self, signal: Signal) -> None:
        self.scheduler.cancel(self._lit_handle)
        self._lit_handle = self.scheduler.after(
            self.timings.player_lit_ms, partial(self._clear_player_lit, signal), name="player_lit"
        )

    def _clear_player_lit(self, signal: Signal) -> None:
        self._lit_handle = None
        # A newer press may have lit another button meanwhile
        if self.state.currently_lit == signal:
            self._update(currently_lit=None)

    # ------------------------------------------------------------------
    # Game flow
    # ------------------------------------------------------------------

    def _initialize_new_game(self) -> None:
        self._cancel_all_timers()
        self._clear_pending()
        self._update(
            phase=SessionPhase.WAITING_TO_START,
            level=1,
            sequence=(),
            player_sequence=(),
            currently_lit=None,
            all_signals_lit=False,
            game_over_reason=None,
        )

        if not self.is_foreground:
            self.logger.debug("Background, new game starts on return")
            self._phase_before_background = None
            return

        self._update(sequence=self.tracker.extend(()))
        self._show_sequence()

    def _play_startup_animation(self) -> None:
        timings = self.timings
        steps: List[TimelineStep] = []
        for i, signal in enumerate(Signal):
            delay = timings.startup_lead_in_ms if i == 0 else timings.startup_gap_ms
            steps.append(TimelineStep(delay, partial(self._light_signal, signal)))
            steps.append(TimelineStep(timings.startup_lit_ms, self._clear_lit))
        steps.append(TimelineStep(timings.startup_gap_ms + timings.startup_tail_ms))

        self.logger.debug("Playing startup animation")
        self._start_timeline("startup", steps, on_complete=self._initialize_new_game)

    def _show_sequence(self) -> None:
        """(Re)play the whole sequence from its first signal"""
        if not self.is_foreground:
            self.logger.debug("Background, not showing sequence now")
            return

        self._cancel_timeout()
        self._clear_pending()
        self._update(phase=SessionPhase.SHOWING_SEQUENCE, currently_lit=None, all_signals_lit=False)

        timings = self.timings
        steps: List[TimelineStep] = []
        for i, signal in enumerate(self.state.sequence):
            delay = timings.playback_lead_in_ms if i == 0 else timings.playback_gap_ms
            steps.append(TimelineStep(delay, partial(self._light_signal, signal)))
            steps.append(TimelineStep(timings.playback_lit_ms, self._clear_lit))
        steps.append(TimelineStep(timings.playback_gap_ms))

        self.logger.debug(f"Showing sequence of length {len(self.state.sequence)}")
        self._start_timeline("sequence", steps, on_complete=self._begin_player_turn)

    def _begin_player_turn(self) -> None:
        self.logger.debug("Finished showing sequence, now player's turn")
        self._update(phase=SessionPhase.PLAYER_REPEATING, player_sequence=())
        self._restart_timeout()

    def _advance_to_next_level(self) -> None:
        level = self.state.level + 1
        self.logger.info(f"Advancing to level {level}")
        self._update(level=level, sequence=self.tracker.extend(self.state.sequence))

        self._set_pending(PendingTransition.NEXT_ROUND)
        self._start_timeline(
            "next_level_delay",
            [TimelineStep(self.timings.next_level_delay_ms)],
            on_complete=self._show_sequence,
        )

    def _light_signal(self, signal: Signal) -> None:
        self._update(currently_lit=signal)
        self._feedback("play_signal_tone", signal, False)

    def _clear_lit(self) -> None:
        self._update(currently_lit=None)

    # ------------------------------------------------------------------
    # Timeout and game over
    # ------------------------------------------------------------------

    def _restart_timeout(self) -> None:
        if not self.is_foreground:
            return
        self._cancel_timeout()
        self._timeout_handle = self.scheduler.after(
            self.timings.player_timeout_ms, self._on_timeout, name="player_timeout"
        )

    def _cancel_timeout(self) -> None:
        self.scheduler.cancel(self._timeout_handle)
        self._timeout_handle = None

    def _on_timeout(self) -> None:
        self._timeout_handle = None
        if not self.is_foreground:
            self.logger.debug("Timeout fired in background, ignoring")
            return
        if not self._input_open():
            return

        reason = timeout_reason(self.timings.player_timeout_ms)
        self.logger.info(f"Player timeout! {reason}")
        self._feedback("play_error_tone")
        self._schedule_game_over(reason)

    def _schedule_game_over(self, reason: str) -> None:
        """Game over after a short pause that lets the last tone play"""
        self._set_pending(PendingTransition.GAME_OVER, reason)
        self._start_timeline(
            "game_over_delay",
            [TimelineStep(self.timings.feedback_delay_ms)],
            on_complete=partial(self._handle_game_over, reason),
        )

    def _handle_game_over(self, reason: str) -> None:
        self._cancel_timeout()
        self._cancel_lit_clear()

        state = self.state
        new_high_score = max(state.level, state.high_score)
        self.logger.info(f"{reason} at level {state.level} (high score: {state.high_score})")
        self._set_pending(PendingTransition.GAME_OVER, reason)

        if not self.is_foreground:
            self.logger.debug("Background, skipping game over animation")
            self._commit_game_over(reason, new_high_score)
            return

        self._feedback("play_error_tone")

        timings = self.timings
        steps: List[TimelineStep] = []
        for i in range(timings.flash_count):
            steps.append(TimelineStep(0 if i == 0 else timings.flash_off_ms, partial(self._set_all_lit, True)))
            steps.append(TimelineStep(timings.flash_on_ms, partial(self._set_all_lit, False)))
        steps.append(TimelineStep(timings.flash_off_ms))

        self._start_timeline(
            "game_over_flash", steps, on_complete=partial(self._commit_game_over, reason, new_high_score)
        )

    def _set_all_lit(self, lit: bool) -> None:
        self._update(all_signals_lit=lit)

    def _commit_game_over(self, reason: str, new_high_score: int) -> None:
        previous_high_score = self.state.high_score
        self._clear_pending()
        self._update(
            phase=SessionPhase.GAME_OVER,
            high_score=new_high_score,
            currently_lit=None,
            all_signals_lit=False,
            game_over_reason=reason,
        )
        if new_high_score > previous_high_score:
            self.logger.info(f"🏆 New high score: {new_high_score}")
            self._save_settings()

    # ------------------------------------------------------------------
    # Settings overlay
    # ------------------------------------------------------------------

    def enter_settings(self) -> None:
        """Pause the game behind the settings overlay"""
        if self._closed or self.state.phase is SessionPhase.SETTINGS:
            return
        self.logger.info("Switching to settings")
        self._phase_before_settings = self.state.phase
        self._cancel_all_timers()
        self._update(phase=SessionPhase.SETTINGS, currently_lit=None, all_signals_lit=False)

    def exit_settings(self) -> None:
        """
        Leave settings and resume the game.

        - ShowingSequence: playback restarts from the first signal
        - PlayerRepeating: player's progress is kept, timeout restarts
        - anything else: new game if there is no sequence yet, otherwise a
          fresh attempt at the current sequence

        Does nothing before start() or after close().
        """
        if self._closed or not self._started:
            return
        if not self.is_foreground:
            self.logger.debug("Background, not resuming game from settings yet")
            return

        previous_phase = self._phase_before_settings
        self._phase_before_settings = None

        if self.state.phase is not SessionPhase.SETTINGS:
            # Nothing to restore; only make sure a game exists
            if not self.state.sequence and not self._timeline_running():
                self._initialize_new_game()
            return

        self.logger.info(f"Exiting settings, resuming {previous_phase}")

        if previous_phase is SessionPhase.SHOWING_SEQUENCE:
            self._show_sequence()
        elif previous_phase is SessionPhase.PLAYER_REPEATING:
            self._resume_player_turn()
        elif not self.state.sequence:
            self._initialize_new_game()
        else:
            self._clear_pending()
            self._update(phase=SessionPhase.PLAYER_REPEATING, player_sequence=(), game_over_reason=None)
            self._restart_timeout()

    def set_sound_pack(self, sound_pack: SoundPack) -> None:
        self.logger.info(f"Changing sound pack to: {sound_pack.name}")
        self._feedback("set_sound_pack", sound_pack)
        self._update(sound_pack=sound_pack)
        self._save_settings()

    def set_vibration_enabled(self, enabled: bool) -> None:
        self.logger.info(f"Setting vibration enabled: {enabled}")
        self._feedback("set_vibration_enabled", enabled)
        self._update(vibrate_enabled=enabled)
        self._save_settings()

    def set_sound_enabled(self, enabled: bool) -> None:
        self.logger.info(f"Setting sound enabled: {enabled}")
        self._feedback("set_sound_enabled", enabled)
        self._update(sound_enabled=enabled)
        self._save_settings()

    def _resume_player_turn(self) -> None:
        """Back to PLAYER_REPEATING, finishing a decided transition first"""
        if self._pending is PendingTransition.GAME_OVER:
            self._update(phase=SessionPhase.PLAYER_REPEATING)
            self._handle_game_over(self._pending_reason)
        elif self._pending is PendingTransition.NEXT_ROUND:
            self._show_sequence()
        else:
            self._update(phase=SessionPhase.PLAYER_REPEATING)
            self._restart_timeout()

    # ------------------------------------------------------------------
    # Foreground / background
    # ------------------------------------------------------------------

    def on_background(self) -> None:
        """Suspend: nothing fires and nothing changes phase until on_foreground()"""
        if not self.is_foreground:
            return
        self.logger.info("Going to background")
        self.is_foreground = False

        phase = self.state.phase
        self._phase_before_background = phase if phase.is_live else None

        self._cancel_all_timers()
        self._feedback("pause")
        # Held buttons are lost while away; their releases would be ignored
        self._update(currently_lit=None, all_signals_lit=False, active_presses=frozenset())

    def on_foreground(self) -> None:
        """Resume the live phase recorded by on_background()"""
        if self.is_foreground:
            return
        self.logger.info("Coming to foreground")
        self.is_foreground = True
        self._feedback("resume")

        previous_phase = self._phase_before_background
        self._phase_before_background = None

        if self._closed or self.state.phase is SessionPhase.SETTINGS:
            return

        if previous_phase is SessionPhase.SHOWING_SEQUENCE:
            self.logger.debug("Restarting sequence playback")
            self._show_sequence()
        elif previous_phase is SessionPhase.PLAYER_REPEATING:
            self._resume_player_turn()
        elif self._started and self.state.phase is SessionPhase.WAITING_TO_START and not self.state.sequence:
            self._initialize_new_game()

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _is_alive(self) -> bool:
        return self.is_foreground and not self._closed

    def _start_timeline(self, name: str, steps: List[TimelineStep], on_complete: Callable[[], None]) -> None:
        """Replace the current timeline with a new one"""
        self._cancel_timeline()
        timeline = Timeline(
            self.scheduler,
            steps,
            name,
            is_alive=self._is_alive,
            on_complete=lambda: self._timeline_finished(timeline, on_complete),
            logger=self.logger,
        )
        self._timeline = timeline
        timeline.start()

    def _timeline_finished(self, timeline: Timeline, on_complete: Callable[[], None]) -> None:
        if self._timeline is timeline:
            self._timeline = None
        on_complete()

    def _timeline_running(self) -> bool:
        return self._timeline is not None and self._timeline.running

    def _cancel_timeline(self) -> None:
        if self._timeline is not None:
            self._timeline.cancel()
            self._timeline = None

    def _cancel_lit_clear(self) -> None:
        self.scheduler.cancel(self._lit_handle)
        self._lit_handle = None

    def _cancel_all_timers(self) -> None:
        self._cancel_timeline()
        self._cancel_timeout()
        self._cancel_lit_clear()

    def _set_pending(self, pending: PendingTransition, reason: Optional[str] = None) -> None:
        self._pending = pending
        self._pending_reason = reason

    def _clear_pending(self) -> None:
        self._pending = None
        self._pending_reason = None

    def _feedback(self, method: str, *args) -> None:
        """Call the feedback port; its failures never reach the game logic"""
        try:
            getattr(self.feedback, method)(*args)
        except Exception as e:
            self.logger.error(f"Feedback {method} failed: {e}", exception=e)

    def _load_settings(self) -> None:
        settings = self.settings_store.load()
        self._feedback("set_sound_pack", settings.sound_pack)
        self._feedback("set_vibration_enabled", settings.vibrate_enabled)
        self._feedback("set_sound_enabled", settings.sound_enabled)
        self._update(
            high_score=settings.high_score,
            sound_pack=settings.sound_pack,
            vibrate_enabled=settings.vibrate_enabled,
            sound_enabled=settings.sound_enabled,
        )

    def _save_settings(self) -> None:
        state = self.state
        self.settings_store.save(PersistedSettings(
            high_score=state.high_score,
            sound_pack=state.sound_pack,
            vibrate_enabled=state.vibrate_enabled,
            sound_enabled=state.sound_enabled,
        ))
