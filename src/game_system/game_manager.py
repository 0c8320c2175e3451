"""
Main game manager - runs the frame loop and feeds button input to the session
"""

import time
from typing import Optional, TYPE_CHECKING

import psutil

from .signals import Signal
from .states import GameSessionState, SessionPhase
from utils import OnceInMs

if TYPE_CHECKING:
    from button_system.interfaces import IButtonReader
    from utils import ClassLogger
    from .config import ButtonLayout
    from .scheduler import FrameScheduler
    from .session import GameSession


class GameManager:
    """
    Drives a GameSession from the frame loop.

    Responsibilities:
    - Run due scheduler callbacks every frame
    - Translate button edges into session intents
    - Log phase transitions and resource usage
    - Maintain consistent frame timing
    """

    def __init__(self,
                 session: 'GameSession',
                 button_reader: 'IButtonReader',
                 scheduler: 'FrameScheduler',
                 layout: 'ButtonLayout',
                 logger: 'ClassLogger',
                 frame_duration_ms: float = 20):
        """
        Args:
            session: GameSession to drive
            button_reader: Interface for reading button states
            scheduler: FrameScheduler shared with the session
            layout: Which button index does what
            logger: Logger for debugging and monitoring
            frame_duration_ms: Target frame duration in milliseconds
        """
        self.session = session
        self.button_reader = button_reader
        self.scheduler = scheduler
        self.layout = layout
        self.logger = logger
        self.target_frame_duration = frame_duration_ms / 1000.0
        self.running = True
        self._stopped = False

        self._memory_monitor = OnceInMs(60000)
        self._process = psutil.Process()

        self._last_phase: Optional[SessionPhase] = None
        self._unsubscribe = session.subscribe(self._on_state_changed)

        self.logger.info(f"GameManager initialized: {frame_duration_ms}ms frame duration, "
                         f"{button_reader.get_button_count()} buttons")

    def start(self) -> None:
        """Start the session, ignoring buttons held down at startup"""
        ignore_held = getattr(self.button_reader, "ignore_pressed_until_released", None)
        if ignore_held is not None:
            ignore_held()
        self.session.start()

    def run_game_loop(self) -> None:
        """
        Start the session and run frames until stop() or Ctrl+C.

        Keeps a fixed frame duration by sleeping out the rest of each frame.
        """
        self.logger.info(f"Starting game loop with {int(self.target_frame_duration * 1000)}ms frame duration")
        self.start()

        try:
            while self.running:
                frame_start = time.time()

                self.update()

                sleep_time = self.target_frame_duration - (time.time() - frame_start)
                if sleep_time > 0:
                    time.sleep(sleep_time)

        except KeyboardInterrupt:
            self.logger.info("Game stopped by user (Ctrl+C)")
            self.logger.flush()
        except Exception as e:
            self.logger.error(f"Game loop error: {e}", exception=e)
            raise
        finally:
            self.stop()

    def update(self) -> None:
        """One frame: timers first, then buttons"""
        if self._memory_monitor.should_execute():
            self._log_memory_usage()

        self.scheduler.run_due()

        button_state = self.button_reader.read_buttons()
        for index in button_state.pressed_buttons():
            self._handle_press(index)
        for index in button_state.released_buttons():
            self._handle_release(index)

    def _handle_press(self, index: int) -> None:
        layout = self.layout
        session = self.session

        signal = layout.signal_buttons.get(index)
        if signal is not None:
            if session.state.phase is SessionPhase.SETTINGS:
                self._handle_settings_button(signal)
            else:
                session.on_button_event(signal, True)
            return

        if index == layout.start_button:
            if session.state.phase is SessionPhase.SETTINGS:
                self.logger.debug("START ignored in settings")
                return
            session.start_new_game()

        elif index == layout.settings_button:
            if session.state.phase is SessionPhase.SETTINGS:
                session.exit_settings()
            else:
                session.enter_settings()

        elif index == layout.pause_button:
            if session.is_foreground:
                session.on_background()
            else:
                session.on_foreground()

        else:
            self.logger.debug(f"Button {index} has no function")

    def _handle_release(self, index: int) -> None:
        signal = self.layout.signal_buttons.get(index)
        if signal is not None:
            self.session.on_button_event(signal, False)

    def _handle_settings_button(self, signal: Signal) -> None:
        """In settings the color buttons change preferences"""
        session = self.session
        state = session.state
        if signal is Signal.GREEN:
            session.set_sound_pack(state.sound_pack.next_pack())
        elif signal is Signal.RED:
            session.set_vibration_enabled(not state.vibrate_enabled)
        elif signal is Signal.YELLOW:
            session.set_sound_enabled(not state.sound_enabled)

    def _on_state_changed(self, state: GameSessionState) -> None:
        if state.phase is self._last_phase:
            return
        if self._last_phase is None:
            self.logger.info(f"Phase: {state.phase}")
        else:
            self.logger.info(f"Phase transition: {self._last_phase} → {state.phase} (level {state.level})")
        self._last_phase = state.phase
        if state.phase is SessionPhase.GAME_OVER:
            self.logger.info(f"Game over: {state.game_over_reason} | high score {state.high_score}")

    def stop(self) -> None:
        """Stop the loop, close the session and release the buttons"""
        self.running = False
        if self._stopped:
            return
        self._stopped = True

        self._unsubscribe()
        self.session.close()
        self.button_reader.cleanup()
        self.logger.info("Game stopped")

    def _log_memory_usage(self) -> None:
        """Log current memory and CPU usage (process and system)"""
        try:
            process_mb = self._process.memory_info().rss / 1024 / 1024
            process_cpu_percent = self._process.cpu_percent(interval=None)

            sys_mem = psutil.virtual_memory()
            sys_total_mb = sys_mem.total / 1024 / 1024
            sys_used_mb = sys_mem.used / 1024 / 1024
            sys_cpu_percent = psutil.cpu_percent(interval=None)

            self.logger.info(
                f"💾 Memory - Process: {process_mb:.1f}MB | "
                f"System: {sys_used_mb:.0f}/{sys_total_mb:.0f}MB ({sys_mem.percent:.1f}%) | "
                f"⚙️  CPU - Process: {process_cpu_percent:.1f}% | System: {sys_cpu_percent:.1f}%"
            )
        except psutil.Error as e:
            self.logger.warning(f"Failed to log system usage: {e}")

    def get_current_phase_name(self) -> str:
        return str(self.session.state.phase)
