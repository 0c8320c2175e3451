"""
Keyboard sampler for playing without GPIO hardware
"""

import select
import sys
import termios
import time
import tty
from typing import Callable, List, Optional

from .interfaces import IButtonSampler


class KeyboardSampler(IButtonSampler):
    """
    Simulates momentary buttons with digit keys, over a raw terminal.

    A terminal only reports key presses, never releases, so each key
    press holds its button down for hold_ms and then releases it. Pressing
    the key again while held extends the hold. Works over SSH (stdin is
    polled with a non-blocking select).

    Default game layout:
        0 GREEN  1 RED  2 YELLOW  3 BLUE
        4 START  5 SETTINGS  6 PAUSE

    Example:
        sampler = KeyboardSampler(num_buttons=7, logger=logger)
        reader = ButtonReader(sampler, logger)
    """

    def __init__(self,
                 num_buttons: int,
                 logger,
                 hold_ms: int = 150,
                 time_source_ms: Optional[Callable[[], float]] = None):
        """
        Args:
            num_buttons: Number of virtual buttons (max 10 for digit keys 0-9)
            logger: ClassLogger instance for logging
            hold_ms: How long one key press keeps its button down
            time_source_ms: Clock in milliseconds (monotonic by default)
        """
        if num_buttons > 10:
            raise ValueError("KeyboardSampler supports max 10 buttons (digit keys 0-9)")

        self._button_count = num_buttons
        self._logger = logger
        self._hold_ms = hold_ms
        self._time_source_ms = time_source_ms or (lambda: time.monotonic() * 1000.0)
        self._release_at_ms: List[float] = [0.0] * num_buttons

        self._stdin_available = False
        self._original_terminal_settings = None
        self._raw_mode_enabled = False

    def get_button_count(self) -> int:
        return self._button_count

    def setup(self) -> None:
        """Switch the terminal to raw mode for immediate key capture"""
        if not sys.stdin.isatty():
            self._logger.error("❌ Keyboard input not available (stdin is not a TTY)")
            raise RuntimeError("Keyboard input not available")

        try:
            self._original_terminal_settings = termios.tcgetattr(sys.stdin)
            tty.setcbreak(sys.stdin.fileno())
        except termios.error as e:
            self._logger.error("❌ Could not enable raw terminal mode", exception=e)
            raise RuntimeError("Failed to enable raw terminal mode") from e

        self._raw_mode_enabled = True
        self._stdin_available = True

        self._logger.info("🎮 Keyboard sampler initialized (NO GPIO)")
        self._logger.info(f"   {self._button_count} virtual buttons mapped to digit keys 0-{self._button_count - 1}")

    def _poll_keyboard(self) -> None:
        if not self._stdin_available:
            return
        while select.select([sys.stdin], [], [], 0) == ([sys.stdin], [], []):
            key = sys.stdin.read(1)
            if not key:
                break
            self.handle_key(key)

    def handle_key(self, key: str) -> None:
        """Press the button for a digit key"""
        if not key.isdigit():
            self._logger.debug(f"Ignoring key {key!r}")
            return

        button_index = int(key)
        if button_index >= self._button_count:
            self._logger.warning(f"Invalid button {button_index} (only 0-{self._button_count - 1} available)")
            return

        self._release_at_ms[button_index] = self._time_source_ms() + self._hold_ms

    def read_button(self, button_index: int) -> bool:
        """
        Held if a key press for this button happened less than hold_ms ago.

        Keyboard input is polled when button 0 is read, i.e. once per frame.
        """
        if button_index == 0:
            self._poll_keyboard()
        return self._time_source_ms() < self._release_at_ms[button_index]

    def cleanup(self) -> None:
        """Restore the terminal"""
        self._release_at_ms = [0.0] * self._button_count
        if self._raw_mode_enabled and self._original_terminal_settings is not None:
            termios.tcsetattr(sys.stdin.fileno(), termios.TCSADRAIN, self._original_terminal_settings)
            self._raw_mode_enabled = False
            self._logger.info("Keyboard sampler cleaned up")
