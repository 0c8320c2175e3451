"""
Button reader with edge detection on top of an IButtonSampler
"""

from typing import Dict, List, Optional

from .interfaces import IButtonReader, IButtonSampler
from .button_state import ButtonState


class ButtonReader(IButtonReader):
    """
    Samples every button once per call and reports edges.

    Buttons held down when ignore_pressed_until_released() is called read
    as released until they are physically let go, so a button held through
    startup does not count as a press.

    Example:
        sampler = GPIOSampler([17, 27, 22, 23, 24, 25, 5], "up", logger)
        reader = ButtonReader(sampler, logger, labels={0: "GREEN", 1: "RED"})

        while True:
            state = reader.read_buttons()
            for index in state.pressed_buttons():
                ...
    """

    def __init__(self,
                 sampler: IButtonSampler,
                 logger,
                 labels: Optional[Dict[int, str]] = None):
        """
        Args:
            sampler: IButtonSampler reading the hardware
            logger: ClassLogger instance for logging
            labels: Optional names used in log lines instead of indices
        """
        self._sampler = sampler
        self._logger = logger
        self._labels = dict(labels or {})

        button_count = sampler.get_button_count()
        self._previous_state: List[bool] = [False] * button_count
        self._ignored_buttons: List[bool] = [False] * button_count
        self._cleaned_up = False

        self._sampler.setup()

        self._logger.info(f"ButtonReader initialized with {button_count} buttons")

    def _label(self, index: int) -> str:
        return self._labels.get(index, f"Button {index}")

    def ignore_pressed_until_released(self) -> None:
        """Treat currently held buttons as released until they go up"""
        for i in range(self._sampler.get_button_count()):
            if self._sampler.read_button(i):
                self._ignored_buttons[i] = True
                self._previous_state[i] = False  # no release edge when it goes up
                self._logger.debug(f"{self._label(i)} will be ignored until released")

    def read_buttons(self) -> ButtonState:
        current: List[bool] = []
        for i in range(self._sampler.get_button_count()):
            is_pressed = self._sampler.read_button(i)
            if self._ignored_buttons[i]:
                if not is_pressed:
                    self._ignored_buttons[i] = False
                    self._logger.debug(f"{self._label(i)} released, no longer ignored")
                is_pressed = False
            current.append(is_pressed)

        state = ButtonState(for_button=current, previous_state_of=self._previous_state)
        self._previous_state = current.copy()

        for i in state.pressed_buttons():
            self._logger.info(f"{self._label(i)} pressed")
        for i in state.released_buttons():
            self._logger.debug(f"{self._label(i)} released")

        return state

    def get_button_count(self) -> int:
        return self._sampler.get_button_count()

    def cleanup(self) -> None:
        if self._cleaned_up:
            return
        self._cleaned_up = True
        try:
            self._sampler.cleanup()
        except Exception as e:
            self._logger.warning(f"Button sampler cleanup failed: {e}")
            return
        self._logger.info("ButtonReader cleaned up successfully")
