"""
GPIO-based button sampler using RPi.GPIO
"""

from typing import List

from .interfaces import IButtonSampler


PULL_MODES = ("off", "up", "down")


class GPIOSampler(IButtonSampler):
    """
    Reads buttons wired to Raspberry Pi GPIO pins (BCM numbering).

    With pull_mode "up" the buttons connect the pin to ground, so a LOW
    level means pressed; otherwise HIGH means pressed.
    RPi.GPIO is imported in setup(), so the class can be constructed (and
    the rest of the game imported) on machines without it.
    """

    def __init__(self,
                 button_pins: List[int],
                 pull_mode: str,
                 logger):
        """
        Args:
            button_pins: GPIO pin numbers (BCM mode), index = button index
            pull_mode: "off", "up" or "down"
            logger: ClassLogger instance for logging
        """
        if pull_mode not in PULL_MODES:
            raise ValueError(f"pull_mode must be one of {PULL_MODES}, got {pull_mode!r}")

        self._button_pins = list(button_pins)
        self._pull_mode = pull_mode
        self._logger = logger
        self._gpio = None
        self._pressed_level = None

    def get_button_count(self) -> int:
        return len(self._button_pins)

    def setup(self) -> None:
        """Configure every button pin as input"""
        try:
            import RPi.GPIO as GPIO
        except ImportError as e:
            self._logger.error("RPi.GPIO is required for GPIO buttons (install the 'pi' extra)", exception=e)
            raise

        pull = {"off": GPIO.PUD_OFF, "up": GPIO.PUD_UP, "down": GPIO.PUD_DOWN}[self._pull_mode]

        GPIO.setmode(GPIO.BCM)
        for pin in self._button_pins:
            GPIO.setup(pin, GPIO.IN, pull_up_down=pull)

        self._gpio = GPIO
        self._pressed_level = GPIO.LOW if self._pull_mode == "up" else GPIO.HIGH

        pin_mapping = ", ".join(f"Btn{i}=GPIO{pin}" for i, pin in enumerate(self._button_pins))
        self._logger.info(f"GPIO sampler initialized: {len(self._button_pins)} pins (pull-{self._pull_mode})")
        self._logger.info(f"Pin mapping: {pin_mapping}")

    def read_button(self, button_index: int) -> bool:
        if self._gpio is None:
            return False
        return self._gpio.input(self._button_pins[button_index]) == self._pressed_level

    def cleanup(self) -> None:
        if self._gpio is None:
            return
        self._gpio.cleanup(self._button_pins)
        self._gpio = None
        self._logger.info("GPIO sampler cleaned up")
