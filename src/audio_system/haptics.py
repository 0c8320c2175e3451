"""
GPIO vibration motor for haptic feedback on player presses
"""

from typing import Optional, TYPE_CHECKING

from .interfaces import IHapticMotor

if TYPE_CHECKING:
    from game_system.scheduler import FrameScheduler, TimerHandle


class GPIOHapticMotor(IHapticMotor):
    """
    Vibration motor on a GPIO output pin (through a transistor driver).

    The pin goes HIGH for the pulse duration; switching it off again is
    scheduled on the game's FrameScheduler, so pulses never block the
    frame loop. A new pulse replaces a running one.
    """

    def __init__(self, pin: int, scheduler: 'FrameScheduler', logger):
        """
        Args:
            pin: GPIO pin number (BCM mode)
            scheduler: FrameScheduler used to end pulses
            logger: ClassLogger instance for logging
        """
        self._pin = pin
        self._scheduler = scheduler
        self._logger = logger
        self._gpio = None
        self._off_handle: Optional['TimerHandle'] = None

    def setup(self) -> None:
        """Configure the motor pin as output (Raspberry Pi only)"""
        import RPi.GPIO as GPIO

        GPIO.setmode(GPIO.BCM)
        GPIO.setup(self._pin, GPIO.OUT, initial=GPIO.LOW)
        self._gpio = GPIO
        self._logger.info(f"Haptic motor initialized on GPIO{self._pin}")

    def pulse(self, duration_ms: int) -> None:
        if self._gpio is None:
            return
        self._scheduler.cancel(self._off_handle)
        self._gpio.output(self._pin, self._gpio.HIGH)
        self._off_handle = self._scheduler.after(duration_ms, self._motor_off, name="haptic_off")

    def _motor_off(self) -> None:
        self._off_handle = None
        if self._gpio is not None:
            self._gpio.output(self._pin, self._gpio.LOW)

    def cleanup(self) -> None:
        if self._gpio is None:
            return
        self._scheduler.cancel(self._off_handle)
        self._motor_off()
        self._gpio.cleanup(self._pin)
        self._gpio = None
        self._logger.info("Haptic motor cleaned up")
