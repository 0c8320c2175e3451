"""
Button System Package

Button reading with edge detection, from GPIO pins or the keyboard.
"""

from .button_state import ButtonState
from .interfaces import IButtonReader, IButtonSampler
from .button_reader import ButtonReader
from .gpio_sampler import GPIOSampler
from .keyboard_sampler import KeyboardSampler

__all__ = [
    "ButtonState",
    "IButtonReader",
    "IButtonSampler",
    "ButtonReader",
    "GPIOSampler",
    "KeyboardSampler"
]
