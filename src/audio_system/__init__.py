"""
Audio System Module

Tone and vibration feedback for the Simon game.
"""

from .interfaces import IFeedbackPort, IHapticMotor
from .haptics import GPIOHapticMotor
from .mock_sound_controller import MockSoundController
from .sound_controller import SoundController

__all__ = [
    'IFeedbackPort',
    'IHapticMotor',
    'GPIOHapticMotor',
    'MockSoundController',
    'SoundController'
]
