"""
Abstract interfaces for game feedback (tones and vibration)
"""

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from game_system.signals import Signal, SoundPack


class IFeedbackPort(ABC):
    """
    Plays the tone and/or haptic pulse for a signal or an error.

    Calls are fire-and-forget. Implementations log their own failures
    (missing tone files, audio device problems) and degrade to silence;
    they should not raise into the game logic.
    """

    @abstractmethod
    def play_signal_tone(self, signal: 'Signal', is_player_pressed: bool = False) -> None:
        """
        Play the tone of a signal.

        Args:
            signal: Signal whose tone to play
            is_player_pressed: True for player presses (adds a haptic pulse)
        """
        pass

    @abstractmethod
    def play_error_tone(self) -> None:
        pass

    @abstractmethod
    def pause(self) -> None:
        """Stop sounds and ignore playback requests until resume()"""
        pass

    @abstractmethod
    def resume(self) -> None:
        pass

    @abstractmethod
    def set_sound_pack(self, sound_pack: 'SoundPack') -> None:
        pass

    @abstractmethod
    def set_vibration_enabled(self, enabled: bool) -> None:
        pass

    @abstractmethod
    def set_sound_enabled(self, enabled: bool) -> None:
        pass

    @abstractmethod
    def cleanup(self) -> None:
        """Release audio/haptic resources"""
        pass


class IHapticMotor(ABC):
    """Vibration motor driven for a short pulse"""

    @abstractmethod
    def pulse(self, duration_ms: int) -> None:
        pass

    @abstractmethod
    def cleanup(self) -> None:
        pass
