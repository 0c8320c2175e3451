"""
Mock Sound Controller - No-op feedback port for testing without audio hardware
"""

from typing import List, Tuple, TYPE_CHECKING

from .interfaces import IFeedbackPort

if TYPE_CHECKING:
    from game_system.signals import Signal, SoundPack


class MockSoundController(IFeedbackPort):
    """
    Feedback port that plays nothing.

    Every call is logged at debug level and appended to `calls` as a
    tuple, e.g. ("signal", Signal.GREEN, True) or ("error",), so tests and
    headless runs can see what would have been played.
    """

    def __init__(self, logger):
        self.logger = logger
        self.calls: List[Tuple] = []
        self.is_paused = False
        self.sound_pack = None
        self.vibrate_enabled = True
        self.sound_enabled = True
        self.logger.info("🔇 MockSoundController initialized (audio disabled)")

    def play_signal_tone(self, signal: 'Signal', is_player_pressed: bool = False) -> None:
        self.calls.append(("signal", signal, is_player_pressed))
        self.logger.debug(f"Mock: tone {signal.name} (player={is_player_pressed})")

    def play_error_tone(self) -> None:
        self.calls.append(("error",))
        self.logger.debug("Mock: error tone")

    def pause(self) -> None:
        self.is_paused = True
        self.calls.append(("pause",))

    def resume(self) -> None:
        self.is_paused = False
        self.calls.append(("resume",))

    def set_sound_pack(self, sound_pack: 'SoundPack') -> None:
        self.sound_pack = sound_pack
        self.calls.append(("sound_pack", sound_pack))

    def set_vibration_enabled(self, enabled: bool) -> None:
        self.vibrate_enabled = enabled
        self.calls.append(("vibration", enabled))

    def set_sound_enabled(self, enabled: bool) -> None:
        self.sound_enabled = enabled
        self.calls.append(("sound", enabled))

    def cleanup(self) -> None:
        self.calls.append(("cleanup",))
        self.logger.info("Mock: cleaned up")

    def signal_tones(self) -> List[Tuple['Signal', bool]]:
        """(signal, is_player_pressed) for every signal tone played so far"""
        return [(call[1], call[2]) for call in self.calls if call[0] == "signal"]

    def count(self, kind: str) -> int:
        return sum(1 for call in self.calls if call[0] == kind)

    def clear(self) -> None:
        self.calls.clear()
