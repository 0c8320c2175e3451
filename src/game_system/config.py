"""
Game system configuration
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional

from .signals import Signal


@dataclass(frozen=True)
class SessionTimings:
    """Durations used by GameSession (all in milliseconds)"""

    # Sequence playback
    playback_lead_in_ms: int = 500
    playback_lit_ms: int = 600
    playback_gap_ms: int = 400

    # Player input
    player_lit_ms: int = 300
    player_timeout_ms: int = 10000
    feedback_delay_ms: int = 300     # lets the press tone play before game over
    next_level_delay_ms: int = 1000

    # Game over flash
    flash_count: int = 3
    flash_on_ms: int = 300
    flash_off_ms: int = 300

    # Startup animation (once per session)
    startup_lead_in_ms: int = 500
    startup_lit_ms: int = 300
    startup_gap_ms: int = 150
    startup_tail_ms: int = 500

    def validate(self) -> None:
        for name, value in vars(self).items():
            if value < 0:
                raise ValueError(f"{name} must not be negative, got {value}")
        if self.player_timeout_ms <= 0:
            raise ValueError("player_timeout_ms must be positive")


@dataclass
class ButtonConfig:
    """Button hardware configuration"""
    pins: List[int]
    pull_mode: str = "off"  # "off", "up" or "down"
    sample_rate_hz: int = 200


@dataclass
class ButtonLayout:
    """
    Which button index does what.

    Color buttons feed the game; control buttons trigger session intents.
    """
    signal_buttons: Dict[int, Signal] = field(default_factory=lambda: {
        0: Signal.GREEN,
        1: Signal.RED,
        2: Signal.YELLOW,
        3: Signal.BLUE,
    })
    start_button: Optional[int] = 4
    settings_button: Optional[int] = 5
    pause_button: Optional[int] = 6

    def control_buttons(self) -> Dict[str, int]:
        controls = {
            "start": self.start_button,
            "settings": self.settings_button,
            "pause": self.pause_button,
        }
        return {name: index for name, index in controls.items() if index is not None}

    @property
    def button_count(self) -> int:
        indices = list(self.signal_buttons) + list(self.control_buttons().values())
        return max(indices) + 1 if indices else 0

    def validate(self) -> None:
        if sorted(self.signal_buttons.values()) != sorted(Signal):
            raise ValueError("Every Signal must be mapped to exactly one button")
        indices = list(self.signal_buttons) + list(self.control_buttons().values())
        if len(indices) != len(set(indices)):
            raise ValueError(f"Button index used twice in layout: {indices}")
        if any(index < 0 for index in indices):
            raise ValueError(f"Button indices must not be negative: {indices}")


@dataclass
class AudioConfig:
    """Feedback (tones and vibration) configuration"""
    sounds_folder: str = "sounds"
    file_extension: str = "wav"
    volume: float = 1.0
    haptic_pin: Optional[int] = None
    haptic_pulse_ms: int = 100


@dataclass
class GameConfig:
    """Main game system configuration"""

    button_config: ButtonConfig
    layout: ButtonLayout = field(default_factory=ButtonLayout)
    audio_config: AudioConfig = field(default_factory=AudioConfig)
    timings: SessionTimings = field(default_factory=SessionTimings)

    # Frame loop
    frame_duration_ms: float = 20  # 50 FPS

    # Session
    settings_file: str = "simon_settings.json"
    play_startup_animation: bool = True
    seed: Optional[int] = None

    @property
    def button_count(self) -> int:
        return len(self.button_config.pins)

    @property
    def target_fps(self) -> float:
        return 1000.0 / self.frame_duration_ms

    def validate(self) -> None:
        """Basic validation of configuration"""
        if not self.button_config.pins:
            raise ValueError("At least one button pin must be configured")

        if self.frame_duration_ms <= 0:
            raise ValueError("Frame duration must be positive")

        if self.button_config.pull_mode not in ("off", "up", "down"):
            raise ValueError(f"Unknown pull mode: {self.button_config.pull_mode}")

        self.layout.validate()
        self.timings.validate()

        if self.layout.button_count > self.button_count:
            raise ValueError(
                f"Layout needs {self.layout.button_count} buttons but only {self.button_count} pins are configured"
            )

        pins = list(self.button_config.pins)
        if self.audio_config.haptic_pin is not None:
            pins.append(self.audio_config.haptic_pin)
        if len(pins) != len(set(pins)):
            raise ValueError(f"GPIO pin used twice: {pins}")

        for pin in pins:
            if not (2 <= pin <= 27):  # Valid RPi GPIO range
                raise ValueError(f"GPIO pin {pin} out of valid range (2-27)")

        if not (0.0 <= self.audio_config.volume <= 1.0):
            raise ValueError(f"Volume must be 0.0-1.0, got {self.audio_config.volume}")
