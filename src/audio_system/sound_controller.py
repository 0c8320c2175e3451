"""
Sound Controller - plays signal and error tones with pygame
"""

import os
from typing import Dict, Optional, Tuple, TYPE_CHECKING

import pygame

from game_system.signals import Signal, SoundPack
from .interfaces import IFeedbackPort, IHapticMotor

if TYPE_CHECKING:
    from utils import ClassLogger


class SoundController(IFeedbackPort):
    """
    Feedback port backed by pygame.mixer.

    Tone files live in one folder, named after the pack prefix:
        standard_green_tone.wav, standard_red_tone.wav, ...
        standard_error_tone.wav

    Unlike a hard startup check, missing or broken files only disable
    their own tone: the failure is logged once at load time and playing
    that tone becomes a no-op. If the mixer itself cannot start, the
    controller stays silent but keeps haptic feedback.
    """

    def __init__(self,
                 sounds_folder: str,
                 logger: 'ClassLogger',
                 file_extension: str = "wav",
                 volume: float = 1.0,
                 haptic: Optional[IHapticMotor] = None,
                 haptic_pulse_ms: int = 100):
        """
        Initialize pygame mixer and load every tone pack.

        Args:
            sounds_folder: Folder holding the tone files
            logger: ClassLogger instance for logging
            file_extension: Tone file extension
            volume: Tone volume (0.0 to 1.0)
            haptic: Optional vibration motor for player presses
            haptic_pulse_ms: Vibration pulse length
        """
        self.sounds_folder = sounds_folder
        self.logger = logger
        self.file_extension = file_extension
        self.volume = volume
        self.haptic = haptic
        self.haptic_pulse_ms = haptic_pulse_ms

        self.sound_pack = SoundPack.STANDARD
        self.vibrate_enabled = True
        self.sound_enabled = True
        self.is_paused = False

        # Sound objects keyed by resource prefix (packs may share one)
        self._tones: Dict[str, Dict[Signal, pygame.mixer.Sound]] = {}
        self._error_tones: Dict[str, pygame.mixer.Sound] = {}

        self.mixer = pygame.mixer
        self.mixer_ready = False
        try:
            self.mixer.init()
            self.mixer_ready = True
        except pygame.error as e:
            self.logger.error(f"Audio mixer unavailable, tones disabled: {e}")

        if self.mixer_ready:
            self._load_all_packs()

    def _load_all_packs(self) -> None:
        prefixes = sorted({pack.resource_prefix for pack in SoundPack})
        self.logger.debug(f"Available sound packs: {', '.join(pack.name for pack in SoundPack)}")
        for prefix in prefixes:
            self._load_pack(prefix)

    def _load_pack(self, prefix: str) -> None:
        """Load the tones for one resource prefix, logging every missing file"""
        pack_tones: Dict[Signal, pygame.mixer.Sound] = {}
        for signal in Signal:
            path = os.path.join(self.sounds_folder, f"{prefix}_{signal.name.lower()}_tone.{self.file_extension}")
            sound = self._load_sound(path)
            if sound is not None:
                pack_tones[signal] = sound
        self._tones[prefix] = pack_tones

        error_path = os.path.join(self.sounds_folder, f"{prefix}_error_tone.{self.file_extension}")
        error_sound = self._load_sound(error_path)
        if error_sound is not None:
            self._error_tones[prefix] = error_sound

        error_state = "loaded" if prefix in self._error_tones else "missing"
        self.logger.info(f"Sound pack '{prefix}': {len(pack_tones)}/{len(Signal)} tones, error tone {error_state}")

    def _load_sound(self, path: str) -> Optional[pygame.mixer.Sound]:
        if not os.path.exists(path):
            self.logger.error(f"✗ Tone file not found: {path}")
            return None
        try:
            sound = pygame.mixer.Sound(path)
        except pygame.error as e:
            self.logger.error(f"✗ Failed to load tone {path}: {e}")
            return None
        sound.set_volume(self.volume)
        return sound

    def get_loaded_counts(self) -> Tuple[int, int]:
        """(signal tones, error tones) loaded across all prefixes"""
        return sum(len(tones) for tones in self._tones.values()), len(self._error_tones)

    def play_signal_tone(self, signal: Signal, is_player_pressed: bool = False) -> None:
        if self.is_paused:
            self.logger.debug("Sounds are paused, not playing")
            return

        if is_player_pressed:
            self._vibrate()

        if not self.sound_enabled:
            return

        sound = self._tones.get(self.sound_pack.resource_prefix, {}).get(signal)
        if sound is None:
            self.logger.debug(f"No {self.sound_pack.name} tone for {signal.name}, skipping")
            return
        self._play(sound)

    def play_error_tone(self) -> None:
        if self.is_paused or not self.sound_enabled:
            return
        sound = self._error_tones.get(self.sound_pack.resource_prefix)
        if sound is None:
            self.logger.debug(f"No {self.sound_pack.name} error tone, skipping")
            return
        self._play(sound)

    def _play(self, sound: pygame.mixer.Sound) -> None:
        """Stop whatever is playing, then play sound"""
        try:
            self.mixer.stop()
            sound.play()
        except pygame.error as e:
            self.logger.warning(f"Tone playback failed: {e}")

    def _vibrate(self) -> None:
        if not self.vibrate_enabled or self.haptic is None:
            return
        try:
            self.haptic.pulse(self.haptic_pulse_ms)
        except Exception as e:
            self.logger.warning(f"Failed to vibrate: {e}")

    def pause(self) -> None:
        self.logger.debug("Pausing all sounds")
        self.is_paused = True
        if self.mixer_ready:
            self.mixer.stop()

    def resume(self) -> None:
        self.logger.debug("Resuming sounds")
        self.is_paused = False

    def set_sound_pack(self, sound_pack: SoundPack) -> None:
        self.logger.info(f"Sound pack: {sound_pack.display_name}")
        self.sound_pack = sound_pack

    def set_vibration_enabled(self, enabled: bool) -> None:
        self.vibrate_enabled = enabled
        # Give a sample pulse so the player feels the change
        if enabled and not self.is_paused:
            self._vibrate()

    def set_sound_enabled(self, enabled: bool) -> None:
        self.sound_enabled = enabled
        if not enabled and self.mixer_ready:
            self.mixer.stop()

    def cleanup(self) -> None:
        """Stop sounds and close the audio device"""
        if self.mixer_ready:
            self.mixer.stop()
            self.mixer.quit()
            self.mixer_ready = False
        if self.haptic is not None:
            self.haptic.cleanup()
        self.logger.info("Sound controller cleaned up")
