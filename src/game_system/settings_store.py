"""
Persistence of the high score and player settings
"""

import json
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from .signals import SoundPack


@dataclass(frozen=True)
class PersistedSettings:
    """Values that outlive a session"""
    high_score: int = 0
    sound_pack: SoundPack = SoundPack.STANDARD
    vibrate_enabled: bool = True
    sound_enabled: bool = True

    def to_dict(self) -> dict:
        return {
            "high_score": self.high_score,
            "sound_pack": self.sound_pack.name,
            "vibrate_enabled": self.vibrate_enabled,
            "sound_enabled": self.sound_enabled,
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'PersistedSettings':
        """Build from stored data, ignoring wrong types and unknown keys"""
        defaults = cls()
        high_score = data.get("high_score", defaults.high_score)
        if not isinstance(high_score, int) or isinstance(high_score, bool) or high_score < 0:
            high_score = defaults.high_score
        vibrate = data.get("vibrate_enabled", defaults.vibrate_enabled)
        sound = data.get("sound_enabled", defaults.sound_enabled)
        return cls(
            high_score=high_score,
            sound_pack=SoundPack.from_name(data.get("sound_pack")),
            vibrate_enabled=vibrate if isinstance(vibrate, bool) else defaults.vibrate_enabled,
            sound_enabled=sound if isinstance(sound, bool) else defaults.sound_enabled,
        )


class SettingsStore(ABC):
    """Persistence port used by GameSession"""

    @abstractmethod
    def load(self) -> PersistedSettings:
        """Load stored settings (defaults when nothing is stored)"""
        pass

    @abstractmethod
    def save(self, settings: PersistedSettings) -> bool:
        """
        Store settings.

        Returns:
            True on success, False if the write failed (failure is logged)
        """
        pass


class MemorySettingsStore(SettingsStore):
    """Keeps settings in memory only; counts saves for tests and demos"""

    def __init__(self, initial: Optional[PersistedSettings] = None):
        self.settings = initial if initial is not None else PersistedSettings()
        self.save_count = 0

    def load(self) -> PersistedSettings:
        return self.settings

    def save(self, settings: PersistedSettings) -> bool:
        self.settings = settings
        self.save_count += 1
        return True


class JsonSettingsStore(SettingsStore):
    """
    Settings in a small JSON file.

    A missing file loads defaults silently; a corrupt or unreadable one
    loads defaults with a warning. Write errors are logged, never raised.
    """

    def __init__(self, path: str, logger):
        self.path = Path(path)
        self.logger = logger

    def load(self) -> PersistedSettings:
        if not self.path.exists():
            self.logger.info(f"No settings file at {self.path}, using defaults")
            return PersistedSettings()

        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            self.logger.warning(f"Could not read settings from {self.path}: {e} - using defaults")
            return PersistedSettings()

        if not isinstance(data, dict):
            self.logger.warning(f"Settings file {self.path} does not hold an object - using defaults")
            return PersistedSettings()

        settings = PersistedSettings.from_dict(data)
        self.logger.info(
            f"Loaded settings - Sound Pack: {settings.sound_pack.name}, "
            f"High Score: {settings.high_score}, Vibrate: {settings.vibrate_enabled}, "
            f"Sound: {settings.sound_enabled}"
        )
        return settings

    def save(self, settings: PersistedSettings) -> bool:
        tmp_path = self.path.with_name(self.path.name + ".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(tmp_path, "w", encoding="utf-8") as f:
                json.dump(settings.to_dict(), f, indent=2)
            tmp_path.replace(self.path)
        except OSError as e:
            self.logger.error(f"Failed to save settings to {self.path}: {e}", exception=e)
            return False

        self.logger.debug(f"Saved settings to {self.path}: {settings.to_dict()}")
        return True
