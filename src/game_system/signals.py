"""
Signals (the four colored buttons) and selectable tone packs
"""

import enum
from typing import Optional


class Signal(enum.IntEnum):
    """One of the four colored buttons. The value is the button index."""
    GREEN = 0
    RED = 1
    YELLOW = 2
    BLUE = 3

    @property
    def index(self) -> int:
        return int(self.value)

    @classmethod
    def from_index(cls, index: int) -> 'Signal':
        """
        Get the Signal for a button index.

        Raises:
            ValueError: If index is not 0..3
        """
        return cls(index)

    def __str__(self) -> str:
        return self.name


class SoundPack(enum.Enum):
    """
    Tone packs - stores display data and the file prefix of its tones.

    Packs without their own recordings reuse the standard tones.
    """
    STANDARD = ("Standard", "Classic Simon game sounds", "standard")
    FUNNY = ("Funny", "Humorous sound effects", "funny")
    ELECTRONIC = ("Electronic", "Modern electronic sounds", "standard")
    RETRO = ("Retro Gaming", "8-bit style game sounds", "standard")
    MUSICAL = ("Musical", "Musical instrument tones", "standard")
    NATURE = ("Nature", "Peaceful sounds from nature", "standard")
    SCI_FI = ("Sci-Fi", "Futuristic space sounds", "standard")

    def __init__(self, display_name: str, description: str, resource_prefix: str):
        self.display_name = display_name
        self.description = description
        self.resource_prefix = resource_prefix

    def tone_file(self, signal: Signal, extension: str = "wav") -> str:
        """File name of the tone for a signal, e.g. 'standard_green_tone.wav'"""
        return f"{self.resource_prefix}_{signal.name.lower()}_tone.{extension}"

    def error_tone_file(self, extension: str = "wav") -> str:
        return f"{self.resource_prefix}_error_tone.{extension}"

    def next_pack(self) -> 'SoundPack':
        """Following pack in declaration order (wraps around)"""
        packs = list(SoundPack)
        return packs[(packs.index(self) + 1) % len(packs)]

    @classmethod
    def from_name(cls, name: Optional[str], default: 'SoundPack' = None) -> 'SoundPack':
        """Look up a pack by enum name, falling back to default (STANDARD) for unknown names"""
        fallback = default if default is not None else cls.STANDARD
        if not name:
            return fallback
        try:
            return cls[name]
        except KeyError:
            return fallback
