"""
Session phases and the immutable session state snapshot
"""

import enum
from dataclasses import dataclass, field, replace
from typing import FrozenSet, Optional, Tuple

from .signals import Signal, SoundPack


class SessionPhase(enum.Enum):
    """
    Stage of the turn-taking protocol. Exactly one is active at a time.

    Transitions:
    - WAITING_TO_START → SHOWING_SEQUENCE (new game)
    - SHOWING_SEQUENCE → PLAYER_REPEATING (playback finished)
    - PLAYER_REPEATING → SHOWING_SEQUENCE (round complete, after delay)
    - PLAYER_REPEATING → GAME_OVER (wrong press, too many presses, timeout)
    - GAME_OVER → SHOWING_SEQUENCE (new game)
    - any → SETTINGS → phase restored on exit
    """
    WAITING_TO_START = "WaitingToStart"
    SHOWING_SEQUENCE = "ShowingSequence"
    PLAYER_REPEATING = "PlayerRepeating"
    GAME_OVER = "GameOver"
    SETTINGS = "Settings"

    @property
    def is_live(self) -> bool:
        """Live phases are suspended on background and resumed on foreground"""
        return self in (SessionPhase.SHOWING_SEQUENCE, SessionPhase.PLAYER_REPEATING)

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class GameSessionState:
    """
    Immutable snapshot of everything a presenter needs to render the game.

    GameSession replaces the snapshot on every change, so observers can
    keep references to old snapshots safely.
    """
    phase: SessionPhase = SessionPhase.WAITING_TO_START
    level: int = 1
    sequence: Tuple[Signal, ...] = ()
    player_sequence: Tuple[Signal, ...] = ()
    currently_lit: Optional[Signal] = None
    all_signals_lit: bool = False
    high_score: int = 0
    active_presses: FrozenSet[Signal] = field(default_factory=frozenset)
    sound_pack: SoundPack = SoundPack.STANDARD
    vibrate_enabled: bool = True
    sound_enabled: bool = True
    game_over_reason: Optional[str] = None

    def copy_with(self, **changes) -> 'GameSessionState':
        return replace(self, **changes)

    def is_player_prefix(self) -> bool:
        """True if player_sequence matches the start of sequence"""
        count = len(self.player_sequence)
        return count <= len(self.sequence) and self.sequence[:count] == self.player_sequence

    def __str__(self) -> str:
        lit = self.currently_lit.name if self.currently_lit is not None else "-"
        return (
            f"GameSessionState("
            f"phase={self.phase}, "
            f"level={self.level}, "
            f"progress={len(self.player_sequence)}/{len(self.sequence)}, "
            f"lit={lit}, "
            f"high_score={self.high_score}"
            f")"
        )
