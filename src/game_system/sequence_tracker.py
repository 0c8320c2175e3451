"""
Sequence generation and validation of the player's repetition
"""

import enum
import random
from abc import ABC, abstractmethod
from typing import Iterable, List, Optional, Sequence, Tuple

from .signals import Signal


class SignalSource(ABC):
    """Randomness port - the only source of randomness in a game"""

    @abstractmethod
    def next_signal(self) -> Signal:
        pass


class RandomSignalSource(SignalSource):
    """Uniform choice over all Signals, with replacement (repeats allowed)"""

    def __init__(self, seed: Optional[int] = None):
        self._rng = random.Random(seed)
        self._signals: List[Signal] = list(Signal)

    def next_signal(self) -> Signal:
        return self._rng.choice(self._signals)


class ScriptedSignalSource(SignalSource):
    """
    Replays a fixed list of signals, for tests and demos.

    Example:
        source = ScriptedSignalSource([Signal.GREEN, Signal.RED])
        source.next_signal()  # GREEN
        source.next_signal()  # RED
        source.next_signal()  # GREEN again when cycle=True, IndexError otherwise
    """

    def __init__(self, signals: Iterable[Signal], cycle: bool = False):
        self._signals: List[Signal] = list(signals)
        if not self._signals:
            raise ValueError("ScriptedSignalSource needs at least one signal")
        self._cycle = cycle
        self._position = 0

    def next_signal(self) -> Signal:
        if self._position >= len(self._signals):
            if not self._cycle:
                raise IndexError("ScriptedSignalSource ran out of signals")
            self._position = 0
        signal = self._signals[self._position]
        self._position += 1
        return signal


class MatchResult(enum.Enum):
    """Outcome of validating the player's latest press"""
    CORRECT = "correct"                  # right so far, round continues
    ROUND_COMPLETE = "round_complete"    # whole sequence repeated
    MISMATCH = "mismatch"                # wrong signal
    OUT_OF_RANGE = "out_of_range"        # more presses than sequence entries
    INVALID_INDEX = "invalid_index"      # nothing pressed yet (should never happen)

    @property
    def ends_game(self) -> bool:
        return self in (MatchResult.MISMATCH, MatchResult.OUT_OF_RANGE, MatchResult.INVALID_INDEX)


class SequenceTracker:
    """
    Grows the target sequence and checks the player's repetition of it.

    The tracker is stateless apart from its signal source; sequences are
    passed in and returned as tuples so GameSession keeps sole ownership of
    the game state.
    """

    def __init__(self, signal_source: SignalSource, logger=None):
        self.signal_source = signal_source
        self._logger = logger

    def extend(self, sequence: Sequence[Signal]) -> Tuple[Signal, ...]:
        """Return sequence with one new signal appended"""
        new_signal = self.signal_source.next_signal()
        extended = tuple(sequence) + (new_signal,)
        if self._logger:
            self._logger.debug(f"Adding {new_signal} to sequence, now {[s.name for s in extended]}")
        return extended

    def check(self, player_sequence: Sequence[Signal], sequence: Sequence[Signal]) -> MatchResult:
        """
        Validate the most recent entry of player_sequence.

        Earlier entries were validated when they were pressed, so only the
        last index is compared.
        """
        index = len(player_sequence) - 1

        if index < 0:
            return MatchResult.INVALID_INDEX
        if index >= len(sequence):
            return MatchResult.OUT_OF_RANGE
        if player_sequence[index] != sequence[index]:
            return MatchResult.MISMATCH
        if len(player_sequence) == len(sequence):
            return MatchResult.ROUND_COMPLETE
        return MatchResult.CORRECT

    @staticmethod
    def describe(player_sequence: Sequence[Signal], sequence: Sequence[Signal]) -> str:
        """Human-readable progress, e.g. 'GREEN RED | YELLOW (2/3)'"""
        done = " ".join(s.name for s in player_sequence)
        rest = " ".join(s.name for s in sequence[len(player_sequence):])
        return f"{done} | {rest} ({len(player_sequence)}/{len(sequence)})"
