"""
SequenceTracker and the signal sources
"""

import pytest

from game_system import MatchResult, RandomSignalSource, ScriptedSignalSource, SequenceTracker, Signal

GREEN, RED, YELLOW, BLUE = Signal.GREEN, Signal.RED, Signal.YELLOW, Signal.BLUE


@pytest.fixture
def tracker():
    return SequenceTracker(ScriptedSignalSource([GREEN, RED, YELLOW]))


def test_extend_appends_one_signal(tracker):
    sequence = tracker.extend(())
    assert sequence == (GREEN,)

    sequence = tracker.extend(sequence)
    assert sequence == (GREEN, RED)


def test_extend_does_not_modify_input(tracker):
    original = [BLUE]

    extended = tracker.extend(original)

    assert original == [BLUE]
    assert extended == (BLUE, GREEN)


@pytest.mark.parametrize("player, sequence, expected", [
    ((GREEN,), (GREEN, RED), MatchResult.CORRECT),
    ((GREEN, RED), (GREEN, RED), MatchResult.ROUND_COMPLETE),
    ((GREEN, BLUE), (GREEN, RED), MatchResult.MISMATCH),
    ((RED,), (GREEN,), MatchResult.MISMATCH),
    ((GREEN, RED), (GREEN,), MatchResult.OUT_OF_RANGE),
    ((), (GREEN,), MatchResult.INVALID_INDEX),
])
def test_check(tracker, player, sequence, expected):
    assert tracker.check(player, sequence) is expected


def test_only_failures_end_the_game():
    assert not MatchResult.CORRECT.ends_game
    assert not MatchResult.ROUND_COMPLETE.ends_game
    assert MatchResult.MISMATCH.ends_game
    assert MatchResult.OUT_OF_RANGE.ends_game
    assert MatchResult.INVALID_INDEX.ends_game


def test_describe_shows_progress():
    text = SequenceTracker.describe((GREEN,), (GREEN, RED, YELLOW))

    assert text == "GREEN | RED YELLOW (1/3)"


def test_scripted_source_runs_out():
    source = ScriptedSignalSource([GREEN])
    assert source.next_signal() is GREEN

    with pytest.raises(IndexError):
        source.next_signal()


def test_scripted_source_cycles():
    source = ScriptedSignalSource([GREEN, RED], cycle=True)

    assert [source.next_signal() for _ in range(5)] == [GREEN, RED, GREEN, RED, GREEN]


def test_scripted_source_needs_signals():
    with pytest.raises(ValueError):
        ScriptedSignalSource([])


def test_random_source_is_reproducible_with_seed():
    first = RandomSignalSource(seed=42)
    second = RandomSignalSource(seed=42)

    draws = [first.next_signal() for _ in range(50)]

    assert draws == [second.next_signal() for _ in range(50)]
    assert all(isinstance(signal, Signal) for signal in draws)
    assert len(set(draws)) > 1
