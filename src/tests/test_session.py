"""
GameSession gameplay: playback, player input, levels, timeout and game over
"""

import pytest

from audio_system import MockSoundController
from game_system import PersistedSettings, SessionPhase, Signal, SoundPack
from game_system.session import REASON_TOO_MANY_BUTTONS, REASON_WRONG_BUTTON, timeout_reason

GREEN, RED, YELLOW, BLUE = Signal.GREEN, Signal.RED, Signal.YELLOW, Signal.BLUE


def test_seeded_game_green_red_yellow(make_session):
    h = make_session([GREEN, RED, YELLOW])

    assert h.state.phase is SessionPhase.SHOWING_SEQUENCE
    assert h.state.sequence == (GREEN,)
    assert h.state.level == 1

    h.advance(500)
    assert h.state.currently_lit is GREEN
    assert h.feedback.signal_tones() == [(GREEN, False)]
    h.advance(600)
    assert h.state.currently_lit is None
    h.advance(400)
    assert h.state.phase is SessionPhase.PLAYER_REPEATING

    # Level 1 -> 2
    h.tap(GREEN)
    assert h.state.level == 2
    assert h.state.sequence == (GREEN, RED)
    h.advance(1000)
    assert h.state.phase is SessionPhase.SHOWING_SEQUENCE
    h.finish_playback()
    assert h.state.phase is SessionPhase.PLAYER_REPEATING
    assert h.state.player_sequence == ()

    # Level 2 -> 3
    h.tap(GREEN)
    h.tap(RED)
    assert h.state.level == 3
    assert h.state.sequence == (GREEN, RED, YELLOW)
    h.advance(1000)
    h.finish_playback()

    # Wrong third press
    h.tap(GREEN)
    h.tap(RED)
    h.tap(BLUE)
    assert h.state.player_sequence == (GREEN, RED, BLUE)
    assert h.feedback.count("error") == 0

    h.advance(300)
    assert h.feedback.count("error") == 1
    assert h.state.all_signals_lit

    h.advance(1799)
    assert h.state.phase is SessionPhase.PLAYER_REPEATING

    h.advance(1)
    assert h.state.phase is SessionPhase.GAME_OVER
    assert h.state.game_over_reason == REASON_WRONG_BUTTON
    assert h.state.high_score == 3
    assert not h.state.all_signals_lit
    assert h.store.settings.high_score == 3


def test_playback_plays_every_signal_in_order(make_session):
    h = make_session([GREEN, RED, YELLOW])
    h.finish_playback()
    h.play_round()
    h.tap(GREEN)
    h.tap(RED)
    h.advance(1000)
    h.feedback.clear()

    h.finish_playback()

    assert h.feedback.signal_tones() == [(GREEN, False), (RED, False), (YELLOW, False)]


def test_player_press_lights_button_briefly(harness):
    harness.finish_playback()
    harness.play_round()  # now level 2
    harness.session.on_button_event(GREEN, True)

    assert harness.state.currently_lit is GREEN
    assert harness.feedback.signal_tones()[-1] == (GREEN, True)

    harness.advance(299)
    assert harness.state.currently_lit is GREEN
    harness.advance(1)
    assert harness.state.currently_lit is None


def test_second_finger_is_ignored(make_session):
    h = make_session([GREEN, RED, YELLOW])
    h.finish_playback()
    h.play_round()
    h.feedback.clear()

    h.session.on_button_event(GREEN, True)
    h.session.on_button_event(RED, True)

    assert h.state.player_sequence == (GREEN,)
    assert h.state.active_presses == frozenset({GREEN, RED})
    assert h.feedback.signal_tones() == [(GREEN, True)]

    h.session.on_button_event(RED, False)
    h.session.on_button_event(GREEN, False)
    assert h.state.active_presses == frozenset()

    h.tap(RED)
    assert h.state.player_sequence == (GREEN, RED)
    assert h.state.level == 3


def test_release_without_press_is_ignored(harness):
    harness.finish_playback()
    before = harness.state

    harness.session.on_button_event(BLUE, False)

    assert harness.state is before


def test_presses_ignored_while_showing_sequence(harness):
    assert harness.state.phase is SessionPhase.SHOWING_SEQUENCE

    harness.tap(GREEN)

    assert harness.state.player_sequence == ()
    assert harness.state.active_presses == frozenset()
    assert all(not is_player for _signal, is_player in harness.feedback.signal_tones())


def test_presses_ignored_during_next_level_delay(make_session):
    h = make_session([GREEN, RED])
    h.finish_playback()
    h.tap(GREEN)

    h.tap(RED)

    assert h.state.player_sequence == (GREEN,)
    h.advance(1000)
    h.finish_playback()
    assert h.state.phase is SessionPhase.PLAYER_REPEATING
    assert h.state.player_sequence == ()


def test_presses_ignored_after_game_over(harness):
    harness.finish_playback()
    harness.tap(RED)
    harness.advance(2100)
    assert harness.state.phase is SessionPhase.GAME_OVER

    harness.tap(GREEN)

    assert harness.state.phase is SessionPhase.GAME_OVER
    assert harness.state.player_sequence == (RED,)


def test_sequence_grows_by_one_each_level(harness):
    harness.finish_playback()
    sequences = [harness.state.sequence]

    for _ in range(5):
        harness.play_round()
        sequences.append(harness.state.sequence)

    for previous, current in zip(sequences, sequences[1:]):
        assert len(current) == len(previous) + 1
        assert current[:len(previous)] == previous
    assert harness.state.level == len(harness.state.sequence) == 6


def test_player_sequence_stays_a_prefix(harness):
    states = []
    harness.session.subscribe(states.append)

    harness.finish_playback()
    for _ in range(4):
        harness.play_round()

    assert states
    assert all(state.is_player_prefix() for state in states)


def test_timeout_ends_game_exactly_once(harness):
    harness.finish_playback()

    harness.advance(9999)
    assert harness.feedback.count("error") == 0

    harness.advance(1)
    assert harness.feedback.count("error") == 1
    assert harness.state.phase is SessionPhase.PLAYER_REPEATING

    harness.advance(300)
    assert harness.feedback.count("error") == 2
    harness.advance(1800)
    assert harness.state.phase is SessionPhase.GAME_OVER
    assert harness.state.game_over_reason == timeout_reason(10000)
    assert harness.state.game_over_reason == "Timeout - no button pressed for 10 seconds"

    harness.advance(60000)
    assert harness.feedback.count("error") == 2


def test_press_restarts_timeout(harness):
    harness.finish_playback()
    harness.play_round()  # level 2: GREEN, RED

    harness.advance(5000)
    harness.tap(GREEN)
    harness.advance(9999)
    assert harness.feedback.count("error") == 0

    harness.advance(1)
    assert harness.feedback.count("error") == 1


def test_no_timeout_while_showing_sequence(harness):
    harness.finish_playback()
    for _ in range(9):
        harness.play_round()
    harness.repeat_sequence()
    harness.advance(1000)

    # Level 11 playback is longer than the timeout
    assert harness.playback_ms() > harness.timings.player_timeout_ms
    harness.finish_playback()

    assert harness.feedback.count("error") == 0
    assert harness.state.phase is SessionPhase.PLAYER_REPEATING


def test_high_score_kept_when_not_beaten(make_session):
    h = make_session(settings=PersistedSettings(high_score=5))
    h.finish_playback()

    h.tap(BLUE)
    h.advance(2100)

    assert h.state.phase is SessionPhase.GAME_OVER
    assert h.state.high_score == 5
    assert h.store.save_count == 0


def test_new_high_score_is_saved(make_session):
    h = make_session(settings=PersistedSettings(high_score=1))
    h.finish_playback()
    h.play_round()

    h.tap(BLUE)
    h.advance(2100)

    assert h.state.high_score == 2
    assert h.store.settings.high_score == 2
    assert h.store.save_count == 1


def test_start_new_game_after_game_over(harness):
    harness.finish_playback()
    harness.play_round()
    harness.tap(BLUE)
    harness.advance(2100)
    assert harness.state.phase is SessionPhase.GAME_OVER

    harness.session.start_new_game()

    state = harness.state
    assert state.phase is SessionPhase.SHOWING_SEQUENCE
    assert state.level == 1
    assert len(state.sequence) == 1
    assert state.player_sequence == ()
    assert state.game_over_reason is None
    assert state.high_score == 2


def test_start_new_game_mid_playback_cancels_old_timers(harness):
    harness.advance(700)

    harness.session.start_new_game()
    harness.feedback.clear()
    harness.advance(499)

    assert harness.feedback.signal_tones() == []
    harness.advance(1)
    assert len(harness.feedback.signal_tones()) == 1


def test_start_loads_settings(make_session, feedback):
    settings = PersistedSettings(high_score=7, sound_pack=SoundPack.RETRO, vibrate_enabled=False, sound_enabled=True)

    h = make_session(settings=settings)

    assert h.state.high_score == 7
    assert h.state.sound_pack is SoundPack.RETRO
    assert not h.state.vibrate_enabled
    assert feedback.sound_pack is SoundPack.RETRO
    assert feedback.vibrate_enabled is False


def test_start_twice_is_ignored(harness):
    harness.advance(500)
    sequence = harness.state.sequence

    harness.session.start()

    assert harness.state.sequence == sequence
    assert harness.state.currently_lit is not None


def test_startup_animation_then_first_game(make_session):
    h = make_session(startup_animation=True)

    assert h.state.phase is SessionPhase.WAITING_TO_START
    h.advance(500)
    assert h.state.currently_lit is GREEN
    h.advance(300)
    assert h.state.currently_lit is None
    h.advance(150)
    assert h.state.currently_lit is RED

    h.advance(2800 - 950 - 1)
    assert h.state.phase is SessionPhase.WAITING_TO_START
    assert h.state.sequence == ()

    h.advance(1)
    assert h.state.phase is SessionPhase.SHOWING_SEQUENCE
    assert len(h.state.sequence) == 1
    assert [signal for signal, _ in h.feedback.signal_tones()] == [GREEN, RED, YELLOW, BLUE]


def test_setters_update_state_feedback_and_store(harness):
    harness.session.set_sound_pack(SoundPack.FUNNY)
    harness.session.set_vibration_enabled(False)
    harness.session.set_sound_enabled(False)

    assert harness.state.sound_pack is SoundPack.FUNNY
    assert not harness.state.vibrate_enabled
    assert not harness.state.sound_enabled
    assert harness.feedback.sound_pack is SoundPack.FUNNY
    assert harness.feedback.sound_enabled is False
    assert harness.store.settings == PersistedSettings(
        high_score=0, sound_pack=SoundPack.FUNNY, vibrate_enabled=False, sound_enabled=False
    )


class ExplodingFeedback(MockSoundController):

    def play_signal_tone(self, signal, is_player_pressed=False):
        raise RuntimeError("speaker on fire")

    def play_error_tone(self):
        raise RuntimeError("speaker on fire")

    def pause(self):
        raise RuntimeError("speaker on fire")

    def resume(self):
        raise RuntimeError("speaker on fire")


def test_feedback_failures_do_not_stop_the_game(make_session, logger):
    h = make_session(feedback_port=ExplodingFeedback(logger))

    h.finish_playback()
    assert h.state.phase is SessionPhase.PLAYER_REPEATING

    h.tap(GREEN)
    assert h.state.level == 2
    h.session.on_background()
    h.session.on_foreground()
    h.finish_playback()
    h.tap(BLUE)
    h.advance(2100)
    assert h.state.phase is SessionPhase.GAME_OVER


def test_failing_observer_does_not_break_session(harness):
    def broken_observer(state):
        raise ValueError("bad presenter")

    seen = []
    harness.session.subscribe(broken_observer)
    harness.session.subscribe(seen.append)

    harness.finish_playback()

    assert harness.state.phase is SessionPhase.PLAYER_REPEATING
    assert seen[-1].phase is SessionPhase.PLAYER_REPEATING


def test_close_cancels_timers_and_flushes(harness):
    harness.advance(100)

    harness.session.close()
    harness.session.close()
    harness.advance(60000)

    assert harness.state.phase is SessionPhase.SHOWING_SEQUENCE
    assert harness.scheduler.pending_count == 0
    assert harness.feedback.count("cleanup") == 1
    assert harness.store.save_count == 1


def test_input_and_settings_ignored_after_close(harness):
    harness.finish_playback()
    harness.session.close()
    before = harness.state

    harness.tap(GREEN)
    harness.session.enter_settings()
    harness.session.exit_settings()

    assert harness.state is before
    assert harness.scheduler.pending_count == 0
    assert harness.feedback.signal_tones()[-1] == (GREEN, False)


def test_player_sequence_longer_than_game_sequence_ends_game(harness):
    harness.finish_playback()

    harness.session._check_match((GREEN, GREEN))
    harness.advance(2100)

    assert harness.state.phase is SessionPhase.GAME_OVER
    assert harness.state.game_over_reason == REASON_TOO_MANY_BUTTONS


@pytest.mark.parametrize("wrong", [RED, YELLOW, BLUE])
def test_any_wrong_first_press_ends_game(make_session, wrong):
    h = make_session([GREEN])
    h.finish_playback()

    h.tap(wrong)
    h.advance(2100)

    assert h.state.phase is SessionPhase.GAME_OVER
    assert h.state.high_score == 1
