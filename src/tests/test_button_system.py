"""
Button state edges, ButtonReader filtering and the samplers
"""

import pytest

from button_system import ButtonReader, ButtonState, GPIOSampler, IButtonSampler, KeyboardSampler


class FakeSampler(IButtonSampler):
    """Buttons held down are the indices in `pressed`"""

    def __init__(self, count=7):
        self.count = count
        self.pressed = set()
        self.setup_called = False
        self.cleanup_calls = 0

    def read_button(self, button_index):
        return button_index in self.pressed

    def get_button_count(self):
        return self.count

    def setup(self):
        self.setup_called = True

    def cleanup(self):
        self.cleanup_calls += 1


def test_button_state_edges():
    state = ButtonState([True, False, True], [False, True, True])

    assert state.was_changed == [True, True, False]
    assert state.pressed_buttons() == [0]
    assert state.released_buttons() == [1]
    assert state.total_buttons_pressed == 2
    assert state.any_changed
    assert state.get_button_count() == 3


def test_button_state_validation():
    with pytest.raises(ValueError):
        ButtonState([True], [True, False])
    with pytest.raises(TypeError):
        ButtonState([1], [0])
    with pytest.raises(TypeError):
        ButtonState((True,), [False])


def test_reader_reports_press_and_release(logger):
    sampler = FakeSampler(count=3)
    reader = ButtonReader(sampler, logger)
    assert sampler.setup_called

    sampler.pressed = {2}
    assert reader.read_buttons().pressed_buttons() == [2]
    assert reader.read_buttons().pressed_buttons() == []

    sampler.pressed = set()
    assert reader.read_buttons().released_buttons() == [2]


def test_reader_ignores_buttons_held_until_released(logger):
    sampler = FakeSampler(count=2)
    reader = ButtonReader(sampler, logger, labels={0: "GREEN"})
    sampler.pressed = {0}

    reader.ignore_pressed_until_released()

    state = reader.read_buttons()
    assert state.for_button == [False, False]
    sampler.pressed = set()
    assert not reader.read_buttons().any_changed
    sampler.pressed = {0}
    assert reader.read_buttons().pressed_buttons() == [0]


def test_reader_cleanup_once(logger):
    sampler = FakeSampler()
    reader = ButtonReader(sampler, logger)

    reader.cleanup()
    reader.cleanup()

    assert sampler.cleanup_calls == 1


def test_keyboard_key_is_a_short_press(logger, clock):
    sampler = KeyboardSampler(num_buttons=7, logger=logger, hold_ms=150, time_source_ms=clock)

    sampler.handle_key("3")
    assert sampler.read_button(3)
    assert not sampler.read_button(2)

    clock.advance(149)
    assert sampler.read_button(3)
    clock.advance(1)
    assert not sampler.read_button(3)


def test_keyboard_ignores_unknown_keys(logger, clock):
    sampler = KeyboardSampler(num_buttons=4, logger=logger, time_source_ms=clock)

    sampler.handle_key("x")
    sampler.handle_key("8")

    assert not any(sampler.read_button(i) for i in range(4))


def test_keyboard_button_limit(logger):
    with pytest.raises(ValueError):
        KeyboardSampler(num_buttons=11, logger=logger)


def test_gpio_sampler_rejects_unknown_pull_mode(logger):
    with pytest.raises(ValueError):
        GPIOSampler([17, 27], "sideways", logger)


def test_gpio_sampler_reads_nothing_before_setup(logger):
    sampler = GPIOSampler([17, 27], "up", logger)

    assert sampler.get_button_count() == 2
    assert sampler.read_button(0) is False
    sampler.cleanup()
