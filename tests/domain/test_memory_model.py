import math

import pytest

from deckwise.domain.errors import InvalidRating
from deckwise.domain.memory_model import (
    AGAIN,
    EASY,
    GOOD,
    HARD,
    MemoryState,
    ease_delta,
    format_interval,
    preview_intervals,
    round_half_up,
    transition,
    validate_rating,
)


class TestEaseDelta:
    @pytest.mark.parametrize(
        "rating,expected",
        [(5, 0.1), (4, 0.0), (3, -0.14), (2, -0.32), (1, -0.54), (0, -0.8)],
    )
    def test_sm2_deltas(self, rating, expected):
        assert ease_delta(rating) == pytest.approx(expected)


class TestTransition:
    def test_first_pass_is_one_day(self):
        state = transition(MemoryState(), 4)
        assert state.repetition == 1
        assert state.interval == 1

    def test_second_pass_is_six_days(self):
        state = transition(MemoryState(repetition=1, interval=1), 4)
        assert state.repetition == 2
        assert state.interval == 6

    def test_third_pass_multiplies_by_new_ease(self):
        # ease 2.5 + 0.1 = 2.6 -> 6 * 2.6 = 15.6 -> 16
        state = transition(MemoryState(repetition=2, ease_factor=2.5, interval=6), 5)
        assert state.repetition == 3
        assert state.ease_factor == pytest.approx(2.6)
        assert state.interval == 16

    def test_fail_resets_but_still_decays_ease(self):
        state = transition(MemoryState(repetition=7, ease_factor=2.5, interval=120), 1)
        assert state.repetition == 0
        assert state.interval == 1
        assert state.ease_factor == pytest.approx(2.5 - 0.54)

    def test_ease_floor(self):
        state = MemoryState(repetition=3, ease_factor=1.3, interval=10)
        for rating in range(6):
            assert transition(state, rating).ease_factor >= 1.3

    def test_interval_minimum_one_day(self):
        state = transition(MemoryState(repetition=2, ease_factor=1.3, interval=0), 3)
        assert state.interval == 1

    def test_does_not_mutate_input(self):
        state = MemoryState(repetition=2, ease_factor=2.5, interval=6)
        transition(state, 4)
        assert state == MemoryState(repetition=2, ease_factor=2.5, interval=6)


class TestSanitize:
    def test_clamps_low_ease(self):
        assert MemoryState(ease_factor=0.4).sanitized().ease_factor == 1.3

    def test_clamps_nan_ease(self):
        assert MemoryState(ease_factor=math.nan).sanitized().ease_factor == 1.3

    def test_clamps_negative_counters(self):
        state = MemoryState(repetition=-2, interval=-5).sanitized()
        assert state.repetition == 0
        assert state.interval == 0

    def test_transition_on_corrupt_state_does_not_raise(self):
        state = transition(MemoryState(repetition=-1, ease_factor=-3.0, interval=-9), 4)
        assert state.ease_factor >= 1.3
        assert state.repetition == 1


class TestValidateRating:
    @pytest.mark.parametrize("rating", [0, 3, 5])
    def test_accepts_scale(self, rating):
        assert validate_rating(rating) == rating

    @pytest.mark.parametrize("rating", [-1, 6, 2.5, 4.0, math.nan, "4", None, True])
    def test_rejects_everything_else(self, rating):
        with pytest.raises(InvalidRating):
            validate_rating(rating)

    def test_invalid_rating_is_a_value_error(self):
        with pytest.raises(ValueError):
            transition(MemoryState(), 9)


def test_round_half_up():
    assert round_half_up(2.5) == 3
    assert round_half_up(14.5) == 15
    assert round_half_up(14.49) == 14


def test_preview_intervals_for_new_card():
    assert preview_intervals(MemoryState()) == {AGAIN: 1, HARD: 1, GOOD: 1, EASY: 1}


def test_preview_intervals_for_graduated_card():
    previews = preview_intervals(MemoryState(repetition=2, ease_factor=2.5, interval=6))
    assert previews[AGAIN] == 1
    assert previews[GOOD] == 15
    assert previews[EASY] == 16


@pytest.mark.parametrize(
    "days,label",
    [(1, "1d"), (6, "6d"), (29, "29d"), (60, "2mo"), (400, "1.1y")],
)
def test_format_interval(days, label):
    assert format_interval(days) == label
