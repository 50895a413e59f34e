"""
SM-2 memory model.

The per-card scheduling state and its transition function, plus the rating
scale that study UIs render. Pure computation, no clock and no I/O.
"""

import math
from dataclasses import dataclass

from .constants import (
    DEFAULT_EASE_FACTOR,
    FIRST_INTERVAL_DAYS,
    LAPSE_INTERVAL_DAYS,
    MAX_QUALITY,
    MIN_EASE_FACTOR,
    MIN_QUALITY,
    PASSING_QUALITY,
    SECOND_INTERVAL_DAYS,
)
from .errors import InvalidRating

# SM-2 quality scale (0-5)
QUALITY_DESCRIPTIONS = {
    0: "Complete blackout",
    1: "Incorrect response; the correct one remembered on seeing it",
    2: "Incorrect response; the correct one seemed easy to recall",
    3: "Correct response recalled with serious difficulty",
    4: "Correct response after hesitation",
    5: "Perfect response",
}

# Study buttons and the rating each one submits
AGAIN = 0
HARD = 3
GOOD = 4
EASY = 5

RATING_BUTTONS = {
    AGAIN: "Again",
    HARD: "Hard",
    GOOD: "Good",
    EASY: "Easy",
}


@dataclass(frozen=True)
class MemoryState:
    """
    SM-2 state of a single card.

    Attributes:
        repetition: Consecutive successful reviews since the last lapse.
        ease_factor: Interval growth multiplier.
        interval: Current interval in days.
    """

    repetition: int = 0
    ease_factor: float = DEFAULT_EASE_FACTOR
    interval: int = 0

    def sanitized(self) -> "MemoryState":
        """
        Clamp a possibly corrupt stored state into the valid range.

        A bad historical value must never make a review fail.
        """
        ease = self.ease_factor
        if not isinstance(ease, (int, float)) or not math.isfinite(ease):
            ease = MIN_EASE_FACTOR
        return MemoryState(
            repetition=max(0, int(self.repetition)),
            ease_factor=max(MIN_EASE_FACTOR, float(ease)),
            interval=max(0, int(self.interval)),
        )


def validate_rating(rating: object) -> int:
    """Return the rating if it is an integer in 0..5, else raise InvalidRating."""
    if isinstance(rating, bool) or not isinstance(rating, int):
        raise InvalidRating(rating)
    if rating < MIN_QUALITY or rating > MAX_QUALITY:
        raise InvalidRating(rating)
    return rating


def is_pass(rating: int) -> bool:
    return rating >= PASSING_QUALITY


def ease_delta(rating: int) -> float:
    miss = MAX_QUALITY - rating
    return 0.1 - miss * (0.08 + miss * 0.02)


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def transition(state: MemoryState, rating: int) -> MemoryState:
    """
    Apply one review to a memory state.

    The ease factor moves by the SM-2 delta on every review (lapses included)
    and never drops below 1.3. A lapse restarts the ladder at one day;
    a pass climbs it 1 -> 6 -> interval * ease.
    """
    rating = validate_rating(rating)
    current = state.sanitized()

    new_ease = max(MIN_EASE_FACTOR, current.ease_factor + ease_delta(rating))

    if not is_pass(rating):
        return MemoryState(repetition=0, ease_factor=new_ease, interval=LAPSE_INTERVAL_DAYS)

    repetition = current.repetition + 1
    if repetition == 1:
        interval = FIRST_INTERVAL_DAYS
    elif repetition == 2:
        interval = SECOND_INTERVAL_DAYS
    else:
        interval = max(1, round_half_up(current.interval * new_ease))

    return MemoryState(repetition=repetition, ease_factor=new_ease, interval=interval)


def preview_intervals(state: MemoryState) -> dict[int, int]:
    """Interval (days) each study button would produce from this state."""
    return {rating: transition(state, rating).interval for rating in RATING_BUTTONS}


def format_interval(days: int) -> str:
    """Human-readable label for an interval in days."""
    if days < 30:
        return f"{days}d"
    if days < 365:
        return f"{round(days / 30)}mo"
    return f"{round(days / 365, 1)}y"
