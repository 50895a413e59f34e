"""
Domain models for cards, reviews and derived learning state.

These are pure data structures with no I/O or external dependencies.
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum

from .constants import (
    DEFAULT_EASE_FACTOR,
    DEFAULT_INTERVAL,
    DEFAULT_REPETITION,
    PASSING_QUALITY,
)


@dataclass(frozen=True)
class Card:
    """
    A flashcard together with its SM-2 memory state.

    Attributes:
        id: Card identifier.
        deck_id: Owning deck.
        user_id: Owner of the deck.
        front: Prompt side (not used for scheduling).
        back: Answer side (not used for scheduling).
        repetition: Consecutive successful reviews since the last lapse.
        ease_factor: Interval growth multiplier, never below 1.3 once scheduled.
        interval: Days between the last review and the due date.
        due_date: Next review time; None means the card was never studied.
        version: Write counter maintained by the persistence layer.
    """

    id: str
    deck_id: str
    user_id: str
    front: str = ""
    back: str = ""
    repetition: int = DEFAULT_REPETITION
    ease_factor: float = DEFAULT_EASE_FACTOR
    interval: int = DEFAULT_INTERVAL
    due_date: datetime | None = None
    version: int = 0

    @property
    def is_new(self) -> bool:
        return self.due_date is None


@dataclass(frozen=True)
class ReviewEvent:
    """
    One completed review. Append-only; the sole input to history-based metrics.

    Attributes:
        id: Event identifier (ULID).
        card_id: The card that was reviewed.
        user_id: The reviewer.
        deck_id: Deck of the card at review time.
        timestamp: When the review happened.
        quality_rating: Rating on the 0..5 scale.
        resulting_interval: Interval (days) assigned by this review.
        ease_factor_before / ease_factor_after: Ease factor around the review.
        repetition_before / repetition_after: Repetition count around the review.
        interval_before: Interval (days) the card had before the review.
    """

    id: str
    card_id: str
    user_id: str
    deck_id: str
    timestamp: datetime
    quality_rating: int
    resulting_interval: int
    ease_factor_before: float = DEFAULT_EASE_FACTOR
    ease_factor_after: float = DEFAULT_EASE_FACTOR
    repetition_before: int = DEFAULT_REPETITION
    repetition_after: int = DEFAULT_REPETITION
    interval_before: int = DEFAULT_INTERVAL

    @property
    def passed(self) -> bool:
        return self.quality_rating >= PASSING_QUALITY


@dataclass
class StudySession:
    """
    Aggregated study activity for one user, deck, mode and local calendar day.
    """

    user_id: str
    deck_id: str
    session_date: date
    cards_studied: int = 0
    duration_seconds: float | None = None
    study_mode: str = "spaced-repetition"

    @property
    def key(self) -> tuple[str, date, str, str]:
        return (self.user_id, self.session_date, self.deck_id, self.study_mode)


class CardClassification(str, Enum):
    """Learning stage of a card, derived from its fields at query time."""

    NEW = "new"
    LEARNING = "learning"
    REVIEW = "review"
    DUE = "due"
    MASTERED = "mastered"


@dataclass(frozen=True)
class StreakState:
    """
    Study streak derived from the set of days with at least one review.

    Attributes:
        current: Run of consecutive days ending today or yesterday (0 otherwise).
        longest: Longest run of consecutive days in the history.
        last_study_date: Most recent day with a review, if any.
        streak_start_date: First day of the current run, if it is live.
        total_study_days: Number of distinct days with a review.
        milestones_reached: Milestone lengths covered by the longest run.
    """

    current: int = 0
    longest: int = 0
    last_study_date: date | None = None
    streak_start_date: date | None = None
    total_study_days: int = 0
    milestones_reached: tuple[int, ...] = field(default_factory=tuple)
