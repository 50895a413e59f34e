"""Request/response models for the HTTP wrapper.

Wire names are camelCase (easeFactor, dueDate, qualityRating, ...); Python
attribute names stay snake_case.
"""

from datetime import date, datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, StrictInt
from pydantic.alias_generators import to_camel

from deckwise.domain.models import Card, CardClassification, ReviewEvent, StudySession


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class CardModel(CamelModel):
    id: str
    deck_id: str
    user_id: str
    front: str = ""
    back: str = ""
    repetition: int = 0
    ease_factor: float = 2.5
    interval: int = 0
    due_date: datetime | None = None
    version: int = 0

    def to_domain(self) -> Card:
        return Card(**self.model_dump())


class ReviewEventModel(CamelModel):
    id: str
    card_id: str
    user_id: str
    deck_id: str
    timestamp: datetime
    quality_rating: int
    resulting_interval: int
    ease_factor_before: float = 2.5
    ease_factor_after: float = 2.5
    repetition_before: int = 0
    repetition_after: int = 0
    interval_before: int = 0

    def to_domain(self) -> ReviewEvent:
        return ReviewEvent(**self.model_dump())


class StudySessionModel(CamelModel):
    user_id: str
    deck_id: str
    session_date: date
    cards_studied: int = 0
    duration_seconds: float | None = None
    study_mode: str = "spaced-repetition"

    def to_domain(self) -> StudySession:
        return StudySession(**self.model_dump())


# ---------- schedule ----------


class ScheduleRequest(CamelModel):
    card: CardModel
    # Strict: 4.0 or "4" are rejected rather than coerced
    quality_rating: StrictInt
    now: datetime | None = None


class ScheduleResponse(CamelModel):
    card: CardModel
    review_event: ReviewEventModel


# ---------- classify ----------


class ClassifyRequest(CamelModel):
    card: CardModel
    now: datetime | None = None


class ClassifyResponse(CamelModel):
    classification: CardClassification


# ---------- queue ----------


class QueueRequest(CamelModel):
    cards: list[CardModel]
    now: datetime | None = None
    session_limit: int | None = Field(default=None, ge=0)
    seed: int | str | None = None
    new_card_limit: int | None = Field(default=None, ge=0)
    shuffle: bool = True


class QueueResponse(CamelModel):
    cards: list[CardModel]
    due_count: int
    new_count: int
    total_cards: int
    status: Literal["ready", "empty_queue", "empty_deck"]
    seed: int | str | None = None


# ---------- streak ----------


class StreakRequest(CamelModel):
    review_timestamps: list[datetime]
    time_zone: str = "UTC"
    now: datetime | None = None


class StreakResponse(CamelModel):
    current: int
    longest: int
    last_study_date: date | None = None
    streak_start_date: date | None = None
    total_study_days: int = 0
    milestones_reached: list[int] = []


# ---------- statistics ----------


class StatisticsRequest(CamelModel):
    cards: list[CardModel] = []
    reviews: list[ReviewEventModel] = []
    sessions: list[StudySessionModel] = []
    date_range: Literal["7d", "30d", "90d", "all"] = "30d"
    now: datetime | None = None
    time_zone: str = "UTC"
    retention_window_days: int = Field(default=30, ge=1)
    weighted_retention: bool = False


class DailyActivityModel(CamelModel):
    date: date
    cards_studied: int
    sessions: int
    minutes: int


class UpcomingReviewsModel(CamelModel):
    date: date
    count: int


class DeckProgressModel(CamelModel):
    deck_id: str
    total_cards: int
    studied_cards: int
    mastered_cards: int
    mastery_percentage: float | None
    status: Literal["new", "in-progress", "mastered"]


class StatisticsResponse(CamelModel):
    total_cards: int
    classification_counts: dict[CardClassification, int]
    total_reviews: int
    retention_rate: float | None
    average_interval: float | None
    average_ease_factor: float | None
    date_range: Literal["7d", "30d", "90d", "all"]
    activity: list[DailyActivityModel]
    upcoming_reviews: list[UpcomingReviewsModel]
    deck_progress: list[DeckProgressModel]


class RatingButton(CamelModel):
    rating: int
    label: str
    passed: bool
