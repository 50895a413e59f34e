"""
Statistics aggregator for dashboards.

This is a pure computation module with no I/O. Every rate and average is None
when its denominator is zero: "no data" and "0%" are different answers.
"""

from collections import Counter, defaultdict
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from typing import Literal

from deckwise.application.classification import count_classifications, is_mastered
from deckwise.application.streaks import local_date
from deckwise.domain.clock import as_utc
from deckwise.domain.constants import (
    DATE_RANGE_DAYS,
    DECK_MASTERED_PERCENTAGE,
    MIN_EASE_FACTOR,
    RETENTION_WINDOW_DAYS,
    UPCOMING_REVIEW_DAYS,
    WEIGHTED_RETENTION_MIN_REVIEWS,
)
from deckwise.domain.models import Card, CardClassification, ReviewEvent, StudySession

DateRange = Literal["7d", "30d", "90d", "all"]
DeckStatus = Literal["new", "in-progress", "mastered"]


@dataclass
class DailyActivity:
    """Activity of one local calendar day."""

    date: date
    cards_studied: int = 0
    sessions: int = 0
    minutes: int = 0


@dataclass
class UpcomingReviews:
    date: date
    count: int


@dataclass
class DeckProgress:
    deck_id: str
    total_cards: int
    studied_cards: int
    mastered_cards: int
    mastery_percentage: float | None
    status: DeckStatus


@dataclass
class StatisticsSnapshot:
    """
    Everything a dashboard needs, computed in one pass.

    Optional fields are None when there is nothing to measure.
    """

    total_cards: int
    classification_counts: dict[CardClassification, int]
    total_reviews: int
    retention_rate: float | None
    average_interval: float | None
    average_ease_factor: float | None
    date_range: DateRange
    activity: list[DailyActivity] = field(default_factory=list)
    upcoming_reviews: list[UpcomingReviews] = field(default_factory=list)
    deck_progress: list[DeckProgress] = field(default_factory=list)


class MetricsCalculator:
    """
    Computes derived metrics from cards, review events and study sessions.

    Stateless and side-effect free.
    """

    def __init__(
        self,
        retention_window_days: int = RETENTION_WINDOW_DAYS,
        weighted_retention: bool = False,
    ):
        self.retention_window_days = retention_window_days
        self.weighted_retention = weighted_retention

    def aggregate(
        self,
        cards: list[Card],
        reviews: list[ReviewEvent],
        sessions: list[StudySession],
        now: datetime,
        date_range: DateRange = "30d",
        time_zone: str = "UTC",
    ) -> StatisticsSnapshot:
        """
        Roll cards and history up into a StatisticsSnapshot.
        """
        now = as_utc(now)
        return StatisticsSnapshot(
            total_cards=len(cards),
            classification_counts=count_classifications(cards, now),
            total_reviews=len(reviews),
            retention_rate=self.retention_rate(reviews, now),
            average_interval=self.average_interval(cards),
            average_ease_factor=self.average_ease_factor(cards),
            date_range=date_range,
            activity=self.activity_series(reviews, sessions, now, date_range, time_zone),
            upcoming_reviews=self.upcoming_reviews(cards, now, time_zone),
            deck_progress=self.deck_progress(cards),
        )

    def retention_rate(self, reviews: list[ReviewEvent], now: datetime) -> float | None:
        """
        Percentage of passed reviews in the trailing window, rounded to 0.1.

        Falls back to the whole history when the window is empty.
        """
        if not reviews:
            return None

        cutoff = as_utc(now) - timedelta(days=self.retention_window_days)
        sample = [r for r in reviews if cutoff <= as_utc(r.timestamp) <= as_utc(now)]
        if not sample:
            sample = list(reviews)

        if self.weighted_retention and len(sample) >= WEIGHTED_RETENTION_MIN_REVIEWS:
            # Harder cards (lower ease) count more
            weights = [1 / max(MIN_EASE_FACTOR, r.ease_factor_before) for r in sample]
            passed = sum(w for w, r in zip(weights, sample) if r.passed)
            rate = passed / sum(weights) * 100
        else:
            rate = sum(1 for r in sample if r.passed) / len(sample) * 100

        return min(100.0, max(0.0, round(rate, 1)))

    def average_interval(self, cards: list[Card]) -> float | None:
        """Mean interval of cards studied at least once."""
        intervals = [c.interval for c in cards if c.repetition >= 1]
        if not intervals:
            return None
        return sum(intervals) / len(intervals)

    def average_ease_factor(self, cards: list[Card]) -> float | None:
        eases = [c.ease_factor for c in cards if c.due_date is not None]
        if not eases:
            return None
        return sum(eases) / len(eases)

    def activity_series(
        self,
        reviews: list[ReviewEvent],
        sessions: list[StudySession],
        now: datetime,
        date_range: DateRange,
        time_zone: str,
    ) -> list[DailyActivity]:
        """
        One entry per local day of the window ending today, oldest first.

        Reviews drive cards_studied; sessions drive sessions and minutes.
        """
        today = local_date(now, time_zone)
        review_days = Counter(local_date(r.timestamp, time_zone) for r in reviews)

        session_days: dict[date, list[StudySession]] = defaultdict(list)
        for session in sessions:
            session_days[session.session_date].append(session)

        start = self._window_start(today, date_range, review_days.keys(), session_days.keys())
        if start is None:
            return []

        series = []
        day = start
        while day <= today:
            day_sessions = session_days.get(day, [])
            seconds = sum(s.duration_seconds or 0 for s in day_sessions)
            series.append(
                DailyActivity(
                    date=day,
                    cards_studied=review_days.get(day, 0),
                    sessions=len(day_sessions),
                    minutes=round(seconds / 60),
                )
            )
            day += timedelta(days=1)
        return series

    def _window_start(
        self,
        today: date,
        date_range: DateRange,
        *activity_days: Iterable[date],
    ) -> date | None:
        if date_range in DATE_RANGE_DAYS:
            return today - timedelta(days=DATE_RANGE_DAYS[date_range] - 1)
        if date_range != "all":
            raise ValueError(f"Unknown date range: {date_range!r}")

        known = [d for days in activity_days for d in days if d <= today]
        return min(known) if known else None

    def upcoming_reviews(
        self, cards: list[Card], now: datetime, time_zone: str
    ) -> list[UpcomingReviews]:
        """Cards coming due within the next week, bucketed by local day."""
        horizon = as_utc(now) + timedelta(days=UPCOMING_REVIEW_DAYS)
        counts: Counter[date] = Counter()
        for card in cards:
            if card.due_date is None:
                continue
            due = as_utc(card.due_date)
            if as_utc(now) < due <= horizon:
                counts[local_date(due, time_zone)] += 1
        return [UpcomingReviews(date=d, count=counts[d]) for d in sorted(counts)]

    def deck_progress(self, cards: list[Card]) -> list[DeckProgress]:
        by_deck: dict[str, list[Card]] = defaultdict(list)
        for card in cards:
            by_deck[card.deck_id].append(card)

        progress = []
        for deck_id in sorted(by_deck):
            deck_cards = by_deck[deck_id]
            total = len(deck_cards)
            studied = sum(1 for c in deck_cards if c.repetition > 0)
            mastered = sum(1 for c in deck_cards if is_mastered(c))
            percentage = round(mastered / total * 100, 1) if total else None

            status: DeckStatus
            if studied == 0:
                status = "new"
            elif percentage is not None and percentage >= DECK_MASTERED_PERCENTAGE:
                status = "mastered"
            else:
                status = "in-progress"

            progress.append(
                DeckProgress(
                    deck_id=deck_id,
                    total_cards=total,
                    studied_cards=studied,
                    mastered_cards=mastered,
                    mastery_percentage=percentage,
                    status=status,
                )
            )
        return progress
