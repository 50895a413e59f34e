"""
Statistics Service: application layer orchestrator.

Loads a user's cards and history through the repository ports and hands them
to the pure calculators.
"""

import logging
from collections.abc import Callable
from datetime import datetime, timedelta

from deckwise.application.streaks import compute_streak, local_date, to_local_dates
from deckwise.domain.clock import utcnow
from deckwise.domain.constants import DATE_RANGE_DAYS
from deckwise.domain.models import StreakState
from deckwise.domain.ports import CardRepository, ReviewRepository, SessionRepository

from .metrics_calculator import DateRange, MetricsCalculator, StatisticsSnapshot

logger = logging.getLogger(__name__)


class StatisticsService:
    """
    Application service for streaks and dashboard statistics.

    Depends on repository abstractions, not concrete adapters.
    """

    def __init__(
        self,
        cards: CardRepository,
        reviews: ReviewRepository,
        sessions: SessionRepository,
        calculator: MetricsCalculator | None = None,
        time_zone: str = "UTC",
        clock: Callable[[], datetime] = utcnow,
    ):
        """
        Args:
            cards: Card repository (port).
            reviews: Review log repository (port).
            sessions: Study session repository (port).
            calculator: Optional custom calculator; uses default if not provided.
            time_zone: IANA zone used to turn timestamps into calendar days.
            clock: Source of "now" when callers do not pass one.
        """
        self._cards = cards
        self._reviews = reviews
        self._sessions = sessions
        self._calc = calculator or MetricsCalculator()
        self._tz = time_zone
        self._clock = clock

    async def compute_streak(self, user_id: str, now: datetime | None = None) -> StreakState:
        """
        Current and longest streak from the user's full review history.
        """
        now = now or self._clock()
        events = await self._reviews.list_for_user(user_id)
        dates = to_local_dates((e.timestamp for e in events), self._tz)
        return compute_streak(dates, local_date(now, self._tz))

    async def aggregate_statistics(
        self,
        user_id: str,
        date_range: DateRange = "30d",
        now: datetime | None = None,
    ) -> StatisticsSnapshot:
        """
        Dashboard snapshot for a user.

        Args:
            user_id: Owner of the cards and history.
            date_range: Window of the activity series (7d, 30d, 90d or all).
            now: Reference time; defaults to the service clock.
        """
        now = now or self._clock()
        cards = await self._cards.list_for_user(user_id)
        reviews = await self._reviews.list_for_user(user_id)

        # Sessions feed only the activity series
        today = local_date(now, self._tz)
        start_date = None
        if date_range in DATE_RANGE_DAYS:
            start_date = today - timedelta(days=DATE_RANGE_DAYS[date_range] - 1)
        sessions = await self._sessions.list_for_user(
            user_id, start_date=start_date, end_date=today
        )

        logger.debug(
            f"Aggregating stats for {user_id}: {len(cards)} cards, "
            f"{len(reviews)} reviews, {len(sessions)} sessions"
        )
        return self._calc.aggregate(cards, reviews, sessions, now, date_range, self._tz)
