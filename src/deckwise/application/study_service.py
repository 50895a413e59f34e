"""
Study Service: write path for reviews and read paths for study sessions.

The pure scheduler computes the next state; this service loads the card,
persists the result with an optimistic version check and appends the review.
"""

import logging
from collections.abc import Callable
from datetime import datetime

from deckwise.application.classification import classify
from deckwise.application.queue_selector import (
    NextReviewInfo,
    QueueStats,
    StudyQueue,
    next_review_info,
    queue_stats,
    select_queue,
)
from deckwise.application.scheduler import ScheduleResult, schedule
from deckwise.application.streaks import local_date
from deckwise.domain.clock import utcnow
from deckwise.domain.constants import DAILY_NEW_CARD_LIMIT
from deckwise.domain.errors import CardNotFound, StaleCardVersion
from deckwise.domain.memory_model import validate_rating
from deckwise.domain.models import CardClassification, StudySession
from deckwise.domain.ports import CardRepository, ReviewRepository, SessionRepository

logger = logging.getLogger(__name__)


class StudyService:
    """
    Orchestrates reviews and queue selection over the repository ports.
    """

    def __init__(
        self,
        cards: CardRepository,
        reviews: ReviewRepository,
        sessions: SessionRepository | None = None,
        new_card_limit: int | None = DAILY_NEW_CARD_LIMIT,
        shuffle: bool = True,
        time_zone: str = "UTC",
        clock: Callable[[], datetime] = utcnow,
    ):
        self._cards = cards
        self._reviews = reviews
        self._sessions = sessions
        self._new_card_limit = new_card_limit
        self._shuffle = shuffle
        self._tz = time_zone
        self._clock = clock

    async def review_card(
        self, card_id: str, quality_rating: int, now: datetime | None = None
    ) -> ScheduleResult:
        """
        Schedule a review and persist it.

        A concurrent write to the same card is retried once against the fresh
        state; a second conflict propagates as StaleCardVersion.

        Raises:
            InvalidRating: Rating outside 0..5. Nothing is read or written.
            CardNotFound: Unknown card id.
            StaleCardVersion: The card kept changing underneath the review.
        """
        validate_rating(quality_rating)
        now = now or self._clock()

        try:
            result = await self._apply(card_id, quality_rating, now)
        except StaleCardVersion as e:
            logger.warning(f"Retrying review of {card_id}: {e}")
            result = await self._apply(card_id, quality_rating, now)

        await self._reviews.append(result.review_event)
        logger.info(
            f"Reviewed {card_id} q={quality_rating}: "
            f"interval={result.card.interval}d ease={result.card.ease_factor:.2f}"
        )
        return result

    async def _apply(self, card_id: str, quality_rating: int, now: datetime) -> ScheduleResult:
        card = await self._cards.get(card_id)
        if card is None:
            raise CardNotFound(card_id)

        result = schedule(card, quality_rating, now)
        stored = await self._cards.save(result.card, expected_version=card.version)
        return ScheduleResult(card=stored, review_event=result.review_event)

    async def select_queue(
        self,
        deck_id: str,
        now: datetime | None = None,
        session_limit: int | None = None,
        seed: int | str | None = None,
    ) -> StudyQueue:
        """
        Study queue for a deck. Pass the same seed for the whole session.
        """
        now = now or self._clock()
        cards = await self._cards.list_for_deck(deck_id)
        queue = select_queue(
            cards,
            now,
            session_limit=session_limit,
            seed=seed,
            new_card_limit=self._new_card_limit,
            shuffle=self._shuffle,
        )
        logger.debug(
            f"Queue for deck {deck_id}: {queue.due_count} due, "
            f"{queue.new_count} new, status={queue.status}"
        )
        return queue

    async def queue_stats(self, deck_id: str, now: datetime | None = None) -> QueueStats:
        cards = await self._cards.list_for_deck(deck_id)
        return queue_stats(cards, now or self._clock(), self._new_card_limit)

    async def next_review_info(self, deck_id: str, now: datetime | None = None) -> NextReviewInfo:
        cards = await self._cards.list_for_deck(deck_id)
        return next_review_info(cards, now or self._clock())

    async def classify(self, card_id: str, now: datetime | None = None) -> CardClassification:
        card = await self._cards.get(card_id)
        if card is None:
            raise CardNotFound(card_id)
        return classify(card, now or self._clock())

    async def record_session(
        self,
        user_id: str,
        deck_id: str,
        cards_studied: int,
        duration_seconds: float | None = None,
        study_mode: str = "spaced-repetition",
        now: datetime | None = None,
    ) -> StudySession:
        """
        Record a finished study session under the user's local calendar day.
        """
        if self._sessions is None:
            raise RuntimeError("StudyService was created without a session repository")

        session = StudySession(
            user_id=user_id,
            deck_id=deck_id,
            session_date=local_date(now or self._clock(), self._tz),
            cards_studied=cards_studied,
            duration_seconds=duration_seconds,
            study_mode=study_mode,
        )
        return await self._sessions.record(session)
