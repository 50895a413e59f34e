"""
Review scheduler: the single write path for a review.

Applies a quality rating to a card's memory state and produces the next card
state together with the review event to append. Pure: callers persist both.
"""

import hashlib
from dataclasses import dataclass, replace
from datetime import datetime, timedelta

from ulid import ULID

from deckwise.domain.clock import as_utc
from deckwise.domain.memory_model import (
    MemoryState,
    format_interval,
    preview_intervals,
    transition,
    validate_rating,
)
from deckwise.domain.models import Card, ReviewEvent


@dataclass(frozen=True)
class ScheduleResult:
    """Outcome of scheduling one review."""

    card: Card
    review_event: ReviewEvent

    @property
    def interval(self) -> int:
        return self.card.interval


def memory_state(card: Card) -> MemoryState:
    return MemoryState(
        repetition=card.repetition,
        ease_factor=card.ease_factor,
        interval=card.interval,
    )


def review_event_id(card: Card, now: datetime) -> str:
    """
    ULID whose time part is the review time and whose random part is derived
    from the card id and version, so replaying a history yields the same ids.
    """
    millis = int(now.timestamp() * 1000)
    digest = hashlib.sha256(f"{card.id}:{card.version}".encode()).digest()
    return str(ULID.from_bytes(millis.to_bytes(6, "big") + digest[:10]))


def schedule(card: Card, quality_rating: int, now: datetime) -> ScheduleResult:
    """
    Compute the card state after a review.

    Args:
        card: Current card snapshot.
        quality_rating: Integer rating 0..5 (< 3 is a lapse).
        now: Review time; also the base of the new due date.

    Returns:
        ScheduleResult with the updated card (same version; the store bumps it)
        and the ReviewEvent describing the transition.

    Raises:
        InvalidRating: If the rating is not an integer in 0..5. Nothing is computed.
    """
    rating = validate_rating(quality_rating)
    now = as_utc(now)

    before = memory_state(card).sanitized()
    after = transition(before, rating)

    new_card = replace(
        card,
        repetition=after.repetition,
        ease_factor=after.ease_factor,
        interval=after.interval,
        due_date=now + timedelta(days=after.interval),
    )

    event = ReviewEvent(
        id=review_event_id(card, now),
        card_id=card.id,
        user_id=card.user_id,
        deck_id=card.deck_id,
        timestamp=now,
        quality_rating=rating,
        resulting_interval=after.interval,
        ease_factor_before=before.ease_factor,
        ease_factor_after=after.ease_factor,
        repetition_before=before.repetition,
        repetition_after=after.repetition,
        interval_before=before.interval,
    )
    return ScheduleResult(card=new_card, review_event=event)


def interval_labels(card: Card) -> dict[int, str]:
    """Label per study button, e.g. {0: "1d", 3: "14d", 4: "15d", 5: "16d"}."""
    previews = preview_intervals(memory_state(card))
    return {rating: format_interval(days) for rating, days in previews.items()}
