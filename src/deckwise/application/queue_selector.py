"""
Study queue selection for a session.

Builds the queue by:
1. Splitting the deck into due cards (most overdue first) and new cards
2. Capping new cards (the daily limit shares its slots with due cards, then
   whatever the session limit leaves)
3. Shuffling the selection with a session seed so re-renders keep the order;
   without an explicit seed one is derived from the deck and the UTC date
"""

import random
from dataclasses import dataclass, field
from datetime import datetime
from typing import Literal

from deckwise.domain.clock import as_utc
from deckwise.domain.models import Card

from .classification import is_due

QueueStatus = Literal["ready", "empty_queue", "empty_deck"]


@dataclass
class StudyQueue:
    """Result of queue selection."""

    cards: list[Card]
    due_count: int  # Due cards included in the queue
    new_count: int  # New cards included in the queue
    total_cards: int  # Cards in the deck, selected or not
    seed: int | str | None = None

    @property
    def status(self) -> QueueStatus:
        if self.total_cards == 0:
            return "empty_deck"
        if not self.cards:
            return "empty_queue"
        return "ready"


@dataclass
class QueueStats:
    """Queue sizes for progress indicators."""

    due_count: int
    new_count: int
    total_cards_in_deck: int
    total_study_cards: int


@dataclass
class NextReviewInfo:
    has_cards_to_review: bool
    next_due_date: datetime | None = None
    total_cards_in_deck: int = 0


@dataclass
class _Pools:
    due: list[Card] = field(default_factory=list)
    new: list[Card] = field(default_factory=list)


def _split_pools(cards: list[Card], now: datetime) -> _Pools:
    pools = _Pools()
    for card in cards:
        if card.due_date is None:
            pools.new.append(card)
        elif is_due(card, now):
            pools.due.append(card)
    pools.due.sort(key=lambda c: as_utc(c.due_date))  # type: ignore[arg-type]
    return pools


def _new_card_budget(due_count: int, new_count: int, new_card_limit: int | None) -> int:
    """New cards allowed once due cards have taken their share of the daily limit."""
    if new_card_limit is None:
        return new_count
    return min(new_count, max(0, new_card_limit - due_count))


def default_session_seed(cards: list[Card], now: datetime) -> str:
    """
    Seed used when the caller has none: stable for a deck over one UTC day.
    """
    decks = ",".join(sorted({c.deck_id for c in cards}))
    return f"{decks}:{as_utc(now).date().isoformat()}"


def select_queue(
    cards: list[Card],
    now: datetime,
    session_limit: int | None = None,
    seed: int | str | None = None,
    new_card_limit: int | None = None,
    shuffle: bool = True,
) -> StudyQueue:
    """
    Select and order the cards to study now.

    Args:
        cards: Every card of the deck.
        now: Reference time for "due".
        session_limit: Maximum queue length. Due cards fill it first.
        seed: Session seed. The same seed always yields the same order.
            Defaults to default_session_seed(cards, now).
        new_card_limit: Daily card budget; due cards use it first and new
            cards get what is left. Applied before the session limit.
        shuffle: Interleave due and new cards (default) or keep due-then-new.

    Returns:
        StudyQueue with the ordered cards and the counts behind them.
    """
    pools = _split_pools(cards, now)

    due = pools.due
    new = pools.new[: _new_card_budget(len(pools.due), len(pools.new), new_card_limit)]

    if session_limit is not None:
        limit = max(0, session_limit)
        due = due[:limit]
        new = new[: max(0, limit - len(due))]

    if seed is None:
        seed = default_session_seed(cards, now)

    queue = due + new
    if shuffle:
        random.Random(seed).shuffle(queue)

    return StudyQueue(
        cards=queue,
        due_count=len(due),
        new_count=len(new),
        total_cards=len(cards),
        seed=seed,
    )


def queue_stats(
    cards: list[Card], now: datetime, new_card_limit: int | None = None
) -> QueueStats:
    """
    Sizes of the due and new pools and how many cards a session would hold.
    """
    pools = _split_pools(cards, now)
    due_count = len(pools.due)
    new_count = len(pools.new)

    return QueueStats(
        due_count=due_count,
        new_count=new_count,
        total_cards_in_deck=len(cards),
        total_study_cards=due_count + _new_card_budget(due_count, new_count, new_card_limit),
    )


def next_review_info(cards: list[Card], now: datetime) -> NextReviewInfo:
    """Earliest due date strictly after now, if any card has one."""
    now = as_utc(now)
    upcoming = [as_utc(c.due_date) for c in cards if c.due_date is not None and as_utc(c.due_date) > now]
    next_due = min(upcoming) if upcoming else None
    return NextReviewInfo(
        has_cards_to_review=next_due is not None,
        next_due_date=next_due,
        total_cards_in_deck=len(cards),
    )
