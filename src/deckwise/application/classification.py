"""Card classification (New / Due / Mastered / Learning / Review).

Computed from card fields at query time and never stored.
"""

from collections import Counter
from collections.abc import Iterable
from datetime import datetime

from deckwise.domain.clock import as_utc
from deckwise.domain.constants import MASTERED_INTERVAL_DAYS, REVIEW_MIN_REPETITION
from deckwise.domain.models import Card, CardClassification


def is_due(card: Card, now: datetime) -> bool:
    return card.due_date is not None and as_utc(card.due_date) <= as_utc(now)


def is_mastered(card: Card) -> bool:
    return card.interval >= MASTERED_INTERVAL_DAYS and card.repetition >= REVIEW_MIN_REPETITION


def classify(card: Card, now: datetime) -> CardClassification:
    """
    Classify a card. The first matching rule wins:

    1. NEW: never studied (no due date).
    2. DUE: due date has arrived.
    3. MASTERED: interval >= 21 days and repetition >= 2.
    4. LEARNING: repetition < 2.
    5. REVIEW: everything else.
    """
    if card.due_date is None:
        return CardClassification.NEW
    if is_due(card, now):
        return CardClassification.DUE
    if is_mastered(card):
        return CardClassification.MASTERED
    if card.repetition < REVIEW_MIN_REPETITION:
        return CardClassification.LEARNING
    return CardClassification.REVIEW


def count_classifications(
    cards: Iterable[Card], now: datetime
) -> dict[CardClassification, int]:
    """Counts per class, zero-filled so every class is present."""
    counts = Counter(classify(card, now) for card in cards)
    return {cls: counts.get(cls, 0) for cls in CardClassification}
