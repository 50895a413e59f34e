"""
YAML file store used by the CLI.

Loads cards, reviews and sessions from a single YAML document into the
in-memory repositories and writes them back on save().
"""

import logging
from pathlib import Path

import yaml
from pydantic import TypeAdapter

from deckwise.domain.models import Card, ReviewEvent, StudySession

from .memory import InMemoryCardRepository, InMemoryReviewRepository, InMemorySessionRepository

logger = logging.getLogger(__name__)

_CARDS = TypeAdapter(list[Card])
_REVIEWS = TypeAdapter(list[ReviewEvent])
_SESSIONS = TypeAdapter(list[StudySession])


class YamlStore:
    """
    File-backed store.

    Layout:
        cards:    [{id, deck_id, user_id, front, back, repetition, ...}]
        reviews:  [{id, card_id, user_id, timestamp, quality_rating, ...}]
        sessions: [{user_id, deck_id, session_date, cards_studied, ...}]
    """

    def __init__(self, path: Path):
        self.path = path
        self.cards = InMemoryCardRepository()
        self.reviews = InMemoryReviewRepository()
        self.sessions = InMemorySessionRepository()

    @classmethod
    def load(cls, path: Path) -> "YamlStore":
        store = cls(path)
        if not path.exists():
            logger.info(f"No data file at {path}, starting empty")
            return store

        raw = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
        if not isinstance(raw, dict):
            raise ValueError(f"{path}: expected a mapping with cards/reviews/sessions")

        store.cards = InMemoryCardRepository(_CARDS.validate_python(raw.get("cards") or []))
        store.reviews = InMemoryReviewRepository(_REVIEWS.validate_python(raw.get("reviews") or []))
        store.sessions = InMemorySessionRepository(
            _SESSIONS.validate_python(raw.get("sessions") or [])
        )
        logger.debug(
            f"Loaded {len(store.cards.all())} cards and "
            f"{len(store.reviews.all())} reviews from {path}"
        )
        return store

    def save(self) -> None:
        data = {
            "cards": _CARDS.dump_python(self.cards.all(), mode="json"),
            "reviews": _REVIEWS.dump_python(self.reviews.all(), mode="json"),
            "sessions": _SESSIONS.dump_python(self.sessions.all(), mode="json"),
        }
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        tmp.write_text(yaml.safe_dump(data, sort_keys=False, allow_unicode=True), encoding="utf-8")
        tmp.replace(self.path)
        logger.info(f"Saved data to {self.path}")
