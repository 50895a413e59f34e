"""
In-memory repositories.

Implements the storage ports with plain dicts and lists. Card writes are
serialized per card with an optimistic version check.
"""

import asyncio
from dataclasses import replace
from datetime import date

from deckwise.domain.clock import as_utc
from deckwise.domain.errors import CardNotFound, StaleCardVersion
from deckwise.domain.models import Card, ReviewEvent, StudySession
from deckwise.domain.ports import CardRepository, ReviewRepository, SessionRepository


class InMemoryCardRepository(CardRepository):
    def __init__(self, cards: list[Card] | None = None):
        self._cards: dict[str, Card] = {c.id: c for c in cards or []}
        self._lock = asyncio.Lock()

    def all(self) -> list[Card]:
        return list(self._cards.values())

    async def get(self, card_id: str) -> Card | None:
        return self._cards.get(card_id)

    async def list_for_deck(self, deck_id: str) -> list[Card]:
        return [c for c in self._cards.values() if c.deck_id == deck_id]

    async def list_for_user(self, user_id: str) -> list[Card]:
        return [c for c in self._cards.values() if c.user_id == user_id]

    async def add(self, card: Card) -> Card:
        async with self._lock:
            if card.id in self._cards:
                raise ValueError(f"Card already exists: {card.id}")
            self._cards[card.id] = card
            return card

    async def save(self, card: Card, expected_version: int) -> Card:
        async with self._lock:
            current = self._cards.get(card.id)
            if current is None:
                raise CardNotFound(card.id)
            if current.version != expected_version:
                raise StaleCardVersion(card.id, expected_version, current.version)

            stored = replace(card, version=current.version + 1)
            self._cards[card.id] = stored
            return stored


class InMemoryReviewRepository(ReviewRepository):
    def __init__(self, events: list[ReviewEvent] | None = None):
        self._events: list[ReviewEvent] = list(events or [])

    def all(self) -> list[ReviewEvent]:
        return list(self._events)

    async def append(self, event: ReviewEvent) -> None:
        self._events.append(event)

    async def list_for_user(self, user_id: str) -> list[ReviewEvent]:
        events = [e for e in self._events if e.user_id == user_id]
        return sorted(events, key=lambda e: as_utc(e.timestamp))


class InMemorySessionRepository(SessionRepository):
    def __init__(self, sessions: list[StudySession] | None = None):
        self._sessions: dict[tuple, StudySession] = {}
        for session in sessions or []:
            self._merge(session)

    def all(self) -> list[StudySession]:
        return list(self._sessions.values())

    def _merge(self, session: StudySession) -> StudySession:
        existing = self._sessions.get(session.key)
        if existing is None:
            stored = replace(session)
        else:
            if existing.duration_seconds is not None and session.duration_seconds is not None:
                duration = existing.duration_seconds + session.duration_seconds
            else:
                duration = existing.duration_seconds or session.duration_seconds
            stored = replace(
                existing,
                cards_studied=existing.cards_studied + session.cards_studied,
                duration_seconds=duration,
            )
        self._sessions[session.key] = stored
        return stored

    async def record(self, session: StudySession) -> StudySession:
        return self._merge(session)

    async def list_for_user(
        self,
        user_id: str,
        start_date: date | None = None,
        end_date: date | None = None,
    ) -> list[StudySession]:
        sessions = [s for s in self._sessions.values() if s.user_id == user_id]
        if start_date is not None:
            sessions = [s for s in sessions if s.session_date >= start_date]
        if end_date is not None:
            sessions = [s for s in sessions if s.session_date <= end_date]
        return sorted(sessions, key=lambda s: s.session_date)
