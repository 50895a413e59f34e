"""
Ports (interfaces) for card, review and session storage.

These define the contract that infrastructure adapters must implement.
Application services depend on these abstractions, not concrete implementations.
"""

from abc import ABC, abstractmethod
from datetime import date

from .models import Card, ReviewEvent, StudySession


class CardRepository(ABC):
    """
    Port for reading and writing cards.

    Implementations:
        - InMemoryCardRepository: process-local dict, used by tests and the YAML store.
    """

    @abstractmethod
    async def get(self, card_id: str) -> Card | None:
        pass

    @abstractmethod
    async def list_for_deck(self, deck_id: str) -> list[Card]:
        pass

    @abstractmethod
    async def list_for_user(self, user_id: str) -> list[Card]:
        pass

    @abstractmethod
    async def add(self, card: Card) -> Card:
        pass

    @abstractmethod
    async def save(self, card: Card, expected_version: int) -> Card:
        """
        Persist a scheduled card.

        Args:
            card: The new card state.
            expected_version: Version of the snapshot the new state was computed from.

        Returns:
            The stored card with its version incremented.

        Raises:
            StaleCardVersion: If the stored version no longer matches.
            CardNotFound: If the card does not exist.
        """
        pass


class ReviewRepository(ABC):
    """Port for the append-only review log."""

    @abstractmethod
    async def append(self, event: ReviewEvent) -> None:
        pass

    @abstractmethod
    async def list_for_user(self, user_id: str) -> list[ReviewEvent]:
        """
        Every review event of a user, oldest first.

        Streaks and the all-time retention fallback need the full history.
        """
        pass


class SessionRepository(ABC):
    """Port for per-day study session records."""

    @abstractmethod
    async def record(self, session: StudySession) -> StudySession:
        """
        Insert a session, or fold it into the existing record with the same
        (user, date, deck, mode) key.
        """
        pass

    @abstractmethod
    async def list_for_user(
        self,
        user_id: str,
        start_date: date | None = None,
        end_date: date | None = None,
    ) -> list[StudySession]:
        """
        Sessions of a user, optionally bounded by [start_date, end_date], oldest first.
        """
        pass
