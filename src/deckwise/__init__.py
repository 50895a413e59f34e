"""deckwise: spaced-repetition scheduling engine for flashcard decks."""

from deckwise.consts import VERSION

__version__ = VERSION
