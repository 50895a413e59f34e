# Domain Package
from .errors import CardNotFound, DeckwiseError, InvalidRating, StaleCardVersion
from .models import Card, CardClassification, ReviewEvent, StreakState, StudySession

__all__ = [
    "Card",
    "CardClassification",
    "ReviewEvent",
    "StreakState",
    "StudySession",
    "DeckwiseError",
    "InvalidRating",
    "StaleCardVersion",
    "CardNotFound",
]
