"""Error taxonomy for the scheduling engine."""


class DeckwiseError(Exception):
    """Base class for every error raised by deckwise."""


class InvalidRating(DeckwiseError, ValueError):
    """Quality rating outside the supported 0..5 integer scale."""

    def __init__(self, rating: object):
        self.rating = rating
        super().__init__(f"Quality rating must be an integer between 0 and 5, got {rating!r}")


class StaleCardVersion(DeckwiseError):
    """A card write was based on a snapshot that is no longer current."""

    def __init__(self, card_id: str, expected: int, actual: int):
        self.card_id = card_id
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Card {card_id} changed underneath this review "
            f"(expected version {expected}, found {actual})"
        )


class CardNotFound(DeckwiseError, KeyError):
    def __init__(self, card_id: str):
        self.card_id = card_id
        super().__init__(card_id)

    def __str__(self) -> str:
        return f"Card not found: {self.card_id}"
