from datetime import datetime, timedelta, timezone

import pytest

from deckwise.domain.models import Card, ReviewEvent

NOW = datetime(2024, 3, 10, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def make_card():
    """Factory for cards; due_in_days sets due_date relative to NOW."""

    def _make(card_id="c1", deck_id="d1", user_id="u1", due_in_days=None, **fields):
        if due_in_days is not None:
            fields["due_date"] = NOW + timedelta(days=due_in_days)
        return Card(id=card_id, deck_id=deck_id, user_id=user_id, **fields)

    return _make


@pytest.fixture
def mock_home(tmp_path, monkeypatch):
    """Mocks Path.home() to point to a temp dir."""
    home = tmp_path / "home"
    home.mkdir()

    # Mocking HOME to a temp directory to isolate config/data files
    monkeypatch.setenv("HOME", str(home))
    return home


@pytest.fixture
def make_review():
    """Factory for review events at a given time."""
    counter = iter(range(1_000_000))

    def _make(timestamp, quality_rating=4, card_id="c1", user_id="u1", deck_id="d1", **fields):
        return ReviewEvent(
            id=f"r{next(counter)}",
            card_id=card_id,
            user_id=user_id,
            deck_id=deck_id,
            timestamp=timestamp,
            quality_rating=quality_rating,
            resulting_interval=fields.pop("resulting_interval", 1),
            **fields,
        )

    return _make
