from datetime import date, timedelta

import pytest

from deckwise.application.stats import MetricsCalculator
from deckwise.domain.models import CardClassification, StudySession


@pytest.fixture
def calc():
    return MetricsCalculator()


class TestRetentionRate:
    def test_no_reviews_is_no_data(self, calc, now):
        assert calc.retention_rate([], now) is None

    def test_percentage_of_passed_reviews(self, calc, now, make_review):
        reviews = [make_review(now - timedelta(days=1), q) for q in (5, 4, 3, 2)]
        assert calc.retention_rate(reviews, now) == 75.0

    def test_rounds_to_one_decimal(self, calc, now, make_review):
        reviews = [make_review(now, q) for q in (4, 4, 1)]
        assert calc.retention_rate(reviews, now) == 66.7

    def test_only_trailing_window_counts(self, calc, now, make_review):
        reviews = [
            make_review(now - timedelta(days=60), 0),
            make_review(now - timedelta(days=45), 0),
            make_review(now - timedelta(days=2), 4),
        ]
        assert calc.retention_rate(reviews, now) == 100.0

    def test_falls_back_to_full_history(self, calc, now, make_review):
        reviews = [
            make_review(now - timedelta(days=60), 0),
            make_review(now - timedelta(days=45), 4),
        ]
        assert calc.retention_rate(reviews, now) == 50.0

    def test_weighted_mode_favours_hard_cards(self, now, make_review):
        reviews = [make_review(now, 4, ease_factor_before=2.5) for _ in range(5)]
        reviews += [make_review(now, 1, ease_factor_before=1.3) for _ in range(5)]

        assert MetricsCalculator().retention_rate(reviews, now) == 50.0
        assert MetricsCalculator(weighted_retention=True).retention_rate(reviews, now) == 34.2

    def test_weighted_mode_needs_enough_reviews(self, now, make_review):
        reviews = [make_review(now, 4, ease_factor_before=2.5)]
        reviews += [make_review(now, 1, ease_factor_before=1.3)]
        assert MetricsCalculator(weighted_retention=True).retention_rate(reviews, now) == 50.0


class TestAverages:
    def test_no_studied_cards_is_no_data(self, calc, make_card):
        assert calc.average_interval([make_card("a"), make_card("b")]) is None
        assert calc.average_ease_factor([make_card("a")]) is None

    def test_average_interval_ignores_new_cards(self, calc, make_card):
        cards = [
            make_card("a"),
            make_card("b", repetition=1, interval=1, due_in_days=1),
            make_card("c", repetition=2, interval=6, due_in_days=6),
        ]
        assert calc.average_interval(cards) == 3.5

    def test_average_ease_factor(self, calc, make_card):
        cards = [
            make_card("a", ease_factor=2.0, due_in_days=1),
            make_card("b", ease_factor=3.0, due_in_days=1),
        ]
        assert calc.average_ease_factor(cards) == pytest.approx(2.5)


class TestActivitySeries:
    def test_seven_day_window(self, calc, now, make_review):
        reviews = [
            make_review(now),
            make_review(now - timedelta(days=1)),
            make_review(now - timedelta(days=1)),
        ]
        sessions = [
            StudySession("u1", "d1", date(2024, 3, 9), cards_studied=2, duration_seconds=600),
        ]

        series = calc.activity_series(reviews, sessions, now, "7d", "UTC")

        assert len(series) == 7
        assert series[0].date == date(2024, 3, 4)
        assert series[-1].date == date(2024, 3, 10)
        assert series[-1].cards_studied == 1
        assert series[-2].cards_studied == 2
        assert series[-2].sessions == 1
        assert series[-2].minutes == 10
        assert all(day.cards_studied == 0 for day in series[:-2])

    def test_all_starts_at_first_activity(self, calc, now, make_review):
        reviews = [make_review(now - timedelta(days=10)), make_review(now)]
        series = calc.activity_series(reviews, [], now, "all", "UTC")
        assert len(series) == 11
        assert series[0].cards_studied == 1

    def test_all_without_history_is_empty(self, calc, now):
        assert calc.activity_series([], [], now, "all", "UTC") == []

    def test_unknown_range(self, calc, now):
        with pytest.raises(ValueError):
            calc.activity_series([], [], now, "1y", "UTC")


def test_upcoming_reviews(calc, now, make_card):
    cards = [
        make_card("a", repetition=1, interval=1, due_in_days=1),
        make_card("b", repetition=1, interval=1, due_in_days=1),
        make_card("c", repetition=2, interval=8, due_in_days=8),
        make_card("d", repetition=2, interval=6, due_in_days=-1),
        make_card("e"),
    ]

    upcoming = calc.upcoming_reviews(cards, now, "UTC")

    assert [(u.date, u.count) for u in upcoming] == [(date(2024, 3, 11), 2)]


def test_deck_progress(calc, make_card):
    cards = [
        make_card("a", deck_id="d1", repetition=3, interval=30, due_in_days=10),
        make_card("b", deck_id="d1"),
        make_card("c", deck_id="d2"),
        make_card("d", deck_id="d3", repetition=4, interval=40, due_in_days=20),
    ]

    progress = {p.deck_id: p for p in calc.deck_progress(cards)}

    assert progress["d1"].mastery_percentage == 50.0
    assert progress["d1"].studied_cards == 1
    assert progress["d1"].status == "in-progress"
    assert progress["d2"].status == "new"
    assert progress["d2"].mastery_percentage == 0.0
    assert progress["d3"].status == "mastered"


def test_aggregate_empty_user(calc, now):
    snapshot = calc.aggregate([], [], [], now)

    assert snapshot.total_cards == 0
    assert snapshot.total_reviews == 0
    assert snapshot.retention_rate is None
    assert snapshot.average_interval is None
    assert set(snapshot.classification_counts.values()) == {0}
    assert len(snapshot.activity) == 30


def test_aggregate_counts_sum_to_total(calc, now, make_card, make_review):
    cards = [
        make_card("a"),
        make_card("b", repetition=1, interval=1, due_in_days=-1),
        make_card("c", repetition=3, interval=25, due_in_days=10),
    ]
    snapshot = calc.aggregate(cards, [make_review(now, 4)], [], now, "7d")

    assert sum(snapshot.classification_counts.values()) == snapshot.total_cards == 3
    assert snapshot.classification_counts[CardClassification.MASTERED] == 1
    assert snapshot.retention_rate == 100.0
    assert snapshot.date_range == "7d"
