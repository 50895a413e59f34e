"""
Study streak tracking.

Streaks are recomputed from the full set of study days on every call; there is
no stored counter to drift away from the review history.
"""

from collections.abc import Iterable
from datetime import date, datetime, timedelta

import pytz

from deckwise.domain.clock import as_utc
from deckwise.domain.constants import STREAK_MILESTONES
from deckwise.domain.models import StreakState


def local_date(timestamp: datetime, time_zone: str) -> date:
    """Calendar date of a timestamp in the given IANA time zone."""
    tz = pytz.timezone(time_zone)
    return as_utc(timestamp).astimezone(tz).date()


def to_local_dates(timestamps: Iterable[datetime], time_zone: str) -> set[date]:
    """
    Normalize review timestamps to the set of local calendar dates.

    Must run before dates reach compute_streak: a review at 23:30 in New York
    is the next day in UTC.
    """
    tz = pytz.timezone(time_zone)
    return {as_utc(ts).astimezone(tz).date() for ts in timestamps}


def _runs(days: list[date]) -> list[tuple[date, date]]:
    """Maximal runs of consecutive days as (first, last) pairs; input sorted."""
    runs: list[tuple[date, date]] = []
    for day in days:
        if runs and day - runs[-1][1] == timedelta(days=1):
            runs[-1] = (runs[-1][0], day)
        else:
            runs.append((day, day))
    return runs


def compute_streak(review_dates: Iterable[date], today: date) -> StreakState:
    """
    Derive current and longest streaks.

    The current streak is the run ending today or yesterday, so a user who has
    not studied yet today keeps a live streak. Dates after today are ignored.
    """
    days = sorted({d for d in review_dates if d <= today})
    if not days:
        return StreakState()

    runs = _runs(days)
    longest = max((last - first).days + 1 for first, last in runs)

    current = 0
    streak_start = None
    first, last = runs[-1]
    if last >= today - timedelta(days=1):
        current = (last - first).days + 1
        streak_start = first

    return StreakState(
        current=current,
        longest=longest,
        last_study_date=days[-1],
        streak_start_date=streak_start,
        total_study_days=len(days),
        milestones_reached=tuple(m for m in STREAK_MILESTONES if longest >= m),
    )
