"""Centralized constants for the deckwise engine.

Scheduling and statistics thresholds live here so the scheduler, the
classifier and anything that renders them import from a single source of truth.
"""

# ---------- SM-2 ----------
DEFAULT_REPETITION = 0
DEFAULT_EASE_FACTOR = 2.5
DEFAULT_INTERVAL = 0
MIN_EASE_FACTOR = 1.3
PASSING_QUALITY = 3
MIN_QUALITY = 0
MAX_QUALITY = 5
FIRST_INTERVAL_DAYS = 1
SECOND_INTERVAL_DAYS = 6
LAPSE_INTERVAL_DAYS = 1

# ---------- Classification ----------
MASTERED_INTERVAL_DAYS = 21
REVIEW_MIN_REPETITION = 2

# ---------- Study queue ----------
DAILY_NEW_CARD_LIMIT = 20

# ---------- Statistics ----------
RETENTION_WINDOW_DAYS = 30
WEIGHTED_RETENTION_MIN_REVIEWS = 10
UPCOMING_REVIEW_DAYS = 7
DECK_MASTERED_PERCENTAGE = 80
DATE_RANGE_DAYS = {"7d": 7, "30d": 30, "90d": 90}

# ---------- Streaks ----------
STREAK_MILESTONES = (7, 30, 50, 100, 200, 365)
