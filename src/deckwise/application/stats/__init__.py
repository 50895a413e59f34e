# Application Stats Package
from .metrics_calculator import (
    DailyActivity,
    DeckProgress,
    MetricsCalculator,
    StatisticsSnapshot,
    UpcomingReviews,
)
from .service import StatisticsService

__all__ = [
    "MetricsCalculator",
    "StatisticsSnapshot",
    "DailyActivity",
    "UpcomingReviews",
    "DeckProgress",
    "StatisticsService",
]
