"""Time helpers shared by the engine and its adapters.

Stored timestamps are timezone-aware UTC; naive values are read as UTC.
"""

from datetime import datetime, timezone


def utcnow() -> datetime:
    """Current timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


def as_utc(dt: datetime) -> datetime:
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)
