"""Timestamp helpers

All persisted timestamps are naive UTC so comparisons behave the same on
PostgreSQL and sqlite.
"""
from datetime import datetime, timezone


def utc_now() -> datetime:
    """Current UTC time without tzinfo."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def epoch_millis() -> int:
    """Milliseconds since the Unix epoch."""
    return int(datetime.now(timezone.utc).timestamp() * 1000)
