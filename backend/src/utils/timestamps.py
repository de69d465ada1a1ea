"""
Timestamp helpers for the event store.

All persisted timestamps are naive UTC datetimes truncated to whole
seconds. The optimistic lock compares client-supplied values against
these, so every value entering the store goes through this module.
"""

from datetime import datetime, timezone, timedelta
from typing import Optional


def utc_now() -> datetime:
    """Current UTC time as a naive datetime at second resolution."""
    return datetime.now(timezone.utc).replace(tzinfo=None, microsecond=0)


def to_utc_naive(value: Optional[datetime]) -> Optional[datetime]:
    """
    Normalize a datetime to naive UTC.

    Aware values are converted to UTC; naive values are assumed to
    already be UTC and returned unchanged.
    """
    if value is None:
        return None
    if value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


def next_updated_at(previous: Optional[datetime]) -> datetime:
    """
    Compute the next updated_at value for a row.

    Returns now, or one second past the previous value when now would
    not advance it, so successive writes strictly increase.
    """
    now = utc_now()
    if previous is not None and now <= previous:
        return previous + timedelta(seconds=1)
    return now
