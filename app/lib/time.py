"""
Time helpers.

All timestamps are stored as naive UTC datetimes. Column defaults use the
callable form (default=utcnow_naive); query windows use window_start().
"""

from datetime import datetime, timedelta, timezone


def utcnow_naive() -> datetime:
    """Current UTC time without tzinfo."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def window_start(window: timedelta, now: datetime = None) -> datetime:
    """Lower bound of a trailing window ending at `now`."""
    return (now or utcnow_naive()) - window
