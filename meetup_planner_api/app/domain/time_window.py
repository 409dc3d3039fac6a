"""
Hour and day windows over absolute instants.

All functions are total and side‑effect free.  Naive datetimes are
treated as UTC so that values coming from clients without an offset
compare correctly with stored ones.
"""

from datetime import datetime, timedelta, timezone

ONE_MICROSECOND = timedelta(microseconds=1)


def to_utc(instant: datetime) -> datetime:
    """Return ``instant`` as an aware datetime in UTC."""
    if instant.tzinfo is None:
        return instant.replace(tzinfo=timezone.utc)
    return instant.astimezone(timezone.utc)


def hour_window(instant: datetime) -> tuple[datetime, datetime]:
    """Inclusive window covering the clock hour that contains ``instant``.

    >>> hour_window(datetime(2030, 5, 1, 14, 30, tzinfo=timezone.utc))[0].hour
    14
    """
    start = to_utc(instant).replace(minute=0, second=0, microsecond=0)
    return start, start + timedelta(hours=1) - ONE_MICROSECOND


def day_window(instant: datetime) -> tuple[datetime, datetime]:
    """Inclusive window covering the UTC calendar day that contains ``instant``."""
    start = to_utc(instant).replace(hour=0, minute=0, second=0, microsecond=0)
    return start, start + timedelta(days=1) - ONE_MICROSECOND


def is_before(a: datetime, b: datetime) -> bool:
    return to_utc(a) < to_utc(b)


def subtract_days(instant: datetime, days: int) -> datetime:
    return to_utc(instant) - timedelta(days=days)


def utcnow() -> datetime:
    """Default clock for services; tests inject their own."""
    return datetime.now(timezone.utc)
