"""Cancellation deadline for meetups."""

from datetime import datetime, timedelta

from .time_window import is_before, to_utc

# Organizers may cancel only while more than this much time remains.
CANCELLATION_NOTICE = timedelta(hours=48)


def is_cancelable(scheduled_at: datetime, now: datetime) -> bool:
    """True iff ``now`` is strictly earlier than ``scheduled_at - 48h``."""
    return is_before(now, to_utc(scheduled_at) - CANCELLATION_NOTICE)
