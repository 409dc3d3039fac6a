"""
Entities handled by the rule engine.

These are the shapes repositories return and accept.  They are kept
separate from the API schemas in ``app.schemas`` so the HTTP payloads
can evolve without touching the rules.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel

from .cancellation import is_cancelable
from .time_window import is_before


class User(BaseModel):
    id: int
    name: str
    email: str


class MediaAsset(BaseModel):
    id: int
    name: str
    path: str


class Meetup(BaseModel):
    """A scheduled event owned by ``organizer_id``.

    ``past`` and ``cancelable`` are not stored: they depend on the
    instant at which the meetup is read, so callers pass ``now``.
    """

    id: Optional[int] = None
    organizer_id: int
    title: str
    description: str
    location: str
    scheduled_at: datetime
    banner_id: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def is_past(self, now: datetime) -> bool:
        return is_before(self.scheduled_at, now)

    def is_cancelable(self, now: datetime) -> bool:
        return is_cancelable(self.scheduled_at, now)


class Subscription(BaseModel):
    id: Optional[int] = None
    attendee_id: int
    meetup_id: int
    created_at: datetime
