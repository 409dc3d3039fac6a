"""
Pydantic models for queued tasks exposed to workers.

A task is a unit of work that an external worker should perform, such
as mailing an organizer about a new subscriber.  Workers poll pending
tasks and acknowledge each one once handled; a task that is never
acknowledged is returned again, so handlers must be idempotent.
"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel


class TaskRead(BaseModel):
    """Schema for a task returned by the tasks API.

    Known topics:

    * ``"subscription_mail"``: tell an organizer that someone subscribed.
      ``payload`` holds ``meetup``, ``attendee`` and ``organizer``.
    """

    id: int
    topic: str
    payload: dict[str, Any]
    status: str
    created_at: datetime

    model_config = {
        "from_attributes": True,
    }
