"""Pydantic models for subscriptions."""

from datetime import datetime

from pydantic import BaseModel


class SubscriptionRead(BaseModel):
    id: int
    attendee_id: int
    meetup_id: int
    created_at: datetime

    model_config = {
        "from_attributes": True,
    }


class UpcomingSubscription(BaseModel):
    """A meetup the caller is subscribed to that has not started yet."""

    subscription_id: int
    meetup_id: int
    title: str
    description: str
    location: str
    scheduled_at: datetime
