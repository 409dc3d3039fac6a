"""
Pydantic models for meetup data.

``MeetupCreate`` and ``MeetupUpdate`` only check the *shape* of a
request.  Length and presence rules belong to ``MeetupRegistry`` so the
same rules apply whichever way the registry is called.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class MeetupCreate(BaseModel):
    title: Optional[str] = Field(None, examples=["Python Meetup"])
    description: Optional[str] = Field(None, examples=["Monthly talks about packaging and typing"])
    location: Optional[str] = Field(None, examples=["Main hall, 2nd floor"])
    scheduled_at: Optional[datetime] = Field(None, examples=["2030-09-01T19:00:00Z"])
    banner_id: Optional[int] = Field(None, examples=[1])


class MeetupUpdate(BaseModel):
    """Schema for updating a meetup.

    All fields are optional; only provided fields will be updated.
    """

    title: Optional[str] = None
    description: Optional[str] = None
    location: Optional[str] = None
    scheduled_at: Optional[datetime] = None
    banner_id: Optional[int] = None


class MeetupRead(BaseModel):
    id: int
    organizer_id: int
    title: str
    description: str
    location: str
    scheduled_at: datetime
    banner_id: int
    past: bool
    cancelable: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {
        "from_attributes": True,
    }


class OrganizerRead(BaseModel):
    id: int
    name: str


class BannerRead(BaseModel):
    id: int
    path: str
    url: str


class MeetupSummary(BaseModel):
    """Row of the organizer's meetup listing."""

    id: int
    title: str
    description: str
    location: str
    scheduled_at: datetime
    past: bool
    cancelable: bool
    organizer: Optional[OrganizerRead] = None
    banner: Optional[BannerRead] = None
