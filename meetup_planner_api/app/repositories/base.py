"""
Repository interfaces (repository pattern).

The services depend only on these abstractions.  ``app.repositories.sqlite``
provides the production implementation; tests substitute in‑memory
doubles.  Filters are plain dataclasses so each implementation can turn
them into whatever query language it speaks.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional

from ..domain.entities import MediaAsset, Meetup, Subscription, User


@dataclass
class MeetupFilter:
    """Criteria for ``MeetupRepository.find_matching``.

    ``None`` fields do not restrict the result.  ``scheduled_between`` is
    an inclusive ``(start, end)`` pair.  Results are ordered ascending by
    ``scheduled_at``.
    """

    organizer_id: Optional[int] = None
    title: Optional[str] = None
    description: Optional[str] = None
    location: Optional[str] = None
    scheduled_between: Optional[tuple[datetime, datetime]] = None
    limit: Optional[int] = None
    offset: int = 0


@dataclass
class SubscriptionFilter:
    """Criteria for ``SubscriptionRepository.find_matching``.

    ``scheduled_between`` and ``scheduled_after`` apply to the subscribed
    meetup's ``scheduled_at`` (inclusive and exclusive respectively).
    """

    attendee_id: Optional[int] = None
    meetup_id: Optional[int] = None
    scheduled_between: Optional[tuple[datetime, datetime]] = None
    scheduled_after: Optional[datetime] = None
    limit: Optional[int] = None


class MeetupRepository(ABC):
    @abstractmethod
    def find(self, meetup_id: int) -> Optional[Meetup]:
        """Return a meetup by ID, or None if not found."""

    @abstractmethod
    def find_matching(self, criteria: MeetupFilter) -> list[Meetup]:
        """Return meetups satisfying every given criterion, ordered by date."""

    @abstractmethod
    def insert(self, meetup: Meetup) -> Meetup:
        """Persist a new meetup and return it with ``id`` set."""

    @abstractmethod
    def update(self, meetup_id: int, changes: dict[str, Any], updated_at: datetime) -> Meetup:
        """Apply ``changes`` to an existing meetup and return the result."""

    @abstractmethod
    def delete(self, meetup_id: int) -> None:
        """Remove a meetup."""


class SubscriptionRepository(ABC):
    @abstractmethod
    def find(self, subscription_id: int) -> Optional[Subscription]:
        """Return a subscription by ID, or None if not found."""

    @abstractmethod
    def find_matching(self, criteria: SubscriptionFilter) -> list[Subscription]:
        """Return subscriptions satisfying every given criterion."""

    @abstractmethod
    def insert(self, subscription: Subscription) -> Subscription:
        """Persist a subscription.

        Raises ``DuplicateSubscriptionError`` when the storage layer
        already holds one for the same attendee and meetup.
        """

    @abstractmethod
    def delete_for_meetup(self, meetup_id: int) -> int:
        """Remove every subscription to ``meetup_id``; return how many."""


class UserRepository(ABC):
    @abstractmethod
    def find(self, user_id: int) -> Optional[User]:
        """Return a user by ID, or None if not found."""

    @abstractmethod
    def find_by_email(self, email: str) -> Optional[User]:
        """Return a user by email, or None if not found."""


class MediaRepository(ABC):
    @abstractmethod
    def find(self, file_id: int) -> Optional[MediaAsset]:
        """Return a media asset by ID, or None if not found."""


class UnitOfWork(ABC):
    """Groups repositories that share one atomic transaction.

    Use as a context manager.  Leaving the block normally commits;
    leaving it with an exception rolls everything back.  ``write=True``
    units must serialise against concurrent writers so that the rule
    checks performed inside them stay valid until commit.
    """

    meetups: MeetupRepository
    subscriptions: SubscriptionRepository
    users: UserRepository
    media: MediaRepository

    @abstractmethod
    def __enter__(self) -> "UnitOfWork":
        ...

    @abstractmethod
    def __exit__(self, exc_type, exc, tb) -> None:
        ...


class NotificationQueue(ABC):
    """One‑way channel to the notification workers."""

    @abstractmethod
    def enqueue(self, topic: str, payload: dict[str, Any]) -> Optional[int]:
        """Hand ``payload`` to the workers subscribed to ``topic``."""
