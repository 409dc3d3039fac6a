"""
Business logic for subscriptions.

``SubscriptionLedger.subscribe`` checks, in order, that the meetup
exists, has not happened yet, is not the attendee's own, is not already
subscribed and does not share a clock hour with another of the
attendee's subscriptions.  The checks and the insert run in one write
transaction; the UNIQUE index on ``(user_id, meetup_id)`` catches any
duplicate that slips past a non‑serialising store.

After the subscription commits the organizer is notified through the
task queue.  A failing enqueue is logged and otherwise ignored: the
subscription stands.
"""

import logging
from datetime import datetime
from typing import Callable, List, Optional

from meetup_planner_api.app.domain.entities import Meetup, Subscription, User
from meetup_planner_api.app.domain.errors import (
    DuplicateSubscriptionError,
    MeetupNotFoundError,
    MeetupPastError,
    SelfSubscriptionError,
    TimeConflictError,
)
from meetup_planner_api.app.domain.time_window import hour_window, utcnow
from meetup_planner_api.app.repositories.base import NotificationQueue, SubscriptionFilter, UnitOfWork
from meetup_planner_api.app.repositories.sqlite import SQLiteUnitOfWork
from meetup_planner_api.app.schemas.subscription import SubscriptionRead, UpcomingSubscription

logger = logging.getLogger(__name__)

SUBSCRIPTION_MAIL = "subscription_mail"


def _user_payload(user: Optional[User]) -> Optional[dict]:
    if user is None:
        return None
    return {"id": user.id, "name": user.name, "email": user.email}


def build_subscription_mail(meetup: Meetup, attendee: Optional[User], organizer: Optional[User]) -> dict:
    """JSON payload for the ``subscription_mail`` task."""
    return {
        "meetup": {
            "id": meetup.id,
            "title": meetup.title,
            "location": meetup.location,
            "scheduled_at": meetup.scheduled_at.isoformat(),
        },
        "attendee": _user_payload(attendee),
        "organizer": _user_payload(organizer),
    }


class SubscriptionLedger:
    """Subscribe attendees to meetups and list what they are attending."""

    def __init__(
        self,
        queue: NotificationQueue,
        unit_of_work: Callable[..., UnitOfWork] = SQLiteUnitOfWork,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self.queue = queue
        self.unit_of_work = unit_of_work
        self.clock = clock

    async def subscribe(self, attendee_id: int, meetup_id: int) -> SubscriptionRead:
        """Subscribe ``attendee_id`` to ``meetup_id``.

        Raises ``MeetupNotFoundError``, ``MeetupPastError``,
        ``SelfSubscriptionError``, ``DuplicateSubscriptionError`` or
        ``TimeConflictError``; nothing is written when any of them is
        raised.
        """
        now = self.clock()
        with self.unit_of_work(write=True) as uow:
            meetup = uow.meetups.find(meetup_id)
            if meetup is None:
                raise MeetupNotFoundError()
            if meetup.is_past(now):
                raise MeetupPastError()
            if meetup.organizer_id == attendee_id:
                raise SelfSubscriptionError()
            if uow.subscriptions.find_matching(
                SubscriptionFilter(attendee_id=attendee_id, meetup_id=meetup_id, limit=1)
            ):
                raise DuplicateSubscriptionError()
            if uow.subscriptions.find_matching(
                SubscriptionFilter(
                    attendee_id=attendee_id,
                    scheduled_between=hour_window(meetup.scheduled_at),
                    limit=1,
                )
            ):
                raise TimeConflictError()
            subscription = uow.subscriptions.insert(
                Subscription(attendee_id=attendee_id, meetup_id=meetup_id, created_at=now)
            )
            attendee = uow.users.find(attendee_id)
            organizer = uow.users.find(meetup.organizer_id)
        logger.info("User %s subscribed to meetup %s", attendee_id, meetup_id)

        try:
            self.queue.enqueue(SUBSCRIPTION_MAIL, build_subscription_mail(meetup, attendee, organizer))
        except Exception:
            logger.exception("Could not enqueue %s for subscription %s", SUBSCRIPTION_MAIL, subscription.id)

        return SubscriptionRead(
            id=subscription.id,
            attendee_id=subscription.attendee_id,
            meetup_id=subscription.meetup_id,
            created_at=subscription.created_at,
        )

    async def list_upcoming(self, attendee_id: int) -> List[UpcomingSubscription]:
        """Return the attendee's subscriptions to meetups that start after now.

        Ordered by the meetup's date, earliest first.
        """
        now = self.clock()
        upcoming: List[UpcomingSubscription] = []
        with self.unit_of_work() as uow:
            subscriptions = uow.subscriptions.find_matching(
                SubscriptionFilter(attendee_id=attendee_id, scheduled_after=now)
            )
            for subscription in subscriptions:
                meetup = uow.meetups.find(subscription.meetup_id)
                if meetup is None:
                    continue
                upcoming.append(
                    UpcomingSubscription(
                        subscription_id=subscription.id,
                        meetup_id=meetup.id,
                        title=meetup.title,
                        description=meetup.description,
                        location=meetup.location,
                        scheduled_at=meetup.scheduled_at,
                    )
                )
        upcoming.sort(key=lambda item: item.scheduled_at)
        return upcoming
