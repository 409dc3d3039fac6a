"""
Business logic for meetups.

``MeetupRegistry`` owns the meetup lifecycle: it validates drafts,
rejects past dates and same‑hour duplicates at creation, restricts
updates and deletion to the organizer, and enforces the 48‑hour
cancellation deadline.  Every operation runs inside one unit of work, so
the checks and the write they guard commit or roll back together.

The registry holds no state besides its collaborators; build it once
and share it between requests.
"""

import logging
from datetime import datetime
from typing import Any, Callable, List, Optional

from meetup_planner_api.app.core.config import settings
from meetup_planner_api.app.domain.authorization import assert_owner
from meetup_planner_api.app.domain.cancellation import is_cancelable
from meetup_planner_api.app.domain.entities import Meetup
from meetup_planner_api.app.domain.errors import (
    BannerNotFoundError,
    CancellationWindowError,
    DuplicateMeetupError,
    NotFoundError,
    PastDateError,
    ValidationError,
)
from meetup_planner_api.app.domain.time_window import day_window, hour_window, is_before, to_utc, utcnow
from meetup_planner_api.app.repositories.base import MeetupFilter, UnitOfWork
from meetup_planner_api.app.repositories.sqlite import SQLiteUnitOfWork
from meetup_planner_api.app.schemas.meetup import (
    BannerRead,
    MeetupCreate,
    MeetupRead,
    MeetupSummary,
    MeetupUpdate,
    OrganizerRead,
)

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("title", "description", "location", "scheduled_at", "banner_id")

MIN_LENGTHS = {"title": 5, "description": 10}


def validate_meetup_fields(values: dict[str, Any], partial: bool = False) -> None:
    """Check presence and length rules for a meetup draft or patch.

    With ``partial=True`` absent fields are accepted, but any field that
    is present must still satisfy its rule.  A field present with an
    explicit ``None`` counts as missing in both modes.
    """
    if partial:
        missing = [field for field, value in values.items() if value is None]
    else:
        missing = [field for field in REQUIRED_FIELDS if values.get(field) is None]
    if missing:
        raise ValidationError(f"Validation fails: missing {', '.join(missing)}")
    for field, minimum in MIN_LENGTHS.items():
        value = values.get(field)
        if value is not None and len(value) < minimum:
            raise ValidationError(f"Validation fails: {field} must have at least {minimum} characters")
    location = values.get("location")
    if location is not None and not location.strip():
        raise ValidationError("Validation fails: location must not be blank")


class MeetupRegistry:
    """Create, list, update and cancel meetups."""

    def __init__(
        self,
        unit_of_work: Callable[..., UnitOfWork] = SQLiteUnitOfWork,
        clock: Callable[[], datetime] = utcnow,
        page_size: Optional[int] = None,
        media_base_url: Optional[str] = None,
    ) -> None:
        self.unit_of_work = unit_of_work
        self.clock = clock
        self.page_size = page_size or settings.page_size
        self.media_base_url = (media_base_url or settings.media_base_url).rstrip("/")

    @staticmethod
    def to_read(meetup: Meetup, now: datetime) -> MeetupRead:
        return MeetupRead(
            id=meetup.id,
            organizer_id=meetup.organizer_id,
            title=meetup.title,
            description=meetup.description,
            location=meetup.location,
            scheduled_at=meetup.scheduled_at,
            banner_id=meetup.banner_id,
            past=meetup.is_past(now),
            cancelable=meetup.is_cancelable(now),
            created_at=meetup.created_at,
            updated_at=meetup.updated_at,
        )

    async def create_meetup(self, organizer_id: int, draft: MeetupCreate) -> MeetupRead:
        """Create a meetup owned by ``organizer_id``.

        Raises ``ValidationError`` for missing or too short fields,
        ``PastDateError`` unless the date is strictly in the future,
        ``BannerNotFoundError`` for an unknown banner and
        ``DuplicateMeetupError`` when the organizer already has a meetup
        with the same title, description and location in the same hour.
        """
        validate_meetup_fields(draft.model_dump())
        now = self.clock()
        scheduled_at = to_utc(draft.scheduled_at)
        if not is_before(now, scheduled_at):
            raise PastDateError()

        with self.unit_of_work(write=True) as uow:
            if uow.media.find(draft.banner_id) is None:
                raise BannerNotFoundError()
            duplicates = uow.meetups.find_matching(
                MeetupFilter(
                    organizer_id=organizer_id,
                    title=draft.title,
                    description=draft.description,
                    location=draft.location,
                    scheduled_between=hour_window(scheduled_at),
                    limit=1,
                )
            )
            if duplicates:
                raise DuplicateMeetupError()
            meetup = uow.meetups.insert(
                Meetup(
                    organizer_id=organizer_id,
                    title=draft.title,
                    description=draft.description,
                    location=draft.location,
                    scheduled_at=scheduled_at,
                    banner_id=draft.banner_id,
                    created_at=now,
                    updated_at=now,
                )
            )
        logger.info("User %s created meetup %s '%s'", organizer_id, meetup.id, meetup.title)
        return self.to_read(meetup, now)

    async def list_meetups(
        self,
        requester_id: int,
        date_filter: Optional[datetime] = None,
        page: int = 1,
    ) -> List[MeetupSummary]:
        """Return one page of the requester's meetups, earliest first.

        - ``date_filter`` restricts the result to the UTC calendar day
          containing it.
        - ``page`` is 1‑indexed; each page holds ``page_size`` meetups.
        """
        if page < 1:
            raise ValidationError("Validation fails: page must be at least 1")
        criteria = MeetupFilter(
            organizer_id=requester_id,
            limit=self.page_size,
            offset=(page - 1) * self.page_size,
        )
        if date_filter is not None:
            criteria.scheduled_between = day_window(date_filter)

        now = self.clock()
        summaries: List[MeetupSummary] = []
        with self.unit_of_work() as uow:
            meetups = uow.meetups.find_matching(criteria)
            user = uow.users.find(requester_id)
            organizer = OrganizerRead(id=user.id, name=user.name) if user else None
            for meetup in meetups:
                asset = uow.media.find(meetup.banner_id)
                banner = None
                if asset:
                    banner = BannerRead(
                        id=asset.id,
                        path=asset.path,
                        url=f"{self.media_base_url}/{asset.path}",
                    )
                summaries.append(
                    MeetupSummary(
                        id=meetup.id,
                        title=meetup.title,
                        description=meetup.description,
                        location=meetup.location,
                        scheduled_at=meetup.scheduled_at,
                        past=meetup.is_past(now),
                        cancelable=meetup.is_cancelable(now),
                        organizer=organizer,
                        banner=banner,
                    )
                )
        return summaries

    async def update_meetup(self, meetup_id: int, requester_id: int, patch: MeetupUpdate) -> MeetupRead:
        """Apply a partial update on behalf of the organizer.

        Only fields present in ``patch`` change; an explicit ``None`` is a
        ``ValidationError``.  The duplicate and future‑date rules are
        creation‑time rules and are not re‑checked here.
        """
        changes = patch.model_dump(exclude_unset=True)
        now = self.clock()
        with self.unit_of_work(write=True) as uow:
            meetup = uow.meetups.find(meetup_id)
            if meetup is None:
                raise NotFoundError()
            assert_owner(meetup.organizer_id, requester_id)
            validate_meetup_fields(changes, partial=True)
            if "banner_id" in changes and uow.media.find(changes["banner_id"]) is None:
                raise BannerNotFoundError()
            if "scheduled_at" in changes:
                changes["scheduled_at"] = to_utc(changes["scheduled_at"])
            if changes:
                meetup = uow.meetups.update(meetup_id, changes, now)
        logger.info("User %s updated meetup %s fields %s", requester_id, meetup_id, sorted(changes))
        return self.to_read(meetup, now)

    async def delete_meetup(self, meetup_id: int, requester_id: int) -> None:
        """Cancel a meetup.

        Allowed only for the organizer and only while more than 48 hours
        remain.  Subscriptions to the meetup are removed in the same
        transaction so none is left pointing at a missing meetup.
        """
        now = self.clock()
        with self.unit_of_work(write=True) as uow:
            meetup = uow.meetups.find(meetup_id)
            if meetup is None:
                raise NotFoundError()
            assert_owner(meetup.organizer_id, requester_id)
            if not is_cancelable(meetup.scheduled_at, now):
                raise CancellationWindowError()
            removed = uow.subscriptions.delete_for_meetup(meetup_id)
            uow.meetups.delete(meetup_id)
        logger.info(
            "User %s cancelled meetup %s, %s subscriptions removed", requester_id, meetup_id, removed
        )
