"""Subscription rules, run against the in-memory unit of work."""

from datetime import datetime, timedelta, timezone

import pytest

from meetup_planner_api.app.domain.entities import Meetup
from meetup_planner_api.app.domain.errors import (
    DuplicateSubscriptionError,
    MeetupNotFoundError,
    MeetupPastError,
    SelfSubscriptionError,
    TimeConflictError,
)
from meetup_planner_api.app.services.subscription_ledger import SUBSCRIPTION_MAIL, SubscriptionLedger
from tests.conftest import NOW
from tests.fakes import BrokenQueue, InMemoryUnitOfWork

UTC = timezone.utc


@pytest.fixture
def ada(store):
    return store.add_user("Ada")


@pytest.fixture
def grace(store):
    return store.add_user("Grace")


@pytest.fixture
def add_meetup(store, ada):
    banner = store.add_media()

    def _add(scheduled_at: datetime, organizer_id: int | None = None, title: str = "Python Night") -> Meetup:
        meetup = Meetup(
            id=store.next_id(),
            organizer_id=organizer_id or ada.id,
            title=title,
            description="Lightning talks about packaging",
            location="Room 101",
            scheduled_at=scheduled_at,
            banner_id=banner.id,
            created_at=NOW,
            updated_at=NOW,
        )
        store.meetups[meetup.id] = meetup
        return meetup

    return _add


@pytest.mark.asyncio
async def test_subscribe_records_and_notifies(ledger, store, queue, ada, grace, add_meetup):
    meetup = add_meetup(NOW + timedelta(days=2))

    subscription = await ledger.subscribe(grace.id, meetup.id)

    assert subscription.attendee_id == grace.id
    assert subscription.meetup_id == meetup.id
    assert subscription.id in store.subscriptions
    assert len(queue.sent) == 1
    topic, payload = queue.sent[0]
    assert topic == SUBSCRIPTION_MAIL
    assert payload["meetup"]["id"] == meetup.id
    assert payload["attendee"]["email"] == "grace@example.com"
    assert payload["organizer"]["name"] == "Ada"


@pytest.mark.asyncio
async def test_subscribe_to_missing_meetup(ledger, grace):
    with pytest.raises(MeetupNotFoundError):
        await ledger.subscribe(grace.id, 404)


@pytest.mark.asyncio
async def test_subscribe_to_past_meetup(ledger, store, grace, add_meetup):
    meetup = add_meetup(NOW - timedelta(minutes=1))

    with pytest.raises(MeetupPastError):
        await ledger.subscribe(grace.id, meetup.id)
    assert store.subscriptions == {}


@pytest.mark.asyncio
async def test_subscribe_to_own_meetup(ledger, store, ada, add_meetup):
    meetup = add_meetup(NOW + timedelta(days=2))

    with pytest.raises(SelfSubscriptionError):
        await ledger.subscribe(ada.id, meetup.id)
    assert store.subscriptions == {}


@pytest.mark.asyncio
async def test_subscribe_twice(ledger, store, queue, grace, add_meetup):
    meetup = add_meetup(NOW + timedelta(days=2))
    await ledger.subscribe(grace.id, meetup.id)

    with pytest.raises(DuplicateSubscriptionError):
        await ledger.subscribe(grace.id, meetup.id)
    assert len(store.subscriptions) == 1
    assert len(queue.sent) == 1


@pytest.mark.asyncio
async def test_same_hour_subscriptions_conflict(ledger, store, grace, add_meetup):
    first = add_meetup(datetime(2030, 5, 10, 14, 30, tzinfo=UTC))
    second = add_meetup(datetime(2030, 5, 10, 14, 45, tzinfo=UTC), title="Rust Night")
    await ledger.subscribe(grace.id, first.id)

    with pytest.raises(TimeConflictError):
        await ledger.subscribe(grace.id, second.id)
    assert len(store.subscriptions) == 1


@pytest.mark.asyncio
async def test_next_hour_subscription_is_allowed(ledger, store, grace, add_meetup):
    first = add_meetup(datetime(2030, 5, 10, 14, 30, tzinfo=UTC))
    later = add_meetup(datetime(2030, 5, 10, 15, 5, tzinfo=UTC), title="Rust Night")
    await ledger.subscribe(grace.id, first.id)
    await ledger.subscribe(grace.id, later.id)

    assert len(store.subscriptions) == 2


@pytest.mark.asyncio
async def test_queue_failure_keeps_subscription(store, clock, grace, add_meetup, caplog):
    ledger = SubscriptionLedger(
        queue=BrokenQueue(),
        unit_of_work=lambda write=False: InMemoryUnitOfWork(store, write),
        clock=clock,
    )
    meetup = add_meetup(NOW + timedelta(days=2))

    subscription = await ledger.subscribe(grace.id, meetup.id)

    assert subscription.id in store.subscriptions
    assert "Could not enqueue" in caplog.text


@pytest.mark.asyncio
async def test_list_upcoming_sorted_and_excludes_started(ledger, clock, grace, add_meetup):
    later = add_meetup(NOW + timedelta(days=3), title="Later")
    sooner = add_meetup(NOW + timedelta(hours=5), title="Sooner")
    starting = add_meetup(NOW + timedelta(hours=1), title="Starting")
    for meetup in (later, sooner, starting):
        await ledger.subscribe(grace.id, meetup.id)

    clock.now = starting.scheduled_at
    upcoming = await ledger.list_upcoming(grace.id)

    assert [item.meetup_id for item in upcoming] == [sooner.id, later.id]
    assert upcoming[0].title == "Sooner"


@pytest.mark.asyncio
async def test_list_upcoming_empty(ledger, grace):
    assert await ledger.list_upcoming(grace.id) == []
