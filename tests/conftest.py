"""Shared fixtures.

Two flavours of services are provided:

- ``registry`` / ``ledger`` run on the in-memory unit of work from
  ``tests.fakes`` and a fixed clock.
- ``sqlite_registry`` / ``sqlite_ledger`` run on a fresh SQLite file per
  test, with the same fixed clock.

``client`` is an httpx AsyncClient talking to the FastAPI app whose
service dependencies are overridden with the SQLite-backed services.
"""

from __future__ import annotations

from collections.abc import AsyncGenerator
from datetime import datetime, timezone

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from meetup_planner_api.app.api.v1.dependencies import (
    get_meetup_registry,
    get_subscription_ledger,
    get_task_service,
)
from meetup_planner_api.app.core.config import settings
from meetup_planner_api.app.core.db import get_cursor, init_db
from meetup_planner_api.app.core.security import create_access_token
from meetup_planner_api.app.main import create_app
from meetup_planner_api.app.repositories.sqlite import SQLiteUnitOfWork
from meetup_planner_api.app.services.meetup_registry import MeetupRegistry
from meetup_planner_api.app.services.subscription_ledger import SubscriptionLedger
from meetup_planner_api.app.services.task_service import TaskService
from tests.fakes import FixedClock, InMemoryStore, InMemoryUnitOfWork, RecordingQueue

NOW = datetime(2030, 5, 1, 12, 0, tzinfo=timezone.utc)
WORKER_TOKEN = "worker-secret"


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock(NOW)


# ── In-memory services ──────────────────────────────────────────────────────


@pytest.fixture
def store() -> InMemoryStore:
    return InMemoryStore()


@pytest.fixture
def queue() -> RecordingQueue:
    return RecordingQueue()


@pytest.fixture
def registry(store, clock) -> MeetupRegistry:
    return MeetupRegistry(
        unit_of_work=lambda write=False: InMemoryUnitOfWork(store, write),
        clock=clock,
        page_size=10,
        media_base_url="http://cdn.test/files",
    )


@pytest.fixture
def ledger(store, queue, clock) -> SubscriptionLedger:
    return SubscriptionLedger(
        queue=queue,
        unit_of_work=lambda write=False: InMemoryUnitOfWork(store, write),
        clock=clock,
    )


# ── SQLite services ─────────────────────────────────────────────────────────


class Seeder:
    """Inserts rows owned by other subsystems (users, files)."""

    def user(self, name: str, email: str | None = None) -> int:
        with get_cursor() as cursor:
            cursor.execute(
                "INSERT INTO users (name, email) VALUES (?, ?)",
                (name, email or f"{name.lower()}@example.com"),
            )
            return cursor.lastrowid

    def file(self, path: str = "banner.png") -> int:
        with get_cursor() as cursor:
            cursor.execute("INSERT INTO files (name, path) VALUES (?, ?)", (path, path))
            return cursor.lastrowid


@pytest.fixture
def sqlite_db(tmp_path, monkeypatch) -> str:
    path = str(tmp_path / "meetups.db")
    monkeypatch.setattr(settings, "database_url", path)
    monkeypatch.setattr(settings, "worker_tokens", WORKER_TOKEN)
    init_db()
    return path


@pytest.fixture
def seed(sqlite_db) -> Seeder:
    return Seeder()


@pytest.fixture
def task_service(sqlite_db, clock) -> TaskService:
    return TaskService(clock=clock)


@pytest.fixture
def sqlite_registry(sqlite_db, clock) -> MeetupRegistry:
    return MeetupRegistry(
        unit_of_work=SQLiteUnitOfWork,
        clock=clock,
        page_size=10,
        media_base_url="http://cdn.test/files",
    )


@pytest.fixture
def sqlite_ledger(sqlite_db, task_service, clock) -> SubscriptionLedger:
    return SubscriptionLedger(queue=task_service, unit_of_work=SQLiteUnitOfWork, clock=clock)


# ── HTTP ────────────────────────────────────────────────────────────────────


@pytest.fixture
def app(sqlite_registry, sqlite_ledger, task_service):
    application = create_app()
    application.dependency_overrides[get_meetup_registry] = lambda: sqlite_registry
    application.dependency_overrides[get_subscription_ledger] = lambda: sqlite_ledger
    application.dependency_overrides[get_task_service] = lambda: task_service
    return application


@pytest_asyncio.fixture
async def client(app) -> AsyncGenerator[AsyncClient, None]:
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


def _bearer_for(email: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token({'sub': email})}"}


@pytest.fixture
def auth_headers():
    """Build an Authorization header for a seeded user's email."""
    return _bearer_for


@pytest.fixture
def worker_headers() -> dict[str, str]:
    return {"Authorization": f"Bearer {WORKER_TOKEN}"}
