"""
SQLite implementation of the repository interfaces.

``SQLiteUnitOfWork`` opens one connection per unit of work and hands the
same connection to every repository, so all reads and writes made during
an operation belong to one transaction.  Write units start with
``BEGIN IMMEDIATE``: SQLite then grants the RESERVED lock up front and a
second writer waits (up to ``settings.db_timeout_seconds``) instead of
interleaving its checks with ours.
"""

import logging
import sqlite3
from datetime import datetime
from typing import Any, Optional

from ..core.db import fits_integer, get_connection
from ..domain.entities import MediaAsset, Meetup, Subscription, User
from ..domain.errors import DuplicateSubscriptionError
from ..domain.time_window import to_utc
from .base import (
    MediaRepository,
    MeetupFilter,
    MeetupRepository,
    SubscriptionFilter,
    SubscriptionRepository,
    UnitOfWork,
    UserRepository,
)

logger = logging.getLogger(__name__)

_MEETUP_COLUMNS = "id, user_id, title, description, location, date, banner_id, created_at, updated_at"

# Entity field -> column for partial updates.
_MEETUP_UPDATABLE = {
    "title": "title",
    "description": "description",
    "location": "location",
    "scheduled_at": "date",
    "banner_id": "banner_id",
}


def format_timestamp(value: datetime) -> str:
    """Serialise an instant as fixed‑width UTC ISO‑8601 text."""
    return to_utc(value).isoformat(timespec="microseconds")


def parse_timestamp(value: str) -> datetime:
    return to_utc(datetime.fromisoformat(value))


def _row_to_meetup(row: sqlite3.Row) -> Meetup:
    return Meetup(
        id=row["id"],
        organizer_id=row["user_id"],
        title=row["title"],
        description=row["description"],
        location=row["location"],
        scheduled_at=parse_timestamp(row["date"]),
        banner_id=row["banner_id"],
        created_at=parse_timestamp(row["created_at"]),
        updated_at=parse_timestamp(row["updated_at"]),
    )


def _row_to_subscription(row: sqlite3.Row) -> Subscription:
    return Subscription(
        id=row["id"],
        attendee_id=row["user_id"],
        meetup_id=row["meetup_id"],
        created_at=parse_timestamp(row["created_at"]),
    )


class SQLiteMeetupRepository(MeetupRepository):
    def __init__(self, conn: sqlite3.Connection) -> None:
        self.conn = conn

    def find(self, meetup_id: int) -> Optional[Meetup]:
        if not fits_integer(meetup_id):
            return None
        row = self.conn.execute(
            f"SELECT {_MEETUP_COLUMNS} FROM meetups WHERE id = ?",
            (meetup_id,),
        ).fetchone()
        return _row_to_meetup(row) if row else None

    def find_matching(self, criteria: MeetupFilter) -> list[Meetup]:
        bound = [criteria.organizer_id, criteria.limit, criteria.offset]
        if not all(fits_integer(value) for value in bound if value is not None):
            return []
        query = f"SELECT {_MEETUP_COLUMNS} FROM meetups"
        params: list[Any] = []
        where_clauses: list[str] = []
        if criteria.organizer_id is not None:
            where_clauses.append("user_id = ?")
            params.append(criteria.organizer_id)
        for field in ("title", "description", "location"):
            value = getattr(criteria, field)
            if value is not None:
                where_clauses.append(f"{field} = ?")
                params.append(value)
        if criteria.scheduled_between is not None:
            start, end = criteria.scheduled_between
            where_clauses.append("date BETWEEN ? AND ?")
            params.extend([format_timestamp(start), format_timestamp(end)])
        if where_clauses:
            query += " WHERE " + " AND ".join(where_clauses)
        query += " ORDER BY date ASC, id ASC"
        if criteria.limit is not None:
            query += " LIMIT ? OFFSET ?"
            params.extend([criteria.limit, criteria.offset])
        rows = self.conn.execute(query, tuple(params)).fetchall()
        return [_row_to_meetup(row) for row in rows]

    def insert(self, meetup: Meetup) -> Meetup:
        cursor = self.conn.execute(
            """
            INSERT INTO meetups (user_id, title, description, location, date, banner_id, created_at, updated_at)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                meetup.organizer_id,
                meetup.title,
                meetup.description,
                meetup.location,
                format_timestamp(meetup.scheduled_at),
                meetup.banner_id,
                format_timestamp(meetup.created_at),
                format_timestamp(meetup.updated_at or meetup.created_at),
            ),
        )
        return meetup.model_copy(update={"id": cursor.lastrowid})

    def update(self, meetup_id: int, changes: dict[str, Any], updated_at: datetime) -> Meetup:
        fields: list[str] = []
        values: list[Any] = []
        for key, value in changes.items():
            column = _MEETUP_UPDATABLE.get(key)
            if column is None:
                raise KeyError(f"Meetup field {key!r} cannot be updated")
            fields.append(f"{column} = ?")
            values.append(format_timestamp(value) if isinstance(value, datetime) else value)
        fields.append("updated_at = ?")
        values.append(format_timestamp(updated_at))
        values.append(meetup_id)
        self.conn.execute(f"UPDATE meetups SET {', '.join(fields)} WHERE id = ?", tuple(values))
        updated = self.find(meetup_id)
        if updated is None:
            raise LookupError(f"Meetup {meetup_id} disappeared during update")
        return updated

    def delete(self, meetup_id: int) -> None:
        self.conn.execute("DELETE FROM meetups WHERE id = ?", (meetup_id,))


class SQLiteSubscriptionRepository(SubscriptionRepository):
    def __init__(self, conn: sqlite3.Connection) -> None:
        self.conn = conn

    def find(self, subscription_id: int) -> Optional[Subscription]:
        if not fits_integer(subscription_id):
            return None
        row = self.conn.execute(
            "SELECT id, user_id, meetup_id, created_at FROM subscriptions WHERE id = ?",
            (subscription_id,),
        ).fetchone()
        return _row_to_subscription(row) if row else None

    def find_matching(self, criteria: SubscriptionFilter) -> list[Subscription]:
        bound = [criteria.attendee_id, criteria.meetup_id, criteria.limit]
        if not all(fits_integer(value) for value in bound if value is not None):
            return []
        query = (
            "SELECT s.id, s.user_id, s.meetup_id, s.created_at "
            "FROM subscriptions s JOIN meetups m ON m.id = s.meetup_id"
        )
        params: list[Any] = []
        where_clauses: list[str] = []
        if criteria.attendee_id is not None:
            where_clauses.append("s.user_id = ?")
            params.append(criteria.attendee_id)
        if criteria.meetup_id is not None:
            where_clauses.append("s.meetup_id = ?")
            params.append(criteria.meetup_id)
        if criteria.scheduled_between is not None:
            start, end = criteria.scheduled_between
            where_clauses.append("m.date BETWEEN ? AND ?")
            params.extend([format_timestamp(start), format_timestamp(end)])
        if criteria.scheduled_after is not None:
            where_clauses.append("m.date > ?")
            params.append(format_timestamp(criteria.scheduled_after))
        if where_clauses:
            query += " WHERE " + " AND ".join(where_clauses)
        query += " ORDER BY m.date ASC, s.id ASC"
        if criteria.limit is not None:
            query += " LIMIT ?"
            params.append(criteria.limit)
        rows = self.conn.execute(query, tuple(params)).fetchall()
        return [_row_to_subscription(row) for row in rows]

    def insert(self, subscription: Subscription) -> Subscription:
        try:
            cursor = self.conn.execute(
                "INSERT INTO subscriptions (user_id, meetup_id, created_at) VALUES (?, ?, ?)",
                (
                    subscription.attendee_id,
                    subscription.meetup_id,
                    format_timestamp(subscription.created_at),
                ),
            )
        except sqlite3.IntegrityError as exc:
            if "subscriptions.user_id, subscriptions.meetup_id" in str(exc):
                raise DuplicateSubscriptionError() from exc
            raise
        return subscription.model_copy(update={"id": cursor.lastrowid})

    def delete_for_meetup(self, meetup_id: int) -> int:
        cursor = self.conn.execute("DELETE FROM subscriptions WHERE meetup_id = ?", (meetup_id,))
        return cursor.rowcount


class SQLiteUserRepository(UserRepository):
    def __init__(self, conn: sqlite3.Connection) -> None:
        self.conn = conn

    def find(self, user_id: int) -> Optional[User]:
        if not fits_integer(user_id):
            return None
        row = self.conn.execute(
            "SELECT id, name, email FROM users WHERE id = ?", (user_id,)
        ).fetchone()
        return User(id=row["id"], name=row["name"], email=row["email"]) if row else None

    def find_by_email(self, email: str) -> Optional[User]:
        row = self.conn.execute(
            "SELECT id, name, email FROM users WHERE email = ?", (email,)
        ).fetchone()
        return User(id=row["id"], name=row["name"], email=row["email"]) if row else None


class SQLiteMediaRepository(MediaRepository):
    def __init__(self, conn: sqlite3.Connection) -> None:
        self.conn = conn

    def find(self, file_id: int) -> Optional[MediaAsset]:
        if not fits_integer(file_id):
            return None
        row = self.conn.execute(
            "SELECT id, name, path FROM files WHERE id = ?", (file_id,)
        ).fetchone()
        return MediaAsset(id=row["id"], name=row["name"], path=row["path"]) if row else None


class SQLiteUnitOfWork(UnitOfWork):
    """One connection, one transaction.

    Read‑only units use a deferred ``BEGIN`` so they see a consistent
    snapshot without blocking writers.
    """

    def __init__(self, write: bool = False) -> None:
        self.write = write
        self.conn: Optional[sqlite3.Connection] = None

    def __enter__(self) -> "SQLiteUnitOfWork":
        self.conn = get_connection()
        try:
            self.conn.execute("BEGIN IMMEDIATE" if self.write else "BEGIN")
        except sqlite3.Error:
            self.conn.close()
            raise
        self.meetups = SQLiteMeetupRepository(self.conn)
        self.subscriptions = SQLiteSubscriptionRepository(self.conn)
        self.users = SQLiteUserRepository(self.conn)
        self.media = SQLiteMediaRepository(self.conn)
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        try:
            if exc_type is None:
                self.conn.execute("COMMIT")
            elif self.conn.in_transaction:
                logger.debug("Rolling back unit of work after %s", exc_type.__name__)
                self.conn.execute("ROLLBACK")
        finally:
            self.conn.close()
            self.conn = None
