"""
Durable task queue for notification workers.

Tasks represent pending actions that an external worker should perform,
such as mailing an organizer about a new subscriber.  Services enqueue
tasks through ``TaskService.enqueue``; workers poll the API for pending
tasks and acknowledge completion via a callback endpoint.  A task that
is polled but never acknowledged is handed out again, so delivery is
at‑least‑once.

Tasks are stored in the ``tasks`` SQLite table created by migration 3.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime
from typing import Any, Callable, List, Optional

from meetup_planner_api.app.core.db import fits_integer, get_connection, get_cursor
from meetup_planner_api.app.domain.errors import TaskNotFoundError
from meetup_planner_api.app.domain.time_window import utcnow
from meetup_planner_api.app.repositories.base import NotificationQueue
from meetup_planner_api.app.repositories.sqlite import format_timestamp, parse_timestamp
from meetup_planner_api.app.schemas.task import TaskRead

logger = logging.getLogger(__name__)


class TaskService(NotificationQueue):
    """Service for enqueuing, listing and completing worker tasks."""

    def __init__(self, clock: Callable[[], datetime] = utcnow) -> None:
        self.clock = clock

    # ------------------------------------------------------------------
    # Producer side
    # ------------------------------------------------------------------
    def enqueue(self, topic: str, payload: dict[str, Any]) -> Optional[int]:
        """Store a pending task and return its ID.

        ``payload`` must be JSON serialisable; datetimes should already be
        converted to ISO strings by the caller.
        """
        now = format_timestamp(self.clock())
        with get_cursor() as cursor:
            cursor.execute(
                """
                INSERT INTO tasks (topic, payload, status, created_at, updated_at)
                VALUES (?, ?, 'pending', ?, ?)
                """,
                (topic, json.dumps(payload), now, now),
            )
            task_id = cursor.lastrowid
        logger.info("Enqueued %s task %s", topic, task_id)
        return task_id

    # ------------------------------------------------------------------
    # Worker side
    # ------------------------------------------------------------------
    async def get_pending_tasks(self, topic: Optional[str] = None, limit: int = 100) -> List[TaskRead]:
        """Return pending tasks, oldest first.

        Parameters
        ----------
        topic : Optional[str]
            Restrict the result to one topic.  ``None`` returns every topic.
        limit : int
            Maximum number of tasks to return.
        """
        query = "SELECT id, topic, payload, status, created_at FROM tasks WHERE status = 'pending'"
        params: list[Any] = []
        if topic:
            query += " AND topic = ?"
            params.append(topic)
        query += " ORDER BY id ASC LIMIT ?"
        params.append(limit)
        conn = get_connection()
        try:
            rows = conn.execute(query, tuple(params)).fetchall()
        finally:
            conn.close()
        return [
            TaskRead(
                id=row["id"],
                topic=row["topic"],
                payload=json.loads(row["payload"]),
                status=row["status"],
                created_at=parse_timestamp(row["created_at"]),
            )
            for row in rows
        ]

    async def complete_task(self, task_id: int) -> None:
        """Mark a task as completed.

        Raises
        ------
        TaskNotFoundError
            If the task does not exist.
        """
        if not fits_integer(task_id):
            raise TaskNotFoundError(f"Task {task_id} not found")
        with get_cursor() as cursor:
            row = cursor.execute("SELECT id FROM tasks WHERE id = ?", (task_id,)).fetchone()
            if not row:
                raise TaskNotFoundError(f"Task {task_id} not found")
            cursor.execute(
                "UPDATE tasks SET status = 'completed', updated_at = ? WHERE id = ?",
                (format_timestamp(self.clock()), task_id),
            )
