"""
API endpoints for the notification task queue.

Workers poll ``GET /tasks`` for pending work and acknowledge each task
with ``POST /tasks/{task_id}/complete`` once handled.  Both routes
require a worker token (see ``WORKER_TOKENS``).
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from meetup_planner_api.app.api.v1.dependencies import get_task_service
from meetup_planner_api.app.core.security import require_worker
from meetup_planner_api.app.domain.errors import MeetupPlannerError
from meetup_planner_api.app.schemas.task import TaskRead
from meetup_planner_api.app.services.task_service import TaskService

router = APIRouter()


@router.get("/", response_model=List[TaskRead], summary="Get pending tasks")
async def get_pending_tasks(
    topic: Optional[str] = Query(None, description="Only tasks of this topic, e.g. 'subscription_mail'"),
    limit: int = Query(100, ge=1, le=1000),
    worker: str = Depends(require_worker),
    tasks: TaskService = Depends(get_task_service),
) -> List[TaskRead]:
    """Return pending tasks, oldest first.

    A task stays pending until completed, so a worker that crashes
    mid‑task will see it again on the next poll.
    """
    return await tasks.get_pending_tasks(topic=topic, limit=limit)


@router.post("/{task_id}/complete", status_code=status.HTTP_204_NO_CONTENT, summary="Mark a task as completed")
async def complete_task(
    task_id: int,
    worker: str = Depends(require_worker),
    tasks: TaskService = Depends(get_task_service),
) -> None:
    try:
        await tasks.complete_task(task_id)
    except MeetupPlannerError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e)) from e
    return None
