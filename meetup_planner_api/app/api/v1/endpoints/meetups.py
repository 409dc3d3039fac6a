"""
Meetup endpoints for API v1.

Every route acts on behalf of the authenticated user: listing shows the
caller's own meetups, and only the organizer may update or cancel one.
Rule violations raised by ``MeetupRegistry`` are turned into HTTP
errors carrying the status attached to each error class.
"""

from datetime import date, datetime, timezone
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from meetup_planner_api.app.api.v1.dependencies import get_meetup_registry
from meetup_planner_api.app.core.security import get_current_user
from meetup_planner_api.app.domain.errors import MeetupPlannerError
from meetup_planner_api.app.schemas.meetup import MeetupCreate, MeetupRead, MeetupSummary, MeetupUpdate
from meetup_planner_api.app.services.meetup_registry import MeetupRegistry

router = APIRouter()


@router.get("/", response_model=List[MeetupSummary])
async def list_meetups(
    date_filter: Optional[date] = Query(None, alias="date", description="Only meetups on this day (YYYY-MM-DD, UTC)"),
    page: int = Query(1, ge=1),
    current_user: dict = Depends(get_current_user),
    registry: MeetupRegistry = Depends(get_meetup_registry),
) -> List[MeetupSummary]:
    """List the caller's meetups ordered by date, 10 per page."""
    day = None
    if date_filter is not None:
        day = datetime(date_filter.year, date_filter.month, date_filter.day, tzinfo=timezone.utc)
    try:
        return await registry.list_meetups(current_user["user_id"], date_filter=day, page=page)
    except MeetupPlannerError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e)) from e


@router.post("/", response_model=MeetupRead, status_code=status.HTTP_201_CREATED)
async def create_meetup(
    meetup: MeetupCreate,
    current_user: dict = Depends(get_current_user),
    registry: MeetupRegistry = Depends(get_meetup_registry),
) -> MeetupRead:
    """Create a meetup organized by the caller.

    Rejected with 400 when a field is missing or too short, the date is
    not in the future, the banner does not exist, or the caller already
    has the same meetup within that hour.
    """
    try:
        return await registry.create_meetup(current_user["user_id"], meetup)
    except MeetupPlannerError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e)) from e


@router.put("/{meetup_id}", response_model=MeetupRead)
async def update_meetup(
    meetup_id: int,
    updates: MeetupUpdate,
    current_user: dict = Depends(get_current_user),
    registry: MeetupRegistry = Depends(get_meetup_registry),
) -> MeetupRead:
    """Partially update a meetup; unspecified fields remain unchanged."""
    try:
        return await registry.update_meetup(meetup_id, current_user["user_id"], updates)
    except MeetupPlannerError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e)) from e


@router.delete("/{meetup_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_meetup(
    meetup_id: int,
    current_user: dict = Depends(get_current_user),
    registry: MeetupRegistry = Depends(get_meetup_registry),
) -> None:
    """Cancel a meetup at least 48 hours ahead; its subscriptions go with it."""
    try:
        await registry.delete_meetup(meetup_id, current_user["user_id"])
    except MeetupPlannerError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e)) from e
    return None
