"""
Subscription endpoints for API v1.

``POST /meetups/{meetup_id}/subscriptions`` subscribes the caller;
``GET /subscriptions`` lists the caller's upcoming meetups.
"""

from typing import List

from fastapi import APIRouter, Depends, HTTPException, Path, status

from meetup_planner_api.app.api.v1.dependencies import get_subscription_ledger
from meetup_planner_api.app.core.security import get_current_user
from meetup_planner_api.app.domain.errors import MeetupPlannerError
from meetup_planner_api.app.schemas.subscription import SubscriptionRead, UpcomingSubscription
from meetup_planner_api.app.services.subscription_ledger import SubscriptionLedger

router = APIRouter()


@router.post(
    "/meetups/{meetup_id}/subscriptions",
    response_model=SubscriptionRead,
    status_code=status.HTTP_201_CREATED,
)
async def subscribe(
    meetup_id: int = Path(..., description="ID of the meetup to attend"),
    current_user: dict = Depends(get_current_user),
    ledger: SubscriptionLedger = Depends(get_subscription_ledger),
) -> SubscriptionRead:
    """Subscribe the caller to a meetup.

    Rejected with 400 if the meetup is missing, already passed, organized
    by the caller, already subscribed, or in the same hour as another of
    the caller's subscriptions.
    """
    try:
        return await ledger.subscribe(current_user["user_id"], meetup_id)
    except MeetupPlannerError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e)) from e


@router.get("/subscriptions", response_model=List[UpcomingSubscription])
async def list_upcoming_subscriptions(
    current_user: dict = Depends(get_current_user),
    ledger: SubscriptionLedger = Depends(get_subscription_ledger),
) -> List[UpcomingSubscription]:
    return await ledger.list_upcoming(current_user["user_id"])
