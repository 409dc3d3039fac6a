"""
Service providers for the v1 endpoints.

Services are stateless, so one instance of each is shared by every
request.  Tests replace them through ``app.dependency_overrides``.
"""

from functools import lru_cache

from meetup_planner_api.app.services.meetup_registry import MeetupRegistry
from meetup_planner_api.app.services.subscription_ledger import SubscriptionLedger
from meetup_planner_api.app.services.task_service import TaskService


@lru_cache
def get_task_service() -> TaskService:
    return TaskService()


@lru_cache
def get_meetup_registry() -> MeetupRegistry:
    return MeetupRegistry()


@lru_cache
def get_subscription_ledger() -> SubscriptionLedger:
    return SubscriptionLedger(queue=get_task_service())
