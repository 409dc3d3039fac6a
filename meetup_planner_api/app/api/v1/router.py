"""
Top‑level router for version 1 of the API.

This router aggregates domain‑specific routers under a unified prefix.
When new domains are introduced, update this file to include them.
"""

from fastapi import APIRouter

from .endpoints import info, meetups, subscriptions, tasks

router = APIRouter()

router.include_router(meetups.router, prefix="/meetups", tags=["meetups"])
# Subscription routes span /meetups/{id}/subscriptions and /subscriptions,
# so the module declares full paths itself.
router.include_router(subscriptions.router, tags=["subscriptions"])
router.include_router(tasks.router, prefix="/tasks", tags=["tasks"])
router.include_router(info.router, prefix="/info", tags=["info"])
