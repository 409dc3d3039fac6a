"""
Information endpoint for API v1.

Returns the service name and version together with the scheduling
constants clients need to render forms (page size, cancellation
notice).  No authentication is required.
"""

from typing import Any, Dict

from fastapi import APIRouter

from meetup_planner_api.app.core.config import settings
from meetup_planner_api.app.domain.cancellation import CANCELLATION_NOTICE

router = APIRouter()


@router.get("/", response_model=Dict[str, Any])
async def get_info() -> Dict[str, Any]:
    return {
        "name": settings.project_name,
        "version": settings.api_version,
        "page_size": settings.page_size,
        "cancellation_notice_hours": int(CANCELLATION_NOTICE.total_seconds() // 3600),
    }
