"""
Analytics Routes
Trends, department metrics and completion performance
"""
from datetime import datetime

from fastapi import APIRouter, Depends

from app.api.routes.auth import require_staff
from app.models.profile import Profile
from app.models.work_request import WorkRequest
from app.services import analytics


router = APIRouter()


@router.get("/")
async def get_analytics(
    time_range: str = "30days",
    current_user: Profile = Depends(require_staff)
):
    """
    Aggregate work requests created within the selected time range
    """
    end = datetime.utcnow()
    start = analytics.range_start(time_range, end)

    requests = await WorkRequest.find(
        WorkRequest.created_at >= start,
        WorkRequest.created_at <= end
    ).sort("created_at").to_list()

    return {
        "time_range": time_range,
        "start": start.isoformat(),
        "end": end.isoformat(),
        **analytics.summarize(requests),
    }
