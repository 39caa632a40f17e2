"""
Dashboard Routes
Headline numbers for the admin dashboard
"""
from fastapi import APIRouter, Depends

from app.api.routes.auth import require_staff
from app.models.profile import Profile
from app.models.work_request import HIGH_PRIORITIES, WorkRequestResponse, WorkStatus
from app.services import work_orders


router = APIRouter()


@router.get("/overview")
async def get_dashboard_overview(
    current_user: Profile = Depends(require_staff)
):
    """
    Get dashboard overview
    """
    requests = await work_orders.list_work_requests()

    pending = sum(1 for r in requests if r.status == WorkStatus.PENDING)
    active = sum(1 for r in requests if r.status in (WorkStatus.APPROVED, WorkStatus.IN_PROGRESS))
    completed = sum(1 for r in requests if r.status == WorkStatus.COMPLETED)
    high_priority = sum(1 for r in requests if r.priority in HIGH_PRIORITIES)

    return {
        "pending": pending,
        "active": active,
        "completed": completed,
        "high_priority": high_priority,
        "total": len(requests),
        "completion_rate": round((completed / len(requests) * 100) if requests else 0),
        "recent": [WorkRequestResponse.from_document(r) for r in requests[:5]],
    }
