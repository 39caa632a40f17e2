"""
Calendar Routes
Month/week scheduling views and drag-and-drop rescheduling
"""
import logging
from datetime import date, datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field

from app.api.routes.auth import require_staff
from app.models.profile import Profile
from app.models.work_request import WorkRequest, WorkRequestResponse, to_datetime
from app.services import calendar as calendar_service
from app.services import filters, work_orders
from app.services.webhook import webhook_service


logger = logging.getLogger(__name__)

router = APIRouter()


class Move(BaseModel):
    id: str
    new_date: date


class RescheduleRequest(BaseModel):
    moves: List[Move] = Field(..., min_length=1)
    reason: Optional[str] = None


async def _calendar_requests(department: Optional[str], status: Optional[str]) -> List[WorkRequest]:
    requests = await WorkRequest.find_all().sort("requested_date").to_list()
    return filters.filter_requests(requests, status=status, department=department)


def _day(day: date, requests: List[WorkRequest], month: Optional[int] = None) -> dict:
    on_day = calendar_service.requests_for_date(requests, day)
    return {
        "date": day.isoformat(),
        "in_month": month is None or day.month == month,
        "priority": calendar_service.day_priority(on_day),
        "work_orders": [WorkRequestResponse.from_document(r) for r in on_day],
    }


@router.get("/month")
async def get_month(
    year: Optional[int] = Query(None, ge=1900, le=9999),
    month: Optional[int] = Query(None, ge=1, le=12),
    department: Optional[str] = None,
    status: Optional[str] = None,
    current_user: Profile = Depends(require_staff)
):
    """
    Month grid, Sunday-first weeks, with work orders placed on their requested day
    """
    today = datetime.utcnow().date()
    year = year or today.year
    month = month or today.month
    requests = await _calendar_requests(department, status)

    return {
        "year": year,
        "month": month,
        "weeks": [
            [_day(day, requests, month) for day in week]
            for week in calendar_service.month_grid(year, month)
        ],
    }


@router.get("/week")
async def get_week(
    anchor: Optional[date] = None,
    department: Optional[str] = None,
    status: Optional[str] = None,
    current_user: Profile = Depends(require_staff)
):
    """
    Sunday-to-Saturday week around the anchor day
    """
    anchor = anchor or datetime.utcnow().date()
    requests = await _calendar_requests(department, status)

    return {
        "anchor": anchor.isoformat(),
        "days": [_day(day, requests) for day in calendar_service.week_dates(anchor)],
    }


@router.get("/unscheduled", response_model=List[WorkRequestResponse])
async def get_schedulable(
    department: Optional[str] = None,
    status: Optional[str] = None,
    current_user: Profile = Depends(require_staff)
):
    """
    Open work orders that can be dragged onto the calendar
    """
    requests = await _calendar_requests(department, status)
    return [WorkRequestResponse.from_document(r) for r in calendar_service.schedulable(requests)]


@router.post("/reschedule")
async def reschedule(
    body: RescheduleRequest,
    current_user: Profile = Depends(require_staff)
):
    """
    Save calendar moves; every moved work order records the reason and the
    requestor is notified
    """
    requests = []
    for move in body.moves:
        requests.append(await work_orders.get_work_request(move.id))

    moves = {move.id: move.new_date for move in body.moves}
    changes = calendar_service.plan_reschedule(requests, moves, body.reason)
    reason = (body.reason or "").strip() or None

    for change in changes:
        change.request.requested_date = to_datetime(change.new_date)
        change.request.date_changed_reason = reason
        change.request.updated_at = datetime.utcnow()
        await work_orders.save_change(change.request, change.old_date)

    results = []
    for change in changes:
        notified = await webhook_service.notify_date_change(
            change.request, change.old_date, change.new_date, reason
        )
        if not notified:
            logger.warning(
                "Date change notification for %s was not delivered", change.request.work_order_id
            )
        results.append({
            "id": str(change.request.id),
            "work_order_id": change.request.work_order_id,
            "old_date": change.old_date.isoformat(),
            "new_date": change.new_date.isoformat(),
            "notified": notified,
        })

    logger.info("%s rescheduled %d work order(s)", current_user.email, len(changes))
    return {
        "updated": len(changes),
        "changes": results,
    }
