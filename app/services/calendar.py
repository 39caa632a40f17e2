"""
Calendar scheduling
Month/week grids, day priority badges and drag-and-drop reschedule planning
"""
import calendar
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Dict, List, Optional, Sequence

from app.exceptions import NotFoundError, ValidationError
from app.models.work_request import Priority, WorkRequest, WorkStatus


SCHEDULABLE_STATUSES = {WorkStatus.PENDING, WorkStatus.APPROVED, WorkStatus.IN_PROGRESS}

# Weeks start on Sunday
_calendar = calendar.Calendar(firstweekday=calendar.SUNDAY)


@dataclass
class DateChange:
    request: WorkRequest
    old_date: date
    new_date: date


def effective_date(request: WorkRequest, pending_moves: Optional[Dict[str, date]] = None) -> date:
    """Requested day, or where it has been dragged to but not saved yet"""
    if pending_moves:
        moved = pending_moves.get(str(request.id))
        if moved:
            return moved
    return request.requested_day


def requests_for_date(
    requests: Sequence[WorkRequest],
    day: date,
    pending_moves: Optional[Dict[str, date]] = None,
) -> List[WorkRequest]:
    return [r for r in requests if effective_date(r, pending_moves) == day]


def day_priority(requests: Sequence[WorkRequest]) -> Optional[str]:
    """Badge for a calendar day: emergency beats high beats everything else"""
    if not requests:
        return None
    if any(r.priority == Priority.EMERGENCY for r in requests):
        return "emergency"
    if any(r.priority == Priority.HIGH for r in requests):
        return "high"
    return "normal"


def month_grid(year: int, month: int) -> List[List[date]]:
    """Full weeks covering the month, Sunday first"""
    return _calendar.monthdatescalendar(year, month)


def week_dates(anchor: date) -> List[date]:
    """The Sunday-to-Saturday week containing anchor"""
    start = anchor - timedelta(days=(anchor.weekday() + 1) % 7)
    return [start + timedelta(days=i) for i in range(7)]


def schedulable(requests: Sequence[WorkRequest]) -> List[WorkRequest]:
    """Requests that can still be dragged onto the calendar"""
    return [r for r in requests if r.status in SCHEDULABLE_STATUSES]


def plan_reschedule(
    requests: Sequence[WorkRequest],
    moves: Dict[str, date],
    reason: Optional[str],
) -> List[DateChange]:
    """
    Validate a batch of calendar moves.

    Only open work orders can move. Moves onto the same day are dropped.
    Any real move needs a reason.
    """
    by_id = {str(r.id): r for r in requests}
    changes = []
    for request_id, new_date in moves.items():
        request = by_id.get(request_id)
        if request is None:
            raise NotFoundError(f"Work order {request_id} not found")
        if request.status not in SCHEDULABLE_STATUSES:
            raise ValidationError(
                f"Work order {request.work_order_id or request_id} is {request.status.value} "
                "and can no longer be rescheduled",
                details={"id": request_id, "status": request.status.value},
            )
        old_date = request.requested_day
        if new_date == old_date:
            continue
        changes.append(DateChange(request=request, old_date=old_date, new_date=new_date))

    if changes and not (reason or "").strip():
        raise ValidationError("Please provide a reason for changing the date")
    return changes
