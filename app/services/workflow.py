"""
Work Order Workflow
Status transitions for work requests

Every status change goes through this module. Each operation validates the
move against ALLOWED_TRANSITIONS, sets the actor/timestamp pair for the new
status together, and keeps the work timer in step. Operations mutate the
document in memory only; callers save it.
"""
import logging
import math
from dataclasses import dataclass
from datetime import datetime, date
from typing import Dict, Iterable, List, Optional, Set, Tuple
from uuid import uuid4

from app.config import settings
from app.exceptions import InvalidTransitionError, NotFoundError, ValidationError
from app.models.work_request import (
    ChecklistItem,
    ChecklistItemIn,
    CLOSED_STATUSES,
    WorkRequest,
    WorkStatus,
    to_datetime,
)


logger = logging.getLogger(__name__)


ALLOWED_TRANSITIONS: Dict[WorkStatus, Set[WorkStatus]] = {
    WorkStatus.PENDING: {WorkStatus.APPROVED, WorkStatus.REJECTED},
    WorkStatus.APPROVED: {WorkStatus.IN_PROGRESS},
    WorkStatus.IN_PROGRESS: {WorkStatus.PAUSED, WorkStatus.COMPLETED},
    WorkStatus.PAUSED: {WorkStatus.IN_PROGRESS},
}


@dataclass
class TransitionResult:
    """Outcome of a status change"""
    previous_status: WorkStatus
    previous_requested_date: datetime
    date_changed: bool = False

    @property
    def old_day(self) -> date:
        return self.previous_requested_date.date()


def can_transition(current: WorkStatus, target: WorkStatus) -> bool:
    return target in ALLOWED_TRANSITIONS.get(current, set())


def available_actions(request: WorkRequest) -> List[WorkStatus]:
    """Statuses reachable from the request's current status"""
    return sorted(ALLOWED_TRANSITIONS.get(request.status, set()), key=lambda s: s.value)


def _begin(request: WorkRequest, target: WorkStatus) -> TransitionResult:
    if not can_transition(request.status, target):
        raise InvalidTransitionError(request.status.value, target.value)
    return TransitionResult(
        previous_status=request.status,
        previous_requested_date=request.requested_date,
    )


def _finish(request: WorkRequest, target: WorkStatus, actor: str, now: datetime) -> None:
    logger.info(
        "Work order %s: %s -> %s by %s",
        request.work_order_id or request.id, request.status.value, target.value, actor
    )
    request.status = target
    request.updated_at = now


def _start_timer(request: WorkRequest, now: datetime) -> None:
    request.is_timer_active = True
    request.timer_started_at = now
    request.timer_paused_at = None


def _stop_timer(request: WorkRequest, now: datetime) -> None:
    if request.is_timer_active and request.timer_started_at:
        elapsed = int((now - request.timer_started_at).total_seconds())
        request.total_elapsed_seconds += max(elapsed, 0)
    request.is_timer_active = False
    request.timer_started_at = None


def normalize_checklist(items: Optional[Iterable[ChecklistItemIn]]) -> List[ChecklistItem]:
    """Strip item texts, drop blank items, give every item an id"""
    checklist = []
    for item in items or []:
        text = item.text.strip()
        if not text:
            continue
        checklist.append(ChecklistItem(
            id=item.id or str(uuid4()),
            text=text,
            completed=item.completed,
        ))
    return checklist


def approve(
    request: WorkRequest,
    actor: str,
    new_date: Optional[date] = None,
    date_change_reason: Optional[str] = None,
    checklist: Optional[Iterable[ChecklistItemIn]] = None,
    now: Optional[datetime] = None,
) -> TransitionResult:
    """
    Approve a pending request.

    Moving the requested date at approval requires a reason; both are stored.
    A supplied checklist replaces the current one.
    """
    result = _begin(request, WorkStatus.APPROVED)
    now = now or datetime.utcnow()

    date_moved = new_date is not None and new_date != request.requested_day
    if date_moved:
        reason = (date_change_reason or "").strip()
        if not reason:
            raise ValidationError("A reason is required when changing the requested date")
        request.requested_date = to_datetime(new_date)
        request.date_changed_reason = reason

    if checklist is not None:
        request.approval_checklist = normalize_checklist(checklist)

    request.approved_by = actor
    request.approved_at = now
    _finish(request, WorkStatus.APPROVED, actor, now)
    result.date_changed = date_moved
    return result


def reject(
    request: WorkRequest,
    actor: str,
    reason: Optional[str],
    now: Optional[datetime] = None,
) -> TransitionResult:
    """Reject a pending request; the reason is mandatory"""
    result = _begin(request, WorkStatus.REJECTED)
    now = now or datetime.utcnow()

    reason = (reason or "").strip()
    min_length = settings.REJECTION_REASON_MIN_LENGTH
    if len(reason) < min_length:
        raise ValidationError(f"Rejection reason must be at least {min_length} characters")

    request.rejected_by = actor
    request.rejected_at = now
    request.rejected_reason = reason
    _finish(request, WorkStatus.REJECTED, actor, now)
    return result


def start(request: WorkRequest, actor: str, now: Optional[datetime] = None) -> TransitionResult:
    # in_progress is also the resume target; starting is only from approved
    if request.status != WorkStatus.APPROVED:
        raise InvalidTransitionError(request.status.value, WorkStatus.IN_PROGRESS.value)
    result = _begin(request, WorkStatus.IN_PROGRESS)
    now = now or datetime.utcnow()

    request.started_by = actor
    request.started_at = now
    _start_timer(request, now)
    _finish(request, WorkStatus.IN_PROGRESS, actor, now)
    return result


def pause(request: WorkRequest, actor: str, now: Optional[datetime] = None) -> TransitionResult:
    result = _begin(request, WorkStatus.PAUSED)
    now = now or datetime.utcnow()

    request.paused_at = now
    _stop_timer(request, now)
    request.timer_paused_at = now
    _finish(request, WorkStatus.PAUSED, actor, now)
    return result


def resume(request: WorkRequest, actor: str, now: Optional[datetime] = None) -> TransitionResult:
    if request.status != WorkStatus.PAUSED:
        raise InvalidTransitionError(request.status.value, WorkStatus.IN_PROGRESS.value)
    result = _begin(request, WorkStatus.IN_PROGRESS)
    now = now or datetime.utcnow()

    request.resumed_at = now
    _start_timer(request, now)
    _finish(request, WorkStatus.IN_PROGRESS, actor, now)
    return result


def complete(
    request: WorkRequest,
    actor: str,
    actual_hours: Optional[float],
    notes: Optional[str] = None,
    now: Optional[datetime] = None,
) -> TransitionResult:
    """Complete work in progress; actual hours must be positive"""
    result = _begin(request, WorkStatus.COMPLETED)
    if actual_hours is None or not math.isfinite(actual_hours) or actual_hours <= 0:
        raise ValidationError("Hours must be greater than 0")
    now = now or datetime.utcnow()

    request.completed_by = actor
    request.completed_at = now
    request.actual_hours = actual_hours
    request.completion_notes = (notes or "").strip() or None
    _stop_timer(request, now)
    _finish(request, WorkStatus.COMPLETED, actor, now)
    return result


def toggle_checklist_item(request: WorkRequest, item_id: str, now: Optional[datetime] = None) -> ChecklistItem:
    if request.status in CLOSED_STATUSES:
        raise ValidationError(f"Checklist of a {request.status.value} work order cannot change")
    for item in request.approval_checklist:
        if item.id == item_id:
            item.completed = not item.completed
            request.updated_at = now or datetime.utcnow()
            return item
    raise NotFoundError(f"Checklist item {item_id} not found")


def checklist_progress(items: List[ChecklistItem]) -> Tuple[int, int, int]:
    """(completed, total, percent) for a checklist"""
    total = len(items)
    done = sum(1 for item in items if item.completed)
    percent = round(done / total * 100) if total else 0
    return done, total, percent

