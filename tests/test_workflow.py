from datetime import date, datetime, timedelta

import pytest

from app.exceptions import InvalidTransitionError, NotFoundError, ValidationError
from app.models.work_request import ChecklistItemIn, WorkStatus
from app.services import workflow


NOW = datetime(2026, 3, 5, 10, 0)


def test_pending_can_only_be_approved_or_rejected():
    assert workflow.can_transition(WorkStatus.PENDING, WorkStatus.APPROVED)
    assert workflow.can_transition(WorkStatus.PENDING, WorkStatus.REJECTED)
    assert not workflow.can_transition(WorkStatus.PENDING, WorkStatus.COMPLETED)
    assert not workflow.can_transition(WorkStatus.COMPLETED, WorkStatus.IN_PROGRESS)
    assert not workflow.can_transition(WorkStatus.REJECTED, WorkStatus.APPROVED)


def test_available_actions(work_request_factory):
    request = work_request_factory(status=WorkStatus.IN_PROGRESS)
    assert workflow.available_actions(request) == [WorkStatus.COMPLETED, WorkStatus.PAUSED]
    assert workflow.available_actions(work_request_factory(status=WorkStatus.COMPLETED)) == []


def test_approve_records_actor_and_checklist(work_request_factory):
    request = work_request_factory()
    result = workflow.approve(
        request, "Pat Admin",
        checklist=[ChecklistItemIn(text="  Buy bulbs "), ChecklistItemIn(text="   ")],
        now=NOW,
    )

    assert request.status == WorkStatus.APPROVED
    assert request.approved_by == "Pat Admin"
    assert request.approved_at == NOW
    assert [item.text for item in request.approval_checklist] == ["Buy bulbs"]
    assert request.approval_checklist[0].id
    assert result.previous_status == WorkStatus.PENDING
    assert not result.date_changed


def test_approve_with_new_date_requires_reason(work_request_factory):
    request = work_request_factory(requested=date(2026, 3, 10))

    with pytest.raises(ValidationError):
        workflow.approve(request, "Pat", new_date=date(2026, 3, 12), date_change_reason="  ")

    # nothing changed on failure
    assert request.status == WorkStatus.PENDING
    assert request.requested_day == date(2026, 3, 10)


def test_approve_moving_date(work_request_factory):
    request = work_request_factory(requested=date(2026, 3, 10))
    result = workflow.approve(
        request, "Pat", new_date=date(2026, 3, 12), date_change_reason="Sanctuary booked"
    )

    assert result.date_changed
    assert result.old_day == date(2026, 3, 10)
    assert request.requested_day == date(2026, 3, 12)
    assert request.date_changed_reason == "Sanctuary booked"


def test_approve_same_date_is_not_a_move(work_request_factory):
    request = work_request_factory(requested=date(2026, 3, 10))
    result = workflow.approve(request, "Pat", new_date=date(2026, 3, 10))
    assert not result.date_changed
    assert request.date_changed_reason is None


def test_reject_needs_a_real_reason(work_request_factory):
    request = work_request_factory()
    with pytest.raises(ValidationError):
        workflow.reject(request, "Pat", "too short")
    assert request.status == WorkStatus.PENDING

    workflow.reject(request, "Pat", "  Not a facilities job  ", now=NOW)
    assert request.status == WorkStatus.REJECTED
    assert request.rejected_reason == "Not a facilities job"
    assert request.rejected_by == "Pat"
    assert request.rejected_at == NOW


def test_cannot_start_pending_request(work_request_factory):
    with pytest.raises(InvalidTransitionError):
        workflow.start(work_request_factory(), "Pat")


def test_timer_accumulates_across_pause_and_resume(work_request_factory):
    request = work_request_factory(status=WorkStatus.APPROVED)

    workflow.start(request, "Sam", now=NOW)
    assert request.is_timer_active
    assert request.started_by == "Sam"

    workflow.pause(request, "Sam", now=NOW + timedelta(minutes=30))
    assert request.status == WorkStatus.PAUSED
    assert not request.is_timer_active
    assert request.total_elapsed_seconds == 1800

    workflow.resume(request, "Sam", now=NOW + timedelta(hours=2))
    assert request.status == WorkStatus.IN_PROGRESS
    assert request.resumed_at == NOW + timedelta(hours=2)

    workflow.complete(request, "Sam", 1.5, "  ", now=NOW + timedelta(hours=3))
    assert request.status == WorkStatus.COMPLETED
    assert request.total_elapsed_seconds == 1800 + 3600
    assert request.actual_hours == 1.5
    assert request.completion_notes is None
    assert request.completed_by == "Sam"


def test_resume_only_from_paused(work_request_factory):
    with pytest.raises(InvalidTransitionError):
        workflow.resume(work_request_factory(status=WorkStatus.APPROVED), "Sam")


def test_complete_requires_positive_hours(work_request_factory):
    request = work_request_factory(status=WorkStatus.IN_PROGRESS)
    with pytest.raises(ValidationError):
        workflow.complete(request, "Sam", 0)
    with pytest.raises(ValidationError):
        workflow.complete(request, "Sam", None)
    assert request.status == WorkStatus.IN_PROGRESS


def test_completed_is_terminal(work_request_factory):
    request = work_request_factory(status=WorkStatus.COMPLETED)
    with pytest.raises(InvalidTransitionError):
        workflow.pause(request, "Sam")


def test_toggle_checklist_item(work_request_factory):
    request = work_request_factory()
    workflow.approve(request, "Pat", checklist=[ChecklistItemIn(id="a", text="Ladder")])

    item = workflow.toggle_checklist_item(request, "a")
    assert item.completed
    assert workflow.checklist_progress(request.approval_checklist) == (1, 1, 100)

    workflow.toggle_checklist_item(request, "a")
    assert workflow.checklist_progress(request.approval_checklist) == (0, 1, 0)

    with pytest.raises(NotFoundError):
        workflow.toggle_checklist_item(request, "missing")


def test_checklist_frozen_once_closed(work_request_factory):
    request = work_request_factory()
    workflow.approve(request, "Pat", checklist=[ChecklistItemIn(id="a", text="Ladder")])
    request.status = WorkStatus.COMPLETED
    with pytest.raises(ValidationError):
        workflow.toggle_checklist_item(request, "a")


def test_checklist_progress_empty():
    assert workflow.checklist_progress([]) == (0, 0, 0)


def test_complete_rejects_non_finite_hours(work_request_factory):
    request = work_request_factory(status=WorkStatus.IN_PROGRESS)
    for hours in (float("nan"), float("inf"), float("-inf")):
        with pytest.raises(ValidationError):
            workflow.complete(request, "Sam", hours)
    assert request.status == WorkStatus.IN_PROGRESS
    assert request.actual_hours is None
