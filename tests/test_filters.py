from datetime import date, datetime

from app.models.work_request import Priority, WorkStatus
from app.services import filters


def _requests(factory):
    return [
        factory(work_order_id="WO-3", title="Fix faucet", department="admin",
                priority=Priority.LOW, status=WorkStatus.PENDING),
        factory(work_order_id="WO-2", title="Stage lights", requestor_name="Ruth Chen",
                department="worship", priority=Priority.HIGH, status=WorkStatus.IN_PROGRESS),
        factory(work_order_id="WO-1", title="Paint nursery", department="children",
                priority=Priority.EMERGENCY, status=WorkStatus.COMPLETED),
    ]


def test_search_is_case_insensitive_over_visible_columns(work_request_factory):
    requests = _requests(work_request_factory)

    assert [r.work_order_id for r in filters.filter_requests(requests, search="STAGE")] == ["WO-2"]
    assert [r.work_order_id for r in filters.filter_requests(requests, search="ruth")] == ["WO-2"]
    assert [r.work_order_id for r in filters.filter_requests(requests, search="wo-1")] == ["WO-1"]
    assert len(filters.filter_requests(requests, search="   ")) == 3


def test_filters_combine_and_all_disables(work_request_factory):
    requests = _requests(work_request_factory)

    assert filters.filter_requests(requests, status="all", priority="all", department="all") == requests
    matching = filters.filter_requests(requests, status="in_progress", department="Worship")
    assert [r.work_order_id for r in matching] == ["WO-2"]
    assert filters.filter_requests(requests, status="pending", priority="high") == []


def test_filter_keeps_input_order(work_request_factory):
    requests = _requests(work_request_factory)
    assert filters.filter_requests(requests) == requests


def test_paginate_clamps_page():
    items = list(range(25))

    page = filters.paginate(items, page=2, page_size=10)
    assert page.items == list(range(10, 20))
    assert page.total == 25
    assert page.total_pages == 3

    assert filters.paginate(items, page=9, page_size=10).items == [20, 21, 22, 23, 24]
    assert filters.paginate(items, page=0, page_size=10).page == 1


def test_paginate_empty():
    page = filters.paginate([], page=3)
    assert page.items == []
    assert page.total_pages == 1
    assert page.page == 1


def test_summary_counts(work_request_factory):
    requests = _requests(work_request_factory)
    assert filters.summary_counts(requests) == {
        "total": 3,
        "pending": 1,
        "active": 1,
        # completed emergency does not count
        "high_priority": 1,
        "completed": 1,
    }


def test_group_by_status_has_every_column(work_request_factory):
    board = filters.group_by_status(_requests(work_request_factory))
    assert set(board) == {s.value for s in WorkStatus}
    assert [r.work_order_id for r in board["pending"]] == ["WO-3"]
    assert board["paused"] == []


def test_export_csv(work_request_factory):
    request = work_request_factory(
        work_order_id="WO-5",
        title='Fix "main" door, again',
        requested=date(2026, 4, 2),
        created_at=datetime(2026, 3, 30, 16, 45),
    )
    lines = filters.export_csv([request]).splitlines()

    assert lines[0] == "Work Order,Title,Requestor,Department,Priority,Status,Requested Date,Submitted Date"
    assert lines[1] == 'WO-5,"Fix ""main"" door, again",Jane Doe,worship,medium,pending,2026-04-02,2026-03-30'
