"""
Work order list helpers
Search, filtering, pagination, headline counts and CSV export
"""
import csv
import io
import math
from dataclasses import dataclass
from typing import Generic, List, Optional, Sequence, TypeVar

from app.models.work_request import (
    CLOSED_STATUSES,
    HIGH_PRIORITIES,
    WorkRequest,
    WorkStatus,
)
from app.services.work_order_ids import display_code


T = TypeVar("T")

ALL = "all"

CSV_HEADERS = [
    "Work Order", "Title", "Requestor", "Department",
    "Priority", "Status", "Requested Date", "Submitted Date",
]


@dataclass
class Page(Generic[T]):
    items: List[T]
    total: int
    page: int
    total_pages: int


def _active(criterion: Optional[str]) -> bool:
    return bool(criterion) and criterion != ALL


def matches_search(request: WorkRequest, term: Optional[str]) -> bool:
    """Case-insensitive substring search over the visible columns"""
    if not term or not term.strip():
        return True
    needle = term.strip().lower()
    fields = [
        request.title,
        request.requestor_name,
        request.department,
        request.work_order_id or "",
    ]
    return any(needle in field.lower() for field in fields)


def filter_requests(
    requests: Sequence[WorkRequest],
    search: Optional[str] = None,
    status: Optional[str] = None,
    priority: Optional[str] = None,
    department: Optional[str] = None,
) -> List[WorkRequest]:
    """Order-preserving filter; None or "all" disables a criterion"""
    result = []
    for request in requests:
        if _active(status) and request.status.value != status:
            continue
        if _active(priority) and request.priority.value != priority:
            continue
        if _active(department) and request.department != department.lower():
            continue
        if not matches_search(request, search):
            continue
        result.append(request)
    return result


def paginate(items: Sequence[T], page: int = 1, page_size: int = 10) -> Page[T]:
    total = len(items)
    total_pages = max(1, math.ceil(total / page_size)) if page_size > 0 else 1
    page = min(max(page, 1), total_pages)
    start = (page - 1) * page_size
    return Page(
        items=list(items[start:start + page_size]),
        total=total,
        page=page,
        total_pages=total_pages,
    )


def summary_counts(requests: Sequence[WorkRequest]) -> dict:
    """Headline numbers shown above the work order table"""
    return {
        "total": len(requests),
        "pending": sum(1 for r in requests if r.status == WorkStatus.PENDING),
        "active": sum(1 for r in requests if r.status == WorkStatus.IN_PROGRESS),
        "high_priority": sum(
            1 for r in requests
            if r.priority in HIGH_PRIORITIES and r.status not in CLOSED_STATUSES
        ),
        "completed": sum(1 for r in requests if r.status == WorkStatus.COMPLETED),
    }


def group_by_status(requests: Sequence[WorkRequest]) -> dict:
    """Kanban columns, one per status, each in input order"""
    board = {status.value: [] for status in WorkStatus}
    for request in requests:
        board[request.status.value].append(request)
    return board


def export_csv(requests: Sequence[WorkRequest]) -> str:
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(CSV_HEADERS)
    for r in requests:
        writer.writerow([
            display_code(r),
            r.title,
            r.requestor_name,
            r.department,
            r.priority.value,
            r.status.value,
            r.requested_day.isoformat(),
            r.created_at.strftime("%Y-%m-%d") if r.created_at else "",
        ])
    return buffer.getvalue()
