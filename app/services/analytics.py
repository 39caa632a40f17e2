"""
Analytics
Aggregations behind the analytics charts
"""
from collections import Counter, OrderedDict
from datetime import datetime, timedelta
from typing import Dict, List, Optional, Sequence

from app.exceptions import ValidationError
from app.models.work_request import WorkRequest, WorkStatus


TIME_RANGES: Dict[str, int] = {
    "30days": 30,
    "3months": 90,
    "6months": 180,
    "1year": 365,
}


def range_start(time_range: str, now: Optional[datetime] = None) -> datetime:
    if time_range not in TIME_RANGES:
        raise ValidationError(
            f"Unknown time range '{time_range}'; expected one of {', '.join(TIME_RANGES)}"
        )
    now = now or datetime.utcnow()
    return now - timedelta(days=TIME_RANGES[time_range])


def week_label(moment: datetime) -> str:
    """ISO week label, e.g. 'W07 2026'"""
    iso_year, iso_week, _ = moment.isocalendar()
    return f"W{iso_week:02d} {iso_year}"


def days_late(request: WorkRequest) -> Optional[int]:
    """Whole days between the requested day and completion; negative is early"""
    if not request.completed_at or not request.requested_date:
        return None
    return (request.completed_at.date() - request.requested_day).days


def work_volume(requests: Sequence[WorkRequest]) -> List[dict]:
    """Requests submitted per day, chronological"""
    per_day = Counter(r.created_at.date() for r in requests)
    return [
        {"date": f"{day.strftime('%b')} {day.day}", "requests": count}
        for day, count in sorted(per_day.items())
    ]


def department_breakdown(requests: Sequence[WorkRequest]) -> List[dict]:
    """Requests per department, busiest first"""
    total = len(requests)
    per_department = Counter(r.department for r in requests)
    breakdown = [
        {
            "name": name,
            "requests": count,
            "percentage": round(count / total * 100) if total else 0,
        }
        for name, count in per_department.items()
    ]
    # stable: ties keep first-seen order
    breakdown.sort(key=lambda d: d["requests"], reverse=True)
    return breakdown


def weekly_completion(completed: Sequence[WorkRequest]) -> List[dict]:
    """Average actual hours per completion week"""
    weeks: Dict[str, dict] = {}
    for r in completed:
        if not r.actual_hours or not r.completed_at:
            continue
        label = week_label(r.completed_at)
        week = weeks.setdefault(label, {"hours": 0.0, "count": 0, "first": r.completed_at})
        week["hours"] += r.actual_hours
        week["count"] += 1
        week["first"] = min(week["first"], r.completed_at)

    ordered = sorted(weeks.items(), key=lambda item: item[1]["first"])
    return [
        {
            "week": label,
            "avg_hours": round(data["hours"] / data["count"], 2),
            "total_requests": data["count"],
        }
        for label, data in ordered
    ]


def weekly_performance(completed: Sequence[WorkRequest]) -> List[dict]:
    """On-time / late / early split per completion week, in percent"""
    weeks: "OrderedDict[str, Dict[str, int]]" = OrderedDict()
    for r in sorted(completed, key=lambda r: r.completed_at or datetime.min):
        diff = days_late(r)
        if diff is None:
            continue
        week = weeks.setdefault(week_label(r.completed_at), {"on_time": 0, "late": 0, "early": 0})
        if diff == 0:
            week["on_time"] += 1
        elif diff > 0:
            week["late"] += 1
        else:
            week["early"] += 1

    performance = []
    for label, data in weeks.items():
        total = data["on_time"] + data["late"] + data["early"]
        performance.append({
            "week": label,
            "on_time": round(data["on_time"] / total * 100),
            "late": round(data["late"] / total * 100),
            "early": round(data["early"] / total * 100),
        })
    return performance


def summarize(requests: Sequence[WorkRequest]) -> dict:
    """Everything the analytics page shows, in one pass over the list"""
    completed = [r for r in requests if r.status == WorkStatus.COMPLETED]

    with_hours = [r.actual_hours for r in completed if r.actual_hours]
    avg_completion_hours = round(sum(with_hours) / len(with_hours), 2) if with_hours else 0

    on_time = sum(1 for r in completed if days_late(r) == 0)
    on_time_rate = round(on_time / len(completed) * 100) if completed else 0

    departments = department_breakdown(requests)
    if departments:
        most_active = {"name": departments[0]["name"], "count": departments[0]["requests"]}
    else:
        most_active = {"name": "N/A", "count": 0}

    return {
        "total_requests": len(requests),
        "avg_completion_hours": avg_completion_hours,
        "on_time_rate": on_time_rate,
        "most_active_department": most_active,
        "work_volume": work_volume(requests),
        "departments": departments,
        "weekly_completion": weekly_completion(completed),
        "completion_performance": weekly_performance(completed),
    }
