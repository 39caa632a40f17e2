"""
Work order persistence
Loading, submission, and broadcasting of saved changes
"""
import logging
import re
from datetime import date
from typing import List, Optional

from beanie import PydanticObjectId
from bson.errors import InvalidId

from app.config import settings
from app.exceptions import NotFoundError
from app.models.work_request import (
    WorkRequest,
    WorkRequestCreate,
    WorkRequestResponse,
    to_datetime,
)
from app.services.change_feed import ChangeEvent, change_feed
from app.services.webhook import webhook_service
from app.services.work_order_ids import next_work_order_id


logger = logging.getLogger(__name__)


async def get_work_request(request_id: str) -> WorkRequest:
    try:
        object_id = PydanticObjectId(request_id)
    except (InvalidId, TypeError, ValueError):
        raise NotFoundError(f"Work order {request_id} not found")

    request = await WorkRequest.get(object_id)
    if not request:
        raise NotFoundError(f"Work order {request_id} not found")
    return request


async def list_work_requests(newest_first: bool = True) -> List[WorkRequest]:
    order = "-created_at" if newest_first else "created_at"
    return await WorkRequest.find_all().sort(order).to_list()


async def find_by_email(email: str) -> List[WorkRequest]:
    """Requests submitted with this email, any capitalisation, newest first"""
    pattern = f"^{re.escape(email.strip())}$"
    return await WorkRequest.find(
        {"requestor_email": {"$regex": pattern, "$options": "i"}}
    ).sort("-created_at").to_list()


async def broadcast(
    request: WorkRequest,
    event: ChangeEvent,
    old_requested_date: Optional[date] = None,
) -> None:
    """Push a saved change to live views and the automation webhook"""
    record = WorkRequestResponse.from_document(request).model_dump(mode="json")
    change_feed.publish(event, record)
    await webhook_service.notify_work_request(request, event.value, old_requested_date)


async def submit_request(data: WorkRequestCreate) -> WorkRequest:
    """Create a pending work request with the next WO code"""
    request = WorkRequest(
        work_order_id=await next_work_order_id(),
        requestor_name=data.requestor_name,
        requestor_email=str(data.requestor_email),
        requestor_phone=data.requestor_phone,
        department=data.department,
        title=data.title,
        description=data.description,
        category=(data.category or "").strip() or settings.DEFAULT_CATEGORY,
        location=data.location,
        priority=data.priority,
        estimated_hours=data.estimated_hours,
        requested_date=to_datetime(data.requested_date),
    )
    await request.insert()
    logger.info(
        "Work request %s submitted by %s (%s)",
        request.work_order_id, request.requestor_email, request.department
    )
    await broadcast(request, ChangeEvent.INSERT)
    return request


async def save_change(request: WorkRequest, old_requested_date: Optional[date] = None) -> WorkRequest:
    await request.save()
    await broadcast(request, ChangeEvent.UPDATE, old_requested_date)
    return request
