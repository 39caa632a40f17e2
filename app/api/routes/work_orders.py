"""
Work Order Routes
Admin work order table, kanban board, status workflow and live change feed
"""
import asyncio
import logging
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Query, WebSocket, WebSocketDisconnect, status
from fastapi.responses import Response

from app.api.routes.auth import profile_from_token, require_staff
from app.config import settings
from app.models.profile import Profile, STAFF_ROLES
from app.models.work_request import (
    ApproveRequest,
    CompleteRequest,
    RejectRequest,
    WorkRequestListResponse,
    WorkRequestResponse,
)
from app.services import filters, workflow, work_orders
from app.services.change_feed import change_feed
from app.services.webhook import webhook_service


logger = logging.getLogger(__name__)

router = APIRouter()


def _respond(request) -> WorkRequestResponse:
    return WorkRequestResponse.from_document(request)


@router.get("/", response_model=WorkRequestListResponse)
async def list_work_orders(
    search: Optional[str] = None,
    status: Optional[str] = None,
    priority: Optional[str] = None,
    department: Optional[str] = None,
    page: int = Query(1, ge=1),
    page_size: int = Query(settings.ITEMS_PER_PAGE, ge=1, le=100),
    current_user: Profile = Depends(require_staff)
):
    """
    Filtered, paged work order table (newest first)
    """
    requests = await work_orders.list_work_requests()
    matching = filters.filter_requests(requests, search, status, priority, department)
    result = filters.paginate(matching, page, page_size)

    return {
        "total": result.total,
        "page": result.page,
        "total_pages": result.total_pages,
        "counts": filters.summary_counts(requests),
        "work_orders": [_respond(r) for r in result.items],
    }


@router.get("/board")
async def get_board(
    search: Optional[str] = None,
    priority: Optional[str] = None,
    department: Optional[str] = None,
    current_user: Profile = Depends(require_staff)
):
    """
    Kanban view: one column per status
    """
    requests = await work_orders.list_work_requests()
    matching = filters.filter_requests(requests, search, None, priority, department)
    board = filters.group_by_status(matching)

    columns = {}
    for column, items in board.items():
        columns[column] = []
        for r in items:
            done, total, percent = workflow.checklist_progress(r.approval_checklist)
            columns[column].append({
                **_respond(r).model_dump(mode="json"),
                "checklist_progress": {"completed": done, "total": total, "percent": percent},
            })
    return columns


@router.get("/export.csv")
async def export_work_orders(
    search: Optional[str] = None,
    status: Optional[str] = None,
    priority: Optional[str] = None,
    department: Optional[str] = None,
    current_user: Profile = Depends(require_staff)
):
    """
    Download the filtered table as CSV
    """
    requests = await work_orders.list_work_requests()
    matching = filters.filter_requests(requests, search, status, priority, department)
    filename = f"work-orders-{datetime.utcnow().strftime('%Y-%m-%d')}.csv"

    return Response(
        content=filters.export_csv(matching),
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.get("/{request_id}", response_model=WorkRequestResponse)
async def get_work_order(
    request_id: str,
    current_user: Profile = Depends(require_staff)
):
    request = await work_orders.get_work_request(request_id)
    return _respond(request)


@router.post("/{request_id}/approve", response_model=WorkRequestResponse)
async def approve_work_order(
    request_id: str,
    body: ApproveRequest,
    current_user: Profile = Depends(require_staff)
):
    """
    Approve a pending request, optionally moving its date and attaching a checklist
    """
    request = await work_orders.get_work_request(request_id)
    result = workflow.approve(
        request,
        current_user.display_name,
        new_date=body.new_date,
        date_change_reason=body.date_change_reason,
        checklist=body.checklist,
    )
    await work_orders.save_change(request, result.old_day)

    if result.date_changed:
        await webhook_service.notify_date_change(
            request, result.old_day, request.requested_day, request.date_changed_reason
        )
    return _respond(request)


@router.post("/{request_id}/reject", response_model=WorkRequestResponse)
async def reject_work_order(
    request_id: str,
    body: RejectRequest,
    current_user: Profile = Depends(require_staff)
):
    request = await work_orders.get_work_request(request_id)
    result = workflow.reject(request, current_user.display_name, body.reason)
    await work_orders.save_change(request, result.old_day)
    return _respond(request)


@router.post("/{request_id}/start", response_model=WorkRequestResponse)
async def start_work_order(
    request_id: str,
    current_user: Profile = Depends(require_staff)
):
    request = await work_orders.get_work_request(request_id)
    result = workflow.start(request, current_user.display_name)
    await work_orders.save_change(request, result.old_day)
    return _respond(request)


@router.post("/{request_id}/pause", response_model=WorkRequestResponse)
async def pause_work_order(
    request_id: str,
    current_user: Profile = Depends(require_staff)
):
    request = await work_orders.get_work_request(request_id)
    result = workflow.pause(request, current_user.display_name)
    await work_orders.save_change(request, result.old_day)
    return _respond(request)


@router.post("/{request_id}/resume", response_model=WorkRequestResponse)
async def resume_work_order(
    request_id: str,
    current_user: Profile = Depends(require_staff)
):
    request = await work_orders.get_work_request(request_id)
    result = workflow.resume(request, current_user.display_name)
    await work_orders.save_change(request, result.old_day)
    return _respond(request)


@router.post("/{request_id}/complete", response_model=WorkRequestResponse)
async def complete_work_order(
    request_id: str,
    body: CompleteRequest,
    current_user: Profile = Depends(require_staff)
):
    request = await work_orders.get_work_request(request_id)
    result = workflow.complete(request, current_user.display_name, body.actual_hours, body.notes)
    await work_orders.save_change(request, result.old_day)
    return _respond(request)


@router.patch("/{request_id}/checklist/{item_id}", response_model=WorkRequestResponse)
async def toggle_checklist_item(
    request_id: str,
    item_id: str,
    current_user: Profile = Depends(require_staff)
):
    request = await work_orders.get_work_request(request_id)
    workflow.toggle_checklist_item(request, item_id)
    await work_orders.save_change(request, request.requested_day)
    return _respond(request)


async def _wait_for_disconnect(websocket: WebSocket) -> None:
    """Return once the client goes away; clients send nothing else"""
    while True:
        message = await websocket.receive()
        if message["type"] == "websocket.disconnect":
            return


@router.websocket("/ws")
async def work_order_changes(websocket: WebSocket, token: str = Query(...)):
    """
    Live change feed for the work order list
    """
    profile = await profile_from_token(token)
    if profile is None or profile.role not in STAFF_ROLES:
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return

    async with change_feed.subscribe() as queue:
        await websocket.accept()
        listener = asyncio.create_task(_wait_for_disconnect(websocket))
        getter = None
        try:
            while True:
                getter = asyncio.create_task(queue.get())
                done, _ = await asyncio.wait({getter, listener}, return_when=asyncio.FIRST_COMPLETED)
                if getter not in done:
                    break
                await websocket.send_json(getter.result())
        except WebSocketDisconnect:
            logger.debug("Change feed send to %s failed, client gone", profile.email)
        finally:
            listener.cancel()
            if getter is not None:
                getter.cancel()
    logger.debug("Change feed client %s disconnected", profile.email)
