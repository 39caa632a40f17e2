"""
Public Request Routes
Anonymous work request submission and status check
"""
from typing import List

from fastapi import APIRouter, Query, status
from pydantic import BaseModel, EmailStr

from app.models.work_request import (
    PublicWorkRequestResponse,
    WorkRequestCreate,
    WorkStatus,
)
from app.services import work_orders


router = APIRouter()


class SubmissionResponse(BaseModel):
    message: str
    id: str
    work_order_id: str
    status: WorkStatus


class StatusCheckResponse(BaseModel):
    email: EmailStr
    total: int
    requests: List[PublicWorkRequestResponse]


@router.post("/", response_model=SubmissionResponse, status_code=status.HTTP_201_CREATED)
async def submit_work_request(request_data: WorkRequestCreate):
    """
    Submit a new work request from the public form
    """
    request = await work_orders.submit_request(request_data)

    return {
        "message": f"Work request submitted! ID: {request.work_order_id}",
        "id": str(request.id),
        "work_order_id": request.work_order_id,
        "status": request.status,
    }


@router.get("/status", response_model=StatusCheckResponse)
async def check_status(email: EmailStr = Query(..., description="Email used on the request")):
    """
    Look up every request submitted with an email address
    """
    requests = await work_orders.find_by_email(str(email))

    return {
        "email": email,
        "total": len(requests),
        "requests": [PublicWorkRequestResponse.from_document(r) for r in requests],
    }
