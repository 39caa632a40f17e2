"""
Work Request Model
Database schema for facility maintenance and event requests
"""
from datetime import datetime, date
from typing import Optional, List
from uuid import uuid4
from pydantic import BaseModel, EmailStr, Field, field_validator
from beanie import Document
from enum import Enum


class WorkStatus(str, Enum):
    """Work order lifecycle status"""
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    IN_PROGRESS = "in_progress"
    PAUSED = "paused"
    COMPLETED = "completed"


class Priority(str, Enum):
    """Request priority"""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"
    EMERGENCY = "emergency"


HIGH_PRIORITIES = {Priority.HIGH, Priority.URGENT, Priority.EMERGENCY}
CLOSED_STATUSES = {WorkStatus.COMPLETED, WorkStatus.REJECTED}


class ChecklistItem(BaseModel):
    """Approval checklist entry"""
    id: str = Field(default_factory=lambda: str(uuid4()))
    text: str
    completed: bool = False


class WorkRequest(Document):
    """Work request document"""

    # Identity
    work_order_id: Optional[str] = None

    # Requestor
    requestor_name: str
    requestor_email: str
    requestor_phone: Optional[str] = None
    department: str

    # Request Details
    title: str
    description: str
    category: str = "General"
    location: str
    priority: Priority = Priority.MEDIUM
    estimated_hours: Optional[float] = None

    # Scheduling
    requested_date: datetime
    date_changed_reason: Optional[str] = None

    # Status
    status: WorkStatus = WorkStatus.PENDING

    # Approval
    approved_by: Optional[str] = None
    approved_at: Optional[datetime] = None
    approval_checklist: List[ChecklistItem] = []

    # Rejection
    rejected_by: Optional[str] = None
    rejected_at: Optional[datetime] = None
    rejected_reason: Optional[str] = None

    # Work
    started_by: Optional[str] = None
    started_at: Optional[datetime] = None
    paused_at: Optional[datetime] = None
    resumed_at: Optional[datetime] = None

    # Completion
    completed_by: Optional[str] = None
    completed_at: Optional[datetime] = None
    actual_hours: Optional[float] = None
    completion_notes: Optional[str] = None

    # Timer
    is_timer_active: bool = False
    timer_started_at: Optional[datetime] = None
    timer_paused_at: Optional[datetime] = None
    total_elapsed_seconds: int = 0

    # Metadata
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    class Settings:
        name = "work_requests"
        indexes = [
            "work_order_id",
            "requestor_email",
            "status",
            "department",
            "requested_date",
            "created_at",
        ]

    class Config:
        json_schema_extra = {
            "example": {
                "work_order_id": "WO-42",
                "requestor_name": "Jane Doe",
                "requestor_email": "jane@church.org",
                "department": "worship",
                "title": "Replace stage lights",
                "description": "Two spotlights over the stage are out",
                "location": "Main sanctuary",
                "priority": "high",
                "requested_date": "2026-01-10",
                "status": "pending"
            }
        }

    @property
    def requested_day(self) -> date:
        return self.requested_date.date()


def to_datetime(day: date) -> datetime:
    """Store calendar days as midnight datetimes"""
    return datetime(day.year, day.month, day.day)


class WorkRequestCreate(BaseModel):
    """Schema for the public submission form"""
    title: str = Field(..., min_length=1, max_length=200)
    description: str = Field(..., min_length=1)
    location: str = Field(..., min_length=1)
    department: str = Field(..., min_length=1)
    priority: Priority = Priority.MEDIUM
    requested_date: date
    requestor_name: str = Field(..., min_length=1)
    requestor_email: EmailStr
    requestor_phone: Optional[str] = None
    category: Optional[str] = None
    estimated_hours: Optional[float] = Field(default=None, gt=0, allow_inf_nan=False)

    @field_validator("title", "description", "location", "department", "requestor_name")
    @classmethod
    def not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be blank")
        return value

    @field_validator("department")
    @classmethod
    def lower_department(cls, value: str) -> str:
        return value.lower()


class ChecklistItemIn(BaseModel):
    """Checklist entry supplied at approval"""
    id: Optional[str] = None
    text: str
    completed: bool = False


class ApproveRequest(BaseModel):
    """Schema for approving a work order"""
    new_date: Optional[date] = None
    date_change_reason: Optional[str] = None
    checklist: Optional[List[ChecklistItemIn]] = None


class RejectRequest(BaseModel):
    """Schema for rejecting a work order"""
    reason: str


class CompleteRequest(BaseModel):
    """Schema for completing a work order"""
    actual_hours: float = Field(..., gt=0, allow_inf_nan=False)
    notes: Optional[str] = None


class WorkRequestResponse(BaseModel):
    """Full work order, as seen by the admin suite"""
    id: str
    work_order_id: Optional[str] = None
    requestor_name: str
    requestor_email: str
    requestor_phone: Optional[str] = None
    department: str
    title: str
    description: str
    category: str
    location: str
    priority: Priority
    estimated_hours: Optional[float] = None
    requested_date: date
    date_changed_reason: Optional[str] = None
    status: WorkStatus
    approved_by: Optional[str] = None
    approved_at: Optional[datetime] = None
    approval_checklist: List[ChecklistItem] = []
    rejected_by: Optional[str] = None
    rejected_at: Optional[datetime] = None
    rejected_reason: Optional[str] = None
    started_by: Optional[str] = None
    started_at: Optional[datetime] = None
    paused_at: Optional[datetime] = None
    resumed_at: Optional[datetime] = None
    completed_by: Optional[str] = None
    completed_at: Optional[datetime] = None
    actual_hours: Optional[float] = None
    completion_notes: Optional[str] = None
    is_timer_active: bool = False
    total_elapsed_seconds: int = 0
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_document(cls, request: WorkRequest) -> "WorkRequestResponse":
        data = request.model_dump(exclude={"id", "requested_date"})
        return cls(id=str(request.id), requested_date=request.requested_day, **data)


class PublicWorkRequestResponse(BaseModel):
    """Work order as shown on the public status page"""
    work_order_id: Optional[str] = None
    title: str
    department: str
    location: str
    priority: Priority
    status: WorkStatus
    requested_date: date
    date_changed_reason: Optional[str] = None
    rejected_reason: Optional[str] = None
    created_at: datetime
    completed_at: Optional[datetime] = None

    @classmethod
    def from_document(cls, request: WorkRequest) -> "PublicWorkRequestResponse":
        return cls(
            work_order_id=request.work_order_id,
            title=request.title,
            department=request.department,
            location=request.location,
            priority=request.priority,
            status=request.status,
            requested_date=request.requested_day,
            date_changed_reason=request.date_changed_reason,
            rejected_reason=request.rejected_reason,
            created_at=request.created_at,
            completed_at=request.completed_at,
        )


class WorkRequestListResponse(BaseModel):
    """Paged list of work orders with headline counts"""
    total: int
    page: int
    total_pages: int
    counts: dict
    work_orders: List[WorkRequestResponse]
