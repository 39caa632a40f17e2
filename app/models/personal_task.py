"""
Personal Task Model
Private to-do items on a staff member's task board
"""
from datetime import datetime
from typing import Optional, List
from pydantic import BaseModel, Field, field_validator
from beanie import Document
from enum import Enum


class TaskStatus(str, Enum):
    TODO = "todo"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


class TaskPriority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"


class PersonalTask(Document):
    user_id: str
    title: str
    description: Optional[str] = None
    priority: TaskPriority = TaskPriority.MEDIUM
    status: TaskStatus = TaskStatus.TODO
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    class Settings:
        name = "personal_tasks"
        indexes = [
            "user_id",
            "status",
        ]


def _strip_title(value: Optional[str]) -> Optional[str]:
    if value is None:
        return value
    value = value.strip()
    if not value:
        raise ValueError("Title is required")
    return value


class PersonalTaskCreate(BaseModel):
    title: str
    description: Optional[str] = None
    priority: TaskPriority = TaskPriority.MEDIUM
    status: TaskStatus = TaskStatus.TODO

    @field_validator("title")
    @classmethod
    def title_required(cls, value: str) -> str:
        return _strip_title(value)


class PersonalTaskUpdate(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    priority: Optional[TaskPriority] = None
    status: Optional[TaskStatus] = None

    @field_validator("title")
    @classmethod
    def title_required(cls, value: Optional[str]) -> Optional[str]:
        return _strip_title(value)


class TaskStatusUpdate(BaseModel):
    status: TaskStatus


class PersonalTaskResponse(BaseModel):
    id: str
    title: str
    description: Optional[str] = None
    priority: TaskPriority
    status: TaskStatus
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_document(cls, task: PersonalTask) -> "PersonalTaskResponse":
        return cls(
            id=str(task.id),
            title=task.title,
            description=task.description,
            priority=task.priority,
            status=task.status,
            created_at=task.created_at,
            updated_at=task.updated_at,
        )


class TaskBoardResponse(BaseModel):
    todo: List[PersonalTaskResponse]
    in_progress: List[PersonalTaskResponse]
    completed: List[PersonalTaskResponse]
