"""
Personal Task Routes
Each staff member's private task board
"""
from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, status
from beanie import PydanticObjectId
from bson.errors import InvalidId

from app.api.routes.auth import get_current_user
from app.models.personal_task import (
    PersonalTask,
    PersonalTaskCreate,
    PersonalTaskResponse,
    PersonalTaskUpdate,
    TaskBoardResponse,
    TaskStatus,
    TaskStatusUpdate,
)
from app.models.profile import Profile


router = APIRouter()


async def _get_own_task(task_id: str, current_user: Profile) -> PersonalTask:
    """Owner-only lookup; someone else's task looks like a missing one"""
    try:
        task = await PersonalTask.get(PydanticObjectId(task_id))
    except (InvalidId, TypeError, ValueError):
        task = None

    if not task or task.user_id != str(current_user.id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Task not found")
    return task


async def _my_tasks(current_user: Profile, task_status: Optional[TaskStatus] = None) -> List[PersonalTask]:
    query = {"user_id": str(current_user.id)}
    if task_status:
        query["status"] = task_status.value
    return await PersonalTask.find(query).sort("-created_at").to_list()


@router.get("/", response_model=List[PersonalTaskResponse])
async def list_tasks(
    status: Optional[TaskStatus] = None,
    current_user: Profile = Depends(get_current_user)
):
    """Get my tasks, newest first"""
    tasks = await _my_tasks(current_user, status)
    return [PersonalTaskResponse.from_document(t) for t in tasks]


@router.get("/board", response_model=TaskBoardResponse)
async def get_board(current_user: Profile = Depends(get_current_user)):
    """My tasks split into todo / in progress / completed columns"""
    tasks = await _my_tasks(current_user)
    board = {s.value: [] for s in TaskStatus}
    for task in tasks:
        board[task.status.value].append(PersonalTaskResponse.from_document(task))
    return board


@router.post("/", response_model=PersonalTaskResponse, status_code=status.HTTP_201_CREATED)
async def create_task(
    task_data: PersonalTaskCreate,
    current_user: Profile = Depends(get_current_user)
):
    """Create a task"""
    task = PersonalTask(user_id=str(current_user.id), **task_data.model_dump())
    await task.insert()
    return PersonalTaskResponse.from_document(task)


@router.put("/{task_id}", response_model=PersonalTaskResponse)
async def update_task(
    task_id: str,
    task_data: PersonalTaskUpdate,
    current_user: Profile = Depends(get_current_user)
):
    """Edit a task"""
    task = await _get_own_task(task_id, current_user)

    for field, value in task_data.model_dump(exclude_unset=True).items():
        if value is not None or field == "description":
            setattr(task, field, value)
    task.updated_at = datetime.utcnow()
    await task.save()
    return PersonalTaskResponse.from_document(task)


@router.patch("/{task_id}/status", response_model=PersonalTaskResponse)
async def update_task_status(
    task_id: str,
    body: TaskStatusUpdate,
    current_user: Profile = Depends(get_current_user)
):
    """Move a task to another column"""
    task = await _get_own_task(task_id, current_user)
    task.status = body.status
    task.updated_at = datetime.utcnow()
    await task.save()
    return PersonalTaskResponse.from_document(task)


@router.delete("/{task_id}")
async def delete_task(
    task_id: str,
    current_user: Profile = Depends(get_current_user)
):
    """Delete a task"""
    task = await _get_own_task(task_id, current_user)
    await task.delete()
    return {"message": "Task deleted", "task_id": task_id}
