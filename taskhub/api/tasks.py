"""Owner-scoped task routes."""

from __future__ import annotations

from typing import Literal

from fastapi import APIRouter, Depends, Query, status

from ..domain.account import Account
from ..domain.contracts import TaskQuery
from ..domain.task import TaskPriority, TaskStatus
from ..domain.task_service import TaskService
from ..schemas import (
    MessageResponse,
    TaskCreateRequest,
    TaskEnvelope,
    TaskListResponse,
    TaskResponse,
    TaskUpdateRequest,
)
from .deps import get_identity, get_task_service

router = APIRouter(prefix="/api/tasks", tags=["tasks"])

SortField = Literal["created_at", "updated_at", "due_date", "priority", "title"]


@router.get("", response_model=TaskListResponse)
def list_tasks(
    status_filter: TaskStatus | None = Query(default=None, alias="status"),
    priority: TaskPriority | None = Query(default=None),
    search: str | None = Query(default=None, max_length=100),
    sort_by: SortField = Query(default="created_at"),
    sort_order: Literal["asc", "desc"] = Query(default="desc"),
    identity: Account = Depends(get_identity),
    service: TaskService = Depends(get_task_service),
) -> TaskListResponse:
    tasks = service.list_tasks(
        identity,
        TaskQuery(
            status=status_filter,
            priority=priority,
            search=search.strip() if search else None,
            sort_by=sort_by,
            sort_order=sort_order,
        ),
    )
    now = service.now()
    return TaskListResponse(tasks=[TaskResponse.from_domain(task, now) for task in tasks])


@router.post("", response_model=TaskEnvelope, status_code=status.HTTP_201_CREATED)
def create_task(
    payload: TaskCreateRequest,
    identity: Account = Depends(get_identity),
    service: TaskService = Depends(get_task_service),
) -> TaskEnvelope:
    task = service.create_task(identity, payload.to_domain())
    return TaskEnvelope(message="Task created successfully", task=TaskResponse.from_domain(task, service.now()))


@router.get("/{task_id}", response_model=TaskEnvelope)
def get_task(
    task_id: str,
    identity: Account = Depends(get_identity),
    service: TaskService = Depends(get_task_service),
) -> TaskEnvelope:
    task = service.get_task(identity, task_id)
    return TaskEnvelope(task=TaskResponse.from_domain(task, service.now()))


@router.put("/{task_id}", response_model=TaskEnvelope)
def update_task(
    task_id: str,
    payload: TaskUpdateRequest,
    identity: Account = Depends(get_identity),
    service: TaskService = Depends(get_task_service),
) -> TaskEnvelope:
    task = service.update_task(identity, task_id, payload.to_domain())
    return TaskEnvelope(message="Task updated successfully", task=TaskResponse.from_domain(task, service.now()))


@router.patch("/{task_id}/toggle", response_model=TaskEnvelope)
def toggle_task(
    task_id: str,
    identity: Account = Depends(get_identity),
    service: TaskService = Depends(get_task_service),
) -> TaskEnvelope:
    task = service.toggle_task(identity, task_id)
    return TaskEnvelope(
        message="Task status updated successfully", task=TaskResponse.from_domain(task, service.now())
    )


@router.delete("/{task_id}", response_model=MessageResponse)
def delete_task(
    task_id: str,
    identity: Account = Depends(get_identity),
    service: TaskService = Depends(get_task_service),
) -> MessageResponse:
    service.delete_task(identity, task_id)
    return MessageResponse(message="Task deleted successfully")
