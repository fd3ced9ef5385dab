"""Task DTOs exchanged over HTTP."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Annotated

from pydantic import BaseModel, StringConstraints, field_validator

from ..domain.contracts import TaskCreate, TaskUpdate
from ..domain.task import Task, TaskPriority, TaskStatus, is_overdue

Title = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=100)]
Description = Annotated[str, StringConstraints(strip_whitespace=True, max_length=500)]


def _as_utc(value: datetime | None) -> datetime | None:
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class TaskCreateRequest(BaseModel):
    title: Title
    description: Description = ""
    due_date: datetime | None = None
    priority: TaskPriority = TaskPriority.medium

    @field_validator("due_date")
    @classmethod
    def normalize_due_date(cls, value: datetime | None) -> datetime | None:
        return _as_utc(value)

    def to_domain(self) -> TaskCreate:
        return TaskCreate(
            title=self.title,
            description=self.description,
            due_date=self.due_date,
            priority=self.priority,
        )


class TaskUpdateRequest(BaseModel):
    title: Title | None = None
    description: Description | None = None
    due_date: datetime | None = None
    status: TaskStatus | None = None
    priority: TaskPriority | None = None

    @field_validator("due_date")
    @classmethod
    def normalize_due_date(cls, value: datetime | None) -> datetime | None:
        return _as_utc(value)

    def to_domain(self) -> TaskUpdate:
        # Explicit nulls only count for due_date; other columns are NOT NULL.
        fields_set = {
            name
            for name in self.model_fields_set
            if name == "due_date" or getattr(self, name) is not None
        }
        return TaskUpdate(
            title=self.title,
            description=self.description,
            due_date=self.due_date,
            status=self.status,
            priority=self.priority,
            fields_set=frozenset(fields_set),
        )


class TaskResponse(BaseModel):
    task_id: str
    owner_id: str
    title: str
    description: str
    due_date: datetime | None
    status: TaskStatus
    priority: TaskPriority
    created_at: datetime
    updated_at: datetime
    is_overdue: bool

    @classmethod
    def from_domain(cls, task: Task, now: datetime) -> "TaskResponse":
        return cls(
            task_id=task.task_id,
            owner_id=task.owner_id,
            title=task.title,
            description=task.description,
            due_date=task.due_date,
            status=task.status,
            priority=task.priority,
            created_at=task.created_at,
            updated_at=task.updated_at,
            is_overdue=is_overdue(task, now),
        )


class TaskEnvelope(BaseModel):
    message: str | None = None
    task: TaskResponse


class TaskListResponse(BaseModel):
    tasks: list[TaskResponse]
