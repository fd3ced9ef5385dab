"""Task records and the values derived from them at read time."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum


class TaskStatus(str, Enum):
    pending = "pending"
    completed = "completed"


class TaskPriority(str, Enum):
    low = "low"
    medium = "medium"
    high = "high"


@dataclass(frozen=True, slots=True)
class Task:
    task_id: str
    owner_id: str
    title: str
    description: str
    due_date: datetime | None
    status: TaskStatus
    priority: TaskPriority
    created_at: datetime
    updated_at: datetime


def is_overdue(task: Task, now: datetime) -> bool:
    """A task is overdue when it has a due date in the past and is still pending."""
    if task.due_date is None or task.status is TaskStatus.completed:
        return False
    return now > task.due_date
