"""Domain-level request contracts shared by multiple layers."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

from .account import Role
from .task import TaskPriority, TaskStatus


@dataclass(slots=True)
class RegisterInput:
    """Shape-validated inputs for creating an account."""

    name: str
    email: str
    password: str
    role: Role = Role.user
    admin_code: str | None = None


@dataclass(slots=True)
class NewAccount:
    """Row handed to the account store; the password is already hashed."""

    name: str
    email: str
    password_hash: str
    role: Role


@dataclass(slots=True)
class ProfileUpdate:
    name: str | None = None
    email: str | None = None


@dataclass(slots=True)
class TaskCreate:
    title: str
    description: str = ""
    due_date: datetime | None = None
    priority: TaskPriority = TaskPriority.medium


@dataclass(slots=True)
class TaskUpdate:
    """Partial task update; only fields named in ``fields_set`` are written."""

    title: str | None = None
    description: str | None = None
    due_date: datetime | None = None
    status: TaskStatus | None = None
    priority: TaskPriority | None = None
    fields_set: frozenset[str] = field(default_factory=frozenset)

    def changes(self) -> dict[str, object]:
        return {name: getattr(self, name) for name in sorted(self.fields_set)}


SORT_FIELDS = ("created_at", "updated_at", "due_date", "priority", "title")


@dataclass(slots=True)
class TaskQuery:
    status: TaskStatus | None = None
    priority: TaskPriority | None = None
    search: str | None = None
    sort_by: str = "created_at"
    sort_order: str = "desc"
