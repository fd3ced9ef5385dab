"""Owner-scoped task workflows."""

from __future__ import annotations

from datetime import datetime

from .account import Account
from .contracts import TaskCreate, TaskQuery, TaskUpdate
from .errors import FieldError, NotFoundError, ValidationError
from .task import Task
from ..clock import Clock, utcnow
from ..repository import TaskRepository


class TaskService:
    """Task CRUD where every lookup is bound to the caller's account id.

    A task owned by someone else is reported exactly like a missing one.
    """

    def __init__(self, repository: TaskRepository, *, clock: Clock = utcnow) -> None:
        self._repository = repository
        self._clock = clock

    def _check_due_date(self, due_date: datetime | None) -> None:
        if due_date is not None and due_date < self._clock():
            raise ValidationError([FieldError("due_date", "Due date cannot be in the past")])

    def list_tasks(self, identity: Account, query: TaskQuery) -> list[Task]:
        return self._repository.list_tasks(identity.account_id, query)

    def create_task(self, identity: Account, payload: TaskCreate) -> Task:
        self._check_due_date(payload.due_date)
        return self._repository.create_task(identity.account_id, payload)

    def get_task(self, identity: Account, task_id: str) -> Task:
        task = self._repository.get_task(identity.account_id, task_id)
        if task is None:
            raise NotFoundError("Task not found")
        return task

    def update_task(self, identity: Account, task_id: str, changes: TaskUpdate) -> Task:
        if "due_date" in changes.fields_set:
            self._check_due_date(changes.due_date)
        task = self._repository.update_task(identity.account_id, task_id, changes)
        if task is None:
            raise NotFoundError("Task not found")
        return task

    def toggle_task(self, identity: Account, task_id: str) -> Task:
        task = self._repository.toggle_task(identity.account_id, task_id)
        if task is None:
            raise NotFoundError("Task not found")
        return task

    def delete_task(self, identity: Account, task_id: str) -> None:
        if not self._repository.delete_task(identity.account_id, task_id):
            raise NotFoundError("Task not found")

    def now(self) -> datetime:
        return self._clock()
