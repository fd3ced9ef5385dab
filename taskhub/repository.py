"""Database repositories for accounts and the tasks they own."""

from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Iterator

from psycopg import errors
from psycopg.rows import tuple_row
from psycopg_pool import ConnectionPool

from .domain.account import Account, Role, StoredAccount
from .domain.contracts import SORT_FIELDS, NewAccount, ProfileUpdate, TaskCreate, TaskQuery, TaskUpdate
from .domain.errors import ConflictError, UnknownAccountError
from .domain.task import Task, TaskPriority, TaskStatus

logger = logging.getLogger(__name__)

_ACCOUNT_COLUMNS = "account_id, name, email, role, created_at, updated_at"
_TASK_COLUMNS = (
    "task_id, owner_id, title, description, due_date, status, priority, created_at, updated_at"
)

_SORT_EXPRESSIONS = {
    "created_at": "created_at",
    "updated_at": "updated_at",
    "due_date": "due_date",
    "title": "lower(title)",
    "priority": "CASE priority WHEN 'low' THEN 0 WHEN 'medium' THEN 1 ELSE 2 END",
}


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _map_account(row: tuple) -> Account:
    return Account(
        account_id=row[0],
        name=row[1],
        email=row[2],
        role=Role(row[3]),
        created_at=row[4],
        updated_at=row[5],
    )


def _map_task(row: tuple) -> Task:
    return Task(
        task_id=row[0],
        owner_id=row[1],
        title=row[2],
        description=row[3],
        due_date=row[4],
        status=TaskStatus(row[5]),
        priority=TaskPriority(row[6]),
        created_at=row[7],
        updated_at=row[8],
    )


def _escape_like(value: str) -> str:
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def build_task_query(owner_id: str, query: TaskQuery) -> tuple[str, list[Any]]:
    """Return the SQL and parameters listing ``owner_id``'s tasks.

    The owner filter is always the first clause; sort columns come from a fixed
    whitelist and never from caller text.
    """
    clauses = ["owner_id = %s"]
    params: list[Any] = [owner_id]

    if query.status is not None:
        clauses.append("status = %s")
        params.append(query.status.value)
    if query.priority is not None:
        clauses.append("priority = %s")
        params.append(query.priority.value)
    if query.search:
        pattern = f"%{_escape_like(query.search)}%"
        clauses.append("(title ILIKE %s OR description ILIKE %s)")
        params.extend([pattern, pattern])

    if query.sort_by not in SORT_FIELDS:
        raise ValueError(f"unsupported sort field: {query.sort_by}")
    direction = "ASC" if query.sort_order == "asc" else "DESC"
    order_sql = f"{_SORT_EXPRESSIONS[query.sort_by]} {direction} NULLS LAST, task_id {direction}"

    sql = f"""
        SELECT {_TASK_COLUMNS}
        FROM tasks
        WHERE {" AND ".join(clauses)}
        ORDER BY {order_sql}
    """
    return sql, params


class AccountRepository:
    """Postgres-backed credential store.

    Email uniqueness is left to the ``accounts_email_key`` constraint; a
    violation surfaces as ``ConflictError`` without exposing constraint text.
    """

    def __init__(self, pool: ConnectionPool) -> None:
        self._pool = pool

    def create_account(self, payload: NewAccount) -> Account:
        account_id = str(uuid.uuid4())
        now = _now()
        try:
            with self._pool.connection() as conn:
                with conn.cursor(row_factory=tuple_row) as cur:
                    cur.execute(
                        f"""
                        INSERT INTO accounts (account_id, name, email, password_hash, role, created_at, updated_at)
                        VALUES (%s, %s, %s, %s, %s, %s, %s)
                        RETURNING {_ACCOUNT_COLUMNS}
                        """,
                        (
                            account_id,
                            payload.name,
                            payload.email,
                            payload.password_hash,
                            payload.role.value,
                            now,
                            now,
                        ),
                    )
                    row = cur.fetchone()
                conn.commit()
        except errors.UniqueViolation as exc:
            raise ConflictError("Email already registered") from exc
        return _map_account(row)

    def find_by_email(self, email: str) -> StoredAccount | None:
        with self._pool.connection() as conn:
            with conn.cursor(row_factory=tuple_row) as cur:
                cur.execute(
                    f"SELECT {_ACCOUNT_COLUMNS}, password_hash FROM accounts WHERE email = %s",
                    (email,),
                )
                row = cur.fetchone()
        if not row:
            return None
        return StoredAccount(account=_map_account(row[:6]), password_hash=row[6])

    def find_by_id(self, account_id: str) -> Account | None:
        with self._pool.connection() as conn:
            with conn.cursor(row_factory=tuple_row) as cur:
                cur.execute(
                    f"SELECT {_ACCOUNT_COLUMNS} FROM accounts WHERE account_id = %s",
                    (account_id,),
                )
                row = cur.fetchone()
        if not row:
            return None
        return _map_account(row)

    def list_accounts(self) -> list[Account]:
        with self._pool.connection() as conn:
            with conn.cursor(row_factory=tuple_row) as cur:
                cur.execute(f"SELECT {_ACCOUNT_COLUMNS} FROM accounts ORDER BY created_at, account_id")
                rows = cur.fetchall()
        return [_map_account(row) for row in rows]

    def update_account(self, account_id: str, changes: ProfileUpdate) -> Account | None:
        """Apply name/email changes; the role column is never written here."""
        fields: list[tuple[str, Any]] = []
        if changes.name is not None:
            fields.append(("name", changes.name))
        if changes.email is not None:
            fields.append(("email", changes.email))
        fields.append(("updated_at", _now()))

        sets = ", ".join(f"{column} = %s" for column, _ in fields)
        params = [value for _, value in fields] + [account_id]
        try:
            with self._pool.connection() as conn:
                with conn.cursor(row_factory=tuple_row) as cur:
                    cur.execute(
                        f"UPDATE accounts SET {sets} WHERE account_id = %s RETURNING {_ACCOUNT_COLUMNS}",
                        params,
                    )
                    row = cur.fetchone()
                conn.commit()
        except errors.UniqueViolation as exc:
            raise ConflictError("Email is already taken") from exc
        if not row:
            return None
        return _map_account(row)

    def delete_account(self, account_id: str) -> int | None:
        """Delete an account and every task it owns in one transaction.

        Returns the number of tasks removed, or ``None`` when the account does
        not exist. The row lock blocks concurrent task inserts for this owner
        until commit, after which their foreign key check fails.
        """
        with self._pool.connection() as conn:
            with conn.transaction():
                with conn.cursor(row_factory=tuple_row) as cur:
                    cur.execute(
                        "SELECT account_id FROM accounts WHERE account_id = %s FOR UPDATE",
                        (account_id,),
                    )
                    if cur.fetchone() is None:
                        return None
                    cur.execute("DELETE FROM tasks WHERE owner_id = %s", (account_id,))
                    removed = cur.rowcount
                    cur.execute("DELETE FROM accounts WHERE account_id = %s", (account_id,))
        logger.debug("deleted account %s with %d tasks", account_id, removed)
        return removed


class TaskRepository:
    """Owner-scoped task persistence; every statement filters on ``owner_id``."""

    def __init__(self, pool: ConnectionPool) -> None:
        self._pool = pool

    def create_task(self, owner_id: str, payload: TaskCreate) -> Task:
        task_id = str(uuid.uuid4())
        now = _now()
        try:
            with self._pool.connection() as conn:
                with conn.cursor(row_factory=tuple_row) as cur:
                    cur.execute(
                        f"""
                        INSERT INTO tasks (task_id, owner_id, title, description, due_date, status, priority, created_at, updated_at)
                        VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s)
                        RETURNING {_TASK_COLUMNS}
                        """,
                        (
                            task_id,
                            owner_id,
                            payload.title,
                            payload.description,
                            payload.due_date,
                            TaskStatus.pending.value,
                            payload.priority.value,
                            now,
                            now,
                        ),
                    )
                    row = cur.fetchone()
                conn.commit()
        except errors.ForeignKeyViolation as exc:
            raise UnknownAccountError("owner removed while creating task") from exc
        return _map_task(row)

    def list_tasks(self, owner_id: str, query: TaskQuery) -> list[Task]:
        sql, params = build_task_query(owner_id, query)
        with self._pool.connection() as conn:
            with conn.cursor(row_factory=tuple_row) as cur:
                cur.execute(sql, params)
                rows = cur.fetchall()
        return [_map_task(row) for row in rows]

    def get_task(self, owner_id: str, task_id: str) -> Task | None:
        with self._pool.connection() as conn:
            with conn.cursor(row_factory=tuple_row) as cur:
                cur.execute(
                    f"SELECT {_TASK_COLUMNS} FROM tasks WHERE task_id = %s AND owner_id = %s",
                    (task_id, owner_id),
                )
                row = cur.fetchone()
        if not row:
            return None
        return _map_task(row)

    def update_task(self, owner_id: str, task_id: str, changes: TaskUpdate) -> Task | None:
        fields: list[tuple[str, Any]] = []
        for column, value in changes.changes().items():
            if isinstance(value, (TaskStatus, TaskPriority)):
                value = value.value
            fields.append((column, value))
        fields.append(("updated_at", _now()))

        sets = ", ".join(f"{column} = %s" for column, _ in fields)
        params = [value for _, value in fields] + [task_id, owner_id]
        with self._pool.connection() as conn:
            with conn.cursor(row_factory=tuple_row) as cur:
                cur.execute(
                    f"""
                    UPDATE tasks SET {sets}
                    WHERE task_id = %s AND owner_id = %s
                    RETURNING {_TASK_COLUMNS}
                    """,
                    params,
                )
                row = cur.fetchone()
            conn.commit()
        if not row:
            return None
        return _map_task(row)

    def toggle_task(self, owner_id: str, task_id: str) -> Task | None:
        with self._pool.connection() as conn:
            with conn.cursor(row_factory=tuple_row) as cur:
                cur.execute(
                    f"""
                    UPDATE tasks
                    SET status = CASE status WHEN 'completed' THEN 'pending' ELSE 'completed' END,
                        updated_at = %s
                    WHERE task_id = %s AND owner_id = %s
                    RETURNING {_TASK_COLUMNS}
                    """,
                    (_now(), task_id, owner_id),
                )
                row = cur.fetchone()
            conn.commit()
        if not row:
            return None
        return _map_task(row)

    def delete_task(self, owner_id: str, task_id: str) -> bool:
        with self._pool.connection() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    "DELETE FROM tasks WHERE task_id = %s AND owner_id = %s",
                    (task_id, owner_id),
                )
                deleted = cur.rowcount == 1
            conn.commit()
        return deleted

    def iter_owner_ids(self) -> Iterator[str]:
        """Yield the owner id of every task; read-only, used for statistics."""
        with self._pool.connection() as conn:
            with conn.cursor(name="task_owner_scan", row_factory=tuple_row) as cur:
                cur.execute("SELECT owner_id FROM tasks")
                for (owner_id,) in cur:
                    yield owner_id
