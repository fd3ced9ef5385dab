from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum


class Role(str, Enum):
    """Closed set of roles an account can hold."""

    user = "user"
    admin = "admin"


@dataclass(frozen=True, slots=True)
class Account:
    """Public view of an account; also the resolved identity of a request."""

    account_id: str
    name: str
    email: str
    role: Role
    created_at: datetime
    updated_at: datetime


@dataclass(frozen=True, slots=True)
class StoredAccount:
    """Account together with its password hash, only handed out for login."""

    account: Account
    password_hash: str


def normalize_email(email: str) -> str:
    return (email or "").strip().lower()
