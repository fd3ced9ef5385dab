"""Account-related DTOs exchanged over HTTP."""

from __future__ import annotations

from datetime import datetime
from typing import Annotated

from pydantic import BaseModel, EmailStr, Field, StringConstraints

from ..domain.account import Account, Role
from ..domain.statistics import Statistics

Name = Annotated[str, StringConstraints(strip_whitespace=True, min_length=2, max_length=50)]
Password = Annotated[str, StringConstraints(min_length=6, max_length=128)]


class UserResponse(BaseModel):
    """Serialised account; the password hash is never part of it."""

    account_id: str
    name: str
    email: EmailStr
    role: Role
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_domain(cls, account: Account) -> "UserResponse":
        return cls(
            account_id=account.account_id,
            name=account.name,
            email=account.email,
            role=account.role,
            created_at=account.created_at,
            updated_at=account.updated_at,
        )


class RegisterRequest(BaseModel):
    name: Name
    email: EmailStr
    password: Password
    role: Role = Role.user
    admin_code: str | None = Field(default=None, max_length=256)


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1, max_length=128)


class ProfileUpdateRequest(BaseModel):
    name: Name | None = None
    email: EmailStr | None = None


class AuthResponse(BaseModel):
    message: str
    token: str
    token_type: str = "bearer"
    expires_in: int
    user: UserResponse


class UserEnvelope(BaseModel):
    user: UserResponse


class UserMessageEnvelope(BaseModel):
    message: str
    user: UserResponse


class MessageResponse(BaseModel):
    message: str


class AccountStatsResponse(BaseModel):
    account_id: str
    name: str
    email: str
    role: Role
    task_count: int


class StatisticsResponse(BaseModel):
    total_users: int
    total_admins: int
    user_stats: list[AccountStatsResponse]

    @classmethod
    def from_domain(cls, stats: Statistics) -> "StatisticsResponse":
        return cls(
            total_users=stats.total_users,
            total_admins=stats.total_admins,
            user_stats=[
                AccountStatsResponse(
                    account_id=entry.account_id,
                    name=entry.name,
                    email=entry.email,
                    role=entry.role,
                    task_count=entry.task_count,
                )
                for entry in stats.user_stats
            ],
        )
