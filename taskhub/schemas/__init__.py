"""Request and response models for the HTTP surface."""

from .account import (
    AccountStatsResponse,
    AuthResponse,
    LoginRequest,
    MessageResponse,
    ProfileUpdateRequest,
    RegisterRequest,
    StatisticsResponse,
    UserEnvelope,
    UserMessageEnvelope,
    UserResponse,
)
from .task import TaskCreateRequest, TaskEnvelope, TaskListResponse, TaskResponse, TaskUpdateRequest

__all__ = [
    "AccountStatsResponse",
    "AuthResponse",
    "LoginRequest",
    "MessageResponse",
    "ProfileUpdateRequest",
    "RegisterRequest",
    "StatisticsResponse",
    "TaskCreateRequest",
    "TaskEnvelope",
    "TaskListResponse",
    "TaskResponse",
    "TaskUpdateRequest",
    "UserEnvelope",
    "UserMessageEnvelope",
    "UserResponse",
]
