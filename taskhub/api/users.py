"""Profile self-service and administrative account routes."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from ..domain.account import Account
from ..domain.contracts import ProfileUpdate
from ..domain.service import AccountService
from ..schemas import (
    MessageResponse,
    ProfileUpdateRequest,
    StatisticsResponse,
    UserEnvelope,
    UserMessageEnvelope,
    UserResponse,
)
from .deps import get_account_service, get_identity, require_admin

router = APIRouter(prefix="/api/users", tags=["users"])


@router.get("/profile", response_model=UserEnvelope)
def get_profile(identity: Account = Depends(get_identity)) -> UserEnvelope:
    return UserEnvelope(user=UserResponse.from_domain(identity))


@router.put("/profile", response_model=UserMessageEnvelope)
def update_profile(
    payload: ProfileUpdateRequest,
    identity: Account = Depends(get_identity),
    service: AccountService = Depends(get_account_service),
) -> UserMessageEnvelope:
    account = service.update_profile(identity, ProfileUpdate(name=payload.name, email=payload.email))
    return UserMessageEnvelope(
        message="Profile updated successfully", user=UserResponse.from_domain(account)
    )


@router.delete("/profile", response_model=MessageResponse)
def delete_profile(
    identity: Account = Depends(get_identity),
    service: AccountService = Depends(get_account_service),
) -> MessageResponse:
    """Delete the caller's account together with all of its tasks."""
    service.delete_self(identity)
    return MessageResponse(message="Account deleted successfully")


@router.get("/statistics", response_model=StatisticsResponse)
def statistics(
    identity: Account = Depends(require_admin),
    service: AccountService = Depends(get_account_service),
) -> StatisticsResponse:
    return StatisticsResponse.from_domain(service.statistics(identity))


@router.delete("/{account_id}", response_model=MessageResponse)
def delete_account(
    account_id: str,
    identity: Account = Depends(require_admin),
    service: AccountService = Depends(get_account_service),
) -> MessageResponse:
    """Delete another account and its tasks (admin only, never the caller)."""
    service.delete_account_as_admin(identity, account_id)
    return MessageResponse(message="User and their tasks deleted successfully")
