"""Registration, login and current-identity routes."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Request, status

from ..domain.account import Account, normalize_email
from ..domain.contracts import RegisterInput
from ..domain.service import AccountService, AuthResult
from ..schemas import AuthResponse, LoginRequest, RegisterRequest, UserEnvelope, UserResponse
from ..security.rate_limiter import RateLimiter
from .deps import get_account_service, get_identity, get_rate_limiter

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["auth"])


def _client_host(request: Request) -> str:
    return request.client.host if request.client else "unknown"


def _throttle(limiter: RateLimiter, key: str) -> None:
    if not limiter.allow(key):
        logger.warning("throttled %s", key.split(":", 1)[0])
        raise HTTPException(status_code=status.HTTP_429_TOO_MANY_REQUESTS, detail="rate limited")


def _auth_response(message: str, result: AuthResult) -> AuthResponse:
    return AuthResponse(
        message=message,
        token=result.token.token,
        expires_in=result.token.expires_in,
        user=UserResponse.from_domain(result.account),
    )


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
def register(
    request: Request,
    payload: RegisterRequest,
    service: AccountService = Depends(get_account_service),
    limiter: RateLimiter = Depends(get_rate_limiter),
) -> AuthResponse:
    """Create an account; the admin role requires the configured admin code."""
    _throttle(limiter, f"register:{_client_host(request)}")
    result = service.register(
        RegisterInput(
            name=payload.name,
            email=payload.email,
            password=payload.password,
            role=payload.role,
            admin_code=payload.admin_code,
        )
    )
    return _auth_response("User registered successfully", result)


@router.post("/login", response_model=AuthResponse)
def login(
    request: Request,
    payload: LoginRequest,
    service: AccountService = Depends(get_account_service),
    limiter: RateLimiter = Depends(get_rate_limiter),
) -> AuthResponse:
    key = f"login:{_client_host(request)}:{normalize_email(payload.email)}"
    _throttle(limiter, key)
    result = service.login(payload.email, payload.password)
    limiter.reset(key)
    return _auth_response("Login successful", result)


@router.get("/me", response_model=UserEnvelope)
def me(identity: Account = Depends(get_identity)) -> UserEnvelope:
    return UserEnvelope(user=UserResponse.from_domain(identity))
