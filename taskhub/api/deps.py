"""Request dependencies: service lookup, session resolution and role guards."""

from __future__ import annotations

from typing import Callable

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from ..domain.account import Account, Role
from ..domain.guards import require_role
from ..domain.service import AccountService
from ..domain.task_service import TaskService
from ..security.rate_limiter import RateLimiter

_bearer = HTTPBearer(auto_error=False)


def get_account_service(request: Request) -> AccountService:
    """Resolve the `AccountService` stored on the FastAPI application state."""
    service: AccountService = request.app.state.account_service
    return service


def get_task_service(request: Request) -> TaskService:
    service: TaskService = request.app.state.task_service
    return service


def get_rate_limiter(request: Request) -> RateLimiter:
    limiter: RateLimiter = request.app.state.rate_limiter
    return limiter


def get_identity(
    credentials: HTTPAuthorizationCredentials | None = Depends(_bearer),
    service: AccountService = Depends(get_account_service),
) -> Account:
    """Resolve ``Authorization: Bearer <token>`` into the caller's account.

    The returned value is immutable and is passed explicitly to the services.
    """
    token = None
    if credentials is not None and credentials.scheme.lower() == "bearer":
        token = credentials.credentials
    return service.resolve(token)


def requires(role: Role) -> Callable[..., Account]:
    """Build a dependency that resolves the caller and enforces ``role``."""

    def dependency(identity: Account = Depends(get_identity)) -> Account:
        return require_role(identity, role)

    return dependency


require_admin = requires(Role.admin)
