"""Error taxonomy recovered at the HTTP boundary.

Each class carries the public message sent to callers. Storage and token
library errors are translated into these before they leave the domain layer.
"""

from __future__ import annotations

from dataclasses import dataclass


class TaskhubError(Exception):
    """Base class for errors mapped to a stable status/message contract."""

    public_message = "Request failed"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.public_message)
        self.message = message or self.public_message


@dataclass(frozen=True, slots=True)
class FieldError:
    field: str
    message: str


class ValidationError(TaskhubError):
    public_message = "Validation failed"

    def __init__(self, errors: list[FieldError]) -> None:
        super().__init__()
        self.errors = list(errors)


class AuthenticationError(TaskhubError):
    """Missing, invalid or expired token, or a token for a deleted account."""

    public_message = "Not authenticated"

    def __init__(self, detail: str | None = None) -> None:
        # ``detail`` is for logs only; callers always see ``public_message``.
        super().__init__(self.public_message)
        self.detail = detail or ""


class InvalidTokenError(AuthenticationError):
    pass


class UnknownAccountError(AuthenticationError):
    pass


class InvalidCredentialsError(AuthenticationError):
    public_message = "Invalid credentials"


class AuthorizationError(TaskhubError):
    public_message = "Forbidden"


class InvalidAdminCodeError(AuthorizationError):
    public_message = "Invalid admin code"


class SelfTargetError(AuthorizationError):
    public_message = "Admins cannot delete themselves"


class ConflictError(TaskhubError):
    public_message = "Email already registered"


class NotFoundError(TaskhubError):
    public_message = "Not found"


class InternalError(TaskhubError):
    public_message = "Internal server error"
