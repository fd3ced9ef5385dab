"""Map domain and storage failures onto stable HTTP responses."""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from psycopg import Error as DatabaseError

from ..domain.errors import (
    AuthenticationError,
    AuthorizationError,
    ConflictError,
    InternalError,
    NotFoundError,
    SelfTargetError,
    TaskhubError,
    ValidationError,
)

logger = logging.getLogger(__name__)

_STATUS_BY_ERROR: list[tuple[type[TaskhubError], int]] = [
    (ValidationError, status.HTTP_400_BAD_REQUEST),
    (AuthenticationError, status.HTTP_401_UNAUTHORIZED),
    (SelfTargetError, status.HTTP_400_BAD_REQUEST),
    (AuthorizationError, status.HTTP_403_FORBIDDEN),
    (ConflictError, status.HTTP_400_BAD_REQUEST),
    (NotFoundError, status.HTTP_404_NOT_FOUND),
]


def status_for(exc: TaskhubError) -> int:
    for error_type, code in _STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            return code
    return status.HTTP_500_INTERNAL_SERVER_ERROR


def _field_name(loc: tuple) -> str:
    parts = [str(part) for part in loc if part not in ("body", "query", "path")]
    return parts[-1] if parts else "request"


def install_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(TaskhubError)
    async def handle_domain_error(_: Request, exc: TaskhubError) -> JSONResponse:
        code = status_for(exc)
        content: dict[str, object] = {"message": exc.message}
        headers = None
        if isinstance(exc, ValidationError):
            content["errors"] = [{"field": e.field, "message": e.message} for e in exc.errors]
        elif isinstance(exc, AuthenticationError):
            logger.info("authentication rejected: %s", exc.detail or exc.__class__.__name__)
            headers = {"WWW-Authenticate": "Bearer"}
        elif code == status.HTTP_500_INTERNAL_SERVER_ERROR:
            logger.error("internal error: %s", exc)
            content = {"message": InternalError.public_message}
        return JSONResponse(status_code=code, content=content, headers=headers)

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(_: Request, exc: RequestValidationError) -> JSONResponse:
        errors = [
            {"field": _field_name(tuple(error.get("loc", ()))), "message": error.get("msg", "invalid")}
            for error in exc.errors()
        ]
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"message": ValidationError.public_message, "errors": errors},
        )

    @app.exception_handler(DatabaseError)
    async def handle_database_error(_: Request, exc: DatabaseError) -> JSONResponse:
        logger.exception("storage failure", exc_info=exc)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"message": InternalError.public_message},
        )
