"""Application error taxonomy and the FastAPI handlers that render it.

Every error leaves the API as JSON shaped like::

    {"detail": "...", "code": "VALIDATION_ERROR", "errors": [{"field": ..., "message": ...}]}

``errors`` is only present for validation failures.
"""

from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from slowapi.errors import RateLimitExceeded
from sqlalchemy.exc import SQLAlchemyError
from starlette.responses import JSONResponse

from libs.common.logging import get_logger, get_request_id
from libs.common.rate_limit import rate_limit_exceeded_handler

logger = get_logger(__name__)


class AppError(Exception):
    """Base exception for errors surfaced to API clients."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    code: str = "INTERNAL_ERROR"

    def __init__(
        self,
        message: str,
        errors: Optional[list[dict]] = None,
        headers: Optional[dict[str, str]] = None,
    ):
        self.message = message
        self.errors = errors
        self.headers = headers
        super().__init__(message)


class AuthenticationError(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    code = "UNAUTHENTICATED"

    def __init__(self, message: str = "Not authenticated"):
        super().__init__(message, headers={"WWW-Authenticate": "Bearer"})


class AuthorizationError(AppError):
    status_code = status.HTTP_403_FORBIDDEN
    code = "FORBIDDEN"

    def __init__(self, message: str = "You do not have permission to do this"):
        super().__init__(message)


class NotFoundError(AppError):
    status_code = status.HTTP_404_NOT_FOUND
    code = "NOT_FOUND"


class ConflictError(AppError):
    status_code = status.HTTP_409_CONFLICT
    code = "CONFLICT"


class ValidationError(AppError):
    status_code = 422
    code = "VALIDATION_ERROR"

    def __init__(self, message: str, field: Optional[str] = None):
        errors = [{"field": field, "message": message}] if field else None
        super().__init__(message, errors=errors)
        self.field = field


class PersistenceError(AppError):
    """Store unavailable or a constraint rejected the write.

    The client only ever sees a generic message; details go to the log.
    """

    code = "INTERNAL_ERROR"

    def __init__(self, message: str = "Internal server error"):
        super().__init__(message)


def _error_response(
    status_code: int,
    code: str,
    detail: str,
    errors: Optional[list[dict]] = None,
    headers: Optional[dict[str, str]] = None,
) -> JSONResponse:
    content = {"detail": detail, "code": code}
    if errors:
        content["errors"] = errors
    request_id = get_request_id()
    if request_id:
        content["request_id"] = request_id
    return JSONResponse(status_code=status_code, content=content, headers=headers)


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    if isinstance(exc, (AuthenticationError, AuthorizationError)):
        logger.warning(
            "Access denied on %s %s: %s", request.method, request.url.path, exc.message
        )
    return _error_response(
        exc.status_code, exc.code, exc.message, exc.errors, exc.headers
    )


async def request_validation_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Reshape FastAPI/Pydantic validation errors into field-level detail."""
    errors = []
    for error in exc.errors():
        # Drop the leading "body"/"query"/"path" location segment
        loc = [str(part) for part in error.get("loc", ())]
        if loc and loc[0] in ("body", "query", "path", "header"):
            loc = loc[1:]
        errors.append({"field": ".".join(loc) or None, "message": error.get("msg")})
    return _error_response(
        422,
        ValidationError.code,
        "Request validation failed",
        errors,
    )


async def persistence_error_handler(
    request: Request, exc: SQLAlchemyError
) -> JSONResponse:
    logger.exception(
        "Database error on %s %s", request.method, request.url.path, exc_info=exc
    )
    error = PersistenceError()
    return _error_response(error.status_code, error.code, error.message)


def add_exception_handlers(app: FastAPI) -> None:
    """Register handlers for the application error taxonomy."""
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(SQLAlchemyError, persistence_error_handler)
    app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)
