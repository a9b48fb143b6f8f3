"""Custom exceptions and exception handlers.

Two families live here:
- Bootstrap errors (``ConfigurationError``, ``SchemaValidationError``) raised
  while the configuration is assembled; they abort startup.
- Request-time errors (``AppException`` subclasses) rendered as structured
  JSON by the FastAPI handlers registered in ``setup_exception_handlers``.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from fastapi import FastAPI, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import ORJSONResponse
from pydantic import BaseModel
from starlette.exceptions import HTTPException as StarletteHTTPException

from recipe_cms.observability.logging import get_logger


if TYPE_CHECKING:
    from fastapi import Request


logger = get_logger(__name__)


# =============================================================================
# Bootstrap errors
# =============================================================================


class ConfigurationError(Exception):
    """Raised when storage, session or auth configuration is unusable."""


class SchemaValidationError(ConfigurationError):
    """Raised when the list declarations are inconsistent.

    Every problem found in one validation pass is collected in ``problems``
    so a broken schema is reported in full rather than one error at a time.
    """

    def __init__(self, problems: list[str]) -> None:
        self.problems = problems
        joined = "\n  - ".join(problems)
        super().__init__(f"Invalid schema ({len(problems)} problem(s)):\n  - {joined}")


# =============================================================================
# Request-time errors
# =============================================================================


class ErrorDetail(BaseModel):
    """Structured error detail for validation errors."""

    code: str
    message: str
    field: str | None = None


class ErrorResponse(BaseModel):
    """Structured error response."""

    error: str
    message: str
    details: list[ErrorDetail] | None = None


class AppException(Exception):
    """Base application exception.

    All request-time exceptions inherit from this class
    for consistent error handling.
    """

    def __init__(
        self,
        status_code: int,
        error: str,
        message: str,
        details: list[ErrorDetail] | None = None,
    ) -> None:
        self.status_code = status_code
        self.error = error
        self.message = message
        self.details = details
        super().__init__(message)


class NotFoundException(AppException):
    """Resource not found exception."""

    def __init__(self, resource: str, identifier: Any) -> None:
        super().__init__(
            status_code=status.HTTP_404_NOT_FOUND,
            error="NOT_FOUND",
            message=f"{resource} with identifier '{identifier}' not found",
        )


class AccessDeniedException(AppException):
    """Raised when a list access rule rejects an operation."""

    def __init__(self, list_key: str, operation: str) -> None:
        super().__init__(
            status_code=status.HTTP_403_FORBIDDEN,
            error="ACCESS_DENIED",
            message=f"You cannot {operation} items in {list_key}",
        )


class ValidationFailedException(AppException):
    """Raised when item data breaks a field rule (required, shape, capability)."""

    def __init__(self, list_key: str, details: list[ErrorDetail]) -> None:
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            error="VALIDATION_ERROR",
            message=f"{list_key} item data is invalid",
            details=details,
        )


class ReferenceNotFoundException(AppException):
    """Raised when a relationship write points at an item that does not exist."""

    def __init__(self, list_key: str, field: str, identifier: Any) -> None:
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            error="REFERENCE_NOT_FOUND",
            message=f"{list_key}.{field} references missing item '{identifier}'",
            details=[
                ErrorDetail(
                    code="REFERENCE_NOT_FOUND",
                    message=f"No item with id '{identifier}'",
                    field=field,
                )
            ],
        )


class UniqueConstraintException(AppException):
    """Raised when a write would duplicate a unique field value."""

    def __init__(self, list_key: str, field: str | None = None) -> None:
        target = f"{list_key}.{field}" if field else list_key
        super().__init__(
            status_code=status.HTTP_409_CONFLICT,
            error="UNIQUE_CONSTRAINT",
            message=f"Unique constraint failed on {target}",
        )


def setup_exception_handlers(app: FastAPI) -> None:
    """Register exception handlers with the FastAPI application."""

    @app.exception_handler(AppException)
    async def app_exception_handler(
        _request: Request,
        exc: AppException,
    ) -> ORJSONResponse:
        """Handle custom application exceptions."""
        return ORJSONResponse(
            status_code=exc.status_code,
            content=ErrorResponse(
                error=exc.error,
                message=exc.message,
                details=exc.details,
            ).model_dump(),
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(
        _request: Request,
        exc: StarletteHTTPException,
    ) -> ORJSONResponse:
        """Handle Starlette HTTP exceptions."""
        return ORJSONResponse(
            status_code=exc.status_code,
            content=ErrorResponse(
                error="HTTP_ERROR",
                message=str(exc.detail),
            ).model_dump(),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        _request: Request,
        exc: RequestValidationError,
    ) -> ORJSONResponse:
        """Handle Pydantic validation errors."""
        details = [
            ErrorDetail(
                code="VALIDATION_ERROR",
                message=error["msg"],
                field=".".join(str(loc) for loc in error["loc"]),
            )
            for error in exc.errors()
        ]
        return ORJSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content=ErrorResponse(
                error="VALIDATION_ERROR",
                message="Request validation failed",
                details=details,
            ).model_dump(),
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(
        request: Request,
        exc: Exception,
    ) -> ORJSONResponse:
        """Handle unexpected exceptions."""
        logger.opt(exception=exc).error(
            "Unhandled exception",
            method=request.method,
            path=request.url.path,
        )
        return ORJSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=ErrorResponse(
                error="INTERNAL_SERVER_ERROR",
                message="An unexpected error occurred",
            ).model_dump(),
        )
