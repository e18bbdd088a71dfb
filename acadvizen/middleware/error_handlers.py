"""Centralized error handling: domain failures and HTTP errors share one JSON envelope.

Every error response looks like::

    {"error": {"category": ..., "code": ..., "detail": ...}}
"""

import logging
from typing import Any
from uuid import UUID, uuid4

from fastapi import HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from acadvizen.exceptions import DomainError, ErrorCode, ValidationError


logger = logging.getLogger(__name__)


class ErrorCategory:
    """Error category constants."""

    VALIDATION = "VALIDATION_ERROR"
    CONFLICT = "CONFLICT_ERROR"
    RESOURCE_NOT_FOUND = "RESOURCE_NOT_FOUND"
    STATE = "STATE_ERROR"
    EXTERNAL_SERVICE = "EXTERNAL_SERVICE_ERROR"
    AUTHENTICATION = "AUTHENTICATION_ERROR"
    AUTHORIZATION = "AUTHORIZATION_ERROR"
    INTERNAL = "INTERNAL_ERROR"


# ErrorCode -> (category, HTTP status)
DOMAIN_ERROR_MAP: dict[ErrorCode, tuple[str, int]] = {
    ErrorCode.VALIDATION: (ErrorCategory.VALIDATION, status.HTTP_400_BAD_REQUEST),
    ErrorCode.CONFLICT: (ErrorCategory.CONFLICT, status.HTTP_409_CONFLICT),
    ErrorCode.NOT_FOUND: (ErrorCategory.RESOURCE_NOT_FOUND, status.HTTP_404_NOT_FOUND),
    ErrorCode.INVALID_STATE: (ErrorCategory.STATE, status.HTTP_409_CONFLICT),
    ErrorCode.DEPENDENCY_FAILURE: (ErrorCategory.EXTERNAL_SERVICE, status.HTTP_503_SERVICE_UNAVAILABLE),
    ErrorCode.ACCESS_DENIED: (ErrorCategory.AUTHORIZATION, status.HTTP_403_FORBIDDEN),
    ErrorCode.INTERNAL: (ErrorCategory.INTERNAL, status.HTTP_500_INTERNAL_SERVER_ERROR),
}


def format_error_response(
    category: str,
    code: str,
    detail: str,
    status_code: int,
    metadata: dict[str, Any] | None = None,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    """Format a consistent error response."""
    content: dict[str, Any] = {
        "error": {
            "category": category,
            "code": code,
            "detail": detail,
        }
    }

    if metadata:
        content["error"]["metadata"] = metadata

    return JSONResponse(status_code=status_code, content=content, headers=headers)


async def handle_domain_errors(request: Request, exc: DomainError) -> JSONResponse:
    """Translate a failed workflow operation into its HTTP response."""
    category, status_code = DOMAIN_ERROR_MAP.get(exc.code, DOMAIN_ERROR_MAP[ErrorCode.INTERNAL])
    if status_code >= status.HTTP_500_INTERNAL_SERVER_ERROR:
        logger.error(f"{exc.code} on {request.method} {request.url.path}: {exc.message}")
    else:
        logger.info(f"{exc.code} on {request.method} {request.url.path}: {exc.message}")

    metadata = {"errors": exc.errors} if isinstance(exc, ValidationError) and exc.errors else None
    return format_error_response(
        category=category,
        code=exc.code.value,
        detail=exc.message,
        status_code=status_code,
        metadata=metadata,
    )


async def handle_request_validation_errors(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Handle request body/query errors reported by FastAPI."""
    logger.info(f"Validation error on {request.method} {request.url.path}", extra={"error": str(exc)})

    errors = []
    for error in exc.errors():
        field = " -> ".join(str(loc) for loc in error["loc"])
        errors.append({"field": field, "message": error["msg"], "type": error["type"]})

    return format_error_response(
        category=ErrorCategory.VALIDATION,
        code=ErrorCode.VALIDATION.value,
        detail="Invalid input data",
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        metadata={"errors": errors},
    )


async def handle_http_errors(request: Request, exc: HTTPException) -> JSONResponse:
    """Wrap authentication/authorization and other HTTP errors in the envelope."""
    if exc.status_code == status.HTTP_401_UNAUTHORIZED:
        category, code = ErrorCategory.AUTHENTICATION, "AUTHENTICATION_REQUIRED"
    elif exc.status_code == status.HTTP_403_FORBIDDEN:
        category, code = ErrorCategory.AUTHORIZATION, "FORBIDDEN"
    elif exc.status_code == status.HTTP_404_NOT_FOUND:
        category, code = ErrorCategory.RESOURCE_NOT_FOUND, ErrorCode.NOT_FOUND.value
    else:
        category, code = ErrorCategory.INTERNAL, f"HTTP_{exc.status_code}"

    logger.info(f"HTTP {exc.status_code} on {request.method} {request.url.path}: {exc.detail}")
    return format_error_response(
        category=category,
        code=code,
        detail=str(exc.detail),
        status_code=exc.status_code,
        headers=getattr(exc, "headers", None),
    )


async def handle_unexpected_errors(request: Request, exc: Exception) -> JSONResponse:
    """Global exception handler for unhandled errors."""
    error_id = uuid4()
    log_error_context(request, exc, error_id)
    return format_error_response(
        category=ErrorCategory.INTERNAL,
        code=ErrorCode.INTERNAL.value,
        detail="An unexpected error occurred",
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        metadata={"error_id": str(error_id)},
    )


def log_error_context(request: Request, exc: Exception, error_id: UUID | None = None) -> None:
    """Log comprehensive error context for debugging."""
    context = {
        "error_id": str(error_id) if error_id else None,
        "method": request.method,
        "path": request.url.path,
        "query_params": dict(request.query_params),
        "client_host": request.client.host if request.client else "unknown",
        "user_id": getattr(request.state, "user_id", None),
        "error_type": type(exc).__name__,
        "error_message": str(exc),
    }

    safe_headers = {
        k: v for k, v in request.headers.items() if k.lower() not in ["authorization", "cookie", "x-api-key"]
    }
    context["headers"] = safe_headers

    logger.error("Request failed", extra=context, exc_info=exc)
