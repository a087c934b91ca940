"""Exception handlers turning every failure into an ``ErrorResponse``.

Application errors map to a status through ``STATUS_BY_EXCEPTION``, framework
``HTTPException``s keep their status, and anything else is a 500 whose
details are hidden in production. ``BadRequestAlertError`` responses also
carry the ``X-Comprehend-Error`` / ``X-Comprehend-Params`` alert headers.
"""

import traceback
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import Response
from loguru import logger
from starlette.exceptions import HTTPException

from src.api.schemas.errors import ErrorResponse, ServiceInfo
from src.api.utils.headers import create_failure_alert
from src.api.utils.responses import ORJSONResponse
from src.core.config import Settings, get_settings
from src.core.context import RequestContext, generate_request_id
from src.core.error_context import sanitize_error_context
from src.core.exceptions import (
    BadRequestAlertError,
    ComprehendError,
    ErrorCode,
    ExternalServiceError,
    NotFoundError,
    Severity,
    ValidationError,
)

# Checked in order, so subclasses must precede their bases
STATUS_BY_EXCEPTION: tuple[tuple[type[ComprehendError], int], ...] = (
    (ValidationError, status.HTTP_400_BAD_REQUEST),
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (ExternalServiceError, status.HTTP_502_BAD_GATEWAY),
)

HTTP_ERROR_CODES: dict[int, tuple[ErrorCode, Severity]] = {
    status.HTTP_400_BAD_REQUEST: (ErrorCode.VALIDATION_ERROR, Severity.LOW),
    status.HTTP_401_UNAUTHORIZED: (ErrorCode.UNAUTHORIZED, Severity.HIGH),
    status.HTTP_404_NOT_FOUND: (ErrorCode.NOT_FOUND, Severity.LOW),
}


def get_service_info(settings: Settings) -> ServiceInfo:
    """Describe this service for inclusion in error bodies."""
    return ServiceInfo(
        name=settings.app_name,
        version=settings.app_version,
        environment=settings.environment,
    )


def status_code_for(exc: ComprehendError) -> int:
    """Map an application exception to its HTTP status code."""
    for exc_type, status_code in STATUS_BY_EXCEPTION:
        if isinstance(exc, exc_type):
            return status_code
    return status.HTTP_500_INTERNAL_SERVER_ERROR


def _error_response(
    request: Request,
    status_code: int,
    error_code: str,
    message: str,
    severity: Severity,
    *,
    details: dict[str, Any] | None = None,
    debug_info: dict[str, Any] | None = None,
    headers: dict[str, str] | None = None,
) -> Response:
    # Reuse the ID the request logging middleware put on X-Request-ID
    request_id = getattr(request.state, "request_id", None) or generate_request_id()
    body = ErrorResponse(
        error_code=error_code,
        message=message,
        details=details,
        correlation_id=RequestContext.get_correlation_id(),
        request_id=request_id,
        severity=severity.value,
        service_info=get_service_info(get_settings()),
        debug_info=debug_info,
    )
    return ORJSONResponse(
        status_code=status_code,
        content=body.model_dump(mode="json"),
        headers=headers,
    )


async def comprehend_error_handler(request: Request, exc: Exception) -> Response:
    """Handle ``ComprehendError`` and its subclasses.

    Raises:
        TypeError: If exc is not a ComprehendError instance
    """
    if not isinstance(exc, ComprehendError):
        raise TypeError(f"Expected ComprehendError, got {type(exc).__name__}")

    status_code = status_code_for(exc)
    log = logger.warning if exc.is_expected else logger.error
    log(
        "Handling {exception_type}: {message}",
        exception_type=type(exc).__name__,
        message=exc.message,
        status_code=status_code,
        fingerprint=exc.fingerprint,
        **sanitize_error_context(
            exc,
            {
                "request_method": request.method,
                "request_path": request.url.path,
                "error_code": exc.error_code,
            },
        ),
    )

    debug_info = None
    if get_settings().environment == "development":
        debug_info = {
            "stack_trace": exc.stack_trace,
            "error_context": exc.context,
            "exception_type": type(exc).__name__,
        }
        if exc.cause:
            debug_info["cause"] = {
                "type": type(exc.cause).__name__,
                "message": str(exc.cause),
            }

    headers = None
    if isinstance(exc, BadRequestAlertError):
        headers = create_failure_alert(exc.entity_name, exc.error_key)

    return _error_response(
        request,
        status_code,
        exc.error_code,
        exc.message,
        exc.severity,
        details=exc.context or None,
        debug_info=debug_info,
        headers=headers,
    )


async def validation_error_handler(request: Request, exc: Exception) -> Response:
    """Handle request validation failures with per-field messages.

    Raises:
        TypeError: If exc is not a RequestValidationError instance
    """
    if not isinstance(exc, RequestValidationError):
        raise TypeError(f"Expected RequestValidationError, got {type(exc).__name__}")

    field_errors: dict[str, list[str]] = {}
    for error in exc.errors():
        # ('body', 'name') -> 'name'; ('query', 'tablename') -> 'tablename'
        field_name = ".".join(str(loc) for loc in error.get("loc", ())[1:]) or "root"
        field_errors.setdefault(field_name, []).append(
            error.get("msg", "Invalid value")
        )

    logger.warning(
        "Request validation failed",
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        path=request.url.path,
        method=request.method,
        fields=sorted(field_errors),
    )

    return _error_response(
        request,
        status.HTTP_422_UNPROCESSABLE_ENTITY,
        ErrorCode.VALIDATION_ERROR.value,
        "Request validation failed",
        Severity.LOW,
        details={"validation_errors": field_errors},
    )


async def http_exception_handler(request: Request, exc: Exception) -> Response:
    """Handle Starlette ``HTTPException`` (404 for unknown routes, 405, ...).

    Raises:
        TypeError: If exc is not an HTTPException instance
    """
    if not isinstance(exc, HTTPException):
        raise TypeError(f"Expected HTTPException, got {type(exc).__name__}")

    error_code, severity = HTTP_ERROR_CODES.get(
        exc.status_code,
        (
            ErrorCode.INTERNAL_ERROR,
            Severity.HIGH
            if exc.status_code >= status.HTTP_500_INTERNAL_SERVER_ERROR
            else Severity.MEDIUM,
        ),
    )
    logger.warning(
        "HTTP exception",
        status=exc.status_code,
        method=request.method,
        path=request.url.path,
        detail=exc.detail,
    )

    return _error_response(
        request,
        exc.status_code,
        error_code.value,
        str(exc.detail),
        severity,
        headers=getattr(exc, "headers", None),
    )


async def generic_exception_handler(request: Request, exc: Exception) -> Response:
    """Handle anything else, including database errors, as a 500.

    Internal details are hidden from clients in production.
    """
    logger.exception(
        "Unhandled exception: {exception_type}",
        exception_type=type(exc).__name__,
        **sanitize_error_context(
            exc,
            {"request_method": request.method, "request_path": request.url.path},
        ),
    )

    if get_settings().environment == "production":
        return _error_response(
            request,
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            ErrorCode.INTERNAL_ERROR.value,
            "An internal server error occurred",
            Severity.CRITICAL,
        )

    return _error_response(
        request,
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        ErrorCode.INTERNAL_ERROR.value,
        f"Internal server error: {type(exc).__name__}",
        Severity.CRITICAL,
        details={"error": str(exc), "type": type(exc).__name__},
        debug_info={
            "stack_trace": traceback.format_tb(exc.__traceback__),
            "exception_type": type(exc).__name__,
        },
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Register all exception handlers on ``app``."""
    app.add_exception_handler(ComprehendError, comprehend_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(Exception, generic_exception_handler)
