"""Exception hierarchy shared by every layer of the application.

Each exception carries a machine-readable error code, a severity and an
optional context dict. The API layer maps the concrete subclasses to HTTP
status codes in ``src.api.middleware.error_handler``.
"""

import hashlib
import traceback
from enum import Enum

from src.core.types import ErrorContext


class ErrorCode(Enum):
    """Standardized error codes returned in error responses."""

    INTERNAL_ERROR = "INTERNAL_ERROR"
    """An unexpected internal error occurred in the system."""

    VALIDATION_ERROR = "VALIDATION_ERROR"
    """Input validation failed due to invalid or malformed data."""

    ID_EXISTS = "ID_EXISTS"
    """A new entity was submitted with an identifier already set."""

    NOT_FOUND = "NOT_FOUND"
    """The requested resource could not be found."""

    UNAUTHORIZED = "UNAUTHORIZED"
    """Authentication failed or user is not authorized for this action."""

    EXTERNAL_SERVICE_ERROR = "EXTERNAL_SERVICE_ERROR"
    """A call to object storage or an upstream HTTP API failed."""


class Severity(Enum):
    """How urgently an error needs attention."""

    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    CRITICAL = "CRITICAL"


class ComprehendError(Exception):
    """Base exception class for all application exceptions.

    Args:
        error_code: Unique identifier for the error type (string or ErrorCode enum)
        message: Human-readable error message
        severity: Severity level of the error (defaults to MEDIUM)
        context: Additional context information about the error
        cause: The original exception that caused this error
    """

    def __init__(
        self,
        error_code: str | ErrorCode,
        message: str,
        severity: Severity = Severity.MEDIUM,
        context: ErrorContext | None = None,
        cause: Exception | None = None,
    ) -> None:
        self.error_code = (
            error_code.value if isinstance(error_code, ErrorCode) else error_code
        )
        self.message = message
        self.severity = severity
        self.context = context or {}
        self.cause = cause

        self.stack_trace = traceback.format_stack()[:-1]
        self.fingerprint = self._generate_fingerprint()

        super().__init__(message)
        if cause:
            self.__cause__ = cause

    def _generate_fingerprint(self) -> str:
        """Hash the error type and raising location so similar errors group."""
        max_frames = 5
        relevant_frames = self.stack_trace[-max_frames:]

        fingerprint_data = f"{self.__class__.__name__}:{self.error_code}"
        for frame in relevant_frames:
            if "site-packages" not in frame and "src/" in frame:
                lines = frame.strip().split("\n")
                if lines:
                    fingerprint_data += f":{lines[0]}"

        return hashlib.sha256(fingerprint_data.encode()).hexdigest()[:16]

    @property
    def is_expected(self) -> bool:
        """Whether the error is part of normal operation (LOW or MEDIUM)."""
        return self.severity in (Severity.LOW, Severity.MEDIUM)

    @property
    def should_alert(self) -> bool:
        """Whether the error should page someone (HIGH or CRITICAL)."""
        return self.severity in (Severity.HIGH, Severity.CRITICAL)

    def __str__(self) -> str:
        return f"[{self.error_code}] {self.message}"

    def __repr__(self) -> str:
        class_name = self.__class__.__name__
        context_str = f", context={self.context}" if self.context else ""
        return (
            f"{class_name}(error_code='{self.error_code}', "
            f"message='{self.message}', severity={self.severity.value}{context_str})"
        )


class ValidationError(ComprehendError):
    """Raised when input does not meet format or validation rules."""

    def __init__(
        self,
        message: str,
        error_code: str | ErrorCode = ErrorCode.VALIDATION_ERROR,
        context: ErrorContext | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(error_code, message, Severity.LOW, context, cause)


class BadRequestAlertError(ValidationError):
    """Client error tied to a specific entity, reported through alert headers.

    Args:
        message: Description of the problem
        entity_name: Name of the entity the request targeted (e.g. "profile")
        error_key: Short key identifying the problem (e.g. "idexists")
        error_code: Error code (defaults to ID_EXISTS)
    """

    def __init__(
        self,
        message: str,
        entity_name: str,
        error_key: str,
        error_code: str | ErrorCode = ErrorCode.ID_EXISTS,
    ) -> None:
        self.entity_name = entity_name
        self.error_key = error_key
        super().__init__(
            message,
            error_code=error_code,
            context={"entity_name": entity_name, "error_key": error_key},
        )


class NotFoundError(ComprehendError):
    """Raised when a requested resource does not exist."""

    def __init__(
        self,
        message: str,
        error_code: str | ErrorCode = ErrorCode.NOT_FOUND,
        context: ErrorContext | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(error_code, message, Severity.LOW, context, cause)


class ExternalServiceError(ComprehendError):
    """Raised when object storage or an upstream HTTP API call fails.

    Args:
        message: Description of the failure
        service: Name of the external service (e.g. "storage", "comprehend")
        status_code: HTTP status returned by the service, when there was one
        context: Additional context information about the error
        cause: The original exception that caused this error
    """

    def __init__(
        self,
        message: str,
        service: str,
        status_code: int | None = None,
        context: ErrorContext | None = None,
        cause: Exception | None = None,
    ) -> None:
        self.service = service
        self.status_code = status_code
        details: ErrorContext = {"service": service}
        if status_code is not None:
            details["upstream_status"] = status_code
        if context:
            details.update(context)
        super().__init__(
            ErrorCode.EXTERNAL_SERVICE_ERROR, message, Severity.HIGH, details, cause
        )
