"""Error response body returned by every exception handler."""

from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel, Field


class ServiceInfo(BaseModel):
    """Identifies the service instance that produced an error."""

    name: str = Field(..., examples=["Comprehend"])
    version: str = Field(..., examples=["0.1.0"])
    environment: str = Field(
        ..., examples=["development", "staging", "production"]
    )


class ErrorResponse(BaseModel):
    """Standard error body.

    ``debug_info`` is only populated in development.
    """

    error_code: str = Field(
        ...,
        description="Unique error code identifying the error type",
        examples=["VALIDATION_ERROR", "ID_EXISTS", "NOT_FOUND"],
    )
    message: str = Field(
        ...,
        description="Human-readable error message",
        examples=["A new profile cannot already have an ID"],
    )
    details: dict[str, Any] | None = Field(
        default=None,
        description="Additional error details (e.g., field-specific validation errors)",
    )
    correlation_id: str | None = Field(
        default=None,
        description="Request correlation ID for tracing and debugging",
    )
    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(UTC),
        description="Timestamp when the error occurred (with timezone)",
    )
    severity: str | None = Field(default=None, examples=["LOW", "HIGH"])
    service_info: ServiceInfo | None = Field(default=None)
    request_id: str | None = Field(
        default=None,
        description="Unique identifier of this request",
        examples=["req-550e8400-e29b-41d4-a716-446655440000"],
    )
    debug_info: dict[str, Any] | None = Field(default=None)

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "error_code": "ID_EXISTS",
                    "message": "A new profile cannot already have an ID",
                    "details": {"entity_name": "profile", "error_key": "idexists"},
                    "correlation_id": "550e8400-e29b-41d4-a716-446655440000",
                    "request_id": "req-660e8400-e29b-41d4-a716-446655440000",
                    "timestamp": "2024-06-14T12:00:00+00:00",
                    "severity": "LOW",
                    "service_info": {
                        "name": "Comprehend",
                        "version": "0.1.0",
                        "environment": "production",
                    },
                },
                {
                    "error_code": "EXTERNAL_SERVICE_ERROR",
                    "message": "Comprehend results API returned 503",
                    "details": {"service": "comprehend", "upstream_status": 503},
                    "timestamp": "2024-06-14T12:00:01+00:00",
                    "severity": "HIGH",
                },
            ]
        }
    }
