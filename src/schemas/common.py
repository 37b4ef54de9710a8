"""Common schemas used across the application."""

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class HealthStatus(str, Enum):
    """Health check status values."""

    HEALTHY = "healthy"
    UNHEALTHY = "unhealthy"


class HealthResponse(BaseModel):
    """Response schema for basic health check endpoint.

    Used for liveness probes to verify the service is running.
    """

    model_config = ConfigDict(from_attributes=True)

    status: HealthStatus = Field(description="Current health status")
    timestamp: datetime = Field(default_factory=datetime.utcnow, description="Check timestamp")
    version: str = Field(default="0.1.0", description="API version")


class CheckResult(BaseModel):
    """Result of an individual dependency check."""

    model_config = ConfigDict(from_attributes=True)

    name: str = Field(description="Name of the dependency being checked")
    healthy: bool = Field(description="Whether the dependency is healthy")
    latency_ms: float | None = Field(default=None, description="Response time in milliseconds")
    error: str | None = Field(default=None, description="Error message if unhealthy")


class ReadinessResponse(BaseModel):
    """Response schema for readiness check endpoint."""

    model_config = ConfigDict(from_attributes=True)

    status: HealthStatus = Field(description="Overall readiness status")
    timestamp: datetime = Field(default_factory=datetime.utcnow, description="Check timestamp")
    checks: list[CheckResult] = Field(default_factory=list, description="Individual check results")


class ErrorResponse(BaseModel):
    """Standard error response schema.

    ``error`` is always a message from the error catalog; ``code`` is a
    stable identifier clients can switch on.
    """

    model_config = ConfigDict(from_attributes=True)

    error: str = Field(description="Human-readable error message")
    code: str | None = Field(default=None, description="Stable error code")
    details: dict[str, Any] | None = Field(default=None, description="Additional error context")
    request_id: str | None = Field(default=None, description="Request ID for tracing")


class ValidationErrorResponse(BaseModel):
    """Error response for malformed or incomplete requests."""

    errors: list[str] = Field(description="Validation error messages")


def require_non_empty(data: Any, fields: tuple[str, ...], message: str) -> Any:
    """Reject a request body whose required fields are missing or empty.

    Used by ``model_validator(mode="before")`` hooks so that a missing field
    yields one catalog message instead of per-field pydantic errors.

    Args:
        data: Raw request body.
        fields: Names of fields that must be present and non-empty.
        message: Catalog message to report.

    Returns:
        Any: The unchanged body.

    Raises:
        ValueError: If any field is missing, None, or an empty string/collection.
    """
    if not isinstance(data, dict):
        raise ValueError(message)
    for field in fields:
        value = data.get(field)
        if value is None or (isinstance(value, (str, list, dict)) and not value):
            raise ValueError(message)
        if isinstance(value, str) and not value.strip():
            raise ValueError(message)
    return data
