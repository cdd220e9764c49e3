"""Core schema definitions for standardized API responses.

This module provides the response envelope shared by every endpoint.
"""

from typing import Any, Generic, TypeVar

from pydantic import BaseModel, Field

from storefront.core.datetime_utils import utc_timestamp

T = TypeVar("T")


class ResponseMeta(BaseModel):
    """Metadata attached to every response."""

    cached: bool | None = Field(None, description="Whether the payload came from the cache")
    timestamp: str = Field(default_factory=utc_timestamp, description="ISO 8601 response time")


class ApiResponse(BaseModel, Generic[T]):
    """Standard API response envelope.

    Example success response:
        {
            "success": true,
            "message": "Dashboard overview retrieved successfully",
            "data": { ... },
            "meta": { "cached": false, "timestamp": "2026-10-19T08:00:00+00:00" }
        }

    Example error response:
        {
            "success": false,
            "message": "Failed to retrieve dashboard overview",
            "errors": { "code": "STATISTICS_UNAVAILABLE", "report": "dashboard_overview" },
            "meta": { "cached": null, "timestamp": "2026-10-19T08:00:00+00:00" }
        }
    """

    success: bool = True
    message: str = "Success"
    data: T | None = None
    errors: dict[str, Any] | None = None
    meta: ResponseMeta = Field(default_factory=ResponseMeta)


def success_response(data: T, message: str = "Success", cached: bool = False) -> ApiResponse[T]:
    """Create a successful API response.

    Args:
        data: The response data.
        message: Human-readable summary.
        cached: Whether the data was served from the report cache.

    Returns:
        ApiResponse with success=True.
    """
    return ApiResponse(success=True, message=message, data=data, meta=ResponseMeta(cached=cached))


def error_response(message: str, errors: dict[str, Any] | None = None) -> ApiResponse[None]:
    """Create an error API response.

    Args:
        message: Error message safe to show to end users.
        errors: Machine-readable error details.

    Returns:
        ApiResponse with success=False.
    """
    return ApiResponse(success=False, message=message, errors=errors or {})
