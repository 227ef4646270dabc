"""
Catalog Backend: Shared Response Schemas
=========================================

What:  The response envelope every endpoint returns, plus the error and
       health shapes.
How:   `ApiResponse[T]` is generic over the payload so OpenAPI documents the
       concrete `data` type per route.

Envelope examples:
    {"success": true, "message": "Categories retrieved successfully.", "data": [...]}
    {"success": true, "message": "Category created successfully.", "data": null}
    {"success": false, "message": "Category not found."}
"""

from typing import Generic, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

T = TypeVar("T")


class CamelModel(BaseModel):
    """Snake_case in Python, camelCase on the wire."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class ApiResponse(BaseModel, Generic[T]):
    success: bool = Field(default=True, description="Always true on 2xx responses")
    message: str = Field(description="Human-readable outcome")
    data: Optional[T] = Field(default=None, description="Payload, null for writes")


class MessageResponse(BaseModel):
    """Envelope without a payload (updates of products, deletes)."""

    success: bool = True
    message: str


class ErrorResponse(BaseModel):
    """
    Standardized error body for all API errors.

    The request correlation id travels in the X-Request-ID response header.
    """

    success: bool = Field(default=False, description="Always false")
    message: str = Field(description="Human-readable error description")


class HealthResponse(BaseModel):
    """
    Health check response showing service and dependency status.

    status:   healthy | degraded | unhealthy
    database: connected | disconnected
    media:    available | unavailable | not_configured
    """

    status: str
    version: str
    database: str
    media: str
    uptime_seconds: float
