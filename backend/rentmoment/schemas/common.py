"""
Rent The Moment Backend — Shared Schema Building Blocks
=======================================================

What:  The camelCase base model, the `{success, message, data}` envelope,
       and the error / health response shapes.
Why:   Every endpoint answers in the same envelope so the storefront and
       admin frontends can handle responses generically.

Envelope:
    success → {"success": true, "message": "...", "data": {...}}
    failure → {"success": false, "error": "not_found", "message": "...", "request_id": "..."}
"""

from typing import Any, Generic, List, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

T = TypeVar("T")


class CamelModel(BaseModel):
    """
    Base for API schemas: camelCase on the wire, snake_case in Python.

    populate_by_name lets request bodies use either spelling;
    from_attributes lets responses be built straight from ORM rows.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
        str_strip_whitespace=True,
    )


class ApiResponse(BaseModel, Generic[T]):
    success: bool = True
    message: Optional[str] = None
    data: Optional[T] = None


class ErrorResponse(BaseModel):
    """
    Standardized error response format for all API errors.

    Example:
        {
            "success": false,
            "error": "validation_error",
            "message": "Validation errors",
            "errors": [{"field": "name", "message": "..."}],
            "request_id": "1a2b3c4d"
        }
    """

    success: bool = False
    error: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error description")
    errors: Optional[List[Any]] = Field(default=None, description="Field-level validation errors")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class HealthResponse(BaseModel):
    status: str = Field(description="OK when the database is reachable, otherwise DEGRADED")
    message: str
    version: str
    database: str = Field(description="Database connectivity: connected, disconnected")
    uptime_seconds: float
