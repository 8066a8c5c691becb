"""
Common Schemas
==============

Envelope models for API responses, used to document the shape that
``success_response`` / ``error_response`` produce.
"""

from typing import Any, Generic, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field

T = TypeVar("T")


class ErrorDetail(BaseModel):
    message: str = Field(..., description="Human readable error message")
    timestamp: str = Field(..., description="ISO-8601 time the error was produced")
    details: Optional[Any] = Field(default=None, description="Field errors for invalid requests")


class SuccessResponse(BaseModel, Generic[T]):
    """Standard success response format"""

    ok: bool = Field(default=True, description="Request success status")
    data: T = Field(..., description="Response data")
    error: None = Field(default=None, description="Always null on success")
    message: Optional[str] = None

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "ok": True,
                "data": {"id": "zone_1a2b3c4d5e6f", "name": "North Field"},
                "error": None,
            }
        }
    )


class ErrorResponse(BaseModel):
    """Standard error response format"""

    ok: bool = Field(default=False, description="Request success status")
    data: None = Field(default=None, description="Always null on error")
    error: ErrorDetail

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "ok": False,
                "data": None,
                "error": {"message": "Zone not found", "timestamp": "2024-05-01T12:00:00+00:00"},
            }
        }
    )
