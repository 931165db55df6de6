# --- File: dormhub/schemas/common/response.py ---
"""
Standard API response envelope for success and error results.
"""

from typing import Any, Dict, Generic, Optional, TypeVar, Union

from pydantic import Field

from dormhub.schemas.common.base import BaseSchema

T = TypeVar("T")

__all__ = [
    "SuccessResponse",
    "ErrorResponse",
]


class SuccessResponse(BaseSchema, Generic[T]):
    """Standard success response."""

    success: bool = Field(default=True, description="Success flag")
    message: Optional[str] = Field(default=None, description="Response message")
    data: Union[T, None] = Field(default=None, description="Response data")

    @classmethod
    def create(
        cls,
        message: Optional[str] = None,
        data: Union[T, None] = None,
    ):
        """Create success response."""
        return cls(success=True, message=message, data=data)


class ErrorResponse(BaseSchema):
    """Standard error response."""

    success: bool = Field(default=False, description="Success flag")
    message: str = Field(..., description="Error message")
    error: str = Field(..., description="Stable machine-readable error code")
    details: Optional[Dict[str, Any]] = Field(
        default=None,
        description="Additional error context",
    )

    @classmethod
    def create(
        cls,
        message: str,
        error: str,
        details: Optional[Dict[str, Any]] = None,
    ):
        """Create error response."""
        return cls(success=False, message=message, error=error, details=details or None)
