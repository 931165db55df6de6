# dormhub/services/common/errors.py
"""
Service-layer exceptions.

These exceptions are raised by service methods and translated at the API
layer into the error envelope with a stable code and HTTP status.
"""
from __future__ import annotations

from typing import Any, Optional

from dormhub.core.exceptions import ErrorCode, http_status_for


class ServiceError(Exception):
    """Base exception for all service-layer errors."""

    error_code: ErrorCode = ErrorCode.INTERNAL_ERROR

    def __init__(self, message: str, details: Optional[dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}

    @property
    def status_code(self) -> int:
        return http_status_for(self.error_code)


class NotFoundError(ServiceError):
    """Raised when a requested resource does not exist."""

    error_code = ErrorCode.NOT_FOUND

    def __init__(
        self,
        resource_type: str,
        identifier: Any,
        details: Optional[dict[str, Any]] = None,
        message: Optional[str] = None,
    ) -> None:
        message = message or f"{resource_type} with identifier '{identifier}' not found"
        super().__init__(message, details)
        self.resource_type = resource_type
        self.identifier = identifier


class ValidationError(ServiceError):
    """Raised when business input validation fails."""

    error_code = ErrorCode.VALIDATION_ERROR

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        details = dict(details or {})
        if field is not None:
            details.setdefault("field", field)
        super().__init__(message, details)
        self.field = field


class CapacityExceededError(ServiceError):
    """Raised when a room has no free bed left."""

    error_code = ErrorCode.CAPACITY_EXCEEDED

    def __init__(self, room_id: int, message: Optional[str] = None) -> None:
        super().__init__(
            message or f"Room {room_id} has no available beds",
            details={"room_id": room_id},
        )
        self.room_id = room_id


class ConflictError(ServiceError):
    """Raised when an operation conflicts with current state."""

    error_code = ErrorCode.CONFLICT

    def __init__(
        self,
        message: str,
        conflicting_field: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(message, details)
        self.conflicting_field = conflicting_field


class InvalidStateError(ServiceError):
    """Raised when an action targets an entity not in the required state."""

    error_code = ErrorCode.INVALID_STATE

    def __init__(
        self,
        message: str,
        current_state: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        details = dict(details or {})
        if current_state is not None:
            details.setdefault("current_state", current_state)
        super().__init__(message, details)
        self.current_state = current_state


class AuthenticationError(ServiceError):
    """Raised when authentication fails."""

    error_code = ErrorCode.UNAUTHORIZED

    def __init__(self, message: str = "Authentication failed") -> None:
        super().__init__(message)


class AuthorizationError(ServiceError):
    """Raised when a user lacks permission for an action."""

    error_code = ErrorCode.FORBIDDEN

    def __init__(
        self,
        message: str = "Authorization failed",
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(message, details)
