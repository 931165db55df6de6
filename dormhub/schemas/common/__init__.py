from .base import BaseResponseSchema, BaseSchema, TimestampMixin
from .enums import (
    CheckInOutStatus,
    NotificationType,
    PaymentMethod,
    PaymentStatus,
    RelatedEntityType,
    RoomRequestStatus,
    RoomStatus,
    RoomType,
    UserRole,
)
from .pagination import PaginatedResponse, PaginationMeta, PaginationParams
from .response import ErrorResponse, SuccessResponse

__all__ = [
    "BaseResponseSchema",
    "BaseSchema",
    "TimestampMixin",
    "CheckInOutStatus",
    "NotificationType",
    "PaymentMethod",
    "PaymentStatus",
    "RelatedEntityType",
    "RoomRequestStatus",
    "RoomStatus",
    "RoomType",
    "UserRole",
    "PaginatedResponse",
    "PaginationMeta",
    "PaginationParams",
    "ErrorResponse",
    "SuccessResponse",
]
