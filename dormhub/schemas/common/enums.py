# --- File: dormhub/schemas/common/enums.py ---
"""
All enumeration types used across the application.

These enums represent the core domain concepts of the housing service
(users, rooms, requests, payments, notifications and check-ins).
"""

from enum import Enum

__all__ = [
    "UserRole",
    "RoomType",
    "RoomStatus",
    "RoomRequestStatus",
    "PaymentStatus",
    "PaymentMethod",
    "CheckInOutStatus",
    "NotificationType",
    "RelatedEntityType",
]


class UserRole(str, Enum):
    """User role enumeration."""

    ADMIN = "admin"
    STUDENT = "student"


class RoomType(str, Enum):
    """Room type enumeration."""

    SINGLE = "single"
    SHARED = "shared"


class RoomStatus(str, Enum):
    """Room status enumeration."""

    AVAILABLE = "available"
    OCCUPIED = "occupied"
    RESERVED = "reserved"
    MAINTENANCE = "maintenance"


class RoomRequestStatus(str, Enum):
    """Room request status enumeration."""

    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"


class PaymentStatus(str, Enum):
    """Payment status enumeration."""

    UNPAID = "unpaid"
    PARTIAL = "partial"
    PAID = "paid"


class PaymentMethod(str, Enum):
    """Payment method enumeration."""

    CASH = "cash"
    VISA = "visa"
    BANK_TRANSFER = "bank_transfer"
    OTHER = "other"


class CheckInOutStatus(str, Enum):
    """Daily check-in log status enumeration."""

    CHECKED_IN = "checked_in"
    CHECKED_OUT = "checked_out"


class NotificationType(str, Enum):
    """Notification type enumeration."""

    ROOM_REQUEST = "room_request"
    ROOM_REQUEST_ACCEPTED = "room_request_accepted"
    ROOM_REQUEST_REJECTED = "room_request_rejected"
    ROOM_MATCH = "room_match"
    CHECK_IN = "check_in"
    CHECK_OUT = "check_out"
    STUDENT_CHECK_IN = "student_check_in"
    STUDENT_CHECK_OUT = "student_check_out"


class RelatedEntityType(str, Enum):
    """Entity a notification points at."""

    ROOM = "room"
    ROOM_REQUEST = "room_request"
    CHECK_IN_OUT = "check_in_out"
