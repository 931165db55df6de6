# dormhub/models/__init__.py
from .base import BaseModel, TimestampModel
from .catalog import Building, College, Service, room_services
from .check_in_out import CheckInOut
from .notification import Notification
from .payment import Payment
from .preference import Preference
from .room import Room
from .room_assignment import RoomAssignment
from .room_request import RoomRequest
from .user import Student, User

__all__ = [
    "BaseModel",
    "TimestampModel",
    "Building",
    "College",
    "Service",
    "room_services",
    "CheckInOut",
    "Notification",
    "Payment",
    "Preference",
    "Room",
    "RoomAssignment",
    "RoomRequest",
    "Student",
    "User",
]
