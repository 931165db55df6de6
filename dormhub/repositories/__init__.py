# dormhub/repositories/__init__.py
from .base import BaseRepository
from .catalog_repository import BuildingRepository, CollegeRepository, ServiceRepository
from .check_in_out_repository import CheckInOutRepository
from .notification_repository import NotificationRepository
from .payment_repository import PaymentRepository
from .preference_repository import PreferenceRepository
from .room_repository import RoomAssignmentRepository, RoomRepository
from .room_request_repository import RoomRequestRepository
from .user_repository import StudentRepository, UserRepository

__all__ = [
    "BaseRepository",
    "BuildingRepository",
    "CollegeRepository",
    "ServiceRepository",
    "CheckInOutRepository",
    "NotificationRepository",
    "PaymentRepository",
    "PreferenceRepository",
    "RoomAssignmentRepository",
    "RoomRepository",
    "RoomRequestRepository",
    "StudentRepository",
    "UserRepository",
]
