"""
Room service layer: administration and read queries.
"""

from dormhub.services.room.room_query_service import RoomQueryService
from dormhub.services.room.room_service import RoomService

__all__ = [
    "RoomQueryService",
    "RoomService",
]
