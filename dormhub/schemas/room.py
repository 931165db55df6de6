# --- File: dormhub/schemas/room.py ---
"""
Room schemas: create/update payloads, listings and the occupancy detail view.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import Field, field_validator

from dormhub.schemas.common.base import BaseResponseSchema, BaseSchema, TimestampMixin
from dormhub.schemas.common.enums import RoomRequestStatus, RoomStatus, RoomType
from dormhub.schemas.payment import PaymentResponse

__all__ = [
    "ServiceBrief",
    "BuildingBrief",
    "StudentBrief",
    "RoomCreate",
    "RoomUpdate",
    "RoomFilterParams",
    "RoomResponse",
    "OccupantResponse",
    "PendingRequestBrief",
    "RoomDetailResponse",
    "MatchingRoomResponse",
]


class ServiceBrief(BaseSchema):
    id: int
    name: str
    icon: Optional[str] = None


class BuildingBrief(BaseSchema):
    id: int
    name: str
    address: Optional[str] = None


class StudentBrief(BaseSchema):
    id: int
    name: str
    email: Optional[str] = None
    phone_number: Optional[str] = None
    year: Optional[int] = None
    college_id: Optional[int] = None
    user_id: Optional[int] = None


class _RoomFields(BaseSchema):
    floor: Optional[int] = None
    building_id: Optional[int] = None
    description: Optional[str] = Field(default=None, max_length=2000)
    images: Optional[List[str]] = None
    service_ids: Optional[List[int]] = None

    @field_validator("service_ids")
    @classmethod
    def dedupe_service_ids(cls, v: Optional[List[int]]) -> Optional[List[int]]:
        if v is None:
            return v
        return list(dict.fromkeys(v))


class RoomCreate(_RoomFields):
    """
    Payload for creating a room.

    ``room_number`` is assigned automatically when omitted. Type-specific
    pricing rules are enforced by the room service.
    """

    room_number: Optional[str] = Field(default=None, min_length=1, max_length=50)
    room_type: RoomType
    total_beds: int = Field(..., ge=1)
    room_price: Optional[Decimal] = Field(default=None, ge=0, max_digits=10, decimal_places=2)
    bed_price: Optional[Decimal] = Field(default=None, ge=0, max_digits=10, decimal_places=2)


class RoomUpdate(_RoomFields):
    """Partial room update; only supplied fields change."""

    room_number: Optional[str] = Field(default=None, min_length=1, max_length=50)
    room_type: Optional[RoomType] = None
    total_beds: Optional[int] = Field(default=None, ge=1)
    room_price: Optional[Decimal] = Field(default=None, ge=0, max_digits=10, decimal_places=2)
    bed_price: Optional[Decimal] = Field(default=None, ge=0, max_digits=10, decimal_places=2)
    status: Optional[RoomStatus] = Field(
        default=None,
        description="'maintenance' blocks new assignments; any other value clears it",
    )


class RoomFilterParams(BaseSchema):
    status: Optional[RoomStatus] = None
    building_id: Optional[int] = None
    floor: Optional[int] = None
    room_type: Optional[RoomType] = None


class RoomResponse(BaseResponseSchema, TimestampMixin):
    room_number: str
    floor: Optional[int] = None
    building_id: Optional[int] = None
    room_type: RoomType
    total_beds: int
    available_beds: int
    occupied_beds: int
    status: RoomStatus
    is_under_maintenance: bool
    room_price: Optional[Decimal] = None
    bed_price: Optional[Decimal] = None
    description: Optional[str] = None
    images: List[str] = Field(default_factory=list)
    services: List[ServiceBrief] = Field(default_factory=list)
    building: Optional[BuildingBrief] = None


class OccupantResponse(BaseResponseSchema):
    """Assignment in a room together with its student and payment."""

    room_id: int
    student_id: int
    check_in_date: datetime
    check_out_date: Optional[datetime] = None
    is_active: bool
    student: StudentBrief
    payment: Optional[PaymentResponse] = None


class PendingRequestBrief(BaseResponseSchema):
    student_id: int
    status: RoomRequestStatus
    notes: Optional[str] = None
    created_at: datetime
    student: StudentBrief


class RoomDetailResponse(RoomResponse):
    occupants: List[OccupantResponse] = Field(default_factory=list)
    pending_requests: List[PendingRequestBrief] = Field(default_factory=list)


class MatchingRoomResponse(RoomResponse):
    has_pending_request: bool = False
    request_status: Optional[RoomRequestStatus] = None
