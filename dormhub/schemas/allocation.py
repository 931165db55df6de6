# --- File: dormhub/schemas/allocation.py ---
"""
Schemas for room assignment, checkout and the room request pipeline.
"""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import Field

from dormhub.schemas.common.base import BaseResponseSchema, BaseSchema, TimestampMixin
from dormhub.schemas.common.enums import RoomRequestStatus
from dormhub.schemas.payment import PaymentOverrides, PaymentResponse
from dormhub.schemas.room import RoomResponse, StudentBrief

__all__ = [
    "AssignStudentRequest",
    "CheckOutRequest",
    "AssignmentResponse",
    "AssignmentDetailResponse",
    "RoomRequestCreate",
    "RoomRequestResponse",
    "RoomRequestDecisionResponse",
]


class AssignStudentRequest(BaseSchema):
    """Admin placement of a student into a room."""

    room_id: int
    student_id: int
    check_in_date: Optional[datetime] = None
    paid: bool = Field(
        default=False,
        description="Mark the opened payment as fully paid unless amount_paid is overridden",
    )
    force_checkout: bool = Field(
        default=False,
        description="Close the student's current assignment instead of failing",
    )
    payment: Optional[PaymentOverrides] = None


class CheckOutRequest(BaseSchema):
    student_id: int
    check_out_date: Optional[datetime] = None


class AssignmentResponse(BaseResponseSchema):
    room_id: int
    student_id: int
    check_in_date: datetime
    check_out_date: Optional[datetime] = None
    is_active: bool


class AssignmentDetailResponse(AssignmentResponse):
    room: RoomResponse
    student: StudentBrief
    payment: Optional[PaymentResponse] = None


class RoomRequestCreate(BaseSchema):
    room_id: int
    notes: Optional[str] = Field(default=None, max_length=1000)


class RoomRequestResponse(BaseResponseSchema, TimestampMixin):
    room_id: int
    student_id: int
    status: RoomRequestStatus
    notes: Optional[str] = None
    room: Optional[RoomResponse] = None
    student: Optional[StudentBrief] = None


class RoomRequestDecisionResponse(BaseSchema):
    """Outcome of accepting a request."""

    request: RoomRequestResponse
    assignment: AssignmentDetailResponse
    released_assignment_id: Optional[int] = None
    rejected_request_ids: List[int] = Field(default_factory=list)
