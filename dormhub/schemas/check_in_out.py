# --- File: dormhub/schemas/check_in_out.py ---
"""Daily check-in/out schemas."""

from __future__ import annotations

import datetime as dt
from typing import Optional

from pydantic import Field

from dormhub.schemas.common.base import BaseResponseSchema, BaseSchema
from dormhub.schemas.common.enums import CheckInOutStatus
from dormhub.schemas.room import StudentBrief

__all__ = [
    "CheckInOutRequest",
    "QRScanRequest",
    "CheckInOutResponse",
    "StudentQRCode",
    "CheckInStatusResponse",
]


class CheckInOutRequest(BaseSchema):
    student_id: int
    notes: Optional[str] = Field(default=None, max_length=500)


class QRScanRequest(BaseSchema):
    payload: str = Field(..., min_length=1, description="Raw text decoded from the QR image")
    notes: Optional[str] = Field(default=None, max_length=500)


class CheckInOutResponse(BaseResponseSchema):
    student_id: int
    date: dt.date
    check_in_time: dt.datetime
    check_out_time: Optional[dt.datetime] = None
    status: CheckInOutStatus
    notes: Optional[str] = None
    student: Optional[StudentBrief] = None


class StudentQRCode(BaseSchema):
    student_id: int
    payload: str
    qr_code: str = Field(..., description="PNG rendering of the payload as a data URL")


class CheckInStatusResponse(BaseSchema):
    """Whether the student holds an open check-in today."""

    is_checked_in: bool
    check_in_time: Optional[dt.datetime] = None
    check_out_time: Optional[dt.datetime] = None
    status: Optional[CheckInOutStatus] = None
