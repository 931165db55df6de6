# dormhub/models/check_in_out.py
"""Daily building entry/exit log for students."""

import datetime
from typing import Optional

from sqlalchemy import Date, DateTime, ForeignKey, Index, Integer, String, Text, text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from dormhub.models.base import TimestampModel
from dormhub.models.user import Student
from dormhub.schemas.common.enums import CheckInOutStatus

__all__ = ["CheckInOut"]


class CheckInOut(TimestampModel):
    __tablename__ = "check_in_outs"

    __table_args__ = (
        # At most one open check-in per student per day
        Index(
            "uq_check_in_outs_open_per_day",
            "student_id",
            "date",
            unique=True,
            postgresql_where=text("status = 'checked_in'"),
            sqlite_where=text("status = 'checked_in'"),
        ),
    )

    student_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("students.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    date: Mapped[datetime.date] = mapped_column(Date, nullable=False, index=True)
    check_in_time: Mapped[datetime.datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    check_out_time: Mapped[Optional[datetime.datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=CheckInOutStatus.CHECKED_IN.value,
    )
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    student: Mapped[Student] = relationship("Student")
