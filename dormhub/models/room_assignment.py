# dormhub/models/room_assignment.py
"""
Room assignment: a student occupying a bed in a room.

Assignments are closed on checkout, never deleted, so the table doubles
as the occupancy history.
"""

from datetime import datetime
from typing import TYPE_CHECKING, Optional

from sqlalchemy import Boolean, DateTime, ForeignKey, Index, Integer, text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from dormhub.models.base import TimestampModel
from dormhub.models.user import Student

if TYPE_CHECKING:
    from dormhub.models.payment import Payment
    from dormhub.models.room import Room

__all__ = ["RoomAssignment"]


class RoomAssignment(TimestampModel):
    __tablename__ = "room_assignments"

    __table_args__ = (
        # At most one active assignment per student
        Index(
            "uq_room_assignments_active_student",
            "student_id",
            unique=True,
            postgresql_where=text("is_active"),
            sqlite_where=text("is_active"),
        ),
        Index("ix_room_assignments_room_active", "room_id", "is_active"),
    )

    room_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("rooms.id", ondelete="CASCADE"),
        nullable=False,
    )
    student_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("students.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    check_in_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    check_out_date: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    room: Mapped["Room"] = relationship("Room", back_populates="assignments")
    student: Mapped[Student] = relationship("Student")
    payment: Mapped[Optional["Payment"]] = relationship(
        "Payment",
        back_populates="assignment",
        uselist=False,
        cascade="all, delete-orphan",
    )
