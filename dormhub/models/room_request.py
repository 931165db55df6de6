# dormhub/models/room_request.py
"""Student-initiated request to be placed in a room."""

from typing import TYPE_CHECKING, Optional

from sqlalchemy import ForeignKey, Index, Integer, String, Text, text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from dormhub.models.base import TimestampModel
from dormhub.models.user import Student
from dormhub.schemas.common.enums import RoomRequestStatus

if TYPE_CHECKING:
    from dormhub.models.room import Room

__all__ = ["RoomRequest"]


class RoomRequest(TimestampModel):
    __tablename__ = "room_requests"

    __table_args__ = (
        # At most one pending request per (room, student)
        Index(
            "uq_room_requests_pending_pair",
            "room_id",
            "student_id",
            unique=True,
            postgresql_where=text("status = 'pending'"),
            sqlite_where=text("status = 'pending'"),
        ),
        Index("ix_room_requests_student_status", "student_id", "status"),
    )

    room_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("rooms.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    student_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("students.id", ondelete="CASCADE"),
        nullable=False,
    )
    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=RoomRequestStatus.PENDING.value,
    )
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    room: Mapped["Room"] = relationship("Room", back_populates="requests")
    student: Mapped[Student] = relationship("Student")
