# dormhub/models/user.py
"""
Account and student profile records.

Accounts carry the role used for authorization; the student profile holds
the personal details shown to admins and links back to its account.
"""

from typing import TYPE_CHECKING, Optional

from sqlalchemy import Boolean, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from dormhub.models.base import TimestampModel
from dormhub.schemas.common.enums import UserRole

if TYPE_CHECKING:
    from dormhub.models.catalog import College
    from dormhub.models.preference import Preference

__all__ = ["User", "Student"]


class User(TimestampModel):
    """Login account; credentials are managed by the identity provider."""

    __tablename__ = "users"

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True, index=True)
    role: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=UserRole.STUDENT.value,
        index=True,
    )
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    student: Mapped[Optional["Student"]] = relationship(
        "Student",
        back_populates="user",
        uselist=False,
    )
    preference: Mapped[Optional["Preference"]] = relationship(
        "Preference",
        back_populates="user",
        uselist=False,
    )


class Student(TimestampModel):
    """Student profile placed into rooms."""

    __tablename__ = "students"

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[Optional[str]] = mapped_column(String(255), nullable=True, unique=True)
    phone_number: Mapped[Optional[str]] = mapped_column(String(30), nullable=True)
    year: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    age: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    college_id: Mapped[Optional[int]] = mapped_column(
        Integer,
        ForeignKey("colleges.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    user_id: Mapped[Optional[int]] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
        unique=True,
    )

    user: Mapped[Optional[User]] = relationship("User", back_populates="student")
    college: Mapped[Optional["College"]] = relationship("College")
