# dormhub/models/preference.py
"""Per-user room preferences, consulted only for matching."""

from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import JSON, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from dormhub.models.base import TimestampModel

if TYPE_CHECKING:
    from dormhub.models.user import User

__all__ = ["Preference"]


class Preference(TimestampModel):
    __tablename__ = "preferences"

    user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
    )
    room_type: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    preferred_services: Mapped[List[int]] = mapped_column(JSON, nullable=False, default=list)

    user: Mapped["User"] = relationship("User", back_populates="preference")
