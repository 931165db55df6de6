# dormhub/models/room.py
"""
Room entity.

``available_beds`` is the single source of truth for occupancy; ``status``
is recomputed from it by the occupancy ledger on every capacity change.
"""

from decimal import Decimal
from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import (
    JSON,
    Boolean,
    CheckConstraint,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from dormhub.models.base import TimestampModel
from dormhub.models.catalog import Building, Service, room_services
from dormhub.schemas.common.enums import RoomStatus

if TYPE_CHECKING:
    from dormhub.models.room_assignment import RoomAssignment
    from dormhub.models.room_request import RoomRequest

__all__ = ["Room"]


class Room(TimestampModel):
    """Physical room with bed capacity, pricing and amenities."""

    __tablename__ = "rooms"

    __table_args__ = (
        CheckConstraint("total_beds >= 1", name="ck_rooms_total_beds_positive"),
        CheckConstraint(
            "available_beds >= 0 AND available_beds <= total_beds",
            name="ck_rooms_available_beds_range",
        ),
    )

    room_number: Mapped[str] = mapped_column(String(50), nullable=False, unique=True, index=True)
    floor: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    building_id: Mapped[Optional[int]] = mapped_column(
        Integer,
        ForeignKey("buildings.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )

    # Type and capacity
    room_type: Mapped[str] = mapped_column(String(20), nullable=False, index=True)
    total_beds: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    available_beds: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=RoomStatus.AVAILABLE.value,
        index=True,
    )
    is_under_maintenance: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    # Pricing
    room_price: Mapped[Optional[Decimal]] = mapped_column(Numeric(10, 2), nullable=True)
    bed_price: Mapped[Optional[Decimal]] = mapped_column(Numeric(10, 2), nullable=True)

    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    images: Mapped[List[str]] = mapped_column(JSON, nullable=False, default=list)

    building: Mapped[Optional[Building]] = relationship("Building")
    services: Mapped[List[Service]] = relationship(
        "Service",
        secondary=room_services,
        order_by="Service.id",
    )
    assignments: Mapped[List["RoomAssignment"]] = relationship(
        "RoomAssignment",
        back_populates="room",
        order_by="RoomAssignment.id",
        cascade="all, delete-orphan",
    )

    requests: Mapped[List["RoomRequest"]] = relationship(
        "RoomRequest",
        back_populates="room",
        cascade="all, delete-orphan",
    )

    @property
    def occupied_beds(self) -> int:
        return self.total_beds - self.available_beds

    @property
    def service_ids(self) -> List[int]:
        return [service.id for service in self.services]
