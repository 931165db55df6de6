# dormhub/models/catalog.py
"""
Catalog records referenced by rooms and students.

These are maintained by a separate administrative surface and are only
read here.
"""

from typing import Optional

from sqlalchemy import Column, ForeignKey, Integer, String, Table, Text
from sqlalchemy.orm import Mapped, mapped_column

from dormhub.db.base import Base
from dormhub.models.base import TimestampModel

__all__ = ["Building", "College", "Service", "room_services"]


room_services = Table(
    "room_services",
    Base.metadata,
    Column("room_id", Integer, ForeignKey("rooms.id", ondelete="CASCADE"), primary_key=True),
    Column("service_id", Integer, ForeignKey("services.id", ondelete="CASCADE"), primary_key=True),
)


class Building(TimestampModel):
    __tablename__ = "buildings"

    name: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    address: Mapped[Optional[str]] = mapped_column(Text, nullable=True)


class College(TimestampModel):
    __tablename__ = "colleges"

    name: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)


class Service(TimestampModel):
    """Amenity a room may offer (laundry, wifi, ...)."""

    __tablename__ = "services"

    name: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    icon: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
