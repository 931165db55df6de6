# dormhub/services/room/room_service.py
"""
Room administration: create, update and delete.

Capacity and status changes go through the occupancy ledger; students
whose preferences match a newly created room are notified after commit.
"""
from __future__ import annotations

import logging
from decimal import Decimal
from typing import Callable, List, Optional

from sqlalchemy.orm import Session

from dormhub.models.room import Room
from dormhub.repositories import BuildingRepository, RoomRepository, ServiceRepository
from dormhub.schemas.common.enums import NotificationType, RelatedEntityType, RoomStatus, RoomType
from dormhub.schemas.room import RoomCreate, RoomResponse, RoomUpdate
from dormhub.services.allocation.occupancy_ledger import (
    OccupancyLedger,
    derive_room_status,
    resolve_room_status,
)
from dormhub.services.common import UnitOfWork, errors
from dormhub.services.common.mapping import to_schema
from dormhub.services.common.permissions import Principal, require_admin
from dormhub.services.notification.notification_service import NotificationService
from dormhub.services.preference.preference_service import PreferenceService

logger = logging.getLogger(__name__)


def validate_room_pricing(
    room_type: RoomType,
    total_beds: int,
    room_price: Optional[Decimal],
    bed_price: Optional[Decimal],
) -> None:
    """
    Single rooms need exactly one bed and a room price; shared rooms need
    a bed price.

    Raises:
        ValidationError: On the first violated rule
    """
    if room_type == RoomType.SINGLE:
        if total_beds != 1:
            raise errors.ValidationError(
                "Single rooms must have exactly 1 bed",
                field="total_beds",
                details={"total_beds": total_beds},
            )
        if room_price is None:
            raise errors.ValidationError("Single rooms require a room price", field="room_price")
    elif room_type == RoomType.SHARED:
        if bed_price is None:
            raise errors.ValidationError("Shared rooms require a bed price", field="bed_price")


class RoomService:

    def __init__(
        self,
        session_factory: Callable[[], Session],
        notifier: NotificationService,
        preferences: PreferenceService,
    ) -> None:
        self._session_factory = session_factory
        self._notifier = notifier
        self._preferences = preferences

    # ------------------------------------------------------------------ #
    # Helpers
    # ------------------------------------------------------------------ #

    def _check_building(self, uow: UnitOfWork, building_id: Optional[int]) -> None:
        if building_id is not None and uow.get_repo(BuildingRepository).get(building_id) is None:
            raise errors.ValidationError(
                f"Building {building_id} does not exist",
                field="building_id",
            )

    def _load_services(self, uow: UnitOfWork, service_ids: List[int]):
        services = uow.get_repo(ServiceRepository).get_many(service_ids)
        unknown = sorted(set(service_ids) - {s.id for s in services})
        if unknown:
            raise errors.ValidationError(
                "Unknown service ids",
                field="service_ids",
                details={"unknown_ids": unknown},
            )
        return services

    def _check_room_number(self, uow: UnitOfWork, room_number: str, room_id: Optional[int] = None) -> None:
        existing = uow.get_repo(RoomRepository).get_by_number(room_number)
        if existing is not None and existing.id != room_id:
            raise errors.ConflictError(
                f"Room number '{room_number}' is already in use",
                conflicting_field="room_number",
            )

    # ------------------------------------------------------------------ #
    # Create
    # ------------------------------------------------------------------ #

    def create_room(self, actor: Principal, data: RoomCreate) -> RoomResponse:
        require_admin(actor)
        validate_room_pricing(data.room_type, data.total_beds, data.room_price, data.bed_price)

        with UnitOfWork(self._session_factory) as uow:
            rooms = uow.get_repo(RoomRepository)

            room_number = data.room_number or rooms.next_room_number()
            self._check_room_number(uow, room_number)
            self._check_building(uow, data.building_id)
            services = self._load_services(uow, data.service_ids or [])

            room = Room(
                room_number=room_number,
                floor=data.floor,
                building_id=data.building_id,
                room_type=data.room_type.value,
                total_beds=data.total_beds,
                available_beds=data.total_beds,
                status=derive_room_status(data.total_beds, data.total_beds).value,
                is_under_maintenance=False,
                room_price=data.room_price,
                bed_price=data.bed_price,
                description=data.description,
                images=list(data.images or []),
            )
            room.services = services
            rooms.create(room)
            uow.flush()

            response = to_schema(room, RoomResponse)
            service_ids = room.service_ids

        logger.info("Created room %s (%s, %s beds)", response.room_number, response.room_type.value, response.total_beds)
        self._announce_room(response, service_ids)
        return response

    def _announce_room(self, room: RoomResponse, service_ids: List[int]) -> None:
        """Tell students whose preferences match the new room."""
        try:
            user_ids = self._preferences.find_matching_students(room.room_type.value, service_ids)
        except Exception:
            logger.exception("Preference matching failed for room %s", room.id)
            return
        if not user_ids:
            return
        self._notifier.send_many(
            user_ids,
            NotificationType.ROOM_MATCH,
            "New room matches your preferences",
            f"Room {room.room_number} is now available and matches your preferences",
            related_id=room.id,
            related_type=RelatedEntityType.ROOM,
        )

    # ------------------------------------------------------------------ #
    # Update
    # ------------------------------------------------------------------ #

    def update_room(self, actor: Principal, room_id: int, data: RoomUpdate) -> RoomResponse:
        """
        Apply a partial update.

        ``status='maintenance'`` sets the maintenance override; any other
        status clears it and must agree with current capacity.
        """
        require_admin(actor)
        changes = data.model_dump(exclude_unset=True)

        with UnitOfWork(self._session_factory) as uow:
            ledger = OccupancyLedger(uow)
            room = ledger.lock_room(room_id)

            room_type = RoomType(changes.get("room_type") or room.room_type)
            total_beds = changes.get("total_beds") or room.total_beds
            room_price = changes["room_price"] if "room_price" in changes else room.room_price
            bed_price = changes["bed_price"] if "bed_price" in changes else room.bed_price
            validate_room_pricing(room_type, total_beds, room_price, bed_price)

            if changes.get("room_number"):
                self._check_room_number(uow, changes["room_number"], room_id=room.id)
                room.room_number = changes["room_number"]
            if "building_id" in changes:
                self._check_building(uow, changes["building_id"])
                room.building_id = changes["building_id"]
            if changes.get("service_ids") is not None:
                room.services = self._load_services(uow, changes["service_ids"])

            for name in ("floor", "description"):
                if name in changes:
                    setattr(room, name, changes[name])
            if changes.get("images") is not None:
                room.images = list(changes["images"])

            room.room_type = room_type.value
            room.room_price = room_price
            room.bed_price = bed_price

            if total_beds != room.total_beds:
                ledger.resize_room(room, total_beds)

            requested_status = changes.get("status")
            if requested_status is not None:
                self._apply_status(ledger, room, RoomStatus(requested_status))

            uow.flush()
            logger.info("Updated room %s: %s", room.id, sorted(changes))
            return to_schema(room, RoomResponse)

    @staticmethod
    def _apply_status(ledger: OccupancyLedger, room: Room, requested: RoomStatus) -> None:
        if requested == RoomStatus.MAINTENANCE:
            ledger.set_maintenance(room, True)
            return

        ledger.set_maintenance(room, False)
        derived = resolve_room_status(room)
        if derived != requested:
            raise errors.ValidationError(
                f"Status '{requested.value}' contradicts current occupancy "
                f"({room.available_beds}/{room.total_beds} beds free implies '{derived.value}')",
                field="status",
                details={"derived_status": derived.value},
            )

    # ------------------------------------------------------------------ #
    # Delete
    # ------------------------------------------------------------------ #

    def delete_room(self, actor: Principal, room_id: int) -> None:
        require_admin(actor)

        with UnitOfWork(self._session_factory) as uow:
            ledger = OccupancyLedger(uow)
            room = ledger.lock_room(room_id)

            active = ledger.count_active_occupants(room.id)
            if active:
                raise errors.ConflictError(
                    f"Room {room.room_number} still has {active} active occupant(s)",
                    details={"room_id": room.id, "active_assignments": active},
                )

            uow.get_repo(RoomRepository).delete(room)
            uow.flush()
            logger.info("Deleted room %s", room_id)
