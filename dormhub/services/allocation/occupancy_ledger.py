# dormhub/services/allocation/occupancy_ledger.py
"""
Occupancy ledger.

Single entry point for every change to a room's bed capacity and to
assignment activity. Room status is never set directly: it is recomputed
from ``(available_beds, total_beds)`` inside the same transaction as the
capacity write that changed it.
"""
from __future__ import annotations

import logging
from datetime import datetime
from typing import Iterable, List, Optional

from dormhub.models.base import utcnow
from dormhub.models.room import Room
from dormhub.models.room_assignment import RoomAssignment
from dormhub.models.user import Student
from dormhub.repositories import RoomAssignmentRepository, RoomRepository
from dormhub.schemas.common.enums import RoomStatus
from dormhub.services.common import UnitOfWork, errors

logger = logging.getLogger(__name__)


def derive_room_status(available_beds: int, total_beds: int) -> RoomStatus:
    """
    Occupancy-derived status.

    All beds free is ``available``, no bed free is ``reserved`` and
    anything in between is ``occupied``.
    """
    if available_beds >= total_beds:
        return RoomStatus.AVAILABLE
    if available_beds <= 0:
        return RoomStatus.RESERVED
    return RoomStatus.OCCUPIED


def resolve_room_status(room: Room) -> RoomStatus:
    """Stored status: the maintenance override wins over occupancy."""
    if room.is_under_maintenance:
        return RoomStatus.MAINTENANCE
    return derive_room_status(room.available_beds, room.total_beds)


class OccupancyLedger:
    """
    Capacity and assignment bookkeeping bound to one unit of work.

    Callers lock the rooms they touch (``lock_room``/``lock_rooms``)
    before reading capacity so check-then-write happens under a row lock.
    """

    def __init__(self, uow: UnitOfWork) -> None:
        self._uow = uow
        self._rooms = uow.get_repo(RoomRepository)
        self._assignments = uow.get_repo(RoomAssignmentRepository)

    # ------------------------------------------------------------------ #
    # Queries
    # ------------------------------------------------------------------ #

    def get_active_assignment(self, student_id: int, *, lock: bool = False) -> Optional[RoomAssignment]:
        return self._assignments.get_active_for_student(student_id, lock=lock)

    def get_room_occupants(self, room_id: int, include_inactive: bool = False) -> List[RoomAssignment]:
        return self._assignments.list_for_room(room_id, include_inactive=include_inactive)

    def count_active_occupants(self, room_id: int) -> int:
        return self._assignments.count_active_for_room(room_id)

    # ------------------------------------------------------------------ #
    # Locking
    # ------------------------------------------------------------------ #

    def lock_room(self, room_id: int) -> Room:
        room = self._rooms.get_for_update(room_id)
        if room is None:
            raise errors.NotFoundError("Room", room_id)
        return room

    def lock_rooms(self, room_ids: Iterable[int]) -> dict[int, Room]:
        """Lock rooms in ascending id order; every id must exist."""
        wanted = set(room_ids)
        locked = {room.id: room for room in self._rooms.lock_many(wanted)}
        missing = wanted - locked.keys()
        if missing:
            raise errors.NotFoundError("Room", min(missing))
        return locked

    # ------------------------------------------------------------------ #
    # Capacity
    # ------------------------------------------------------------------ #

    def apply_capacity_delta(self, room_id: int, delta: int) -> Room:
        """
        Adjust ``available_beds`` by ``delta`` and recompute status.

        Raises:
            InvalidStateError: If the result would leave ``[0, total_beds]``
        """
        room = self.lock_room(room_id)
        new_available = room.available_beds + delta
        if new_available < 0 or new_available > room.total_beds:
            raise errors.InvalidStateError(
                f"Capacity change of {delta:+d} would leave room {room.room_number} "
                f"with {new_available} of {room.total_beds} beds available",
                current_state=room.status,
                details={
                    "room_id": room.id,
                    "available_beds": room.available_beds,
                    "total_beds": room.total_beds,
                    "delta": delta,
                },
            )
        room.available_beds = new_available
        room.status = resolve_room_status(room).value
        return room

    def resize_room(self, room: Room, total_beds: int) -> Room:
        """
        Change ``total_beds`` keeping current occupants in place.

        Raises:
            ConflictError: If fewer beds than active occupants are requested
        """
        occupied = self.count_active_occupants(room.id)
        if total_beds < occupied:
            raise errors.ConflictError(
                f"Room {room.room_number} has {occupied} active occupants; "
                f"cannot reduce to {total_beds} beds",
                conflicting_field="total_beds",
                details={"occupied_beds": occupied, "total_beds": total_beds},
            )
        room.total_beds = total_beds
        room.available_beds = total_beds - occupied
        room.status = resolve_room_status(room).value
        return room

    def set_maintenance(self, room: Room, under_maintenance: bool) -> Room:
        room.is_under_maintenance = under_maintenance
        room.status = resolve_room_status(room).value
        return room

    # ------------------------------------------------------------------ #
    # Assignments
    # ------------------------------------------------------------------ #

    def open_assignment(
        self,
        room: Room,
        student: Student,
        check_in_date: Optional[datetime] = None,
    ) -> RoomAssignment:
        """
        Place ``student`` in ``room`` and consume one bed.

        The room must already be locked by the caller.
        """
        if room.is_under_maintenance:
            raise errors.InvalidStateError(
                f"Room {room.room_number} is under maintenance",
                current_state=RoomStatus.MAINTENANCE.value,
                details={"room_id": room.id},
            )
        if room.available_beds <= 0:
            raise errors.CapacityExceededError(room.id)

        assignment = RoomAssignment(
            room_id=room.id,
            student_id=student.id,
            check_in_date=check_in_date or utcnow(),
            is_active=True,
        )
        self._assignments.create(assignment)
        self.apply_capacity_delta(room.id, -1)
        self._uow.flush()

        logger.info(
            "Opened assignment %s: student %s -> room %s (%s/%s beds free)",
            assignment.id, student.id, room.id, room.available_beds, room.total_beds,
        )
        return assignment

    def close_assignment(
        self,
        assignment: RoomAssignment,
        check_out_date: Optional[datetime] = None,
    ) -> RoomAssignment:
        """Close an active assignment and release its bed."""
        if not assignment.is_active:
            raise errors.InvalidStateError(
                f"Assignment {assignment.id} is already closed",
                current_state="inactive",
            )
        assignment.is_active = False
        assignment.check_out_date = check_out_date or utcnow()
        self._uow.flush()
        self.apply_capacity_delta(assignment.room_id, +1)

        logger.info(
            "Closed assignment %s: student %s left room %s",
            assignment.id, assignment.student_id, assignment.room_id,
        )
        return assignment
