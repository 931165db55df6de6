"""
Room and room assignment repositories.
"""

from typing import Iterable, List, Optional

from sqlalchemy import Select, func, select
from sqlalchemy.orm import Session, selectinload

from dormhub.models.room import Room
from dormhub.models.room_assignment import RoomAssignment
from dormhub.models.user import Student
from dormhub.repositories.base import BaseRepository


class RoomRepository(BaseRepository[Room]):
    """Room lookups, row locking and search."""

    def __init__(self, db: Session):
        super().__init__(Room, db)

    def get_with_details(self, room_id: int) -> Optional[Room]:
        stmt = (
            select(Room)
            .where(Room.id == room_id)
            .options(selectinload(Room.services), selectinload(Room.building))
        )
        return self.db.execute(stmt).scalar_one_or_none()

    def lock_many(self, room_ids: Iterable[int]) -> List[Room]:
        """
        Lock several rooms in ascending id order.

        A fixed lock order keeps two workflows touching the same pair of
        rooms from deadlocking.
        """
        ids = sorted(set(room_ids))
        if not ids:
            return []
        stmt = (
            select(Room)
            .where(Room.id.in_(ids))
            .order_by(Room.id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        return list(self.db.execute(stmt).scalars().all())

    def get_by_number(self, room_number: str) -> Optional[Room]:
        stmt = select(Room).where(Room.room_number == room_number)
        return self.db.execute(stmt).scalar_one_or_none()

    def next_room_number(self) -> str:
        """Next integer room number after the highest numeric one."""
        numbers = self.db.execute(select(Room.room_number)).scalars().all()
        numeric = [int(n) for n in numbers if n and n.isdigit()]
        return str(max(numeric) + 1) if numeric else "1"

    def search_stmt(
        self,
        *,
        status: Optional[str] = None,
        building_id: Optional[int] = None,
        floor: Optional[int] = None,
        room_type: Optional[str] = None,
        statuses: Optional[List[str]] = None,
    ) -> Select:
        stmt = select(Room).options(selectinload(Room.services), selectinload(Room.building))
        if status is not None:
            stmt = stmt.where(Room.status == status)
        if statuses:
            stmt = stmt.where(Room.status.in_(statuses))
        if building_id is not None:
            stmt = stmt.where(Room.building_id == building_id)
        if floor is not None:
            stmt = stmt.where(Room.floor == floor)
        if room_type is not None:
            stmt = stmt.where(Room.room_type == room_type)
        return stmt.order_by(Room.room_number, Room.id)

    def search(self, **filters) -> List[Room]:
        return list(self.db.execute(self.search_stmt(**filters)).scalars().all())


class RoomAssignmentRepository(BaseRepository[RoomAssignment]):
    """Queries over the occupancy history."""

    def __init__(self, db: Session):
        super().__init__(RoomAssignment, db)

    def get_active_for_student(self, student_id: int, *, lock: bool = False) -> Optional[RoomAssignment]:
        stmt = select(RoomAssignment).where(
            RoomAssignment.student_id == student_id,
            RoomAssignment.is_active.is_(True),
        )
        if lock:
            stmt = stmt.with_for_update().execution_options(populate_existing=True)
        return self.db.execute(stmt).scalar_one_or_none()

    def get_active_with_details(self, student_id: int) -> Optional[RoomAssignment]:
        stmt = (
            select(RoomAssignment)
            .where(
                RoomAssignment.student_id == student_id,
                RoomAssignment.is_active.is_(True),
            )
            .options(
                selectinload(RoomAssignment.room).selectinload(Room.services),
                selectinload(RoomAssignment.room).selectinload(Room.building),
                selectinload(RoomAssignment.student).selectinload(Student.college),
                selectinload(RoomAssignment.payment),
            )
        )
        return self.db.execute(stmt).scalar_one_or_none()

    def list_for_room(self, room_id: int, *, include_inactive: bool = False) -> List[RoomAssignment]:
        stmt = (
            select(RoomAssignment)
            .where(RoomAssignment.room_id == room_id)
            .options(
                selectinload(RoomAssignment.student).selectinload(Student.college),
                selectinload(RoomAssignment.payment),
            )
            .order_by(RoomAssignment.check_in_date.desc(), RoomAssignment.id.desc())
        )
        if not include_inactive:
            stmt = stmt.where(RoomAssignment.is_active.is_(True))
        return list(self.db.execute(stmt).scalars().all())

    def count_active_for_room(self, room_id: int) -> int:
        stmt = select(func.count(RoomAssignment.id)).where(
            RoomAssignment.room_id == room_id,
            RoomAssignment.is_active.is_(True),
        )
        return int(self.db.execute(stmt).scalar_one())
