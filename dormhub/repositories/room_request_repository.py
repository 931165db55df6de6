"""
Room request repository.
"""

from typing import Dict, List, Optional, Sequence

from sqlalchemy import Select, select
from sqlalchemy.orm import Session, selectinload

from dormhub.models.room import Room
from dormhub.models.room_request import RoomRequest
from dormhub.models.user import Student
from dormhub.repositories.base import BaseRepository
from dormhub.schemas.common.enums import RoomRequestStatus


class RoomRequestRepository(BaseRepository[RoomRequest]):

    def __init__(self, db: Session):
        super().__init__(RoomRequest, db)

    def get_pending_for_pair(self, student_id: int, room_id: int) -> Optional[RoomRequest]:
        stmt = select(RoomRequest).where(
            RoomRequest.student_id == student_id,
            RoomRequest.room_id == room_id,
            RoomRequest.status == RoomRequestStatus.PENDING.value,
        )
        return self.db.execute(stmt).scalars().first()

    def list_other_pending_for_student(self, student_id: int, exclude_id: int) -> List[RoomRequest]:
        stmt = (
            select(RoomRequest)
            .where(
                RoomRequest.student_id == student_id,
                RoomRequest.status == RoomRequestStatus.PENDING.value,
                RoomRequest.id != exclude_id,
            )
            .order_by(RoomRequest.id)
            .with_for_update()
        )
        return list(self.db.execute(stmt).scalars().all())

    def list_pending_for_room(self, room_id: int) -> List[RoomRequest]:
        stmt = (
            select(RoomRequest)
            .where(
                RoomRequest.room_id == room_id,
                RoomRequest.status == RoomRequestStatus.PENDING.value,
            )
            .options(selectinload(RoomRequest.student).selectinload(Student.college))
            .order_by(RoomRequest.created_at.desc(), RoomRequest.id.desc())
        )
        return list(self.db.execute(stmt).scalars().all())

    def for_student_stmt(self, student_id: int) -> Select:
        return (
            select(RoomRequest)
            .where(RoomRequest.student_id == student_id)
            .options(
                selectinload(RoomRequest.room).selectinload(Room.services),
                selectinload(RoomRequest.room).selectinload(Room.building),
            )
            .order_by(RoomRequest.created_at.desc(), RoomRequest.id.desc())
        )

    def for_room_stmt(self, room_id: int) -> Select:
        return (
            select(RoomRequest)
            .where(RoomRequest.room_id == room_id)
            .options(selectinload(RoomRequest.student).selectinload(Student.college))
            .order_by(RoomRequest.created_at.desc(), RoomRequest.id.desc())
        )

    def latest_status_by_room(self, student_id: int, room_ids: Sequence[int]) -> Dict[int, str]:
        """Most recent request status per room for one student."""
        if not room_ids:
            return {}
        stmt = (
            select(RoomRequest)
            .where(RoomRequest.student_id == student_id, RoomRequest.room_id.in_(set(room_ids)))
            .order_by(RoomRequest.id)
        )
        statuses: Dict[int, str] = {}
        for request in self.db.execute(stmt).scalars().all():
            statuses[request.room_id] = request.status
        return statuses
