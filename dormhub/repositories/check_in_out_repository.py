"""
Daily check-in/out log repository.
"""

from datetime import date
from typing import List, Optional

from sqlalchemy import Select, select
from sqlalchemy.orm import Session, selectinload

from dormhub.models.check_in_out import CheckInOut
from dormhub.repositories.base import BaseRepository
from dormhub.schemas.common.enums import CheckInOutStatus


class CheckInOutRepository(BaseRepository[CheckInOut]):

    def __init__(self, db: Session):
        super().__init__(CheckInOut, db)

    def get_open(self, student_id: int, day: date, *, lock: bool = True) -> Optional[CheckInOut]:
        stmt = (
            select(CheckInOut)
            .where(
                CheckInOut.student_id == student_id,
                CheckInOut.date == day,
                CheckInOut.status == CheckInOutStatus.CHECKED_IN.value,
            )
            .order_by(CheckInOut.check_in_time.desc())
        )
        if lock:
            stmt = stmt.with_for_update()
        return self.db.execute(stmt).scalars().first()

    def list_for_day(self, day: date) -> List[CheckInOut]:
        return list(self.db.execute(self.search_stmt(day=day)).scalars().all())

    def history_stmt(self, student_id: int) -> Select:
        return (
            select(CheckInOut)
            .where(CheckInOut.student_id == student_id)
            .options(selectinload(CheckInOut.student))
            .order_by(CheckInOut.date.desc(), CheckInOut.check_in_time.desc(), CheckInOut.id.desc())
        )

    def search_stmt(self, *, day: Optional[date] = None, student_id: Optional[int] = None) -> Select:
        stmt = select(CheckInOut).options(selectinload(CheckInOut.student))
        if day is not None:
            stmt = stmt.where(CheckInOut.date == day)
        if student_id is not None:
            stmt = stmt.where(CheckInOut.student_id == student_id)
        return stmt.order_by(CheckInOut.check_in_time.desc(), CheckInOut.id.desc())
