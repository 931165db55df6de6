"""
Payment repository with filtering and aggregate totals.
"""

from datetime import datetime
from decimal import Decimal
from typing import Dict, Optional

from sqlalchemy import Select, func, select
from sqlalchemy.orm import Session, selectinload

from dormhub.models.payment import Payment
from dormhub.models.room_assignment import RoomAssignment
from dormhub.repositories.base import BaseRepository


class PaymentRepository(BaseRepository[Payment]):

    def __init__(self, db: Session):
        super().__init__(Payment, db)

    def _apply_filters(
        self,
        stmt: Select,
        *,
        status: Optional[str] = None,
        payment_method: Optional[str] = None,
        room_id: Optional[int] = None,
        student_id: Optional[int] = None,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
    ) -> Select:
        if room_id is not None or student_id is not None:
            stmt = stmt.join(RoomAssignment, RoomAssignment.id == Payment.assignment_id)
            if room_id is not None:
                stmt = stmt.where(RoomAssignment.room_id == room_id)
            if student_id is not None:
                stmt = stmt.where(RoomAssignment.student_id == student_id)
        if status is not None:
            stmt = stmt.where(Payment.status == status)
        if payment_method is not None:
            stmt = stmt.where(Payment.payment_method == payment_method)
        if start_date is not None:
            stmt = stmt.where(Payment.payment_date >= start_date)
        if end_date is not None:
            stmt = stmt.where(Payment.payment_date <= end_date)
        return stmt

    def search_stmt(self, **filters) -> Select:
        stmt = select(Payment).options(
            selectinload(Payment.assignment).selectinload(RoomAssignment.room),
            selectinload(Payment.assignment).selectinload(RoomAssignment.student),
        )
        stmt = self._apply_filters(stmt, **filters)
        return stmt.order_by(Payment.payment_date.desc(), Payment.id.desc())

    def totals(self, **filters) -> Dict[str, Decimal]:
        stmt = select(
            func.coalesce(func.sum(Payment.amount_due), 0),
            func.coalesce(func.sum(Payment.amount_paid), 0),
            func.coalesce(func.sum(Payment.remaining_amount), 0),
            func.count(Payment.id),
        )
        stmt = self._apply_filters(stmt.select_from(Payment), **filters)
        due, paid, remaining, count = self.db.execute(stmt).one()
        return {
            "total_due": Decimal(str(due)),
            "total_paid": Decimal(str(paid)),
            "total_remaining": Decimal(str(remaining)),
            "count": int(count),
        }

    def totals_by_method(self, **filters) -> Dict[str, Dict[str, object]]:
        stmt = select(
            Payment.payment_method,
            func.coalesce(func.sum(Payment.amount_paid), 0),
            func.count(Payment.id),
        ).select_from(Payment)
        stmt = self._apply_filters(stmt, **filters).group_by(Payment.payment_method)
        return {
            method: {"total_paid": Decimal(str(paid)), "count": int(count)}
            for method, paid, count in self.db.execute(stmt).all()
        }

    def get_by_assignment(self, assignment_id: int) -> Optional[Payment]:
        stmt = (
            select(Payment)
            .where(Payment.assignment_id == assignment_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        return self.db.execute(stmt).scalar_one_or_none()
