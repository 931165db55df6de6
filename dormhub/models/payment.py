# dormhub/models/payment.py
"""
Payment ledger row, one per room assignment.

``remaining_amount`` and ``status`` are derived from the due and paid
amounts by the payment ledger after every mutation.
"""

from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING, Optional

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Integer, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from dormhub.models.base import TimestampModel
from dormhub.schemas.common.enums import PaymentMethod, PaymentStatus

if TYPE_CHECKING:
    from dormhub.models.room_assignment import RoomAssignment

__all__ = ["Payment"]


class Payment(TimestampModel):
    __tablename__ = "payments"

    __table_args__ = (
        CheckConstraint("amount_due >= 0", name="ck_payments_amount_due_non_negative"),
        CheckConstraint("amount_paid >= 0", name="ck_payments_amount_paid_non_negative"),
    )

    assignment_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("room_assignments.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
    )
    amount_due: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False, default=Decimal("0"))
    amount_paid: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False, default=Decimal("0"))
    remaining_amount: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False, default=Decimal("0"))
    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=PaymentStatus.UNPAID.value,
        index=True,
    )
    payment_method: Mapped[str] = mapped_column(
        String(30),
        nullable=False,
        default=PaymentMethod.CASH.value,
    )
    payment_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, index=True)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    assignment: Mapped["RoomAssignment"] = relationship("RoomAssignment", back_populates="payment")
