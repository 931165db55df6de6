# --- File: dormhub/schemas/payment.py ---
"""
Payment ledger schemas: overrides, edits, additional payments and reports.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Dict, Optional

from pydantic import Field

from dormhub.schemas.common.base import BaseResponseSchema, BaseSchema, TimestampMixin
from dormhub.schemas.common.enums import PaymentMethod, PaymentStatus

__all__ = [
    "PaymentOverrides",
    "PaymentUpdate",
    "PaymentUpsertRequest",
    "AdditionalPaymentRequest",
    "PaymentResponse",
    "PaymentListItem",
    "PaymentFilterParams",
    "MethodTotals",
    "FinancialReport",
]


class PaymentOverrides(BaseSchema):
    """Explicit values used instead of room-derived defaults when a payment opens."""

    amount_due: Optional[Decimal] = Field(default=None, ge=0, max_digits=10, decimal_places=2)
    amount_paid: Optional[Decimal] = Field(default=None, ge=0, max_digits=10, decimal_places=2)
    payment_method: Optional[PaymentMethod] = None
    payment_date: Optional[datetime] = None
    notes: Optional[str] = Field(default=None, max_length=2000)


class PaymentUpdate(PaymentOverrides):
    """Direct overwrite of payment fields; omitted fields are left unchanged."""


class PaymentUpsertRequest(PaymentOverrides):
    """Open or overwrite the payment row of one assignment."""

    assignment_id: int = Field(..., gt=0)


class AdditionalPaymentRequest(BaseSchema):
    amount: Decimal = Field(..., max_digits=10, decimal_places=2, description="Amount received")
    payment_method: Optional[PaymentMethod] = None
    notes: Optional[str] = Field(default=None, max_length=500)


class PaymentResponse(BaseResponseSchema, TimestampMixin):
    assignment_id: int
    amount_due: Decimal
    amount_paid: Decimal
    remaining_amount: Decimal
    status: PaymentStatus
    payment_method: PaymentMethod
    payment_date: datetime
    notes: Optional[str] = None


class PaymentListItem(PaymentResponse):
    """Payment row annotated with its room and student."""

    room_id: int
    room_number: str
    student_id: int
    student_name: str


class PaymentFilterParams(BaseSchema):
    status: Optional[PaymentStatus] = None
    payment_method: Optional[PaymentMethod] = None
    room_id: Optional[int] = None
    student_id: Optional[int] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None

    def as_query(self) -> Dict[str, object]:
        """Filters as repository keyword arguments with enums unwrapped."""
        query: Dict[str, object] = {}
        for name, value in self.model_dump(exclude_none=True).items():
            query[name] = value.value if hasattr(value, "value") else value
        return query


class MethodTotals(BaseSchema):
    total_paid: Decimal = Decimal("0.00")
    count: int = 0


class FinancialReport(BaseSchema):
    total_due: Decimal
    total_paid: Decimal
    total_remaining: Decimal
    payment_count: int
    by_method: Dict[PaymentMethod, MethodTotals]
