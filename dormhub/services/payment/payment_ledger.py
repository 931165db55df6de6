# dormhub/services/payment/payment_ledger.py
"""
Payment ledger.

Keeps one payment row per assignment with ``remaining_amount`` and
``status`` recomputed from the due and paid amounts after every change.
Notifications are the caller's concern.
"""
from __future__ import annotations

import logging
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Dict, Optional, Tuple, Union

from dormhub.models.base import utcnow
from dormhub.models.payment import Payment
from dormhub.models.room import Room
from dormhub.models.room_assignment import RoomAssignment
from dormhub.repositories import PaymentRepository, RoomAssignmentRepository
from dormhub.schemas.common.enums import PaymentMethod, PaymentStatus, RoomType
from dormhub.schemas.payment import PaymentOverrides, PaymentUpdate
from dormhub.services.common import UnitOfWork, errors

logger = logging.getLogger(__name__)

ZERO = Decimal("0.00")
CENT = Decimal("0.01")

Amount = Union[Decimal, int, float, str]


def to_money(value: Optional[Amount]) -> Decimal:
    """Normalize an amount to a two-decimal ``Decimal``; ``None`` is zero."""
    if value is None:
        return ZERO
    return Decimal(str(value)).quantize(CENT, rounding=ROUND_HALF_UP)


def calculate_payment_status(amount_due: Amount, amount_paid: Amount) -> PaymentStatus:
    due = to_money(amount_due)
    paid = to_money(amount_paid)
    if paid <= 0:
        return PaymentStatus.UNPAID
    if paid >= due:
        return PaymentStatus.PAID
    return PaymentStatus.PARTIAL


def calculate_remaining(amount_due: Amount, amount_paid: Amount) -> Decimal:
    return max(to_money(amount_due) - to_money(amount_paid), ZERO)


def default_amount_due(room: Room) -> Decimal:
    """Room price for single rooms, bed price for shared rooms."""
    if room.room_type == RoomType.SINGLE.value:
        return to_money(room.room_price)
    return to_money(room.bed_price)


def _stamp_note(existing: Optional[str], note: str) -> str:
    entry = f"{utcnow().isoformat(timespec='seconds')}: {note}"
    return f"{existing}\n{entry}" if existing else entry


class PaymentLedger:
    """Payment row bookkeeping bound to one unit of work."""

    def __init__(self, uow: UnitOfWork) -> None:
        self._uow = uow
        self._payments = uow.get_repo(PaymentRepository)

    @staticmethod
    def recompute(payment: Payment) -> Payment:
        payment.amount_due = to_money(payment.amount_due)
        payment.amount_paid = to_money(payment.amount_paid)
        payment.remaining_amount = calculate_remaining(payment.amount_due, payment.amount_paid)
        payment.status = calculate_payment_status(payment.amount_due, payment.amount_paid).value
        return payment

    def get(self, payment_id: int, *, lock: bool = False) -> Payment:
        payment = self._payments.get_for_update(payment_id) if lock else self._payments.get(payment_id)
        if payment is None:
            raise errors.NotFoundError("Payment", payment_id)
        return payment

    def open_payment(
        self,
        assignment: RoomAssignment,
        room: Room,
        overrides: Optional[PaymentOverrides] = None,
        *,
        paid_in_full: bool = False,
    ) -> Payment:
        """
        Open the payment row for a new assignment.

        Due defaults from the room's pricing and paid defaults to zero.
        ``paid_in_full`` sets paid to the due amount unless ``amount_paid``
        is overridden explicitly.
        """
        overrides = overrides or PaymentOverrides()

        amount_due = (
            to_money(overrides.amount_due)
            if overrides.amount_due is not None
            else default_amount_due(room)
        )
        if overrides.amount_paid is not None:
            amount_paid = to_money(overrides.amount_paid)
        elif paid_in_full:
            amount_paid = amount_due
        else:
            amount_paid = ZERO

        payment = Payment(
            assignment=assignment,
            amount_due=amount_due,
            amount_paid=amount_paid,
            payment_method=(overrides.payment_method or PaymentMethod.CASH).value,
            payment_date=overrides.payment_date or utcnow(),
            notes=overrides.notes,
        )
        self.recompute(payment)
        self._payments.create(payment)
        self._uow.flush()

        logger.info(
            "Opened payment %s for assignment %s: due=%s paid=%s",
            payment.id, assignment.id, payment.amount_due, payment.amount_paid,
        )
        return payment

    def record_additional_payment(
        self,
        payment_id: int,
        amount: Amount,
        method: Optional[PaymentMethod] = None,
        note: Optional[str] = None,
    ) -> Payment:
        """
        Add ``amount`` to the paid total and append a timestamped note.

        Raises:
            ValidationError: If ``amount`` is not positive
        """
        amount = to_money(amount)
        if amount <= 0:
            raise errors.ValidationError(
                "Payment amount must be greater than zero",
                field="amount",
                details={"amount": str(amount)},
            )

        payment = self.get(payment_id, lock=True)
        payment.amount_paid = to_money(payment.amount_paid) + amount
        if method is not None:
            payment.payment_method = method.value
        payment.payment_date = utcnow()
        payment.notes = _stamp_note(payment.notes, note or f"Received {amount}")
        self.recompute(payment)
        self._uow.flush()

        logger.info(
            "Recorded %s on payment %s: paid=%s remaining=%s status=%s",
            amount, payment.id, payment.amount_paid, payment.remaining_amount, payment.status,
        )
        return payment

    def set_payment(self, payment_id: int, fields: PaymentUpdate) -> Payment:
        """Overwrite the supplied fields and recompute derived values."""
        payment = self.get(payment_id, lock=True)
        self._apply_fields(payment, fields.model_dump(exclude_unset=True))
        self.recompute(payment)
        self._uow.flush()
        return payment

    def upsert_for_assignment(self, assignment_id: int, fields: PaymentOverrides) -> Tuple[Payment, bool]:
        """
        Open the assignment's payment row, or overwrite the supplied fields
        on the existing one.

        Returns:
            The payment and whether it was created

        Raises:
            NotFoundError: If the assignment does not exist
        """
        assignment = self._uow.get_repo(RoomAssignmentRepository).get(assignment_id)
        if assignment is None:
            raise errors.NotFoundError("RoomAssignment", assignment_id)

        existing = self._payments.get_by_assignment(assignment_id)
        if existing is None:
            return self.open_payment(assignment, assignment.room, fields), True

        self._apply_fields(existing, fields.model_dump(exclude_unset=True))
        self.recompute(existing)
        self._uow.flush()
        return existing, False

    @staticmethod
    def _apply_fields(payment: Payment, changes: Dict[str, Any]) -> None:
        for name in ("amount_due", "amount_paid"):
            if name in changes:
                if changes[name] is None:
                    raise errors.ValidationError(f"{name} cannot be null", field=name)
                setattr(payment, name, to_money(changes[name]))
        if changes.get("payment_method") is not None:
            payment.payment_method = PaymentMethod(changes["payment_method"]).value
        if changes.get("payment_date") is not None:
            payment.payment_date = changes["payment_date"]
        if "notes" in changes:
            payment.notes = changes["notes"]
