from datetime import datetime, timezone
from decimal import Decimal

import pytest
from sqlalchemy import func, select

from dormhub.models import Payment, RoomAssignment
from dormhub.schemas.allocation import AssignStudentRequest
from dormhub.schemas.common.enums import PaymentMethod, PaymentStatus, RoomType
from dormhub.schemas.payment import (
    AdditionalPaymentRequest,
    PaymentFilterParams,
    PaymentOverrides,
    PaymentUpdate,
    PaymentUpsertRequest,
)
from dormhub.services.common import errors
from dormhub.services.payment.payment_ledger import calculate_payment_status, calculate_remaining, to_money


@pytest.mark.parametrize(
    "due, paid, status, remaining",
    [
        ("150", "0", PaymentStatus.UNPAID, "150.00"),
        ("150", "100", PaymentStatus.PARTIAL, "50.00"),
        ("150", "150", PaymentStatus.PAID, "0.00"),
        ("150", "200", PaymentStatus.PAID, "0.00"),
        ("0", "0", PaymentStatus.UNPAID, "0.00"),
    ],
)
def test_payment_derivation(due, paid, status, remaining):
    assert calculate_payment_status(due, paid) == status
    assert calculate_remaining(due, paid) == Decimal(remaining)


def test_to_money_rounds_to_cents():
    assert to_money("10.005") == Decimal("10.01")
    assert to_money(None) == Decimal("0.00")


def _assign(allocation, admin_actor, room, student, **kwargs):
    return allocation.assign_student(
        admin_actor,
        AssignStudentRequest(room_id=room.id, student_id=student.id, **kwargs),
    )


def test_additional_payments_walk_status_to_paid(allocation, payment_service, admin_actor, make_room, seed):
    room = make_room("201", total_beds=2, bed_price=Decimal("150"))
    assignment = _assign(allocation, admin_actor, room, seed.students[0])

    payment = assignment.payment
    assert payment.amount_due == Decimal("150.00")
    assert payment.amount_paid == Decimal("0.00")
    assert payment.status == PaymentStatus.UNPAID

    payment = payment_service.add_payment(admin_actor, payment.id, AdditionalPaymentRequest(amount=Decimal("100")))
    assert payment.amount_paid == Decimal("100.00")
    assert payment.remaining_amount == Decimal("50.00")
    assert payment.status == PaymentStatus.PARTIAL

    payment = payment_service.add_payment(
        admin_actor,
        payment.id,
        AdditionalPaymentRequest(amount=Decimal("50"), payment_method=PaymentMethod.VISA, notes="Final instalment"),
    )
    assert payment.status == PaymentStatus.PAID
    assert payment.remaining_amount == Decimal("0.00")
    assert payment.payment_method == PaymentMethod.VISA
    # Notes accumulate
    assert "Received 100.00" in payment.notes
    assert payment.notes.endswith("Final instalment")


@pytest.mark.parametrize("amount", ["0", "-5"])
def test_non_positive_additional_payment_is_rejected(allocation, payment_service, admin_actor, make_room, seed, db, amount):
    room = make_room("202", total_beds=1)
    assignment = _assign(allocation, admin_actor, room, seed.students[0])

    with pytest.raises(errors.ValidationError):
        payment_service.add_payment(admin_actor, assignment.payment.id, AdditionalPaymentRequest(amount=Decimal(amount)))

    db.expire_all()
    assert db.get(Payment, assignment.payment.id).amount_paid == Decimal("0.00")


def test_single_room_defaults_to_room_price(allocation, admin_actor, make_room, seed):
    room = make_room("203", total_beds=1, room_type=RoomType.SINGLE, room_price=Decimal("400"), bed_price=None)
    assignment = _assign(allocation, admin_actor, room, seed.students[0])
    assert assignment.payment.amount_due == Decimal("400.00")


def test_overrides_and_paid_flag(allocation, admin_actor, make_room, seed):
    room = make_room("204", total_beds=3)

    paid = _assign(allocation, admin_actor, room, seed.students[0], paid=True)
    assert paid.payment.amount_paid == Decimal("150.00")
    assert paid.payment.status == PaymentStatus.PAID

    overridden = _assign(
        allocation,
        admin_actor,
        room,
        seed.students[1],
        paid=True,
        payment=PaymentOverrides(amount_due=Decimal("120"), amount_paid=Decimal("20"), payment_method=PaymentMethod.BANK_TRANSFER),
    )
    assert overridden.payment.amount_due == Decimal("120.00")
    assert overridden.payment.amount_paid == Decimal("20.00")
    assert overridden.payment.remaining_amount == Decimal("100.00")
    assert overridden.payment.status == PaymentStatus.PARTIAL
    assert overridden.payment.payment_method == PaymentMethod.BANK_TRANSFER


def test_set_payment_recomputes(allocation, payment_service, admin_actor, make_room, seed):
    room = make_room("205", total_beds=1)
    assignment = _assign(allocation, admin_actor, room, seed.students[0])

    payment = payment_service.set_payment(
        admin_actor,
        assignment.payment.id,
        PaymentUpdate(amount_due=Decimal("300"), amount_paid=Decimal("300"), notes="Scholarship"),
    )
    assert payment.status == PaymentStatus.PAID
    assert payment.remaining_amount == Decimal("0.00")
    assert payment.notes == "Scholarship"

    payment = payment_service.set_payment(admin_actor, payment.id, PaymentUpdate(amount_paid=Decimal("0")))
    assert payment.status == PaymentStatus.UNPAID
    assert payment.remaining_amount == Decimal("300.00")
    assert payment.amount_due == Decimal("300.00")


def test_save_payment_opens_row_for_assignment_without_one(payment_service, admin_actor, make_room, seed, db):
    room = make_room("207", total_beds=2, bed_price=Decimal("150"))
    assignment = RoomAssignment(
        room_id=room.id,
        student_id=seed.students[0].id,
        check_in_date=datetime.now(timezone.utc),
        is_active=False,
    )
    db.add(assignment)
    db.commit()

    payment = payment_service.save_payment(
        admin_actor,
        PaymentUpsertRequest(assignment_id=assignment.id, amount_paid=Decimal("50")),
    )

    assert payment.assignment_id == assignment.id
    assert payment.amount_due == Decimal("150.00")
    assert payment.remaining_amount == Decimal("100.00")
    assert payment.status == PaymentStatus.PARTIAL


def test_save_payment_overwrites_existing_row(allocation, payment_service, admin_actor, make_room, seed, db):
    room = make_room("208", total_beds=2)
    assignment = _assign(allocation, admin_actor, room, seed.students[0])

    payment = payment_service.save_payment(
        admin_actor,
        PaymentUpsertRequest(
            assignment_id=assignment.id,
            amount_due=Decimal("180"),
            amount_paid=Decimal("180"),
            payment_method=PaymentMethod.VISA,
        ),
    )

    assert payment.id == assignment.payment.id
    assert payment.status == PaymentStatus.PAID
    assert payment.remaining_amount == Decimal("0.00")
    assert payment.payment_method == PaymentMethod.VISA
    count = db.execute(
        select(func.count(Payment.id)).where(Payment.assignment_id == assignment.id)
    ).scalar_one()
    assert count == 1


def test_save_payment_for_missing_assignment(payment_service, admin_actor, seed):
    with pytest.raises(errors.NotFoundError):
        payment_service.save_payment(admin_actor, PaymentUpsertRequest(assignment_id=4242))


def test_missing_payment_raises_not_found(payment_service, admin_actor):
    with pytest.raises(errors.NotFoundError):
        payment_service.add_payment(admin_actor, 4242, AdditionalPaymentRequest(amount=Decimal("10")))


def test_listing_and_financial_report(allocation, payment_service, admin_actor, make_room, seed):
    from dormhub.schemas.common.pagination import PaginationParams

    room = make_room("206", total_beds=3)
    first = _assign(allocation, admin_actor, room, seed.students[0], paid=True)
    _assign(allocation, admin_actor, room, seed.students[1])

    page = payment_service.list_payments(admin_actor, PaymentFilterParams(), PaginationParams())
    assert page.meta.total_items == 2
    assert {item.student_name for item in page.items} == {"Student 1", "Student 2"}
    assert all(item.room_number == "206" for item in page.items)

    paid_only = payment_service.list_payments(
        admin_actor, PaymentFilterParams(status=PaymentStatus.PAID), PaginationParams()
    )
    assert [item.id for item in paid_only.items] == [first.payment.id]

    report = payment_service.financial_report(admin_actor, PaymentFilterParams(room_id=room.id))
    assert report.payment_count == 2
    assert report.total_due == Decimal("300.00")
    assert report.total_paid == Decimal("150.00")
    assert report.total_remaining == Decimal("150.00")
    assert report.by_method[PaymentMethod.CASH].count == 2


def test_payment_surface_is_admin_only(payment_service, student_actors):
    from dormhub.schemas.common.pagination import PaginationParams
    from dormhub.services.common.permissions import PermissionDenied

    with pytest.raises(PermissionDenied):
        payment_service.list_payments(student_actors[0], PaymentFilterParams(), PaginationParams())
