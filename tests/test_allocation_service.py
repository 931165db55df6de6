import logging
from decimal import Decimal

import pytest
from sqlalchemy import func, select

from dormhub.models import Notification, Payment, Room, RoomAssignment, RoomRequest
from dormhub.schemas.allocation import AssignStudentRequest, CheckOutRequest, RoomRequestCreate
from dormhub.schemas.common.enums import NotificationType, RoomRequestStatus, RoomStatus
from dormhub.services.common import errors
from dormhub.services.common.permissions import PermissionDenied
from dormhub.services.notification import NotificationService
from dormhub.services.payment import PaymentLedger


def assign(allocation, actor, room, student, **kwargs):
    return allocation.assign_student(actor, AssignStudentRequest(room_id=room.id, student_id=student.id, **kwargs))


def request_room(allocation, actor, room):
    return allocation.create_room_request(actor, RoomRequestCreate(room_id=room.id))


def load_room(db, room_id):
    db.expire_all()
    return db.get(Room, room_id)


def active_assignments(db, student_id):
    db.expire_all()
    stmt = select(RoomAssignment).where(RoomAssignment.student_id == student_id, RoomAssignment.is_active.is_(True))
    return list(db.execute(stmt).scalars())


def notifications_for(db, user_id, type_=None):
    stmt = select(Notification).where(Notification.user_id == user_id)
    if type_ is not None:
        stmt = stmt.where(Notification.type == type_.value)
    return list(db.execute(stmt).scalars())


# --------------------------------------------------------------------------- #
# Direct assignment
# --------------------------------------------------------------------------- #

def test_filling_a_room_then_overflowing(allocation, admin_actor, make_room, seed, db):
    room = make_room("A1", total_beds=2)
    s1, s2, s3 = seed.students

    first = assign(allocation, admin_actor, room, s1)
    assert first.room.available_beds == 1
    assert first.room.status == RoomStatus.OCCUPIED
    assert first.student.id == s1.id
    assert first.payment is not None

    second = assign(allocation, admin_actor, room, s2)
    assert second.room.available_beds == 0
    assert second.room.status == RoomStatus.RESERVED

    with pytest.raises(errors.CapacityExceededError):
        assign(allocation, admin_actor, room, s3)

    stored = load_room(db, room.id)
    assert stored.available_beds == 0
    assert active_assignments(db, s3.id) == []


def test_assign_into_maintenance_room_is_invalid_state(allocation, admin_actor, make_room, seed):
    room = make_room("A2", total_beds=2, maintenance=True)
    with pytest.raises(errors.InvalidStateError):
        assign(allocation, admin_actor, room, seed.students[0])


def test_assign_missing_room_or_student(allocation, admin_actor, make_room, seed):
    room = make_room("A3")
    with pytest.raises(errors.NotFoundError):
        allocation.assign_student(admin_actor, AssignStudentRequest(room_id=9999, student_id=seed.students[0].id))
    with pytest.raises(errors.NotFoundError):
        allocation.assign_student(admin_actor, AssignStudentRequest(room_id=room.id, student_id=9999))


def test_second_assignment_conflicts_without_force(allocation, admin_actor, make_room, seed, db):
    room_a = make_room("A4")
    room_b = make_room("A5")
    student = seed.students[0]
    assign(allocation, admin_actor, room_a, student)

    with pytest.raises(errors.ConflictError):
        assign(allocation, admin_actor, room_b, student)

    assert load_room(db, room_b.id).available_beds == 2


def test_force_checkout_moves_student(allocation, admin_actor, make_room, seed, db):
    room_a = make_room("A6")
    room_b = make_room("A7")
    student = seed.students[0]
    assign(allocation, admin_actor, room_a, student)

    moved = assign(allocation, admin_actor, room_b, student, force_checkout=True)

    assert moved.room_id == room_b.id
    assert [a.room_id for a in active_assignments(db, student.id)] == [room_b.id]
    assert load_room(db, room_a.id).available_beds == 2
    assert load_room(db, room_a.id).status == RoomStatus.AVAILABLE.value
    assert load_room(db, room_b.id).available_beds == 1


def test_failed_workflow_leaves_state_untouched(allocation, admin_actor, make_room, seed, db, monkeypatch):
    room_a = make_room("A8")
    room_b = make_room("A9")
    student = seed.students[0]
    original = assign(allocation, admin_actor, room_a, student)

    def explode(self, *args, **kwargs):
        raise RuntimeError("payment store unavailable")

    monkeypatch.setattr(PaymentLedger, "open_payment", explode)

    with pytest.raises(RuntimeError):
        assign(allocation, admin_actor, room_b, student, force_checkout=True)

    assert [a.id for a in active_assignments(db, student.id)] == [original.id]
    assert load_room(db, room_a.id).available_beds == 1
    assert load_room(db, room_b.id).available_beds == 2
    assert load_room(db, room_b.id).status == RoomStatus.AVAILABLE.value


def test_only_admins_assign(allocation, student_actors, make_room, seed):
    room = make_room("A10")
    with pytest.raises(PermissionDenied):
        assign(allocation, student_actors[0], room, seed.students[0])


# --------------------------------------------------------------------------- #
# Checkout and deletion
# --------------------------------------------------------------------------- #

def test_checkout_releases_bed_and_keeps_payment(allocation, admin_actor, make_room, seed, db):
    room = make_room("B1", total_beds=1)
    student = seed.students[0]
    assignment = assign(allocation, admin_actor, room, student, paid=True)

    closed = allocation.check_out_student(admin_actor, CheckOutRequest(student_id=student.id))

    assert closed.id == assignment.id
    assert closed.is_active is False
    assert closed.check_out_date is not None
    stored = load_room(db, room.id)
    assert stored.available_beds == 1
    assert stored.status == RoomStatus.AVAILABLE.value
    payment = db.get(Payment, assignment.payment.id)
    assert payment.amount_paid == Decimal("150.00")


def test_checkout_without_assignment_is_not_found(allocation, admin_actor, seed):
    with pytest.raises(errors.NotFoundError):
        allocation.check_out_student(admin_actor, CheckOutRequest(student_id=seed.students[0].id))


def test_delete_room_with_occupant_then_after_checkout(allocation, room_service, admin_actor, make_room, seed, db):
    room = make_room("B2", total_beds=2)
    room_id = room.id
    student = seed.students[0]
    assign(allocation, admin_actor, room, student)

    with pytest.raises(errors.ConflictError):
        room_service.delete_room(admin_actor, room_id)

    allocation.check_out_student(admin_actor, CheckOutRequest(student_id=student.id))
    room_service.delete_room(admin_actor, room_id)

    db.expire_all()
    assert db.get(Room, room_id) is None


# --------------------------------------------------------------------------- #
# Request pipeline
# --------------------------------------------------------------------------- #

def test_accept_moves_student_and_rejects_siblings(allocation, admin_actor, student_actors, make_room, seed, db):
    room_a = make_room("C1", total_beds=2)
    room_b = make_room("C2", total_beds=1)
    room_c = make_room("C3", total_beds=2)
    student, actor = seed.students[0], student_actors[0]
    old = assign(allocation, admin_actor, room_a, student)

    wanted = request_room(allocation, actor, room_b)
    other = request_room(allocation, actor, room_c)
    assert wanted.status == RoomRequestStatus.PENDING

    decision = allocation.accept_room_request(admin_actor, wanted.id)

    assert decision.request.status == RoomRequestStatus.ACCEPTED
    assert decision.released_assignment_id == old.id
    assert decision.rejected_request_ids == [other.id]
    assert decision.assignment.room_id == room_b.id
    assert decision.assignment.payment.amount_due == Decimal("150.00")

    assert [a.room_id for a in active_assignments(db, student.id)] == [room_b.id]
    assert load_room(db, room_a.id).available_beds == 2
    assert load_room(db, room_a.id).status == RoomStatus.AVAILABLE.value
    assert load_room(db, room_b.id).available_beds == 0
    assert load_room(db, room_b.id).status == RoomStatus.RESERVED.value
    assert db.get(RoomRequest, other.id).status == RoomRequestStatus.REJECTED.value

    accepted = notifications_for(db, seed.users[0].id, NotificationType.ROOM_REQUEST_ACCEPTED)
    assert len(accepted) == 1
    assert accepted[0].related_id == room_b.id


def test_accept_rechecks_capacity(allocation, admin_actor, student_actors, make_room, seed, db):
    room = make_room("C4", total_beds=1)
    first = request_room(allocation, student_actors[0], room)
    second = request_room(allocation, student_actors[1], room)

    allocation.accept_room_request(admin_actor, first.id)

    with pytest.raises(errors.CapacityExceededError):
        allocation.accept_room_request(admin_actor, second.id)

    db.expire_all()
    assert db.get(RoomRequest, second.id).status == RoomRequestStatus.PENDING.value
    assert active_assignments(db, seed.students[1].id) == []
    assert load_room(db, room.id).available_beds == 0


def test_accepting_twice_is_invalid_state(allocation, admin_actor, student_actors, make_room):
    room = make_room("C5")
    request = request_room(allocation, student_actors[0], room)
    allocation.accept_room_request(admin_actor, request.id)

    with pytest.raises(errors.InvalidStateError):
        allocation.accept_room_request(admin_actor, request.id)
    with pytest.raises(errors.InvalidStateError):
        allocation.reject_room_request(admin_actor, request.id)


def test_accept_missing_request_is_not_found(allocation, admin_actor, seed):
    with pytest.raises(errors.NotFoundError):
        allocation.accept_room_request(admin_actor, 31337)


def test_duplicate_pending_request_conflicts(allocation, student_actors, make_room, db):
    room = make_room("C6")
    request_room(allocation, student_actors[0], room)

    with pytest.raises(errors.ConflictError):
        request_room(allocation, student_actors[0], room)

    db.expire_all()
    count = db.execute(select(func.count(RoomRequest.id)).where(RoomRequest.room_id == room.id)).scalar_one()
    assert count == 1


def test_request_for_own_room_conflicts(allocation, admin_actor, student_actors, make_room, seed):
    room = make_room("C7")
    assign(allocation, admin_actor, room, seed.students[0])

    with pytest.raises(errors.ConflictError):
        request_room(allocation, student_actors[0], room)


def test_request_for_full_room_is_capacity_exceeded(allocation, admin_actor, student_actors, make_room, seed):
    room = make_room("C8", total_beds=1)
    assign(allocation, admin_actor, room, seed.students[1])

    with pytest.raises(errors.CapacityExceededError):
        request_room(allocation, student_actors[0], room)


def test_new_request_notifies_admins(allocation, student_actors, make_room, seed, db):
    room = make_room("C9")
    request_room(allocation, student_actors[0], room)

    db.expire_all()
    rows = notifications_for(db, seed.admin.id, NotificationType.ROOM_REQUEST)
    assert len(rows) == 1
    assert "C9" in rows[0].message
    assert rows[0].related_id == room.id


def test_reject_has_no_capacity_effect(allocation, admin_actor, student_actors, make_room, seed, db):
    room = make_room("C10")
    request = request_room(allocation, student_actors[0], room)

    rejected = allocation.reject_room_request(admin_actor, request.id)

    assert rejected.status == RoomRequestStatus.REJECTED
    assert load_room(db, room.id).available_beds == 2
    assert len(notifications_for(db, seed.users[0].id, NotificationType.ROOM_REQUEST_REJECTED)) == 1


def test_only_students_create_requests(allocation, admin_actor, make_room):
    room = make_room("C11")
    with pytest.raises(PermissionDenied):
        request_room(allocation, admin_actor, room)


def test_notification_failure_does_not_fail_accept(
    allocation, admin_actor, student_actors, make_room, seed, db, monkeypatch, caplog
):
    room = make_room("C12")
    request = request_room(allocation, student_actors[0], room)

    def broken(self, *args, **kwargs):
        raise RuntimeError("notification store down")

    monkeypatch.setattr(NotificationService, "notify", broken)

    with caplog.at_level(logging.ERROR, logger="dormhub.services.notification.notification_service"):
        decision = allocation.accept_room_request(admin_actor, request.id)

    assert decision.request.status == RoomRequestStatus.ACCEPTED
    assert [a.room_id for a in active_assignments(db, seed.students[0].id)] == [room.id]
    assert any("Failed to deliver" in record.getMessage() for record in caplog.records)
