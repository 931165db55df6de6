from datetime import date
from unittest.mock import MagicMock

import pytest
from sqlalchemy import func, select
from sqlalchemy.dialects import postgresql

from dormhub.models import Room, RoomAssignment
from dormhub.repositories import (
    CheckInOutRepository,
    PaymentRepository,
    RoomAssignmentRepository,
    RoomRepository,
)
from dormhub.schemas.allocation import RoomRequestCreate
from dormhub.services.common import errors


def _compiled(call):
    """Run a repository call against a recording session and render its SQL for PostgreSQL."""
    db = MagicMock()
    call(db)
    stmt = db.execute.call_args.args[0]
    return str(stmt.compile(dialect=postgresql.dialect()))


class TestLockingStatements:

    def test_get_for_update_locks_the_row(self):
        sql = _compiled(lambda db: RoomRepository(db).get_for_update(7))
        assert "FOR UPDATE" in sql

    def test_lock_many_locks_in_id_order(self):
        sql = _compiled(lambda db: RoomRepository(db).lock_many([9, 3, 9]))
        assert "FOR UPDATE" in sql
        assert "ORDER BY rooms.id" in sql

    def test_lock_many_with_no_ids_issues_no_query(self):
        db = MagicMock()
        assert RoomRepository(db).lock_many([]) == []
        db.execute.assert_not_called()

    def test_active_assignment_lock_is_optional(self):
        locked = _compiled(lambda db: RoomAssignmentRepository(db).get_active_for_student(1, lock=True))
        plain = _compiled(lambda db: RoomAssignmentRepository(db).get_active_for_student(1))
        assert "FOR UPDATE" in locked
        assert "FOR UPDATE" not in plain

    def test_payment_by_assignment_is_locked(self):
        sql = _compiled(lambda db: PaymentRepository(db).get_by_assignment(1))
        assert "FOR UPDATE" in sql

    def test_open_check_in_lookup(self):
        locked = _compiled(lambda db: CheckInOutRepository(db).get_open(1, date(2026, 1, 5)))
        plain = _compiled(lambda db: CheckInOutRepository(db).get_open(1, date(2026, 1, 5), lock=False))
        assert "FOR UPDATE" in locked
        assert "FOR UPDATE" not in plain


def test_get_for_update_rereads_locked_row(session_factory, make_room):
    room_id = make_room("L1", total_beds=2).id
    reader = session_factory()
    writer = session_factory()
    try:
        repo = RoomRepository(reader)
        stale = repo.get(room_id)
        assert stale.available_beds == 2

        writer.get(Room, room_id).available_beds = 0
        writer.commit()

        locked = repo.get_for_update(room_id)
        assert locked is stale
        assert locked.available_beds == 0
    finally:
        reader.close()
        writer.close()


def test_two_accepts_for_last_bed(allocation, admin_actor, student_actors, make_room, db):
    room = make_room("L2", total_beds=1)
    room_id = room.id
    requests = [
        allocation.create_room_request(actor, RoomRequestCreate(room_id=room_id))
        for actor in student_actors[:2]
    ]

    outcomes = []
    for request in requests:
        try:
            allocation.accept_room_request(admin_actor, request.id)
            outcomes.append("accepted")
        except errors.CapacityExceededError:
            outcomes.append("full")

    assert outcomes == ["accepted", "full"]

    db.expire_all()
    active = db.execute(
        select(func.count(RoomAssignment.id)).where(
            RoomAssignment.room_id == room_id,
            RoomAssignment.is_active.is_(True),
        )
    ).scalar_one()
    assert active == 1
    assert db.get(Room, room_id).available_beds == 0


@pytest.mark.parametrize("total_beds", [2, 3])
def test_accepts_fill_room_exactly(allocation, admin_actor, student_actors, make_room, db, total_beds):
    room_id = make_room(f"L{total_beds}0", total_beds=total_beds).id
    requests = [
        allocation.create_room_request(actor, RoomRequestCreate(room_id=room_id))
        for actor in student_actors
    ]

    accepted = 0
    for request in requests:
        try:
            allocation.accept_room_request(admin_actor, request.id)
            accepted += 1
        except errors.CapacityExceededError:
            pass

    assert accepted == min(total_beds, len(requests))
    db.expire_all()
    assert db.get(Room, room_id).available_beds == total_beds - accepted
