import pytest

from dormhub.models import Room
from dormhub.repositories import RoomRepository
from dormhub.services.common import UnitOfWork, errors


def new_room(number):
    return Room(
        room_number=number,
        room_type="shared",
        total_beds=2,
        available_beds=2,
        status="available",
        is_under_maintenance=False,
        images=[],
    )


def test_commits_on_clean_exit(session_factory, db):
    with UnitOfWork(session_factory) as uow:
        uow.get_repo(RoomRepository).create(new_room("U1"))

    assert db.query(Room).filter_by(room_number="U1").count() == 1


def test_rolls_back_when_block_raises(session_factory, db):
    with pytest.raises(RuntimeError):
        with UnitOfWork(session_factory) as uow:
            uow.get_repo(RoomRepository).create(new_room("U2"))
            uow.flush()
            raise RuntimeError("boom")

    assert db.query(Room).filter_by(room_number="U2").count() == 0


def test_constraint_violation_becomes_conflict(session_factory, db):
    with UnitOfWork(session_factory) as uow:
        uow.get_repo(RoomRepository).create(new_room("U3"))

    with pytest.raises(errors.ConflictError):
        with UnitOfWork(session_factory) as uow:
            uow.get_repo(RoomRepository).create(new_room("U3"))
            uow.flush()


def test_repositories_are_cached_per_unit(session_factory):
    with UnitOfWork(session_factory) as uow:
        assert uow.get_repo(RoomRepository) is uow.get_repo(RoomRepository)

    with pytest.raises(RuntimeError):
        uow.get_repo(RoomRepository)


def test_explicit_rollback_skips_commit(session_factory, db):
    with UnitOfWork(session_factory) as uow:
        uow.get_repo(RoomRepository).create(new_room("U4"))
        uow.rollback()

    assert db.query(Room).filter_by(room_number="U4").count() == 0
