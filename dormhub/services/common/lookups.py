# dormhub/services/common/lookups.py
"""
Entity lookups shared by several services.
"""
from __future__ import annotations

from dormhub.models.user import Student
from dormhub.repositories import StudentRepository

from .errors import NotFoundError
from .permissions import Principal
from .unit_of_work import UnitOfWork


def get_student(uow: UnitOfWork, student_id: int) -> Student:
    student = uow.get_repo(StudentRepository).get(student_id)
    if student is None:
        raise NotFoundError("Student", student_id)
    return student


def get_acting_student(uow: UnitOfWork, actor: Principal) -> Student:
    """Student profile owned by the acting user account."""
    student = uow.get_repo(StudentRepository).get_by_user_id(actor.user_id)
    if student is None:
        raise NotFoundError(
            "Student",
            actor.user_id,
            message="No student profile is linked to this account",
        )
    return student
