"""
Account and student profile repositories.
"""

from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session, selectinload

from dormhub.models.preference import Preference
from dormhub.models.user import Student, User
from dormhub.repositories.base import BaseRepository
from dormhub.schemas.common.enums import UserRole


class UserRepository(BaseRepository[User]):

    def __init__(self, db: Session):
        super().__init__(User, db)

    def list_active_admin_ids(self) -> List[int]:
        stmt = (
            select(User.id)
            .where(User.role == UserRole.ADMIN.value, User.is_active.is_(True))
            .order_by(User.id)
        )
        return list(self.db.execute(stmt).scalars().all())

    def list_active_students_with_preferences(self) -> List[User]:
        """Active student accounts that have saved a preference row."""
        stmt = (
            select(User)
            .join(Preference, Preference.user_id == User.id)
            .where(User.role == UserRole.STUDENT.value, User.is_active.is_(True))
            .options(selectinload(User.preference))
            .order_by(User.id)
        )
        return list(self.db.execute(stmt).scalars().all())


class StudentRepository(BaseRepository[Student]):

    def __init__(self, db: Session):
        super().__init__(Student, db)

    def get_by_user_id(self, user_id: int) -> Optional[Student]:
        stmt = select(Student).where(Student.user_id == user_id)
        return self.db.execute(stmt).scalar_one_or_none()

    def search_by_name(self, term: str, limit: int = 5) -> List[Student]:
        """Case-insensitive substring match on the student name."""
        stmt = (
            select(Student)
            .where(Student.name.ilike(f"%{term}%"))
            .order_by(Student.name, Student.id)
            .limit(limit)
        )
        return list(self.db.execute(stmt).scalars().all())
