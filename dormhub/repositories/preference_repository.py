"""
Preference repository.
"""

from typing import Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from dormhub.models.preference import Preference
from dormhub.repositories.base import BaseRepository


class PreferenceRepository(BaseRepository[Preference]):

    def __init__(self, db: Session):
        super().__init__(Preference, db)

    def get_by_user(self, user_id: int) -> Optional[Preference]:
        stmt = select(Preference).where(Preference.user_id == user_id)
        return self.db.execute(stmt).scalar_one_or_none()
