"""
Read-only catalog repositories (buildings, colleges, services).
"""

from typing import List, Sequence

from sqlalchemy import select
from sqlalchemy.orm import Session

from dormhub.models.catalog import Building, College, Service
from dormhub.repositories.base import BaseRepository


class BuildingRepository(BaseRepository[Building]):

    def __init__(self, db: Session):
        super().__init__(Building, db)


class CollegeRepository(BaseRepository[College]):

    def __init__(self, db: Session):
        super().__init__(College, db)


class ServiceRepository(BaseRepository[Service]):

    def __init__(self, db: Session):
        super().__init__(Service, db)

    def get_many(self, ids: Sequence[int]) -> List[Service]:
        if not ids:
            return []
        stmt = select(Service).where(Service.id.in_(set(ids))).order_by(Service.id)
        return list(self.db.execute(stmt).scalars().all())
