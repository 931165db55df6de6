"""
Base repository with standardized query and persistence helpers.

Repositories never flush or commit on their own; the surrounding
UnitOfWork owns the transaction boundary.
"""

from typing import Any, Generic, List, Optional, Sequence, Tuple, Type, TypeVar

from sqlalchemy import Select, func, select
from sqlalchemy.orm import Session

from dormhub.models.base import BaseModel

# Type variable for model classes
ModelType = TypeVar("ModelType", bound=BaseModel)


class BaseRepository(Generic[ModelType]):
    """
    Generic repository over a single model class.

    Provides lookup, creation, deletion and pagination for
    all domain repositories.
    """

    def __init__(self, model: Type[ModelType], db: Session):
        """
        Initialize repository.

        Args:
            model: SQLAlchemy model class
            db: Database session
        """
        self.model = model
        self.db = db

    # ==================== Read Operations ====================

    def get(self, entity_id: int) -> Optional[ModelType]:
        """Fetch an entity by primary key."""
        return self.db.get(self.model, entity_id)

    def get_for_update(self, entity_id: int) -> Optional[ModelType]:
        """
        Fetch an entity by primary key holding a row lock until the
        transaction ends.

        The row is re-read so attributes reflect the locked state.
        """
        stmt = (
            select(self.model)
            .where(self.model.id == entity_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        return self.db.execute(stmt).scalar_one_or_none()

    def existing_ids(self, ids: Sequence[int]) -> List[int]:
        """Return the subset of ``ids`` that exist."""
        if not ids:
            return []
        stmt = select(self.model.id).where(self.model.id.in_(set(ids)))
        return list(self.db.execute(stmt).scalars().all())

    # ==================== Write Operations ====================

    def create(self, entity: ModelType) -> ModelType:
        """Add an entity to the session; ids are assigned on the next flush."""
        self.db.add(entity)
        return entity

    def delete(self, entity: ModelType) -> None:
        self.db.delete(entity)

    # ==================== Pagination ====================

    def paginate(
        self,
        stmt: Select,
        page: int = 1,
        page_size: int = 20,
    ) -> Tuple[List[Any], int]:
        """
        Execute ``stmt`` for one page.

        Returns:
            Tuple of (items on the page, total matching rows)
        """
        count_stmt = select(func.count()).select_from(stmt.order_by(None).subquery())
        total = int(self.db.execute(count_stmt).scalar_one())

        offset = (page - 1) * page_size
        items = list(self.db.execute(stmt.offset(offset).limit(page_size)).scalars().all())
        return items, total
