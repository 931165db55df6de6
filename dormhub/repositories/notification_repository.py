"""
Notification repository.
"""

from sqlalchemy import Select, func, select, update
from sqlalchemy.orm import Session

from dormhub.models.notification import Notification
from dormhub.repositories.base import BaseRepository


class NotificationRepository(BaseRepository[Notification]):

    def __init__(self, db: Session):
        super().__init__(Notification, db)

    def for_user_stmt(self, user_id: int, *, unread_only: bool = False) -> Select:
        stmt = select(Notification).where(Notification.user_id == user_id)
        if unread_only:
            stmt = stmt.where(Notification.is_read.is_(False))
        return stmt.order_by(Notification.created_at.desc(), Notification.id.desc())

    def count_unread(self, user_id: int) -> int:
        stmt = select(func.count(Notification.id)).where(
            Notification.user_id == user_id,
            Notification.is_read.is_(False),
        )
        return int(self.db.execute(stmt).scalar_one())

    def mark_all_read(self, user_id: int) -> int:
        stmt = (
            update(Notification)
            .where(Notification.user_id == user_id, Notification.is_read.is_(False))
            .values(is_read=True)
            .execution_options(synchronize_session="fetch")
        )
        return self.db.execute(stmt).rowcount or 0
