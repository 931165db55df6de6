# dormhub/services/notification/notification_service.py
"""
In-app notifications.

Workflows call ``send``/``send_to_admins`` after their own transaction has
committed. Delivery runs in a separate unit of work and failures are
logged, never raised, so a notification problem cannot undo a workflow.
"""
from __future__ import annotations

import logging
from typing import Callable, Iterable, List, Optional

from sqlalchemy.orm import Session

from dormhub.models.notification import Notification
from dormhub.repositories import NotificationRepository, UserRepository
from dormhub.schemas.common.enums import NotificationType, RelatedEntityType
from dormhub.schemas.common.pagination import PaginatedResponse, PaginationParams
from dormhub.schemas.notification import NotificationResponse
from dormhub.services.common import UnitOfWork, errors
from dormhub.services.common.pagination import paginate
from dormhub.services.common.permissions import Principal

logger = logging.getLogger(__name__)


class NotificationService:
    """Notification sink plus the per-user inbox."""

    def __init__(self, session_factory: Callable[[], Session]) -> None:
        self._session_factory = session_factory

    # ------------------------------------------------------------------ #
    # Sink
    # ------------------------------------------------------------------ #

    def notify(
        self,
        user_ids: Iterable[int],
        type: NotificationType,
        title: str,
        message: str,
        related_id: Optional[int] = None,
        related_type: Optional[RelatedEntityType] = None,
    ) -> List[int]:
        """Persist one notification per recipient; returns the new ids."""
        recipients = list(dict.fromkeys(user_ids))
        if not recipients:
            return []

        with UnitOfWork(self._session_factory) as uow:
            repo = uow.get_repo(NotificationRepository)
            rows = [
                repo.create(
                    Notification(
                        user_id=user_id,
                        type=type.value,
                        title=title,
                        message=message,
                        is_read=False,
                        related_id=related_id,
                        related_type=related_type.value if related_type else None,
                    )
                )
                for user_id in recipients
            ]
            uow.flush()
            return [row.id for row in rows]

    def send(
        self,
        user_id: Optional[int],
        type: NotificationType,
        title: str,
        message: str,
        related_id: Optional[int] = None,
        related_type: Optional[RelatedEntityType] = None,
    ) -> None:
        """Fire-and-forget delivery to a single user."""
        if user_id is None:
            logger.debug("Skipping %s notification: recipient has no account", type.value)
            return
        self._dispatch([user_id], type, title, message, related_id, related_type)

    def send_to_admins(
        self,
        type: NotificationType,
        title: str,
        message: str,
        related_id: Optional[int] = None,
        related_type: Optional[RelatedEntityType] = None,
    ) -> None:
        """Fire-and-forget delivery to every active admin."""
        try:
            with UnitOfWork(self._session_factory) as uow:
                admin_ids = uow.get_repo(UserRepository).list_active_admin_ids()
        except Exception:
            logger.exception("Could not resolve admin recipients for %s notification", type.value)
            return
        self._dispatch(admin_ids, type, title, message, related_id, related_type)

    def send_many(
        self,
        user_ids: Iterable[int],
        type: NotificationType,
        title: str,
        message: str,
        related_id: Optional[int] = None,
        related_type: Optional[RelatedEntityType] = None,
    ) -> None:
        self._dispatch(list(user_ids), type, title, message, related_id, related_type)

    def _dispatch(self, user_ids, type, title, message, related_id, related_type) -> None:
        try:
            self.notify(user_ids, type, title, message, related_id, related_type)
        except Exception:
            logger.exception(
                "Failed to deliver %s notification to %d recipient(s)",
                type.value, len(user_ids),
            )

    # ------------------------------------------------------------------ #
    # Inbox
    # ------------------------------------------------------------------ #

    def list_notifications(
        self,
        actor: Principal,
        params: PaginationParams,
        unread_only: bool = False,
    ) -> PaginatedResponse[NotificationResponse]:
        with UnitOfWork(self._session_factory) as uow:
            repo = uow.get_repo(NotificationRepository)
            items, total = repo.paginate(
                repo.for_user_stmt(actor.user_id, unread_only=unread_only),
                page=params.page,
                page_size=params.page_size,
            )
            return paginate(
                items=items,
                total_items=total,
                params=params,
                mapper=NotificationResponse.model_validate,
            )

    def unread_count(self, actor: Principal) -> int:
        with UnitOfWork(self._session_factory) as uow:
            return uow.get_repo(NotificationRepository).count_unread(actor.user_id)

    def mark_as_read(self, actor: Principal, notification_id: int) -> NotificationResponse:
        with UnitOfWork(self._session_factory) as uow:
            repo = uow.get_repo(NotificationRepository)
            notification = repo.get(notification_id)
            # Other users' notifications are reported as missing
            if notification is None or notification.user_id != actor.user_id:
                raise errors.NotFoundError("Notification", notification_id)
            notification.is_read = True
            uow.flush()
            return NotificationResponse.model_validate(notification)

    def delete_notification(self, actor: Principal, notification_id: int) -> None:
        with UnitOfWork(self._session_factory) as uow:
            repo = uow.get_repo(NotificationRepository)
            notification = repo.get(notification_id)
            if notification is None or notification.user_id != actor.user_id:
                raise errors.NotFoundError("Notification", notification_id)
            repo.delete(notification)
            uow.flush()

    def mark_all_as_read(self, actor: Principal) -> int:
        with UnitOfWork(self._session_factory) as uow:
            return uow.get_repo(NotificationRepository).mark_all_read(actor.user_id)
