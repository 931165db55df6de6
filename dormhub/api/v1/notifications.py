from typing import Annotated

from fastapi import APIRouter, Depends

from dormhub.dependencies import CurrentPrincipal, Pagination, get_notification_service
from dormhub.schemas.common.response import SuccessResponse
from dormhub.schemas.notification import MarkAllReadResponse, UnreadCountResponse
from dormhub.services.notification import NotificationService

router = APIRouter(prefix="/notifications", tags=["Notifications"])

NotificationServiceDep = Annotated[NotificationService, Depends(get_notification_service)]


@router.get("", summary="Own notifications, newest first")
def list_notifications(
    actor: CurrentPrincipal,
    service: NotificationServiceDep,
    pagination: Pagination,
    unread_only: bool = False,
) -> SuccessResponse:
    return SuccessResponse.create(data=service.list_notifications(actor, pagination, unread_only=unread_only))


@router.get("/unread-count", summary="Number of unread notifications")
def unread_count(actor: CurrentPrincipal, service: NotificationServiceDep) -> SuccessResponse:
    return SuccessResponse.create(data=UnreadCountResponse(unread_count=service.unread_count(actor)))


@router.put("/read-all", summary="Mark every notification read")
def mark_all_read(actor: CurrentPrincipal, service: NotificationServiceDep) -> SuccessResponse:
    updated = service.mark_all_as_read(actor)
    return SuccessResponse.create("All notifications marked as read", MarkAllReadResponse(updated=updated))


@router.put("/{notification_id}/read", summary="Mark one notification read")
def mark_read(notification_id: int, actor: CurrentPrincipal, service: NotificationServiceDep) -> SuccessResponse:
    notification = service.mark_as_read(actor, notification_id)
    return SuccessResponse.create("Notification marked as read", notification)


@router.delete("/{notification_id}", summary="Delete one notification")
def delete_notification(notification_id: int, actor: CurrentPrincipal, service: NotificationServiceDep) -> SuccessResponse:
    service.delete_notification(actor, notification_id)
    return SuccessResponse.create("Notification deleted successfully")
