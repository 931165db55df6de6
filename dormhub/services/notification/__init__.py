from dormhub.services.notification.notification_service import NotificationService

__all__ = ["NotificationService"]
