"""External service integrations for Renfort."""

from .notification_service import (
    CriticalMissionAlert,
    MailMessage,
    NotificationService,
    get_notification_service,
)

__all__ = [
    "CriticalMissionAlert",
    "MailMessage",
    "NotificationService",
    "get_notification_service",
]
