"""Pydantic models for data validation and type checking."""

from models.notification import (
    DEFAULT_EMAIL_PREFERENCES,
    DigestMode,
    EmailNotificationPreferences,
    Notification,
    NotificationAction,
    NotificationCategory,
    NotificationCreate,
    NotificationLink,
    NotificationPriority,
    QuietHours,
    UserProfile,
)

__all__ = [
    "DEFAULT_EMAIL_PREFERENCES",
    "DigestMode",
    "EmailNotificationPreferences",
    "Notification",
    "NotificationAction",
    "NotificationCategory",
    "NotificationCreate",
    "NotificationLink",
    "NotificationPriority",
    "QuietHours",
    "UserProfile",
]
