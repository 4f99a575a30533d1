"""
Notification engine for the project portal.

This module handles:
- Creating per-recipient notification records from domain events
- Evaluating email preferences (categories, digest mode, quiet hours)
- Sending immediate notification emails via Resend
- Sending the once-daily digest to users in daily digest mode
- Read/archive commands and feed queries for the notification bell
"""

from .preferences import merge_preferences, should_send_immediate_email
from .service import NotificationService, build_notification_service

__all__ = [
    "NotificationService",
    "build_notification_service",
    "merge_preferences",
    "should_send_immediate_email",
]
