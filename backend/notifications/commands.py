"""
Read/archive commands and feed queries used by the notification bell UI.

Commands are idempotent: repeating one changes nothing. Archiving is a soft
state; it neither marks a notification read nor deletes it.
"""

from typing import Any

from config.notification_settings import FEED_PAGE_SIZE
from models.notification import Notification
from models.types import NotificationID, UserID
from notifications.store import NotificationStore
from shared.clock import Clock


def mark_notification_read(
    store: NotificationStore, clock: Clock, notification_id: NotificationID
) -> bool:
    """
    Mark one notification read, stamping read_at on the first read only.

    Returns:
        True if the notification changed (False if already read or unknown)
    """
    updated = store.batch_update(
        [notification_id],
        {"is_read": True, "read_at": clock.now()},
        only_where={"is_read": False},
    )
    return updated > 0


def mark_all_notifications_read(
    store: NotificationStore, clock: Clock, recipient_id: UserID
) -> int:
    """Mark every unread notification of a recipient read in one update. Returns the count."""
    return store.update_by_recipient(
        recipient_id,
        {"is_read": True, "read_at": clock.now()},
        only_where={"is_read": False},
    )


def archive_notification(store: NotificationStore, notification_id: NotificationID) -> bool:
    updated = store.batch_update(
        [notification_id], {"is_archived": True}, only_where={"is_archived": False}
    )
    return updated > 0


def archive_all_notifications(store: NotificationStore, recipient_id: UserID) -> int:
    """Archive every unarchived notification of a recipient in one update. Returns the count."""
    return store.update_by_recipient(
        recipient_id, {"is_archived": True}, only_where={"is_archived": False}
    )


def list_notifications(
    store: NotificationStore,
    recipient_id: UserID,
    *,
    unread_only: bool = False,
    limit: int = FEED_PAGE_SIZE,
) -> list[Notification]:
    """Most recent unarchived notifications for a recipient, newest first."""
    return store.query_by_recipient(
        recipient_id,
        is_archived=False,
        is_read=False if unread_only else None,
        descending=True,
        limit=limit,
    )


def count_unread(store: NotificationStore, recipient_id: UserID) -> int:
    return store.count_by_recipient(recipient_id, is_read=False, is_archived=False)


def get_notification_feed(
    store: NotificationStore, recipient_id: UserID, *, unread_only: bool = False
) -> dict[str, Any]:
    """Snapshot for the bell dropdown: the notification list plus the unread badge count."""
    return {
        "notifications": list_notifications(store, recipient_id, unread_only=unread_only),
        "unread_count": count_unread(store, recipient_id),
    }
