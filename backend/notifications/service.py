"""
Entry points of the notification engine.

NotificationService is constructed once at process start with its
collaborators (store, user directory, email sender, clock) and is what domain
producers and the UI layer call. The immediate dispatcher and the daily digest
share nothing but these collaborators.
"""

from typing import Any

from models.notification import Notification, NotificationCreate
from models.types import NotificationID, UserID
from notifications import commands
from notifications.dispatcher import DispatchOutcome, dispatch_immediate_email
from notifications.email_sender import EmailSender, ResendEmailSender
from notifications.error_logger import log_notification_error
from notifications.process_daily_digest import process_daily_digests
from notifications.store import NotificationStore
from notifications.unsubscribe_tokens import unsubscribe
from notifications.user_directory import UserDirectory
from shared.clock import Clock
from shared.db import get_supabase_client


class NotificationService:
    """Creates notifications, triggers their delivery, and serves the bell UI."""

    def __init__(
        self,
        store: NotificationStore,
        directory: UserDirectory,
        sender: EmailSender,
        clock: Clock | None = None,
    ) -> None:
        self.store = store
        self.directory = directory
        self.sender = sender
        self.clock = clock or Clock()

    # ---- creation (domain producers) ----

    def create_notification(self, data: NotificationCreate | dict[str, Any]) -> NotificationID:
        """
        Store a notification for one recipient and dispatch its email.

        Only a failure to store the record is raised to the caller; delivery
        problems are logged and never fail the originating request.
        """
        if not isinstance(data, NotificationCreate):
            data = NotificationCreate.model_validate(data)

        try:
            notification = self.store.create(data, self.clock.now())
        except Exception as e:
            log_notification_error(
                error_type="creation",
                error_message=str(e),
                context={"recipient_id": data.recipient_id, "action": data.action.value},
                exc=e,
            )
            raise

        self._dispatch(notification)
        return notification.id

    def create_bulk_notifications(
        self, recipient_ids: list[UserID], data: dict[str, Any]
    ) -> list[NotificationID]:
        """
        Fan one event out to several recipients: one record each, one dispatch each.

        Args:
            recipient_ids: Recipients; duplicates and empty ids are dropped
            data: NotificationCreate fields except recipient_id

        Returns:
            Ids of the created notifications
        """
        unique_ids = list(dict.fromkeys(rid for rid in recipient_ids if rid))
        if not unique_ids:
            return []

        items = [
            NotificationCreate.model_validate({**data, "recipient_id": recipient_id})
            for recipient_id in unique_ids
        ]

        try:
            notifications = self.store.create_many(items, self.clock.now())
        except Exception as e:
            log_notification_error(
                error_type="creation",
                error_message=str(e),
                context={"recipient_ids": unique_ids, "action": items[0].action.value},
                exc=e,
            )
            raise

        for notification in notifications:
            self._dispatch(notification)
        return [n.id for n in notifications]

    def _dispatch(self, notification: Notification) -> DispatchOutcome:
        return dispatch_immediate_email(
            notification,
            directory=self.directory,
            store=self.store,
            sender=self.sender,
            clock=self.clock,
        )

    def resend_notification(self, notification_id: NotificationID) -> DispatchOutcome | None:
        """Retry immediate delivery of a notification not yet emailed. None if unknown."""
        notification = self.store.get(notification_id)
        if notification is None:
            return None
        return self._dispatch(notification)

    # ---- daily digest (scheduler) ----

    def run_daily_digest(self, *, dry_run: bool = False, **kwargs: Any) -> dict[str, int]:
        return process_daily_digests(
            directory=self.directory,
            store=self.store,
            sender=self.sender,
            clock=self.clock,
            dry_run=dry_run,
            **kwargs,
        )

    # ---- UI commands and queries ----

    def mark_notification_read(self, notification_id: NotificationID) -> bool:
        return commands.mark_notification_read(self.store, self.clock, notification_id)

    def mark_all_notifications_read(self, recipient_id: UserID) -> int:
        return commands.mark_all_notifications_read(self.store, self.clock, recipient_id)

    def archive_notification(self, notification_id: NotificationID) -> bool:
        return commands.archive_notification(self.store, notification_id)

    def archive_all_notifications(self, recipient_id: UserID) -> int:
        return commands.archive_all_notifications(self.store, recipient_id)

    def list_notifications(
        self, recipient_id: UserID, *, unread_only: bool = False
    ) -> list[Notification]:
        return commands.list_notifications(self.store, recipient_id, unread_only=unread_only)

    def count_unread(self, recipient_id: UserID) -> int:
        return commands.count_unread(self.store, recipient_id)

    def get_notification_feed(
        self, recipient_id: UserID, *, unread_only: bool = False
    ) -> dict[str, Any]:
        return commands.get_notification_feed(self.store, recipient_id, unread_only=unread_only)

    def unsubscribe(self, token: str) -> bool:
        return unsubscribe(token, self.directory)


def build_notification_service() -> NotificationService:
    """
    Wire the production service from environment configuration.

    Raises:
        ValueError: If Supabase or Resend credentials are missing
    """
    client = get_supabase_client()
    return NotificationService(
        store=NotificationStore(client),
        directory=UserDirectory(client),
        sender=ResendEmailSender(),
    )
