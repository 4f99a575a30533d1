"""
Immediate (per-notification) email dispatch.

Runs once for every notification record right after it is stored. Sends at
most one email and mutates at most one record: the notification that
triggered it. Nothing raised here reaches the producer that created the
notification; failures are reported as a DispatchOutcome and logged.
"""

from enum import Enum

from models.notification import Notification
from notifications.email_sender import EmailSender, build_unsubscribe_headers
from notifications.email_templates import build_notification_email
from notifications.error_logger import log_notification_error
from notifications.preferences import evaluate_immediate_eligibility
from notifications.store import NotificationStore
from notifications.unsubscribe_tokens import build_optional_unsubscribe_url
from notifications.user_directory import UserDirectory
from shared.clock import Clock


class DispatchOutcome(str, Enum):
    SENT = "sent"
    ALREADY_SENT = "already_sent"
    RECIPIENT_NOT_FOUND = "recipient_not_found"
    NO_EMAIL_ADDRESS = "no_email_address"
    SUPPRESSED = "suppressed"
    SEND_FAILED = "send_failed"
    ERROR = "error"


def dispatch_immediate_email(
    notification: Notification,
    *,
    directory: UserDirectory,
    store: NotificationStore,
    sender: EmailSender,
    clock: Clock,
) -> DispatchOutcome:
    """
    Email a notification to its recipient if their preferences allow it now.

    The record is marked emailed only after a confirmed send. When the email
    is suppressed or the send fails, the flag stays False so the daily digest
    (or a manual resend) can still deliver it.

    Args:
        notification: The stored notification that triggered this dispatch
        directory: Recipient profile lookups
        store: Used only to mark this notification emailed
        sender: Email transport
        clock: Time source for quiet-hours evaluation

    Returns:
        What happened, for logging and tests
    """
    try:
        return _dispatch(notification, directory, store, sender, clock)
    except Exception as e:
        error_file = log_notification_error(
            error_type="dispatch",
            error_message=str(e),
            context={
                "notification_id": notification.id,
                "recipient_id": notification.recipient_id,
            },
            exc=e,
        )
        print(
            f"  ✗ Unexpected error dispatching notification {notification.id}. "
            f"Details logged to: {error_file}"
        )
        return DispatchOutcome.ERROR


def _dispatch(
    notification: Notification,
    directory: UserDirectory,
    store: NotificationStore,
    sender: EmailSender,
    clock: Clock,
) -> DispatchOutcome:
    if notification.is_email_sent:
        return DispatchOutcome.ALREADY_SENT

    recipient = directory.get(notification.recipient_id)
    if recipient is None:
        print(f"  ⚠️  Recipient {notification.recipient_id} not found, skipping email")
        return DispatchOutcome.RECIPIENT_NOT_FOUND

    if not recipient.email:
        return DispatchOutcome.NO_EMAIL_ADDRESS

    verdict = evaluate_immediate_eligibility(
        notification, recipient.email_notification_preferences, clock.now()
    )
    if not verdict.eligible:
        print(
            f"  ⊘ Email for notification {notification.id} suppressed ({verdict.reason})"
        )
        return DispatchOutcome.SUPPRESSED

    unsubscribe_url = build_optional_unsubscribe_url(recipient.id)
    email = build_notification_email(notification, recipient.name, unsubscribe_url)
    result = sender.send(
        recipient.email,
        email["subject"],
        email["html"],
        text=email["text"],
        headers=build_unsubscribe_headers(unsubscribe_url),
    )

    if not result.get("success"):
        error_msg = str(result.get("error", "Unknown error"))
        error_file = log_notification_error(
            error_type="dispatch",
            error_message=error_msg,
            context={
                "notification_id": notification.id,
                "recipient_id": recipient.id,
                "category": notification.category.value,
            },
        )
        print(
            f"  ✗ Failed to email notification {notification.id}: {error_msg} "
            f"(details: {error_file})"
        )
        return DispatchOutcome.SEND_FAILED

    store.mark_email_sent(notification.id)
    print(f"  ✓ Emailed notification {notification.id} to user {recipient.id}")
    return DispatchOutcome.SENT
