"""
Notification creators called by the portal's domain modules.

Each helper turns one domain event into a notification-creation request for
its recipients and hands it to the NotificationService. The person who caused
the event is never notified about it.
"""

from typing import TYPE_CHECKING, Any, Iterable, NamedTuple

from models.notification import NotificationAction, NotificationCategory
from models.types import NotificationID, UserID
from shared.utils import format_date, truncate

if TYPE_CHECKING:
    from notifications.service import NotificationService

MESSAGE_PREVIEW_LENGTH = 100
UPDATE_PREVIEW_LENGTH = 80


class Actor(NamedTuple):
    """The user who caused an event."""

    id: UserID
    name: str


def _recipients(candidates: Iterable[UserID | None], actor: Actor) -> list[UserID]:
    return list(dict.fromkeys(uid for uid in candidates if uid and uid != actor.id))


def _from(actor: Actor) -> dict[str, Any]:
    return {"sender_id": actor.id, "sender_name": actor.name}


def notify_project_created(
    service: "NotificationService",
    *,
    project_id: str,
    project_title: str,
    member_ids: list[UserID],
    creator: Actor,
) -> list[NotificationID]:
    """Tell the project's clients and contractors they were assigned."""
    return service.create_bulk_notifications(
        _recipients(member_ids, creator),
        {
            **_from(creator),
            "title": "New Project Assigned",
            "message": f'You\'ve been assigned to "{project_title}"',
            "category": NotificationCategory.PROJECT,
            "action": NotificationAction.PROJECT_CREATED,
            "priority": "normal",
            "link": {"view": "project-details", "entity_id": project_id},
        },
    )


def notify_project_status_changed(
    service: "NotificationService",
    *,
    project_id: str,
    project_title: str,
    new_status: str,
    member_ids: list[UserID],
    admin_ids: list[UserID],
    changed_by: Actor,
) -> list[NotificationID]:
    """Members and admins hear about status changes; completion is high priority."""
    return service.create_bulk_notifications(
        _recipients([*member_ids, *admin_ids], changed_by),
        {
            **_from(changed_by),
            "title": "Project Status Updated",
            "message": f'"{project_title}" status changed to {new_status}',
            "category": NotificationCategory.PROJECT,
            "action": NotificationAction.PROJECT_STATUS_CHANGED,
            "priority": "high" if new_status == "Completed" else "normal",
            "link": {"view": "project-details", "entity_id": project_id},
        },
    )


def notify_project_update(
    service: "NotificationService",
    *,
    project_id: str,
    project_title: str,
    update_content: str,
    member_ids: list[UserID],
    admin_ids: list[UserID],
    author: Actor,
) -> list[NotificationID]:
    return service.create_bulk_notifications(
        _recipients([*member_ids, *admin_ids], author),
        {
            **_from(author),
            "title": f'Update on "{project_title}"',
            "message": truncate(update_content, UPDATE_PREVIEW_LENGTH),
            "category": NotificationCategory.PROJECT,
            "action": NotificationAction.PROJECT_UPDATE_ADDED,
            "priority": "low",
            "link": {"view": "project-details", "entity_id": project_id},
        },
    )


def notify_message_received(
    service: "NotificationService",
    *,
    recipient_id: UserID,
    message_content: str,
    sender: Actor,
    project_id: str | None = None,
) -> NotificationID:
    return service.create_notification(
        {
            **_from(sender),
            "recipient_id": recipient_id,
            "title": f"New message from {sender.name}",
            "message": truncate(message_content, MESSAGE_PREVIEW_LENGTH),
            "category": NotificationCategory.MESSAGE,
            "action": NotificationAction.MESSAGE_RECEIVED,
            "priority": "normal",
            "link": {"view": "messages", "entity_id": sender.id, "secondary_id": project_id},
        }
    )


def notify_mention(
    service: "NotificationService",
    *,
    mentioned_user_id: UserID,
    message_content: str,
    sender: Actor,
    project_id: str | None = None,
) -> NotificationID:
    return service.create_notification(
        {
            **_from(sender),
            "recipient_id": mentioned_user_id,
            "title": f"{sender.name} mentioned you",
            "message": truncate(message_content, MESSAGE_PREVIEW_LENGTH),
            "category": NotificationCategory.MESSAGE,
            "action": NotificationAction.MESSAGE_MENTION,
            "priority": "high",
            "link": {"view": "messages", "entity_id": sender.id, "secondary_id": project_id},
        }
    )


def notify_invoice_sent(
    service: "NotificationService",
    *,
    invoice_id: str,
    invoice_number: str,
    amount: str,
    client_id: UserID,
    sender: Actor,
) -> NotificationID:
    return service.create_notification(
        {
            **_from(sender),
            "recipient_id": client_id,
            "title": "New Invoice Received",
            "message": f"Invoice {invoice_number} for {amount} has been sent to you",
            "category": NotificationCategory.INVOICE,
            "action": NotificationAction.INVOICE_SENT,
            "priority": "high",
            "link": {"view": "invoices", "entity_id": invoice_id},
        }
    )


def notify_invoice_paid(
    service: "NotificationService",
    *,
    invoice_id: str,
    invoice_number: str,
    amount: str,
    creator_id: UserID,
    payer_name: str,
) -> NotificationID:
    """Payments can come from outside the portal, so only the payer's name is known."""
    return service.create_notification(
        {
            "recipient_id": creator_id,
            "sender_name": payer_name,
            "title": "Invoice Paid",
            "message": f"Invoice {invoice_number} ({amount}) has been paid",
            "category": NotificationCategory.INVOICE,
            "action": NotificationAction.INVOICE_PAID,
            "priority": "high",
            "link": {"view": "invoices", "entity_id": invoice_id},
        }
    )


def notify_milestone_completed(
    service: "NotificationService",
    *,
    project_id: str,
    project_title: str,
    milestone_title: str,
    member_ids: list[UserID],
    completed_by: Actor,
) -> list[NotificationID]:
    return service.create_bulk_notifications(
        _recipients(member_ids, completed_by),
        {
            **_from(completed_by),
            "title": "Milestone Completed",
            "message": f'"{milestone_title}" on "{project_title}" has been completed',
            "category": NotificationCategory.MILESTONE,
            "action": NotificationAction.MILESTONE_COMPLETED,
            "priority": "normal",
            "link": {"view": "project-details", "entity_id": project_id},
        },
    )


def notify_document_uploaded(
    service: "NotificationService",
    *,
    project_id: str,
    project_title: str,
    document_title: str,
    recipient_ids: list[UserID],
    uploader: Actor,
) -> list[NotificationID]:
    return service.create_bulk_notifications(
        _recipients(recipient_ids, uploader),
        {
            **_from(uploader),
            "title": "New Document Uploaded",
            "message": f'"{document_title}" uploaded to "{project_title}"',
            "category": NotificationCategory.DOCUMENT,
            "action": NotificationAction.DOCUMENT_UPLOADED,
            "priority": "low",
            "link": {"view": "documents", "entity_id": project_id},
        },
    )


def notify_event_created(
    service: "NotificationService",
    *,
    event_title: str,
    event_date: str,
    recipient_ids: list[UserID],
    creator: Actor,
) -> list[NotificationID]:
    return service.create_bulk_notifications(
        _recipients(recipient_ids, creator),
        {
            **_from(creator),
            "title": "New Calendar Event",
            "message": f'"{event_title}" scheduled for {format_date(event_date, default=event_date)}',
            "category": NotificationCategory.CALENDAR,
            "action": NotificationAction.EVENT_CREATED,
            "priority": "normal",
            "link": {"view": "calendar"},
        },
    )
