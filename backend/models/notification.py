"""Pydantic models for the notification system."""

from datetime import datetime
from enum import Enum
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from models.types import Hour, NotificationID, TimezoneName, UserID


class NotificationCategory(str, Enum):
    """Coarse classification used for per-user email opt-in/opt-out."""

    PROJECT = "project"
    MESSAGE = "message"
    INVOICE = "invoice"
    MILESTONE = "milestone"
    DOCUMENT = "document"
    CALENDAR = "calendar"
    SYSTEM = "system"


class NotificationAction(str, Enum):
    """Fine-grained event tag. Drives UI iconography only."""

    # Project actions
    PROJECT_CREATED = "project_created"
    PROJECT_STATUS_CHANGED = "project_status_changed"
    PROJECT_UPDATE_ADDED = "project_update_added"
    PROJECT_ASSIGNED = "project_assigned"
    PROJECT_APPROVED = "project_approved"
    PROJECT_REJECTED = "project_rejected"

    # Message actions
    MESSAGE_RECEIVED = "message_received"
    MESSAGE_MENTION = "message_mention"

    # Invoice actions
    INVOICE_CREATED = "invoice_created"
    INVOICE_SENT = "invoice_sent"
    INVOICE_PAID = "invoice_paid"
    INVOICE_OVERDUE = "invoice_overdue"
    INVOICE_PARTIALLY_PAID = "invoice_partially_paid"

    # Milestone actions
    MILESTONE_COMPLETED = "milestone_completed"
    MILESTONE_COMMENT = "milestone_comment"
    MILESTONE_DUE_SOON = "milestone_due_soon"

    # Document actions
    DOCUMENT_UPLOADED = "document_uploaded"
    DOCUMENT_SHARED = "document_shared"

    # Calendar actions
    EVENT_CREATED = "event_created"
    EVENT_REMINDER = "event_reminder"
    EVENT_UPDATED = "event_updated"

    # System actions
    WELCOME = "welcome"
    SYSTEM_ANNOUNCEMENT = "system_announcement"


NotificationPriority = Literal["low", "normal", "high", "urgent"]
DigestMode = Literal["instant", "daily"]


class NotificationLink(BaseModel):
    """Navigation target opened when the notification is clicked."""

    model_config = ConfigDict(str_strip_whitespace=True)

    view: str = Field(..., min_length=1)
    entity_id: str | None = None
    secondary_id: str | None = None


class NotificationCreate(BaseModel):
    """Data a producer supplies to create a notification (id, flags and timestamps are assigned)."""

    model_config = ConfigDict(str_strip_whitespace=True)

    recipient_id: UserID
    sender_id: UserID | None = None
    sender_name: str | None = None
    sender_avatar: str | None = None
    title: str = Field(..., min_length=1)
    message: str = Field(..., min_length=1)
    category: NotificationCategory
    action: NotificationAction
    priority: NotificationPriority = "normal"
    link: NotificationLink | None = None


class Notification(NotificationCreate):
    """Complete notification record from the store."""

    id: NotificationID
    category: NotificationCategory = Field(..., frozen=True)
    is_read: bool = False
    is_archived: bool = False
    is_email_sent: bool = False
    created_at: datetime
    read_at: datetime | None = None


class QuietHours(BaseModel):
    """Local-time window during which immediate email is suppressed."""

    enabled: bool = False
    start_hour: Hour = Field(22, ge=0, le=23)
    end_hour: Hour = Field(7, ge=0, le=23)
    timezone: TimezoneName = "America/New_York"


class EmailNotificationPreferences(BaseModel):
    """Per-user email preferences, stored as JSON on the user profile."""

    enabled: bool = True
    categories: dict[NotificationCategory, bool] = Field(
        default_factory=lambda: {category: True for category in NotificationCategory}
    )
    digest_mode: DigestMode = "instant"
    quiet_hours: QuietHours = Field(default_factory=QuietHours)


# Engine-wide defaults, merged under every stored preference document
DEFAULT_EMAIL_PREFERENCES = EmailNotificationPreferences()


class UserProfile(BaseModel):
    """Recipient profile as seen by the delivery engine."""

    id: UserID
    email: str | None = None
    name: str | None = None
    email_notification_preferences: EmailNotificationPreferences = Field(
        default_factory=EmailNotificationPreferences
    )
