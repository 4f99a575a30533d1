"""
Notification persistence on Supabase.

The `notifications` table holds one row per recipient per event. Rows are only
ever created here, and afterwards only their state flags change: read,
archived and email-sent. Each update is issued as a single PostgREST request,
which PostgreSQL applies as one statement, so multi-row updates are all-or-nothing.
"""

from datetime import datetime
from typing import Any, Iterable

from models.notification import Notification, NotificationCreate
from models.types import NotificationID, NotificationRow, UserID
from shared.db import NOTIFICATIONS_TABLE, fetch_all_rows

MUTABLE_FIELDS = {"is_read", "read_at", "is_archived", "is_email_sent"}


def validate_notification_patch(patch: dict[str, Any]) -> dict[str, Any]:
    """
    Check a state patch against the notification invariants.

    - only state flags and read_at may change (category and content are immutable)
    - is_email_sent and is_read can only move to True
    - read_at may only be written together with is_read=True

    Returns:
        The patch with datetimes converted to ISO strings

    Raises:
        ValueError: If the patch breaks an invariant
    """
    if not patch:
        raise ValueError("Notification patch must not be empty")

    unknown = set(patch) - MUTABLE_FIELDS
    if unknown:
        raise ValueError(f"Notification fields cannot be updated: {sorted(unknown)}")

    if "is_email_sent" in patch and patch["is_email_sent"] is not True:
        raise ValueError("is_email_sent can only be set to True")

    if "is_read" in patch and patch["is_read"] is not True:
        raise ValueError("is_read can only be set to True")

    if "read_at" in patch:
        if patch.get("is_read") is not True:
            raise ValueError("read_at must be written together with is_read=True")
        if patch["read_at"] is None:
            raise ValueError("read_at cannot be cleared")

    return {
        key: value.isoformat() if isinstance(value, datetime) else value
        for key, value in patch.items()
    }


class NotificationStore:
    """Read and write notification rows through a Supabase client."""

    def __init__(self, client: Any) -> None:
        self.client = client

    def create(self, data: NotificationCreate, created_at: datetime) -> Notification:
        """Insert one notification with fresh state flags."""
        return self.create_many([data], created_at)[0]

    def create_many(
        self, items: list[NotificationCreate], created_at: datetime
    ) -> list[Notification]:
        """
        Insert several notifications in one request.

        Args:
            items: One NotificationCreate per recipient
            created_at: Shared creation instant for the batch

        Returns:
            The stored notifications, including their assigned ids
        """
        if not items:
            return []

        rows = [_to_row(item, created_at) for item in items]
        response = self.client.table(NOTIFICATIONS_TABLE).insert(rows).execute()
        return [Notification.model_validate(row) for row in response.data or []]

    def get(self, notification_id: NotificationID) -> Notification | None:
        response = (
            self.client.table(NOTIFICATIONS_TABLE)
            .select("*")
            .eq("id", notification_id)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return Notification.model_validate(response.data[0])

    def query_by_recipient(
        self,
        recipient_id: UserID,
        *,
        is_read: bool | None = None,
        is_archived: bool | None = None,
        is_email_sent: bool | None = None,
        created_after: datetime | None = None,
        descending: bool = True,
        limit: int | None = None,
    ) -> list[Notification]:
        """
        Fetch a recipient's notifications ordered by creation time.

        Flag filters left as None are not applied. `created_after` is inclusive.
        Without a limit every matching row is returned, fetched page by page.
        """

        def build_query() -> Any:
            query = self.client.table(NOTIFICATIONS_TABLE).select("*")
            query = _apply_filters(
                query, recipient_id, is_read, is_archived, is_email_sent, created_after
            )
            # id breaks ties so pages never overlap
            return query.order("created_at", desc=descending).order("id", desc=descending)

        if limit is None:
            rows = fetch_all_rows(build_query)
        else:
            rows = build_query().limit(limit).execute().data or []
        return [Notification.model_validate(row) for row in rows]

    def count_by_recipient(
        self,
        recipient_id: UserID,
        *,
        is_read: bool | None = None,
        is_archived: bool | None = None,
    ) -> int:
        query = self.client.table(NOTIFICATIONS_TABLE).select("id", count="exact")
        query = _apply_filters(query, recipient_id, is_read, is_archived, None, None)
        response = query.execute()
        return response.count or 0

    def batch_update(
        self,
        notification_ids: Iterable[NotificationID],
        patch: dict[str, Any],
        *,
        only_where: dict[str, Any] | None = None,
    ) -> int:
        """
        Apply one state patch to many notifications atomically.

        Args:
            notification_ids: Rows to update
            patch: Field values to write (see validate_notification_patch)
            only_where: Extra equality conditions a row must meet to be updated

        Returns:
            Number of rows updated
        """
        ids = [notification_id for notification_id in notification_ids if notification_id]
        if not ids:
            return 0

        query = (
            self.client.table(NOTIFICATIONS_TABLE)
            .update(validate_notification_patch(patch))
            .in_("id", ids)
        )
        for column, value in (only_where or {}).items():
            query = query.eq(column, value)

        response = query.execute()
        return len(response.data or [])

    def update_by_recipient(
        self,
        recipient_id: UserID,
        patch: dict[str, Any],
        *,
        only_where: dict[str, Any] | None = None,
    ) -> int:
        """
        Apply one state patch to every notification of a recipient matching `only_where`.

        Issued as a single filtered UPDATE, so it is not bounded by the select
        row cap and needs no id list.

        Returns:
            Number of rows updated
        """
        query = (
            self.client.table(NOTIFICATIONS_TABLE)
            .update(validate_notification_patch(patch))
            .eq("recipient_id", recipient_id)
        )
        for column, value in (only_where or {}).items():
            query = query.eq(column, value)

        response = query.execute()
        return len(response.data or [])

    def mark_email_sent(self, notification_id: NotificationID) -> None:
        self.batch_update([notification_id], {"is_email_sent": True})


def _apply_filters(
    query: Any,
    recipient_id: UserID,
    is_read: bool | None,
    is_archived: bool | None,
    is_email_sent: bool | None,
    created_after: datetime | None,
) -> Any:
    query = query.eq("recipient_id", recipient_id)
    if is_read is not None:
        query = query.eq("is_read", is_read)
    if is_archived is not None:
        query = query.eq("is_archived", is_archived)
    if is_email_sent is not None:
        query = query.eq("is_email_sent", is_email_sent)
    if created_after is not None:
        query = query.gte("created_at", created_after.isoformat())
    return query


def _to_row(data: NotificationCreate, created_at: datetime) -> NotificationRow:
    row = data.model_dump(mode="json", exclude_none=True)
    row.update(
        {
            "is_read": False,
            "is_archived": False,
            "is_email_sent": False,
            "created_at": created_at.isoformat(),
        }
    )
    return row
