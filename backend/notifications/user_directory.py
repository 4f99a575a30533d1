"""
Recipient lookups on the `user_profiles` table.

Profiles carry the email address, display name and the
`email_notification_preferences` JSON document. Preferences are merged over the
engine defaults as they are loaded, so callers always see a complete document.
"""

from typing import Any, cast

from pydantic import ValidationError

from models.notification import UserProfile
from models.types import UserID
from notifications.error_logger import log_notification_error
from notifications.preferences import merge_preferences
from shared.db import USER_PROFILES_TABLE, fetch_all_rows

PROFILE_COLUMNS = "id, email, name, email_notification_preferences"


class UserDirectory:
    """Load recipient profiles through a Supabase client."""

    def __init__(self, client: Any) -> None:
        self.client = client

    def get(self, user_id: UserID) -> UserProfile | None:
        """Return the recipient profile, or None if no such user exists."""
        response = (
            self.client.table(USER_PROFILES_TABLE)
            .select(PROFILE_COLUMNS)
            .eq("id", user_id)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _to_profile(cast(dict[str, Any], response.data[0]))

    def list_digest_recipients(self) -> list[UserProfile]:
        """
        Return every user opted into the daily digest with email enabled.

        Filtering on digest_mode happens in the query; the master switch is
        checked after merging so a document without `enabled` counts as enabled.
        Rows that do not form a valid profile are logged and skipped.
        """
        rows = fetch_all_rows(
            lambda: self.client.table(USER_PROFILES_TABLE)
            .select(PROFILE_COLUMNS)
            .eq("email_notification_preferences->>digest_mode", "daily")
            .order("id")
        )

        recipients = []
        for row in rows:
            try:
                profile = _to_profile(cast(dict[str, Any], row))
            except (ValidationError, KeyError) as e:
                error_file = log_notification_error(
                    error_type="digest",
                    error_message=f"Invalid user profile row: {e}",
                    context={"user_id": row.get("id")},
                    exc=e,
                )
                print(
                    f"  ⚠️  Skipping invalid profile {row.get('id')}. "
                    f"Details logged to: {error_file}"
                )
                continue

            preferences = profile.email_notification_preferences
            if preferences.digest_mode == "daily" and preferences.enabled:
                recipients.append(profile)
        return recipients

    def disable_email(self, user_id: UserID) -> bool:
        """
        Turn a user's email master switch off, keeping the rest of their preferences.

        Returns:
            True if the user exists and was updated
        """
        profile = self.get(user_id)
        if profile is None:
            return False

        preferences = profile.email_notification_preferences.model_copy(
            update={"enabled": False}
        )
        self.client.table(USER_PROFILES_TABLE).update(
            {"email_notification_preferences": preferences.model_dump(mode="json")}
        ).eq("id", user_id).execute()
        return True


def _to_profile(row: dict[str, Any]) -> UserProfile:
    return UserProfile(
        id=row["id"],
        email=row.get("email") or None,
        name=row.get("name") or None,
        email_notification_preferences=merge_preferences(
            row.get("email_notification_preferences")
        ),
    )
