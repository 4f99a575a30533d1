"""
Email preference evaluation.

Turns a (possibly partial) stored preference document into a complete
EmailNotificationPreferences, and decides whether a notification should be
emailed immediately. Everything here is pure: no store access, no clock reads.
"""

from datetime import datetime, timezone
from typing import Any, NamedTuple

from config.notification_settings import DEFAULT_TIMEZONE
from models.notification import (
    DEFAULT_EMAIL_PREFERENCES,
    EmailNotificationPreferences,
    Notification,
    NotificationCategory,
    QuietHours,
)
from shared.clock import resolve_timezone

ELIGIBLE = "eligible"
DISABLED = "disabled"
CATEGORY_DISABLED = "category_disabled"
DAILY_DIGEST = "daily_digest"
QUIET_HOURS = "quiet_hours"


class EligibilityVerdict(NamedTuple):
    eligible: bool
    reason: str


def merge_preferences(raw: dict[str, Any] | None) -> EmailNotificationPreferences:
    """
    Overlay a stored preference document on DEFAULT_EMAIL_PREFERENCES.

    Malformed or missing fields never disable email:
    - missing/non-boolean category entries count as enabled, unknown keys are dropped
    - invalid digest_mode falls back to instant
    - quiet hours lacking a valid start_hour/end_hour are treated as disabled
    - a missing or unknown timezone falls back to the service timezone

    Args:
        raw: The `email_notification_preferences` JSON from the user profile

    Returns:
        Complete preferences with all seven categories present
    """
    defaults = DEFAULT_EMAIL_PREFERENCES
    if not isinstance(raw, dict):
        return defaults.model_copy(deep=True)

    enabled = raw.get("enabled")
    if not isinstance(enabled, bool):
        enabled = defaults.enabled

    stored_categories = raw.get("categories")
    if not isinstance(stored_categories, dict):
        stored_categories = {}
    categories = {}
    for category in NotificationCategory:
        value = stored_categories.get(category.value)
        categories[category] = value if isinstance(value, bool) else True

    digest_mode = raw.get("digest_mode")
    if digest_mode not in ("instant", "daily"):
        digest_mode = defaults.digest_mode

    return EmailNotificationPreferences(
        enabled=enabled,
        categories=categories,
        digest_mode=digest_mode,
        quiet_hours=_merge_quiet_hours(raw.get("quiet_hours")),
    )


def _merge_quiet_hours(raw: Any) -> QuietHours:
    defaults = DEFAULT_EMAIL_PREFERENCES.quiet_hours
    if not isinstance(raw, dict):
        return defaults.model_copy()

    tz_name = raw.get("timezone")
    if not isinstance(tz_name, str) or resolve_timezone(tz_name, "UTC").key != tz_name:
        tz_name = DEFAULT_TIMEZONE

    start_hour = raw.get("start_hour")
    end_hour = raw.get("end_hour")
    if not (_is_valid_hour(start_hour) and _is_valid_hour(end_hour)):
        # An incomplete window cannot suppress anything
        return QuietHours(enabled=False, timezone=tz_name)

    return QuietHours(
        enabled=raw.get("enabled") is True,
        start_hour=start_hour,
        end_hour=end_hour,
        timezone=tz_name,
    )


def _is_valid_hour(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and 0 <= value <= 23


def is_within_quiet_hours(current_hour: int, start_hour: int, end_hour: int) -> bool:
    """
    Check whether an hour falls inside a [start_hour, end_hour) window.

    A window with start_hour > end_hour wraps past midnight (e.g. 22 -> 7).
    """
    if start_hour <= end_hour:
        return start_hour <= current_hour < end_hour
    return current_hour >= start_hour or current_hour < end_hour


def evaluate_immediate_eligibility(
    notification: Notification,
    preferences: EmailNotificationPreferences,
    now: datetime,
) -> EligibilityVerdict:
    """
    Decide whether a notification should be emailed right away.

    Checks run in order and stop at the first failure: master switch,
    category opt-out, digest mode, quiet hours.

    Args:
        notification: The freshly created notification
        preferences: Merged recipient preferences
        now: Current instant; naive values are taken as UTC

    Returns:
        EligibilityVerdict with the boolean outcome and the deciding reason
    """
    if not preferences.enabled:
        return EligibilityVerdict(False, DISABLED)

    if preferences.categories.get(notification.category, True) is False:
        return EligibilityVerdict(False, CATEGORY_DISABLED)

    if preferences.digest_mode != "instant":
        return EligibilityVerdict(False, DAILY_DIGEST)

    quiet_hours = preferences.quiet_hours
    if quiet_hours.enabled:
        if now.tzinfo is None:
            now = now.replace(tzinfo=timezone.utc)
        local_now = now.astimezone(resolve_timezone(quiet_hours.timezone, DEFAULT_TIMEZONE))
        if is_within_quiet_hours(local_now.hour, quiet_hours.start_hour, quiet_hours.end_hour):
            return EligibilityVerdict(False, QUIET_HOURS)

    return EligibilityVerdict(True, ELIGIBLE)


def should_send_immediate_email(
    notification: Notification,
    preferences: EmailNotificationPreferences,
    now: datetime,
) -> bool:
    """Boolean form of evaluate_immediate_eligibility()."""
    return evaluate_immediate_eligibility(notification, preferences, now).eligible
