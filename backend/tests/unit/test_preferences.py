"""
Unit tests for notifications/preferences.py

Tests the permissive preference merge and the immediate-email eligibility
rules: master switch, category opt-out, digest mode and quiet hours
(same-day, overnight and boundary hours, evaluated in the recipient's timezone).
"""

import unittest
from datetime import datetime, timezone

from models.notification import (
    DEFAULT_EMAIL_PREFERENCES,
    EmailNotificationPreferences,
    NotificationCategory,
)
from notifications.preferences import (
    CATEGORY_DISABLED,
    DAILY_DIGEST,
    DISABLED,
    ELIGIBLE,
    QUIET_HOURS,
    evaluate_immediate_eligibility,
    is_within_quiet_hours,
    merge_preferences,
    should_send_immediate_email,
)
from tests.fixtures.notification_factory import create_test_notification, utc
from tests.fixtures.user_factory import create_test_preferences


def _prefs(**kwargs) -> EmailNotificationPreferences:
    return merge_preferences(create_test_preferences(**kwargs))


def _quiet(start: int, end: int, tz: str = "UTC") -> dict:
    return {"enabled": True, "start_hour": start, "end_hour": end, "timezone": tz}


class TestMergePreferences(unittest.TestCase):
    """Tests for merge_preferences()."""

    def test_none_returns_defaults(self):
        """Absent preference document uses engine defaults."""
        prefs = merge_preferences(None)

        self.assertTrue(prefs.enabled)
        self.assertEqual(prefs.digest_mode, "instant")
        self.assertFalse(prefs.quiet_hours.enabled)
        self.assertEqual(len(prefs.categories), 7)
        self.assertTrue(all(prefs.categories.values()))

    def test_defaults_not_shared(self):
        """Merged result is a copy; mutating it leaves the defaults intact."""
        prefs = merge_preferences(None)
        prefs.categories[NotificationCategory.PROJECT] = False

        self.assertTrue(DEFAULT_EMAIL_PREFERENCES.categories[NotificationCategory.PROJECT])

    def test_missing_categories_default_enabled(self):
        """Category keys absent from the document count as enabled."""
        prefs = merge_preferences({"categories": {"invoice": False}})

        self.assertFalse(prefs.categories[NotificationCategory.INVOICE])
        self.assertTrue(prefs.categories[NotificationCategory.PROJECT])
        self.assertEqual(len(prefs.categories), 7)

    def test_unknown_category_dropped(self):
        """Only the seven defined categories survive the merge."""
        prefs = merge_preferences({"categories": {"payroll": False}})

        self.assertEqual(set(prefs.categories), set(NotificationCategory))

    def test_non_boolean_category_value_enabled(self):
        """Garbage category values are treated as enabled, never as disabled."""
        prefs = merge_preferences({"categories": {"message": "no"}})

        self.assertTrue(prefs.categories[NotificationCategory.MESSAGE])

    def test_invalid_digest_mode_falls_back_to_instant(self):
        prefs = merge_preferences({"digest_mode": "weekly"})

        self.assertEqual(prefs.digest_mode, "instant")

    def test_non_boolean_enabled_defaults_true(self):
        prefs = merge_preferences({"enabled": None})

        self.assertTrue(prefs.enabled)

    def test_quiet_hours_missing_hours_disabled(self):
        """Quiet hours without start/end hours cannot suppress anything."""
        prefs = merge_preferences({"quiet_hours": {"enabled": True, "timezone": "UTC"}})

        self.assertFalse(prefs.quiet_hours.enabled)

    def test_quiet_hours_out_of_range_disabled(self):
        prefs = merge_preferences(
            {"quiet_hours": {"enabled": True, "start_hour": 25, "end_hour": 7}}
        )

        self.assertFalse(prefs.quiet_hours.enabled)

    def test_quiet_hours_unknown_timezone_uses_service_default(self):
        prefs = merge_preferences({"quiet_hours": _quiet(22, 7, tz="Mars/Olympus_Mons")})

        self.assertTrue(prefs.quiet_hours.enabled)
        self.assertEqual(prefs.quiet_hours.timezone, "America/New_York")

    def test_full_document_preserved(self):
        raw = create_test_preferences(
            enabled=False, digest_mode="daily", quiet_hours=_quiet(9, 17, "Europe/Paris")
        )

        prefs = merge_preferences(raw)

        self.assertFalse(prefs.enabled)
        self.assertEqual(prefs.digest_mode, "daily")
        self.assertEqual(prefs.quiet_hours.start_hour, 9)
        self.assertEqual(prefs.quiet_hours.end_hour, 17)
        self.assertEqual(prefs.quiet_hours.timezone, "Europe/Paris")


class TestIsWithinQuietHours(unittest.TestCase):
    """Tests for is_within_quiet_hours() window arithmetic."""

    def test_same_day_window(self):
        """[9,17): inside at 10, outside at 8, end hour exclusive."""
        self.assertTrue(is_within_quiet_hours(10, 9, 17))
        self.assertTrue(is_within_quiet_hours(9, 9, 17))
        self.assertFalse(is_within_quiet_hours(8, 9, 17))
        self.assertFalse(is_within_quiet_hours(17, 9, 17))

    def test_overnight_window(self):
        """[22,7): inside at 23 and 3, outside at 7 and 12."""
        self.assertTrue(is_within_quiet_hours(23, 22, 7))
        self.assertTrue(is_within_quiet_hours(22, 22, 7))
        self.assertTrue(is_within_quiet_hours(3, 22, 7))
        self.assertTrue(is_within_quiet_hours(0, 22, 7))
        self.assertFalse(is_within_quiet_hours(7, 22, 7))
        self.assertFalse(is_within_quiet_hours(12, 22, 7))
        self.assertFalse(is_within_quiet_hours(21, 22, 7))

    def test_empty_window(self):
        """start == end is an empty window."""
        for hour in range(24):
            self.assertFalse(is_within_quiet_hours(hour, 8, 8))


class TestShouldSendImmediateEmail(unittest.TestCase):
    """Tests for should_send_immediate_email() and its verdict reasons."""

    def setUp(self):
        self.notification = create_test_notification(category="invoice")
        self.noon = utc(2026, 1, 24, 12)

    def test_all_checks_pass(self):
        verdict = evaluate_immediate_eligibility(self.notification, _prefs(), self.noon)

        self.assertEqual(verdict, (True, ELIGIBLE))

    def test_disabled_overrides_everything(self):
        """enabled=false blocks email regardless of categories and quiet hours."""
        for digest_mode in ("instant", "daily"):
            for quiet in (None, _quiet(0, 0)):
                prefs = _prefs(enabled=False, digest_mode=digest_mode, quiet_hours=quiet)

                verdict = evaluate_immediate_eligibility(self.notification, prefs, self.noon)

                self.assertEqual(verdict, (False, DISABLED))

    def test_category_explicitly_disabled(self):
        prefs = _prefs(categories={"invoice": False})

        verdict = evaluate_immediate_eligibility(self.notification, prefs, self.noon)

        self.assertEqual(verdict, (False, CATEGORY_DISABLED))

    def test_category_absent_defaults_enabled(self):
        """Missing category key is not the same as disabled."""
        prefs = _prefs(categories={"project": False})

        self.assertTrue(should_send_immediate_email(self.notification, prefs, self.noon))

    def test_unmerged_preferences_missing_category(self):
        """Even a preferences object built without a category entry passes."""
        prefs = EmailNotificationPreferences(categories={"project": True})

        self.assertTrue(should_send_immediate_email(self.notification, prefs, self.noon))

    def test_daily_digest_always_suppresses(self):
        """digest_mode=daily suppresses even with quiet hours off and category on."""
        prefs = _prefs(digest_mode="daily")

        verdict = evaluate_immediate_eligibility(self.notification, prefs, self.noon)

        self.assertEqual(verdict, (False, DAILY_DIGEST))

    def test_same_day_quiet_hours(self):
        prefs = _prefs(quiet_hours=_quiet(9, 17))

        self.assertFalse(should_send_immediate_email(self.notification, prefs, utc(2026, 1, 24, 10)))
        self.assertTrue(should_send_immediate_email(self.notification, prefs, utc(2026, 1, 24, 8)))
        self.assertTrue(should_send_immediate_email(self.notification, prefs, utc(2026, 1, 24, 17)))

    def test_overnight_quiet_hours(self):
        prefs = _prefs(quiet_hours=_quiet(22, 7))

        self.assertFalse(should_send_immediate_email(self.notification, prefs, utc(2026, 1, 24, 23)))
        self.assertFalse(should_send_immediate_email(self.notification, prefs, utc(2026, 1, 24, 3)))
        self.assertTrue(should_send_immediate_email(self.notification, prefs, utc(2026, 1, 24, 7)))
        self.assertTrue(should_send_immediate_email(self.notification, prefs, utc(2026, 1, 24, 12)))

    def test_quiet_hours_reason(self):
        prefs = _prefs(quiet_hours=_quiet(22, 7))

        verdict = evaluate_immediate_eligibility(self.notification, prefs, utc(2026, 1, 24, 23))

        self.assertEqual(verdict, (False, QUIET_HOURS))

    def test_quiet_hours_use_recipient_timezone(self):
        """03:00 UTC is 22:00 in New York (EST), inside a 22->7 window there."""
        prefs = _prefs(quiet_hours=_quiet(22, 7, "America/New_York"))
        three_am_utc = utc(2026, 1, 24, 3)

        self.assertFalse(should_send_immediate_email(self.notification, prefs, three_am_utc))

        # 15:00 UTC is 10:00 in New York: outside the window
        self.assertTrue(
            should_send_immediate_email(self.notification, prefs, utc(2026, 1, 24, 15))
        )

    def test_naive_now_treated_as_utc(self):
        prefs = _prefs(quiet_hours=_quiet(9, 17))

        self.assertFalse(
            should_send_immediate_email(self.notification, prefs, datetime(2026, 1, 24, 10))
        )

    def test_quiet_hours_disabled_ignores_window(self):
        prefs = _prefs(
            quiet_hours={"enabled": False, "start_hour": 0, "end_hour": 23, "timezone": "UTC"}
        )

        self.assertTrue(
            should_send_immediate_email(
                self.notification, prefs, datetime(2026, 1, 24, 10, tzinfo=timezone.utc)
            )
        )

    def test_priority_and_action_do_not_matter(self):
        """Eligibility ignores priority and action."""
        low = create_test_notification(category="message", priority="low", action="message_received")

        self.assertTrue(should_send_immediate_email(low, _prefs(), self.noon))


if __name__ == "__main__":
    unittest.main()
