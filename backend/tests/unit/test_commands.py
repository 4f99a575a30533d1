"""
Unit tests for notifications/commands.py

Uses the in-memory store so idempotence can be checked on actual state.
"""

import unittest

from notifications.commands import (
    archive_all_notifications,
    archive_notification,
    count_unread,
    get_notification_feed,
    list_notifications,
    mark_all_notifications_read,
    mark_notification_read,
)
from tests.fixtures.in_memory import InMemoryNotificationStore
from tests.fixtures.mock_helpers import FixedClock
from tests.fixtures.notification_factory import create_test_notification_row, utc


class CommandTestCase(unittest.TestCase):
    def setUp(self):
        self.store = InMemoryNotificationStore()
        self.clock = FixedClock(utc(2026, 1, 24, 15))
        for i, created in enumerate(["2026-01-24T10:00:00+00:00", "2026-01-24T12:00:00+00:00"]):
            self.store.add_row(
                create_test_notification_row(
                    notification_id=f"n-{i + 1}", recipient_id="user-1", created_at=created
                )
            )
        self.store.add_row(create_test_notification_row(notification_id="other", recipient_id="user-2"))


class TestMarkRead(CommandTestCase):
    """Tests for mark_notification_read() and mark_all_notifications_read()."""

    def test_mark_read_sets_read_at(self):
        self.assertTrue(mark_notification_read(self.store, self.clock, "n-1"))

        row = self.store.rows["n-1"]
        self.assertTrue(row["is_read"])
        self.assertEqual(row["read_at"], "2026-01-24T15:00:00+00:00")

    def test_mark_read_twice_keeps_first_read_at(self):
        mark_notification_read(self.store, self.clock, "n-1")
        later = FixedClock(utc(2026, 1, 25, 9))

        self.assertFalse(mark_notification_read(self.store, later, "n-1"))
        self.assertEqual(self.store.rows["n-1"]["read_at"], "2026-01-24T15:00:00+00:00")

    def test_mark_read_unknown(self):
        self.assertFalse(mark_notification_read(self.store, self.clock, "missing"))

    def test_mark_all_read_single_update(self):
        count = mark_all_notifications_read(self.store, self.clock, "user-1")

        self.assertEqual(count, 2)
        self.assertEqual(len(self.store.update_calls), 1)
        self.assertEqual(self.store.update_calls[0]["recipient_id"], "user-1")
        self.assertFalse(self.store.rows["other"]["is_read"])

    def test_mark_all_read_nothing_unread(self):
        mark_all_notifications_read(self.store, self.clock, "user-1")
        later = FixedClock(utc(2026, 1, 25, 9))

        self.assertEqual(mark_all_notifications_read(self.store, later, "user-1"), 0)
        self.assertEqual(self.store.rows["n-1"]["read_at"], "2026-01-24T15:00:00+00:00")

    def test_mark_all_read_beyond_one_page(self):
        """Recipients with more notifications than one select page are fully marked."""
        for i in range(1500):
            self.store.add_row(
                create_test_notification_row(notification_id=f"bulk-{i}", recipient_id="user-1")
            )

        count = mark_all_notifications_read(self.store, self.clock, "user-1")

        self.assertEqual(count, 1502)
        self.assertEqual(count_unread(self.store, "user-1"), 0)


class TestArchive(CommandTestCase):
    """Tests for archive_notification() and archive_all_notifications()."""

    def test_archive_does_not_mark_read(self):
        self.assertTrue(archive_notification(self.store, "n-1"))

        row = self.store.rows["n-1"]
        self.assertTrue(row["is_archived"])
        self.assertFalse(row["is_read"])
        self.assertIn("n-1", self.store.rows)

    def test_archive_twice(self):
        archive_notification(self.store, "n-1")

        self.assertFalse(archive_notification(self.store, "n-1"))

    def test_archive_all(self):
        self.assertEqual(archive_all_notifications(self.store, "user-1"), 2)
        self.assertEqual(archive_all_notifications(self.store, "user-1"), 0)
        self.assertFalse(self.store.rows["other"]["is_archived"])


class TestFeedQueries(CommandTestCase):
    """Tests for list_notifications(), count_unread() and get_notification_feed()."""

    def test_list_newest_first_without_archived(self):
        archive_notification(self.store, "n-1")
        self.store.add_row(
            create_test_notification_row(
                notification_id="n-3", recipient_id="user-1", created_at="2026-01-24T14:00:00+00:00"
            )
        )

        ids = [n.id for n in list_notifications(self.store, "user-1")]

        self.assertEqual(ids, ["n-3", "n-2"])

    def test_list_unread_only(self):
        mark_notification_read(self.store, self.clock, "n-2")

        ids = [n.id for n in list_notifications(self.store, "user-1", unread_only=True)]

        self.assertEqual(ids, ["n-1"])

    def test_list_limit(self):
        self.assertEqual(len(list_notifications(self.store, "user-1", limit=1)), 1)

    def test_count_unread_excludes_archived(self):
        archive_notification(self.store, "n-1")

        self.assertEqual(count_unread(self.store, "user-1"), 1)

    def test_feed(self):
        mark_notification_read(self.store, self.clock, "n-1")

        feed = get_notification_feed(self.store, "user-1")

        self.assertEqual([n.id for n in feed["notifications"]], ["n-2", "n-1"])
        self.assertEqual(feed["unread_count"], 1)


if __name__ == "__main__":
    unittest.main()
