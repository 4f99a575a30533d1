"""
CLI script for the daily digest email run.

Scheduled once per day (08:00 in DIGEST_TIMEZONE). For every user in daily
digest mode, collects notifications from the trailing 24 hours that have not
been emailed yet, sends ONE summary email, and marks the whole batch emailed.

Usage:
    # Send daily digest emails
    uv run python -m notifications.process_daily_digest

    # Dry run (don't actually send emails or mark anything)
    uv run python -m notifications.process_daily_digest --dry-run

    # Widen the collection window, e.g. after a missed run
    uv run python -m notifications.process_daily_digest --window-hours 48
"""

import argparse
import time
from datetime import datetime, timedelta

from config.notification_settings import (
    DIGEST_SEND_INTERVAL_SECONDS,
    DIGEST_WINDOW_HOURS,
    get_digest_timezone,
)
from models.notification import UserProfile
from notifications.email_sender import EmailSender, build_unsubscribe_headers
from notifications.email_templates import build_digest_email
from notifications.error_logger import log_notification_error
from notifications.store import NotificationStore
from notifications.unsubscribe_tokens import build_optional_unsubscribe_url
from notifications.user_directory import UserDirectory
from shared.clock import Clock
from shared.utils import print_summary


def process_daily_digests(
    *,
    directory: UserDirectory,
    store: NotificationStore,
    sender: EmailSender,
    clock: Clock,
    dry_run: bool = False,
    window_hours: int = DIGEST_WINDOW_HOURS,
    send_interval: float = DIGEST_SEND_INTERVAL_SECONDS,
) -> dict[str, int]:
    """
    Send one digest email per daily-mode user.

    Each user is an independent unit of work (query, send, batch mark). A
    failure for one user is logged and counted, and the run moves on; that
    user's notifications stay un-emailed and are picked up by the next run.

    Args:
        directory: Recipient profile lookups
        store: Notification queries and the batch mark-emailed update
        sender: Email transport
        clock: Time source for the collection window
        dry_run: If True, don't send emails or update notifications
        window_hours: How far back to collect un-emailed notifications
        send_interval: Pause between users (provider rate limit)

    Returns:
        Dictionary with stats: sent, failed, skipped
    """
    now = clock.now(get_digest_timezone())
    since = now - timedelta(hours=window_hours)
    print(f"Processing daily digest for window starting {since.isoformat()}")

    stats = {"sent": 0, "failed": 0, "skipped": 0}

    recipients = directory.list_digest_recipients()
    if not recipients:
        print("No users in daily digest mode.")
        return stats

    print(f"Found {len(recipients)} users in daily digest mode")

    for recipient in recipients:
        print(f"\nProcessing user {recipient.id}...")
        try:
            outcome = _process_recipient(recipient, store, sender, since, dry_run)
        except Exception as e:
            outcome = "failed"
            error_file = log_notification_error(
                error_type="digest",
                error_message=str(e),
                context={"user_id": recipient.id, "window_start": since.isoformat()},
                exc=e,
            )
            print(f"  ✗ Error processing user {recipient.id}. Details logged to: {error_file}")

        stats[outcome] += 1

        if outcome != "skipped" and send_interval > 0:
            time.sleep(send_interval)

    print_summary("Daily Digest Processing Complete", stats)
    return stats


def _process_recipient(
    recipient: UserProfile,
    store: NotificationStore,
    sender: EmailSender,
    since: datetime,
    dry_run: bool,
) -> str:
    """Run one user's digest. Returns the stats key to increment."""
    if not recipient.email:
        print("  ⚠️  User has no email address, skipping")
        return "skipped"

    notifications = store.query_by_recipient(
        recipient.id,
        is_email_sent=False,
        created_after=since,
        descending=True,
    )
    if not notifications:
        print("  ⊘ Nothing new, skipping")
        return "skipped"

    if dry_run:
        print(f"  [DRY RUN] Would send digest of {len(notifications)} notifications")
        return "sent"

    unsubscribe_url = build_optional_unsubscribe_url(recipient.id)
    email = build_digest_email(notifications, recipient.name, unsubscribe_url)
    result = sender.send(
        recipient.email,
        email["subject"],
        email["html"],
        text=email["text"],
        headers=build_unsubscribe_headers(unsubscribe_url),
    )

    notification_ids = [n.id for n in notifications]

    if not result.get("success"):
        error_msg = str(result.get("error", "Unknown error"))
        error_file = log_notification_error(
            error_type="digest",
            error_message=error_msg,
            context={
                "user_id": recipient.id,
                "notification_count": len(notifications),
                "notification_ids": notification_ids,
            },
        )
        print(f"  ✗ Failed to send digest to user {recipient.id}: {error_msg}")
        print(f"    Error details logged to: {error_file}")
        return "failed"

    # All-or-nothing: either every notification in this digest is marked, or none
    store.batch_update(notification_ids, {"is_email_sent": True})
    print(f"  ✓ Sent digest of {len(notifications)} notifications to user {recipient.id}")
    return "sent"


def main() -> None:
    """CLI entry point."""
    from notifications.service import build_notification_service

    parser = argparse.ArgumentParser(description="Send daily notification digest emails")

    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Dry run mode (don't actually send emails or mark notifications)",
    )

    parser.add_argument(
        "--window-hours",
        type=int,
        default=DIGEST_WINDOW_HOURS,
        help=f"Collect notifications created in the last N hours (default: {DIGEST_WINDOW_HOURS})",
    )

    args = parser.parse_args()
    if args.window_hours <= 0:
        parser.error("--window-hours must be positive")

    service = build_notification_service()
    service.run_daily_digest(dry_run=args.dry_run, window_hours=args.window_hours)


if __name__ == "__main__":
    main()
