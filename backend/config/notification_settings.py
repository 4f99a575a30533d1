# This module defines notification delivery settings.
# Fixed values are module-level constants; values that come from the environment
# are read through small getter functions so each call sees the current .env / os.environ.

import os

# Service-wide timezone used when a preference document names no valid timezone
DEFAULT_TIMEZONE = "America/New_York"

# Trailing window of notifications collected by one digest run
DIGEST_WINDOW_HOURS = 24

# Pause between digest emails (Resend allows ~10 requests/second)
DIGEST_SEND_INTERVAL_SECONDS = 0.1

# Number of notifications returned to the bell dropdown
FEED_PAGE_SIZE = 50

# Accent colour per notification category, used by the email templates
CATEGORY_COLORS = {
    "project": "#F15A2B",
    "message": "#3B82F6",
    "invoice": "#10B981",
    "milestone": "#8B5CF6",
    "document": "#F59E0B",
    "calendar": "#14B8A6",
    "system": "#6B7280",
}


def get_portal_base_url() -> str:
    """Base URL of the portal, used for call-to-action and preference links."""
    return os.getenv("PORTAL_BASE_URL", "https://portal.example.com").rstrip("/")


def get_from_address() -> str:
    """Formatted From header for outgoing notification emails."""
    from_email = os.getenv("NOTIFICATION_FROM_EMAIL", "notifications@projectportal.app")
    return f"{get_brand_name()} <{from_email}>"


def get_brand_name() -> str:
    return os.getenv("NOTIFICATION_FROM_NAME", "Project Portal")


def get_digest_timezone() -> str:
    return os.getenv("DIGEST_TIMEZONE", DEFAULT_TIMEZONE)


def get_error_log_dir() -> str:
    """Directory for notification error reports (created on first write)."""
    default_dir = os.path.join(
        os.path.dirname(os.path.dirname(__file__)), "notifications", "logs"
    )
    return os.getenv("NOTIFICATION_ERROR_LOG_DIR", default_dir)
