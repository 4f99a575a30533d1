from datetime import datetime, timezone

from dateutil import parser as date_parser


def parse_timestamp(value: str | datetime | None) -> datetime | None:
    """Parse an ISO or free-form timestamp into an aware datetime (naive input is taken as UTC)."""
    if not value:
        return None
    if isinstance(value, datetime):
        parsed = value
    else:
        try:
            parsed = date_parser.parse(value, fuzzy=True)
        except (ValueError, OverflowError, TypeError):
            return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def format_date(value: str | datetime | None, default: str = "Unknown date") -> str:
    """Format a timestamp for email and notification copy, e.g. 'January 24, 2026'."""
    parsed = parse_timestamp(value)
    if parsed is None:
        return default
    return parsed.strftime("%B %d, %Y")


def truncate(text: str, max_length: int) -> str:
    """Shorten text for notification previews, ending with an ellipsis when cut."""
    if len(text) <= max_length:
        return text
    return text[:max_length] + "…"


def print_summary(title: str, stats: dict[str, int]) -> None:
    """Print a run summary block."""
    print(f"\n{'=' * 60}")
    print(f"[{datetime.now()}] {title}")
    print(f"{'=' * 60}")
    for key, value in stats.items():
        print(f"{key.capitalize() + ':':<10}{value}")
    print(f"{'Total:':<10}{sum(stats.values())}")
    print(f"{'=' * 60}\n")
