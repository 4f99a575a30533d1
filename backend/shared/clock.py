"""Time source for the delivery engine, injectable so tests can pin the instant."""

from datetime import datetime, timezone
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from config.notification_settings import DEFAULT_TIMEZONE


def resolve_timezone(name: str | None, fallback: str = "UTC") -> ZoneInfo:
    """Return the named zone, or the fallback zone if the name is empty or unknown."""
    if name:
        try:
            return ZoneInfo(name)
        except (ZoneInfoNotFoundError, ValueError):
            pass
    return ZoneInfo(fallback)


class Clock:
    """Wall clock returning aware datetimes."""

    def now(self, tz: str | None = None) -> datetime:
        """Current instant in ``tz``. UTC when omitted, DEFAULT_TIMEZONE when unknown."""
        current = datetime.now(timezone.utc)
        if tz is None:
            return current
        return current.astimezone(resolve_timezone(tz, DEFAULT_TIMEZONE))
