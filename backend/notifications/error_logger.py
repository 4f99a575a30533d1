"""
Error reports for the delivery engine.

Delivery failures never propagate to the code that created the notification,
so each one is written to its own timestamped report file for later inspection.
"""

import os
import traceback
import uuid
from datetime import datetime
from typing import Any

from config.notification_settings import get_error_log_dir


def log_notification_error(
    error_type: str,
    error_message: str,
    context: dict[str, Any] | None = None,
    exc: BaseException | None = None,
) -> str:
    """
    Write a notification error report.

    Args:
        error_type: Stage that failed ('dispatch', 'digest', 'creation', 'unsubscribe')
        error_message: Short description of the failure
        context: Identifiers that help reproduce it (notification_id, user_id, ...)
        exc: Exception being handled, if any; its traceback is appended

    Returns:
        Path to the report file
    """
    log_dir = get_error_log_dir()
    os.makedirs(log_dir, exist_ok=True)

    now = datetime.now()
    # Several failures can land in the same second during a digest run
    suffix = uuid.uuid4().hex[:6]
    filename = os.path.join(
        log_dir, f"{error_type}_error_{now.strftime('%Y%m%d_%H%M%S')}_{suffix}.txt"
    )

    with open(filename, "w", encoding="utf-8") as f:
        f.write(f"Notification {error_type} error - {now.isoformat()}\n")
        f.write("=" * 60 + "\n\n")
        f.write(f"Message: {error_message}\n\n")

        if context:
            f.write("Context:\n")
            for key, value in sorted(context.items()):
                f.write(f"  {key}: {value}\n")
            f.write("\n")

        if exc is not None:
            f.write("Traceback:\n")
            f.write("".join(traceback.format_exception(type(exc), exc, exc.__traceback__)))

    return filename
