"""Shared type definitions for type checking.

Uses NewType for IDs to provide compile-time type safety - prevents mixing
different ID types (e.g., passing UserID where NotificationID expected).

Uses TypeAlias for types that are purely structural.
"""

from typing import Any, NewType, TypeAlias

# ID types using NewType for type safety
NotificationID = NewType("NotificationID", str)
UserID = NewType("UserID", str)

# Structural aliases
Hour: TypeAlias = int  # 0-23
TimezoneName: TypeAlias = str  # IANA name, e.g. "America/New_York"
NotificationRow: TypeAlias = dict[str, Any]  # raw row from the notifications table
SendResult: TypeAlias = dict[str, Any]  # {"success": bool, "email_id"?: str, "error"?: str}
