"""
Signed tokens for one-click email unsubscribe.

Every notification email carries an unsubscribe link (footer and
List-Unsubscribe header). The token inside it is an HMAC-signed user id with a
timestamp, so no server-side state is needed; it expires after 90 days.
Following the link turns the user's email master switch off.
"""

import hashlib
import os
from typing import Optional
from urllib.parse import urlencode

from itsdangerous import BadSignature, SignatureExpired, URLSafeTimedSerializer

from config.notification_settings import get_portal_base_url
from models.types import UserID
from notifications.error_logger import log_notification_error
from notifications.user_directory import UserDirectory

UNSUBSCRIBE_SALT = "email-unsubscribe"
TOKEN_MAX_AGE_DAYS = 90


def _get_serializer() -> URLSafeTimedSerializer:
    """
    Raises:
        ValueError: If UNSUBSCRIBE_SECRET_KEY environment variable not set
    """
    secret_key = os.getenv("UNSUBSCRIBE_SECRET_KEY")
    if not secret_key:
        raise ValueError("UNSUBSCRIBE_SECRET_KEY environment variable must be set.")

    return URLSafeTimedSerializer(
        secret_key,
        salt=UNSUBSCRIBE_SALT,
        signer_kwargs={"digest_method": hashlib.sha256},
    )


def generate_unsubscribe_token(user_id: UserID) -> str:
    """Sign a user id into a URL-safe token (payload.timestamp.signature)."""
    return _get_serializer().dumps(user_id)


def validate_unsubscribe_token(
    token: str, max_age_days: int = TOKEN_MAX_AGE_DAYS
) -> Optional[UserID]:
    """
    Verify a token's signature and age.

    Never raises - returns None for any invalid, expired or malformed token,
    and when the secret key is not configured.
    """
    try:
        serializer = _get_serializer()
        return serializer.loads(token, max_age=max_age_days * 24 * 60 * 60)
    except (BadSignature, SignatureExpired, ValueError, TypeError):
        return None


def build_unsubscribe_url(user_id: UserID) -> str:
    """Portal URL that unsubscribes this user in one click."""
    token = generate_unsubscribe_token(user_id)
    return f"{get_portal_base_url()}/unsubscribe?{urlencode({'token': token})}"


def build_optional_unsubscribe_url(user_id: UserID) -> Optional[str]:
    """Like build_unsubscribe_url(), but None when no secret key is configured."""
    try:
        return build_unsubscribe_url(user_id)
    except ValueError:
        return None


def unsubscribe(token: str, directory: UserDirectory) -> bool:
    """
    Disable all notification email for the user named in a token.

    Args:
        token: Token taken from the unsubscribe link
        directory: UserDirectory used to update the preferences

    Returns:
        True if the token was valid and the user's preferences were updated
    """
    user_id = validate_unsubscribe_token(token)
    if user_id is None:
        print("  ⚠️  Invalid or expired unsubscribe token")
        return False

    try:
        updated = directory.disable_email(user_id)
    except Exception as e:
        log_notification_error(
            error_type="unsubscribe",
            error_message=str(e),
            context={"user_id": user_id},
            exc=e,
        )
        return False

    if updated:
        print(f"  ✓ Email notifications disabled for user {user_id}")
    else:
        print(f"  ⚠️  Unsubscribe token for unknown user {user_id}")
    return updated
