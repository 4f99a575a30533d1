"""
Email content for notification delivery.

Builds subject, HTML and plain text for the single-notification email sent by
the immediate dispatcher and for the daily digest. Data preparation happens
once in the _prepare_* helpers so the builders only handle presentation.
"""

from html import escape
from typing import Any
from urllib.parse import urlencode

from config.notification_settings import (
    CATEGORY_COLORS,
    get_brand_name,
    get_portal_base_url,
)
from models.notification import Notification, NotificationLink
from shared.utils import format_date

DEFAULT_COLOR = "#F15A2B"


def build_portal_url(link: NotificationLink | None) -> str:
    """Deep link into the portal for a notification's navigation target."""
    base_url = get_portal_base_url()
    if link is None:
        return base_url

    params = {"view": link.view}
    if link.entity_id:
        params["id"] = link.entity_id
    if link.secondary_id:
        params["sub"] = link.secondary_id
    return f"{base_url}?{urlencode(params)}"


def build_preferences_url() -> str:
    return f"{get_portal_base_url()}?{urlencode({'view': 'settings'})}"


def _prepare_notification_data(notification: Notification) -> dict[str, Any]:
    category = notification.category.value
    return {
        "title": notification.title,
        "message": notification.message,
        "category_label": category.capitalize(),
        "color": CATEGORY_COLORS.get(category, DEFAULT_COLOR),
        "sender_name": notification.sender_name,
        "date_formatted": format_date(notification.created_at),
        "url": build_portal_url(notification.link),
    }


def build_notification_email(
    notification: Notification,
    recipient_name: str | None,
    unsubscribe_url: str | None = None,
) -> dict[str, str]:
    """
    Build the immediate email for one notification.

    Returns:
        Dict with 'subject', 'html' and 'text'
    """
    data = _prepare_notification_data(notification)
    greeting_name = recipient_name or "there"
    brand = get_brand_name()

    subject = f"{data['title']} | {brand}"
    sender_line = (
        f'<p class="meta">From <strong>{escape(data["sender_name"])}</strong></p>'
        if data["sender_name"]
        else ""
    )

    html = f"""
<!DOCTYPE html>
<html>
<head>
    <meta charset="utf-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>{escape(data['title'])}</title>
    <style>
        body {{
            font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, 'Helvetica Neue', Arial, sans-serif;
            line-height: 1.6;
            color: #333;
            max-width: 600px;
            margin: 0 auto;
            padding: 20px;
            background-color: #f4f4f5;
        }}
        .container {{
            background-color: white;
            padding: 32px;
            border-radius: 16px;
        }}
        .badge {{
            display: inline-block;
            padding: 4px 12px;
            border-radius: 20px;
            color: {data['color']};
            border: 1px solid {data['color']};
            font-size: 11px;
            font-weight: 700;
            text-transform: uppercase;
        }}
        h1 {{ font-size: 22px; color: #1a1a1a; margin: 16px 0 0 0; }}
        .meta {{ color: #6b7280; font-size: 13px; }}
        .cta {{
            display: inline-block;
            margin-top: 24px;
            padding: 12px 28px;
            background: {DEFAULT_COLOR};
            color: #ffffff;
            font-weight: 700;
            text-decoration: none;
            border-radius: 12px;
        }}
        .footer {{ margin-top: 32px; padding-top: 16px; border-top: 1px solid #f4f4f5; font-size: 12px; color: #a1a1aa; }}
        .footer a {{ color: {DEFAULT_COLOR}; text-decoration: none; }}
    </style>
</head>
<body>
    <div class="container">
        <span class="badge">{escape(data['category_label'])}</span>
        <h1>{escape(data['title'])}</h1>
        {sender_line}
        <p>Hi {escape(greeting_name)},</p>
        <p>{escape(data['message'])}</p>
        <a href="{escape(data['url'])}" class="cta">View in Portal →</a>
        {_footer_html(unsubscribe_url)}
    </div>
</body>
</html>
"""

    text = f"""{data['title']}

Hi {greeting_name},

{data['message']}
"""
    if data["sender_name"]:
        text += f"\nFrom: {data['sender_name']}\n"
    text += f"\nView in portal: {data['url']}\n"
    text += _footer_text(unsubscribe_url)

    return {"subject": subject, "html": html, "text": text}


def build_digest_email(
    notifications: list[Notification],
    recipient_name: str | None,
    unsubscribe_url: str | None = None,
) -> dict[str, str]:
    """
    Build the daily digest email listing every notification, newest first.

    Args:
        notifications: Un-emailed notifications from the digest window
        recipient_name: Display name for the greeting
        unsubscribe_url: One-click unsubscribe link for the footer

    Returns:
        Dict with 'subject', 'html' and 'text'
    """
    items = [_prepare_notification_data(n) for n in notifications]
    count = len(items)
    plural = "s" if count != 1 else ""
    brand = get_brand_name()
    greeting_name = recipient_name or "there"

    subject = f"Daily Update: {count} new notification{plural} | {brand}"

    html = f"""
<!DOCTYPE html>
<html>
<head>
    <meta charset="utf-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>Daily Update</title>
    <style>
        body {{
            font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, 'Helvetica Neue', Arial, sans-serif;
            line-height: 1.6;
            color: #333;
            max-width: 600px;
            margin: 0 auto;
            padding: 20px;
            background-color: #f4f4f5;
        }}
        .container {{ background-color: white; padding: 32px; border-radius: 16px; }}
        h2 {{ font-size: 20px; color: #1a1a1a; margin: 0 0 16px 0; }}
        .item {{ padding: 12px 16px; margin-bottom: 12px; background-color: #f9fafb; }}
        .item-title {{ font-weight: 600; color: #1f2937; text-decoration: none; }}
        .item-message {{ color: #52525b; font-size: 14px; margin: 4px 0 0 0; }}
        .footer {{ margin-top: 32px; padding-top: 16px; border-top: 1px solid #f4f4f5; font-size: 12px; color: #a1a1aa; }}
        .footer a {{ color: {DEFAULT_COLOR}; text-decoration: none; }}
    </style>
</head>
<body>
    <div class="container">
        <p>Hi {escape(greeting_name)},</p>
        <h2>You have {count} notification{plural} from the last day</h2>
"""

    for item in items:
        html += f"""
        <div class="item" style="border-left: 4px solid {item['color']};">
            <a href="{escape(item['url'])}" class="item-title">{escape(item['title'])}</a>
            <p class="item-message">{escape(item['message'])}</p>
        </div>
"""

    html += f"""
        {_footer_html(unsubscribe_url)}
    </div>
</body>
</html>
"""

    text = f"""DAILY UPDATE
Hi {greeting_name},

You have {count} notification{plural} from the last day:

"""
    for i, item in enumerate(items, 1):
        text += f"{i}. [{item['category_label']}] {item['title']}\n"
        text += f"   {item['message']}\n"
        text += f"   {item['url']}\n\n"
    text += _footer_text(unsubscribe_url)

    return {"subject": subject, "html": html, "text": text}


def _footer_html(unsubscribe_url: str | None) -> str:
    links = f'<a href="{escape(build_preferences_url())}">Manage notification preferences</a>'
    if unsubscribe_url:
        links += f' &middot; <a href="{escape(unsubscribe_url)}">Unsubscribe from all emails</a>'
    return f"""<div class="footer">
            <p>You received this email because you have email notifications enabled on your {escape(get_brand_name())} account.</p>
            <p>{links}</p>
        </div>"""


def _footer_text(unsubscribe_url: str | None) -> str:
    text = "\n---\n"
    text += f"Manage notification preferences: {build_preferences_url()}\n"
    if unsubscribe_url:
        text += f"Unsubscribe from all emails: {unsubscribe_url}\n"
    return text
