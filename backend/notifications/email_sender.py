"""
Email sending for the notification system.

The delivery paths depend on the EmailSender interface only. The production
implementation sends through the Resend API; it is built once at process start
and handed to the dispatcher and the digest job.
"""

import os
from abc import ABC, abstractmethod
from typing import Optional

import resend

from config.notification_settings import get_from_address
from models.types import SendResult


class EmailSender(ABC):
    """Capability to deliver one email."""

    @abstractmethod
    def send(
        self,
        to: str,
        subject: str,
        html: str,
        text: Optional[str] = None,
        headers: Optional[dict[str, str]] = None,
    ) -> SendResult:
        """
        Send one email.

        Returns:
            Dictionary with 'success' (bool), 'email_id' (str if success), 'error' (str if failed)
        """
        pass


class ResendEmailSender(EmailSender):
    """EmailSender backed by the Resend API."""

    def __init__(self, api_key: Optional[str] = None, from_address: Optional[str] = None):
        api_key = api_key or os.getenv("RESEND_API_KEY")
        if not api_key:
            raise ValueError("RESEND_API_KEY must be set")

        resend.api_key = api_key
        self.from_address = from_address or get_from_address()

    def send(
        self,
        to: str,
        subject: str,
        html: str,
        text: Optional[str] = None,
        headers: Optional[dict[str, str]] = None,
    ) -> SendResult:
        params = {
            "from": self.from_address,
            "to": to,
            "subject": subject,
            "html": html,
        }
        if text:
            params["text"] = text
        if headers:
            params["headers"] = headers

        try:
            response = resend.Emails.send(params)
        except Exception as e:
            return {"success": False, "error": str(e)}

        return {"success": True, "email_id": response.get("id")}


def build_unsubscribe_headers(unsubscribe_url: Optional[str]) -> dict[str, str]:
    """RFC 8058 one-click unsubscribe headers, empty when no link is available."""
    if not unsubscribe_url:
        return {}
    return {
        "List-Unsubscribe": f"<{unsubscribe_url}>",
        "List-Unsubscribe-Post": "List-Unsubscribe=One-Click",
    }
