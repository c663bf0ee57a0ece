"""Invite email delivery through an HTTP mail API.

The mail API receives ``{"from", "to", "subject", "template", "data"}``
and renders the `tenant_invite` template itself. Any transport or API
failure is raised as NotificationError; callers decide whether it is
fatal (for invites it is not, see `services.invites`).
"""

import logging
from typing import Any, Mapping

import httpx

from app.config import settings
from app.wizard.collaborators import NotificationError

logger = logging.getLogger(__name__)

INVITE_SUBJECT = "Welcome to EasyRent - Complete Your Tenant Profile"


class EmailNotifier:
    def __init__(self, api_url: str, sender: str, timeout: float = 10.0):
        self.api_url = api_url
        self.sender = sender
        self.timeout = timeout

    async def send_invite_email(self, to: str, template_data: Mapping[str, Any]) -> None:
        if not self.api_url:
            raise NotificationError("Email delivery is not configured (MAIL_API_URL)")

        payload = {
            "from": self.sender,
            "to": to,
            "subject": INVITE_SUBJECT,
            "template": "tenant_invite",
            "data": dict(template_data),
        }
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.post(self.api_url, json=payload)
                response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise NotificationError(
                f"Mail API returned {exc.response.status_code}: {exc.response.text[:200]}"
            ) from exc
        except httpx.HTTPError as exc:
            raise NotificationError(f"Mail API unreachable: {exc}") from exc

        logger.info(f"Invite email sent to {to}")


def get_notifier() -> EmailNotifier:
    """FastAPI dependency."""
    return EmailNotifier(settings.mail_api_url, settings.mail_from)
