"""
Notification dispatcher for account emails (verification, password reset).

HttpMailer posts to a transactional mail HTTP API (MAIL_API_URL, bearer
MAIL_API_KEY). Without a configured API, LoggingMailer writes the link to the
log instead, which is what local development uses.
"""
import html
import logging
from abc import ABC, abstractmethod
from typing import Optional

import httpx

logger = logging.getLogger("uvicorn.error")


class MailDeliveryError(Exception):
    """Raised when the mail API rejects or cannot receive a message."""


def _verification_html(link: str, name: str) -> str:
    link, name = html.escape(link), html.escape(name or "there")
    return f"""
    <p>Hello {name},</p>
    <p>Thanks for signing up. Please confirm your email address:</p>
    <p><a href="{link}">Verify my email</a></p>
    <p>If the button does not work, copy this link into your browser:</p>
    <p>{link}</p>
    """


def _reset_html(link: str, name: str) -> str:
    link, name = html.escape(link), html.escape(name or "there")
    return f"""
    <p>Hello {name},</p>
    <p>We received a request to reset your password.</p>
    <p><a href="{link}">Reset my password</a></p>
    <p>If you did not ask for this, you can ignore this email.</p>
    """


class NotificationDispatcher(ABC):
    """Sends account emails"""

    @abstractmethod
    async def send(self, to: str, subject: str, html: str, text: str) -> None:
        pass

    async def send_verification_email(self, to: str, link: str, name: Optional[str] = None) -> None:
        await self.send(
            to,
            "Verify your email address",
            _verification_html(link, name or ""),
            f"Confirm your email address: {link}",
        )

    async def send_password_reset_email(self, to: str, link: str, name: Optional[str] = None) -> None:
        await self.send(
            to,
            "Reset your password",
            _reset_html(link, name or ""),
            f"Use this link to reset your password: {link}",
        )


class HttpMailer(NotificationDispatcher):
    """Delivers mail through a JSON HTTP API"""

    def __init__(self, api_url: str, api_key: str | None, sender: str, timeout: float = 10.0):
        self.api_url = api_url
        self.api_key = api_key
        self.sender = sender
        self.timeout = timeout

    async def send(self, to: str, subject: str, html: str, text: str) -> None:
        headers = {"content-type": "application/json"}
        if self.api_key:
            headers["authorization"] = f"Bearer {self.api_key}"
        payload = {
            "from": self.sender,
            "to": [to],
            "subject": subject,
            "html": html,
            "text": text,
        }
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                r = await client.post(self.api_url, json=payload, headers=headers)
        except httpx.HTTPError as exc:
            raise MailDeliveryError(f"mail API unreachable: {exc}") from exc
        if r.status_code >= 400:
            raise MailDeliveryError(f"mail API returned {r.status_code}: {r.text[:200]}")
        logger.info("[mail] sent %r to %s", subject, to)


class LoggingMailer(NotificationDispatcher):
    """Development dispatcher: logs instead of sending"""

    async def send(self, to: str, subject: str, html: str, text: str) -> None:
        logger.warning("[mail] MAIL_API_URL not set; not sending %r to %s: %s", subject, to, text)


def build_mailer(settings) -> NotificationDispatcher:
    if settings.mail_api_url:
        return HttpMailer(settings.mail_api_url, settings.mail_api_key, settings.mail_from)
    return LoggingMailer()
