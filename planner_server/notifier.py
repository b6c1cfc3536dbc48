# -*- coding: utf-8 -*-
"""
Email notifications.

Delivery belongs to the hosted email API; this module only formats the
registration message and posts it.
"""
from __future__ import annotations

import logging
import typing as t

import httpx

from .models import Event, format_time

logger = logging.getLogger(__name__)

# Timeout for the email API (in seconds)
STANDARD_TIMEOUT = 30.0


class Notifier(t.Protocol):
    async def send(self, to_email: str, subject: str, body_html: str, name: str = "") -> bool: ...


def registration_email(event: Event) -> tuple[str, str]:
    """Build the subject and HTML body confirming a registration.

    :param event: The event the user registered for.
    :return: A (subject, body_html) pair.
    """
    subject = f"Registration Confirmed: {event.title}"
    body = (
        f"You have successfully registered for <strong>{event.title}</strong>.<br>"
        f"Date: {event.date.isoformat()}<br>"
        f"Time: {format_time(event.time)}<br>"
        f"Location: {event.location}"
    )
    return subject, body


class EmailNotifier:
    """Sends messages through the email API's confirmation endpoint."""

    def __init__(
            self,
            base_url: str,
            timeout: float = STANDARD_TIMEOUT,
            transport: t.Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.url = f"{base_url.rstrip('/')}/api/auth/send-confirmation"
        self.timeout = timeout
        self._transport = transport

    async def send(self, to_email: str, subject: str, body_html: str, name: str = "") -> bool:
        """
        Post one message to the email API.

        Raises httpx.HTTPError when the API is unreachable or answers with an
        error status; callers decide whether that matters.
        """
        payload = {
            "email": to_email,
            "name": name,
            "subject": subject,
            "body": body_html,
            "type": "message",
        }
        async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
            response = await client.post(self.url, json=payload)
            response.raise_for_status()
        logger.info("Sent '%s' to %s", subject, to_email)
        return True
