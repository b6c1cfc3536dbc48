# -*- coding: utf-8 -*-
"""Tests for the email notifier."""
import json

import httpx
import pytest

from planner_server.models import Event
from planner_server.notifier import EmailNotifier, registration_email


def test_registration_email_contents() -> None:
    event = Event(title="Hackathon 2026", date="2026-04-10", time="18:00", location="Innovation Hub")
    subject, body = registration_email(event)
    assert subject == "Registration Confirmed: Hackathon 2026"
    assert "<strong>Hackathon 2026</strong>" in body
    assert "Date: 2026-04-10" in body
    assert "Time: 18:00" in body
    assert "Location: Innovation Hub" in body


@pytest.mark.asyncio
async def test_send_posts_to_confirmation_endpoint() -> None:
    """The message is posted as JSON with type 'message'."""
    requests: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(200, json={"ok": True})

    notifier = EmailNotifier("https://mail.example.com/", transport=httpx.MockTransport(handler))
    delivered = await notifier.send("amina@example.com", "Hello", "<p>Hi</p>", name="Amina")

    assert delivered is True
    (request,) = requests
    assert request.method == "POST"
    assert str(request.url) == "https://mail.example.com/api/auth/send-confirmation"
    assert json.loads(request.content) == {
        "email": "amina@example.com",
        "name": "Amina",
        "subject": "Hello",
        "body": "<p>Hi</p>",
        "type": "message",
    }


@pytest.mark.asyncio
async def test_send_raises_on_error_status() -> None:
    transport = httpx.MockTransport(lambda request: httpx.Response(502))
    notifier = EmailNotifier("https://mail.example.com", transport=transport)
    with pytest.raises(httpx.HTTPStatusError):
        await notifier.send("amina@example.com", "Hello", "<p>Hi</p>")
