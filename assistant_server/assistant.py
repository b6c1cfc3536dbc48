# -*- coding: utf-8 -*-
"""
AI assistant features: schedule/budget chat, budget advice and timetable import.

Every function takes the OpenAI client as its first argument so callers (the
MCP server, the CLI, tests) decide how it is built.
"""
from __future__ import annotations

import datetime as dt
import json
import logging
import typing as t

import requests
from openai import OpenAI, OpenAIError

from planner_server.config import load_settings
from planner_server.models import Event, User, format_time
from prompts import load_prompt
from .image_utils import load_image, to_data_url
from .timetable import AssistantError, clean_json_response, events_from_payload, week_start

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "gpt-5"


def get_openai_client() -> OpenAI:
    """Get OpenAI client with API key."""
    settings = load_settings()
    if not settings.openai_api_key:
        raise RuntimeError("OPENAI_API_KEY environment variable is not set.")
    return OpenAI(api_key=settings.openai_api_key)


def _event_context(events: t.Iterable[Event]) -> list[dict[str, t.Any]]:
    return [
        {
            "title": e.title,
            "date": e.date.isoformat(),
            "time": format_time(e.time),
            "category": e.category.value,
            "budget": e.total_budget,
            "spent": e.total_spent,
        }
        for e in events
    ]


def _apology(e: Exception) -> str:
    return f"Sorry, I couldn't process that request. Error: {e}"


def ask_assistant(
        client: OpenAI,
        question: str,
        user: User,
        events: t.Sequence[Event],
        model: str = DEFAULT_MODEL,
) -> str:
    """Answer a student's question using their events as context.

    Model failures come back as an apology message rather than an exception,
    so a chat window can show them inline.
    """
    user_message = {
        "user": {"name": user.name, "role": user.role.value},
        "events": _event_context(events),
        "question": question,
    }
    try:
        completion = client.chat.completions.create(
            model=model,
            messages=[
                {"role": "system", "content": load_prompt("assistant_system_prompt")},
                {"role": "user", "content": json.dumps(user_message, indent=2)},
            ],
        )
    except OpenAIError as e:
        logger.error("Assistant request failed: %s", e)
        return _apology(e)
    return completion.choices[0].message.content or "Unable to generate answer."


def budget_advice(client: OpenAI, events: t.Sequence[Event], model: str = DEFAULT_MODEL) -> str:
    """Ask for three budgeting tips based on the student's events."""
    user_message = {
        "total_budget": sum(e.total_budget for e in events),
        "total_spent": sum(e.total_spent for e in events),
        "events": [
            {"title": e.title, "budget": e.total_budget, "spent": e.total_spent}
            for e in events
        ],
    }
    try:
        completion = client.chat.completions.create(
            model=model,
            messages=[
                {"role": "system", "content": load_prompt("budget_advice_prompt")},
                {"role": "user", "content": json.dumps(user_message, indent=2)},
            ],
        )
    except OpenAIError as e:
        logger.error("Budget advice request failed: %s", e)
        return _apology(e)
    return completion.choices[0].message.content or "Unable to generate advice."


def import_timetable(
        client: OpenAI,
        path_or_url: str,
        reference_date: t.Optional[dt.date] = None,
        model: str = DEFAULT_MODEL,
) -> list[Event]:
    """Extract events from a timetable image.

    :param client: OpenAI client.
    :param path_or_url: Local path or URL of the timetable image.
    :param reference_date: Any day of the week the timetable describes (default today).
    :param model: Vision-capable model name.
    :return: Unsaved events; categories are never Organizer.
    :raises AssistantError: If the image cannot be downloaded, the model call
        fails, or its answer holds no usable JSON.
    """
    try:
        content, mime_type = load_image(path_or_url)
    except requests.RequestException as e:
        raise AssistantError(f"Could not download timetable image: {e}") from e
    monday = week_start(reference_date or dt.date.today())

    try:
        completion = client.chat.completions.create(
            model=model,
            response_format={"type": "json_object"},
            messages=[
                {"role": "system", "content": load_prompt("timetable_import_prompt")},
                {
                    "role": "user",
                    "content": [
                        {"type": "text", "text": f'The start date for "Monday" of this week is {monday.isoformat()}.'},
                        {"type": "image_url", "image_url": {"url": to_data_url(content, mime_type)}},
                    ],
                },
            ],
        )
    except OpenAIError as e:
        logger.error("Timetable request failed: %s", e)
        raise AssistantError(f"Timetable request failed: {e}") from e

    raw = completion.choices[0].message.content or ""
    logger.debug("Timetable response: %s", raw)
    if not raw.strip():
        raise AssistantError("The model returned an empty response")
    events = events_from_payload(clean_json_response(raw))
    logger.info("Extracted %d event(s) from %s", len(events), path_or_url)
    return events
