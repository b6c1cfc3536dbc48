# -*- coding: utf-8 -*-
"""
Turning a model's reading of a timetable image into calendar events.

The model is asked for JSON but is not trusted to deliver it cleanly, so the
response is cleaned, parsed and every field is validated before an Event is
built from it.
"""
from __future__ import annotations

import datetime as dt
import json
import logging
import re
import typing as t

from planner_server.models import Event, EventCategory, Priority, Task

logger = logging.getLogger(__name__)

# Keyword groups checked in order; the first group with a hit wins
_CATEGORY_KEYWORDS: list[tuple[EventCategory, tuple[str, ...]]] = [
    (EventCategory.ACADEMIC, ("class", "lecture", "lab", "exam", "quiz", "study", "school",
                              "university", "assignment", "homework", "tutorial", "seminar")),
    (EventCategory.SOCIAL, ("party", "club", "hangout", "date", "friend", "meetup")),
    (EventCategory.WORK, ("job", "work", "meeting", "shift", "interview", "career")),
    (EventCategory.PERSONAL, ("personal", "gym", "health", "doctor", "appointment", "errand")),
]

_FENCE = re.compile(r"```(?:json)?", re.IGNORECASE)


class AssistantError(Exception):
    """The model's answer could not be used."""


def map_event_type(raw: t.Optional[str]) -> EventCategory:
    """Map a model-supplied type to a personal category.

    A missing type means a class (the image is a timetable). Unknown types
    become Personal. Organizer is never produced: imported events are private.
    """
    if not raw:
        return EventCategory.ACADEMIC
    lower = raw.strip().lower()
    for category, keywords in _CATEGORY_KEYWORDS:
        if any(keyword in lower for keyword in keywords):
            return category
    category = EventCategory.normalize(lower)
    return EventCategory.PERSONAL if category is EventCategory.ORGANIZER else category


def week_start(reference: dt.date) -> dt.date:
    """Monday of the reference date's week."""
    return reference - dt.timedelta(days=reference.weekday())


def clean_json_response(text: str) -> t.Any:
    """Strip code fences and parse the outermost JSON array or object.

    :raises AssistantError: If no JSON can be recovered.
    """
    cleaned = _FENCE.sub("", text).strip()
    first, last = cleaned.find("["), cleaned.rfind("]")
    if first == -1 or last == -1:
        first, last = cleaned.find("{"), cleaned.rfind("}")
    if first != -1 and last != -1:
        cleaned = cleaned[first:last + 1]
    try:
        return json.loads(cleaned)
    except json.JSONDecodeError as e:
        raise AssistantError(f"Failed to parse schedule from AI response: {e}") from e


def _items(payload: t.Any) -> list[dict]:
    if isinstance(payload, dict):
        payload = payload.get("events", [])
    if not isinstance(payload, list):
        raise AssistantError("AI response does not contain a list of events")
    return [item for item in payload if isinstance(item, dict)]


def _priority(raw: t.Any) -> Priority:
    for priority in Priority:
        if isinstance(raw, str) and raw.strip().lower() == priority.value.lower():
            return priority
    return Priority.MEDIUM


def events_from_payload(payload: t.Any) -> list[Event]:
    """Build events from parsed model output, skipping unusable rows.

    Academic events are High priority with no budget; other events keep the
    priority the model gave (Medium if missing or invalid).
    """
    events: list[Event] = []
    for item in _items(payload):
        category = map_event_type(item.get("type") or item.get("category"))
        try:
            tasks = [
                Task(title=task.get("title", "") or "Task", status=task.get("status") or "Pending")
                for task in item.get("tasks", []) or []
                if isinstance(task, dict)
            ]
            if category is EventCategory.ACADEMIC:
                priority = Priority.HIGH
            else:
                priority = _priority(item.get("priority"))
            events.append(
                Event(
                    title=item.get("title", "") or "Untitled",
                    date=item["date"],
                    time=item["time"],
                    category=category,
                    location=item.get("location", "") or "",
                    description=item.get("description", "") or "Extracted from timetable",
                    tasks=tasks,
                    priority=priority,
                )
            )
        except (KeyError, TypeError, ValueError) as e:
            logger.warning("Skipping timetable row %r: %s", item.get("title"), e)
    return events
