# -*- coding: utf-8 -*-
from __future__ import annotations

import typing as t

from .models import Event


def list_marketplace_events(events: t.Iterable[Event], search: str = "") -> list[Event]:
    """Published organizer events matching a search term, soonest first.

    Registrants' calendar copies of a listing are left out.

    :param events: Events from every owner.
    :param search: Case-insensitive text matched against title or organizer name.
    :return: The matching marketplace events sorted by date then time.
    """
    term = search.strip().lower()
    matches = [
        e for e in events
        if e.is_marketplace_event
        and (not term or term in e.title.lower() or term in e.organizer_name.lower())
    ]
    return sorted(matches, key=lambda e: (e.date, e.time))
