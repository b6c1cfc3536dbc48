# -*- coding: utf-8 -*-
"""Tests for the in-memory stores and the JSON state file."""
import datetime as dt
from dataclasses import replace

import pytest

from planner_server.errors import DuplicateRegistration, EventNotFound, RegistrationNotFound, StoreError
from planner_server.models import BudgetItem, Event, EventCategory, RegistrationStatus, Task, TaskStatus
from planner_server.store import (
    InMemoryEventStore,
    InMemoryRegistrationStore,
    load_state,
    save_state,
)


def _event(title: str, owner_id: str = "u1", **kwargs) -> Event:
    return Event(title=title, date="2026-03-10", time="09:00", owner_id=owner_id, **kwargs)


def test_upsert_requires_owner() -> None:
    with pytest.raises(StoreError):
        InMemoryEventStore().upsert(_event("Orphan", owner_id=""))


def test_list_by_user_returns_only_that_users_events_in_insertion_order() -> None:
    store = InMemoryEventStore([_event("B"), _event("A"), _event("Other", owner_id="u2")])
    assert [e.title for e in store.list_by_user("u1")] == ["B", "A"]
    assert [e.title for e in store.list_by_user("u2")] == ["Other"]


def test_same_event_id_may_belong_to_several_owners() -> None:
    """A student's copy of a marketplace event does not replace the organizer's."""
    store = InMemoryEventStore()
    original = store.upsert(_event("Hackathon", owner_id="org", category=EventCategory.ORGANIZER))
    store.upsert(replace(original, owner_id="student"))

    assert store.get("org", original.id).owner_id == "org"
    assert store.get("student", original.id).owner_id == "student"
    assert len(store.list_all()) == 2


def test_store_returns_copies() -> None:
    store = InMemoryEventStore()
    saved = store.upsert(_event("Gym"))
    saved.title = "Changed outside"
    assert store.get("u1", saved.id).title == "Gym"


def test_upsert_recalculates_totals() -> None:
    store = InMemoryEventStore()
    event = _event("Party", budget_items=[BudgetItem("Snacks", 20.0, 25.0)])
    event.budget_items.append(BudgetItem("Drinks", 30.0, 10.0))
    saved = store.upsert(event)
    assert (saved.total_budget, saved.total_spent) == (50.0, 35.0)


def test_get_and_delete_missing_event() -> None:
    store = InMemoryEventStore()
    with pytest.raises(EventNotFound):
        store.get("u1", "nope")
    with pytest.raises(EventNotFound):
        store.delete("u1", "nope")


def test_duplicate_registration_is_rejected() -> None:
    store = InMemoryRegistrationStore()
    store.insert("e1", "u1")
    with pytest.raises(DuplicateRegistration) as excinfo:
        store.insert("e1", "u1")
    assert (excinfo.value.event_id, excinfo.value.user_id) == ("e1", "u1")
    assert isinstance(excinfo.value, StoreError)
    # A different user may still register
    store.insert("e1", "u2")
    assert len(store.list_by_event("e1")) == 2


def test_update_status() -> None:
    store = InMemoryRegistrationStore()
    registration = store.insert("e1", "u1")
    updated = store.update_status(registration.id, "attended")
    assert updated.status is RegistrationStatus.ATTENDED
    with pytest.raises(RegistrationNotFound):
        store.update_status("missing", RegistrationStatus.CANCELLED)


def test_state_file_round_trip(tmp_path) -> None:
    """Events, nested tasks and budget items and registrations survive a save and load."""
    path = tmp_path / "state.json"
    events = InMemoryEventStore()
    event = events.upsert(_event(
        "Spring Formal",
        category=EventCategory.ORGANIZER,
        tasks=[Task("Book DJ", status=TaskStatus.COMPLETED, deadline="2026-03-01")],
        budget_items=[BudgetItem("Venue", 300.0, 320.0, paid=True)],
    ))
    registrations = InMemoryRegistrationStore()
    registrations.insert(event.id, "student-1")

    save_state(path, events, registrations)
    loaded_events, loaded_registrations = load_state(path)

    restored = loaded_events.get("u1", event.id)
    assert restored == event
    assert restored.date == dt.date(2026, 3, 10)
    assert restored.tasks[0].status is TaskStatus.COMPLETED
    assert [r.user_id for r in loaded_registrations.list_by_event(event.id)] == ["student-1"]


def test_missing_state_file_gives_empty_stores(tmp_path) -> None:
    events, registrations = load_state(tmp_path / "absent.json")
    assert events.list_all() == []
    assert registrations.list_all() == []
