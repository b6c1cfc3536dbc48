# -*- coding: utf-8 -*-
"""Tests for the Planner facade: role rules, bulk import and registration wiring."""
import datetime as dt
from dataclasses import replace

import pytest

from planner_server.config import Settings
from planner_server.conflicts import FixedAnswerPrompt, OutcomeStatus
from planner_server.errors import AuthenticationRequired, EventNotFound, PermissionDenied
from planner_server.models import BudgetItem, Event, EventCategory, RegistrationStatus, User, UserRole
from planner_server.notifier import EmailNotifier
from planner_server.planner import Planner

STUDENT = User(id="student-1", name="Amina")
ORGANIZER = User(id="org-1", name="Tech Club", role=UserRole.ORGANIZER)
ADMIN = User(id="admin-1", role=UserRole.ADMIN)


def _event(title: str, category=EventCategory.PERSONAL, date="2026-04-10", time="18:00") -> Event:
    return Event(title=title, date=date, time=time, category=category)


def test_students_cannot_publish_marketplace_events() -> None:
    planner = Planner()
    with pytest.raises(PermissionDenied):
        planner.save_event(STUDENT, _event("Hackathon", EventCategory.ORGANIZER))


def test_organizer_event_defaults_organizer_name() -> None:
    planner = Planner()
    saved = planner.save_event(ORGANIZER, _event("Hackathon", EventCategory.ORGANIZER))
    assert saved.owner_id == "org-1"
    assert saved.organizer_name == "Tech Club"
    assert [e.id for e in planner.marketplace()] == [saved.id]


def test_list_events_is_chronological() -> None:
    planner = Planner()
    planner.save_event(STUDENT, _event("Late", time="20:00"))
    planner.save_event(STUDENT, _event("Early", time="07:00"))
    assert [e.title for e in planner.list_events(STUDENT)] == ["Early", "Late"]


def test_bulk_import_never_creates_marketplace_events() -> None:
    planner = Planner()
    saved = planner.add_events(STUDENT, [_event("Lecture", EventCategory.ACADEMIC), _event("Fair", EventCategory.ORGANIZER)])
    assert [e.category for e in saved] == [EventCategory.ACADEMIC, EventCategory.PERSONAL]
    assert planner.marketplace() == []


def test_delete_event() -> None:
    planner = Planner()
    saved = planner.save_event(STUDENT, _event("Gym"))
    planner.delete_event(STUDENT, saved.id)
    assert planner.list_events(STUDENT) == []
    with pytest.raises(EventNotFound):
        planner.delete_event(STUDENT, saved.id)


def test_find_marketplace_event_ignores_personal_events() -> None:
    planner = Planner()
    personal = planner.save_event(STUDENT, _event("Gym"))
    with pytest.raises(EventNotFound):
        planner.find_marketplace_event(personal.id)


@pytest.mark.asyncio
async def test_register_uses_the_users_current_schedule() -> None:
    planner = Planner(prompt=FixedAnswerPrompt(True))
    gym = planner.save_event(STUDENT, _event("Gym"))
    fair = planner.save_event(ORGANIZER, _event("Career Fair", EventCategory.ORGANIZER))

    outcome = await planner.register(STUDENT, planner.find_marketplace_event(fair.id))

    assert outcome.status is OutcomeStatus.COMMITTED
    assert outcome.rescheduled.id == gym.id
    times = {e.title: e.time for e in planner.list_events(STUDENT)}
    assert times == {"Gym": dt.time(19, 0), "Career Fair": dt.time(18, 0)}
    # The organizer's listing is untouched
    assert planner.events.get(ORGANIZER.id, fair.id).owner_id == ORGANIZER.id


@pytest.mark.asyncio
async def test_register_without_user() -> None:
    with pytest.raises(AuthenticationRequired):
        await Planner().register(None, _event("Gym"))


@pytest.mark.asyncio
async def test_attendees_and_attendance() -> None:
    planner = Planner()
    fair = planner.save_event(ORGANIZER, _event("Career Fair", EventCategory.ORGANIZER))
    await planner.register(STUDENT, fair)

    (registration,) = planner.attendees(ORGANIZER, fair.id)
    assert registration.user_id == STUDENT.id
    assert planner.attendees(ADMIN, fair.id) == [registration]

    with pytest.raises(PermissionDenied):
        planner.attendees(STUDENT, fair.id)
    with pytest.raises(EventNotFound):
        planner.attendees(User(id="org-2", role=UserRole.ORGANIZER), fair.id)

    updated = planner.mark_attendance(ORGANIZER, registration.id, "attended")
    assert updated.status is RegistrationStatus.ATTENDED
    with pytest.raises(PermissionDenied):
        planner.mark_attendance(STUDENT, registration.id, RegistrationStatus.CANCELLED)


@pytest.mark.asyncio
async def test_registered_copies_are_not_listed_in_the_marketplace() -> None:
    planner = Planner()
    fair = planner.save_event(ORGANIZER, _event("Career Fair", EventCategory.ORGANIZER))
    second = User(id="student-2", name="Jonas")

    for student in (STUDENT, second):
        outcome = await planner.register(student, planner.find_marketplace_event(fair.id))
        assert outcome.event.source_owner_id == ORGANIZER.id

    (listing,) = planner.marketplace()
    assert listing.owner_id == ORGANIZER.id
    assert planner.find_marketplace_event(fair.id).owner_id == ORGANIZER.id
    assert len(planner.attendees(ORGANIZER, fair.id)) == 2


@pytest.mark.asyncio
async def test_students_cannot_register_an_unlisted_organizer_event() -> None:
    planner = Planner()
    with pytest.raises(PermissionDenied):
        await planner.register(STUDENT, _event("Fake Gig", EventCategory.ORGANIZER))
    assert planner.marketplace() == []
    assert planner.list_events(STUDENT) == []


@pytest.mark.asyncio
async def test_register_uses_the_stored_listing_for_a_known_id() -> None:
    planner = Planner()
    fair = planner.save_event(ORGANIZER, _event("Career Fair", EventCategory.ORGANIZER))
    tampered = Event(id=fair.id, title="Free Money", date=fair.date, time=fair.time, category=EventCategory.ORGANIZER)

    outcome = await planner.register(STUDENT, tampered)

    assert outcome.event.title == "Career Fair"
    assert [e.title for e in planner.marketplace()] == ["Career Fair"]


@pytest.mark.asyncio
async def test_students_can_edit_their_registered_copy() -> None:
    planner = Planner()
    fair = planner.save_event(ORGANIZER, _event("Career Fair", EventCategory.ORGANIZER))
    outcome = await planner.register(STUDENT, fair)

    items = [BudgetItem(description="Printed CVs", estimated_cost=12)]
    edited = planner.save_event(STUDENT, replace(outcome.event, budget_items=items, source_owner_id=""))

    assert edited.source_owner_id == ORGANIZER.id
    assert edited.total_budget == 12
    assert [e.owner_id for e in planner.marketplace()] == [ORGANIZER.id]
    with pytest.raises(PermissionDenied):
        planner.save_event(STUDENT, _event("Fake Gig", EventCategory.ORGANIZER))


def test_from_settings_configures_email_only_when_url_is_set() -> None:
    assert Planner.from_settings(Settings()).resolver.notifier is None
    notifier = Planner.from_settings(Settings(email_api_url="https://mail.example.com/")).resolver.notifier
    assert isinstance(notifier, EmailNotifier)
    assert notifier.url == "https://mail.example.com/api/auth/send-confirmation"
