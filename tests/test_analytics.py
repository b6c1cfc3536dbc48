# -*- coding: utf-8 -*-
"""Tests for budget analytics, dashboard figures and the marketplace listing."""
import datetime as dt

from planner_server.analytics import (
    dashboard_stats,
    home_view,
    sort_chronologically,
    summarize_budget,
    task_progress,
)
from planner_server.formatting import format_budget_summary, format_events
from planner_server.marketplace import list_marketplace_events
from planner_server.models import Event, EventCategory, Priority, Task, TaskStatus, UserRole


def _event(title: str, date: str = "2026-03-10", time: str = "09:00", **kwargs) -> Event:
    return Event(title=title, date=date, time=time, **kwargs)


def test_budget_summary_totals_and_over_budget_events() -> None:
    events = [
        _event("Formal", total_budget=500.0, total_spent=620.0),
        _event("Trip", total_budget=300.0, total_spent=100.0),
    ]
    summary = summarize_budget(events)

    assert summary.total_budget == 800.0
    assert summary.total_spent == 720.0
    assert summary.variance == 80.0
    assert summary.percentage_spent == 90.0
    assert summary.highest_spending_event.title == "Formal"
    assert [e.title for e in summary.over_budget_events] == ["Formal"]
    assert not summary.is_over_budget


def test_budget_summary_of_empty_schedule() -> None:
    """No events: zero totals, zero percentage and no highest spender."""
    summary = summarize_budget([])
    assert summary.percentage_spent == 0.0
    assert summary.highest_spending_event is None
    assert summary.over_budget_events == []


def test_percentage_is_zero_without_budget() -> None:
    summary = summarize_budget([_event("Free concert", total_spent=15.0)])
    assert summary.percentage_spent == 0.0
    assert summary.is_over_budget


def test_dashboard_counts_upcoming_and_high_priority() -> None:
    now = dt.datetime(2026, 3, 10, 12, 0)
    events = [
        _event("Morning", time="09:00", priority=Priority.HIGH),
        _event("Evening", time="18:00", priority=Priority.HIGH, total_budget=40.0),
        _event("Tomorrow", date="2026-03-11", total_spent=5.0),
    ]
    stats = dashboard_stats(events, now=now)
    assert stats.total_events == 3
    assert stats.upcoming_events == 2
    assert stats.high_priority == 2
    assert (stats.total_budget, stats.total_spent) == (40.0, 5.0)


def test_sort_chronologically_uses_date_then_time() -> None:
    events = [_event("C", date="2026-03-11"), _event("B", time="10:00"), _event("A", time="08:00")]
    assert [e.title for e in sort_chronologically(events)] == ["A", "B", "C"]


def test_task_progress() -> None:
    event = _event("Formal", tasks=[
        Task("Venue", status=TaskStatus.COMPLETED),
        Task("DJ", status=TaskStatus.IN_PROGRESS),
        Task("Tickets"),
        Task("Decor", status=TaskStatus.COMPLETED),
    ])
    assert task_progress(event) == 50.0
    assert task_progress(_event("Empty")) == 0.0


def test_home_view_per_role() -> None:
    assert home_view(UserRole.ADMIN) == "admin"
    assert home_view("organizer") == "events"
    assert home_view(UserRole.STUDENT) == "dashboard"


def test_marketplace_lists_only_organizer_events_sorted_and_filtered() -> None:
    events = [
        _event("Music Festival", date="2026-05-01", category=EventCategory.ORGANIZER, organizer_name="Arts Council"),
        _event("Hackathon 2026", date="2026-04-10", category=EventCategory.ORGANIZER, organizer_name="Tech Club"),
        _event("Gym", category=EventCategory.PERSONAL),
    ]
    assert [e.title for e in list_marketplace_events(events)] == ["Hackathon 2026", "Music Festival"]
    assert [e.title for e in list_marketplace_events(events, "tech")] == ["Hackathon 2026"]
    assert [e.title for e in list_marketplace_events(events, "FESTIVAL")] == ["Music Festival"]
    assert list_marketplace_events(events, "gym") == []


def test_format_events() -> None:
    assert format_events([]) == "📅 No events found."
    text = format_events([_event("Calculus Lecture", category=EventCategory.ACADEMIC, location="Room 101")])
    assert "Calculus Lecture" in text
    assert "Tue 3/10 9:00 AM" in text
    assert "Academic" in text
    assert text.endswith("Total: 1 event(s)")


def test_format_budget_summary_flags_overspending() -> None:
    text = format_budget_summary(summarize_budget([_event("Formal", total_budget=100.0, total_spent=150.0)]))
    assert "You have exceeded your total budget!" in text
    assert "Formal: 150.00 of 100.00" in text
    text = format_budget_summary(summarize_budget([_event("Trip", total_budget=100.0, total_spent=50.0)]))
    assert "All events are within budget!" in text
