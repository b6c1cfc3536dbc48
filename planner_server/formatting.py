# -*- coding: utf-8 -*-
"""Plain-text views of schedules, budgets and registration outcomes."""
from __future__ import annotations

import typing as t

from .analytics import BudgetSummary
from .conflicts import OutcomeStatus, RegistrationOutcome, RegistrationSignal
from .models import Event, format_time


def _format_when(event: Event) -> str:
    """Formats an event's date and time as 'Tue 3/10 9:00 AM'."""
    return event.starts_at.strftime("%a %-m/%-d %-I:%M %p")


def _clip(text: str, width: int) -> str:
    return text[:width - 1] if len(text) > width - 1 else text


def format_events(events: t.Sequence[Event]) -> str:
    """Format events as a clean table.

    :param events: Events in display order.
    :return: Formatted table string of the events.
    """
    if not events:
        return "📅 No events found."

    lines = []
    lines.append("📅 EVENTS")
    lines.append("=" * 100)
    lines.append(f"{'#':<4} {'Title':<35} {'When':<18} {'Category':<10} {'Location':<20} {'Budget':>9}")
    lines.append("-" * 100)

    for idx, event in enumerate(events, 1):
        location = _clip(event.location, 20) if event.location else "—"
        lines.append(
            f"{idx:<4} {_clip(event.title, 35):<35} {_format_when(event):<18} "
            f"{event.category.value:<10} {location:<20} {event.total_budget:>9.2f}"
        )

    lines.append("=" * 100)
    lines.append(f"Total: {len(events)} event(s)")
    return "\n".join(lines)


def format_budget_summary(summary: BudgetSummary) -> str:
    lines = []
    lines.append("💰 BUDGET SUMMARY")
    lines.append("=" * 60)
    lines.append(f"{'Total budget':<24} {summary.total_budget:>12.2f}")
    lines.append(f"{'Total spent':<24} {summary.total_spent:>12.2f}")
    lines.append(f"{'Remaining':<24} {summary.variance:>12.2f}")
    lines.append(f"{'Spent':<24} {summary.percentage_spent:>11.1f}%")
    if summary.highest_spending_event is not None:
        lines.append(f"{'Highest spending':<24} {summary.highest_spending_event.title}")
    if summary.is_over_budget:
        lines.append("⚠️  You have exceeded your total budget!")
    lines.append("-" * 60)
    if summary.over_budget_events:
        lines.append("Over budget:")
        for event in summary.over_budget_events:
            lines.append(f"  {event.title}: {event.total_spent:.2f} of {event.total_budget:.2f}")
    else:
        lines.append("All events are within budget!")
    return "\n".join(lines)


def describe_outcome(outcome: RegistrationOutcome, candidate: Event) -> str:
    """One message per outcome, suitable for an alert or a tool result."""
    if outcome.status is OutcomeStatus.SCHEDULING_BLOCKED:
        return (
            f'Cannot register for "{candidate.title}" because you have a class '
            f'"{outcome.blocked_by}" at this time.'
        )
    if outcome.status is OutcomeStatus.CANCELLED:
        return f'Registration for "{candidate.title}" was cancelled.'

    messages = []
    if outcome.rescheduled is not None:
        messages.append(
            f'Moved "{outcome.rescheduled.title}" to {format_time(outcome.rescheduled.time)}.'
        )
    if RegistrationSignal.ALREADY_REGISTERED in outcome.signals:
        messages.append("You are already registered for this event.")
    if RegistrationSignal.REGISTRATION_WARNING in outcome.signals:
        messages.append("Failed to register on server. Adding to personal calendar anyway.")
    messages.append(f'"{candidate.title}" is on your calendar.')
    return " ".join(messages)
