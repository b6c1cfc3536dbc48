# -*- coding: utf-8 -*-
"""Budget and dashboard figures computed from a user's events."""
from __future__ import annotations

import datetime as dt
import typing as t
from dataclasses import dataclass, field

from .models import Event, Priority, TaskStatus, UserRole


@dataclass
class BudgetSummary:
    total_budget: float
    total_spent: float
    variance: float
    percentage_spent: float
    highest_spending_event: t.Optional[Event] = None
    over_budget_events: list[Event] = field(default_factory=list)

    @property
    def is_over_budget(self) -> bool:
        return self.total_spent > self.total_budget


@dataclass
class DashboardStats:
    total_events: int
    upcoming_events: int
    high_priority: int
    total_budget: float
    total_spent: float


def summarize_budget(events: t.Sequence[Event]) -> BudgetSummary:
    """Aggregate budget figures across events.

    Percentage spent is 0 when nothing was budgeted. The highest-spending
    event is None for an empty schedule.
    """
    total_budget = sum(e.total_budget for e in events)
    total_spent = sum(e.total_spent for e in events)
    percentage = (total_spent / total_budget) * 100 if total_budget > 0 else 0.0
    highest = max(events, key=lambda e: e.total_spent) if events else None
    return BudgetSummary(
        total_budget=total_budget,
        total_spent=total_spent,
        variance=total_budget - total_spent,
        percentage_spent=round(percentage, 2),
        highest_spending_event=highest,
        over_budget_events=[e for e in events if e.is_over_budget],
    )


def dashboard_stats(events: t.Sequence[Event], now: t.Optional[dt.datetime] = None) -> DashboardStats:
    now = now or dt.datetime.now()
    return DashboardStats(
        total_events=len(events),
        upcoming_events=sum(1 for e in events if e.starts_at > now),
        high_priority=sum(1 for e in events if e.priority is Priority.HIGH),
        total_budget=sum(e.total_budget for e in events),
        total_spent=sum(e.total_spent for e in events),
    )


def sort_chronologically(events: t.Iterable[Event]) -> list[Event]:
    return sorted(events, key=lambda e: e.starts_at)


def task_progress(event: Event) -> float:
    """Percentage of an event's tasks that are completed (0 when it has none)."""
    if not event.tasks:
        return 0.0
    done = sum(1 for task in event.tasks if task.status is TaskStatus.COMPLETED)
    return round(done / len(event.tasks) * 100, 2)


# Landing view per role
HOME_VIEWS = {
    UserRole.ADMIN: "admin",
    UserRole.ORGANIZER: "events",
    UserRole.STUDENT: "dashboard",
}


def home_view(role: t.Union[str, UserRole]) -> str:
    return HOME_VIEWS[UserRole(role)]
