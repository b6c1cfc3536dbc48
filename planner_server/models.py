"""
Data models for the planner server: events, tasks, budget items and registrations.

This module contains all the dataclasses and closed enumerations used to
represent a student's schedule. Raw values coming from forms, the JSON state
file or the model are validated here, at the boundary.
"""
from __future__ import annotations

import datetime as dt
import typing as t
import uuid
from dataclasses import dataclass, field
from enum import Enum


class EventCategory(str, Enum):
    """Closed set of event categories."""
    ACADEMIC = "Academic"
    PERSONAL = "Personal"
    SOCIAL = "Social"
    WORK = "Work"
    ORGANIZER = "Organizer"

    @classmethod
    def normalize(cls, value: t.Any) -> "EventCategory":
        """Map a raw category to a member, falling back to Personal.

        :param value: A member, its value, or anything else.
        :return: The matching category, or PERSONAL for unknown/empty input.
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            for member in cls:
                if member.value.lower() == value.strip().lower():
                    return member
        return cls.PERSONAL


class Priority(str, Enum):
    HIGH = "High"
    MEDIUM = "Medium"
    LOW = "Low"


class TaskStatus(str, Enum):
    PENDING = "Pending"
    IN_PROGRESS = "In Progress"
    COMPLETED = "Completed"


class RegistrationStatus(str, Enum):
    REGISTERED = "registered"
    ATTENDED = "attended"
    CANCELLED = "cancelled"


class UserRole(str, Enum):
    STUDENT = "student"
    ORGANIZER = "organizer"
    ADMIN = "admin"


def new_id() -> str:
    """Generate an opaque identifier for a new record."""
    return uuid.uuid4().hex


def parse_date(value: t.Union[str, dt.date]) -> dt.date:
    """Parse a 'YYYY-MM-DD' string (or pass a date through)."""
    if isinstance(value, dt.datetime):
        return value.date()
    if isinstance(value, dt.date):
        return value
    return dt.date.fromisoformat(value.strip()[:10])


def parse_time(value: t.Union[str, dt.time]) -> dt.time:
    """Parse an 'HH:MM' or 'HH:MM:SS' wall-clock string (or pass a time through)."""
    if isinstance(value, dt.time):
        return value
    return dt.time.fromisoformat(value.strip())


def format_time(value: dt.time) -> str:
    """Format a wall-clock time as 'HH:MM'."""
    return value.strftime("%H:%M")


@dataclass
class User:
    """The acting user, as known to the auth provider."""
    id: str
    name: str = ""
    email: t.Optional[str] = None
    role: UserRole = UserRole.STUDENT

    def __post_init__(self) -> None:
        self.role = UserRole(self.role)


@dataclass
class Task:
    """A to-do item attached to an event."""
    title: str
    status: TaskStatus = TaskStatus.PENDING
    deadline: t.Optional[dt.date] = None
    id: str = field(default_factory=new_id)

    def __post_init__(self) -> None:
        self.status = TaskStatus(self.status)
        if self.deadline:
            self.deadline = parse_date(self.deadline)


@dataclass
class BudgetItem:
    """A line in an event's budget."""
    description: str
    estimated_cost: float = 0.0
    actual_cost: float = 0.0
    paid: bool = False
    id: str = field(default_factory=new_id)

    def __post_init__(self) -> None:
        if self.estimated_cost < 0 or self.actual_cost < 0:
            raise ValueError(f"Budget item '{self.description}' has a negative cost")


@dataclass
class Event:
    """Represents a scheduled event with its tasks and budget."""
    title: str
    date: dt.date
    time: dt.time
    category: EventCategory = EventCategory.PERSONAL
    location: str = ""
    description: str = ""
    tasks: list[Task] = field(default_factory=list)
    budget_items: list[BudgetItem] = field(default_factory=list)
    total_budget: float = 0.0
    total_spent: float = 0.0
    priority: Priority = Priority.MEDIUM
    owner_id: str = ""
    organizer_name: str = ""
    # Owner of the listing a registration copy was taken from; empty for originals
    source_owner_id: str = ""
    id: str = field(default_factory=new_id)

    def __post_init__(self) -> None:
        self.date = parse_date(self.date)
        self.time = parse_time(self.time)
        self.category = EventCategory.normalize(self.category)
        self.priority = Priority(self.priority)
        self.recalculate_totals()

    def recalculate_totals(self) -> None:
        """Keep the totals equal to the budget item sums whenever items exist."""
        if self.budget_items:
            self.total_budget = sum(item.estimated_cost for item in self.budget_items)
            self.total_spent = sum(item.actual_cost for item in self.budget_items)

    @property
    def starts_at(self) -> dt.datetime:
        return dt.datetime.combine(self.date, self.time)

    @property
    def is_marketplace_event(self) -> bool:
        """A published listing, not a registrant's calendar copy of one."""
        return self.category is EventCategory.ORGANIZER and not self.source_owner_id

    @property
    def is_over_budget(self) -> bool:
        return self.total_spent > self.total_budget


@dataclass
class Registration:
    """A user's registration for a marketplace event."""
    event_id: str
    user_id: str
    status: RegistrationStatus = RegistrationStatus.REGISTERED
    created_at: dt.datetime = field(default_factory=dt.datetime.now)
    id: str = field(default_factory=new_id)
