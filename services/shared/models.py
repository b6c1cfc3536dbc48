"""
Shared Pydantic models for REST API serialization.

This module contains Pydantic equivalents of the planner dataclasses, with
conversions both ways, so every endpoint serializes events the same way.
"""
from __future__ import annotations

import datetime as dt
import typing as t
from dataclasses import asdict

from pydantic import BaseModel, Field, field_validator

from planner_server.analytics import BudgetSummary, DashboardStats
from planner_server.conflicts import RegistrationOutcome
from planner_server.models import (
    BudgetItem,
    Event,
    EventCategory,
    Priority,
    Registration,
    RegistrationStatus,
    Task,
    TaskStatus,
    User,
    UserRole,
)


def _id_of(model: BaseModel) -> dict[str, str]:
    """Keep a client-supplied id; let the dataclass generate one otherwise."""
    return {"id": model.id} if getattr(model, "id", None) else {}


class TaskModel(BaseModel):
    id: t.Optional[str] = None
    title: str
    status: TaskStatus = TaskStatus.PENDING
    deadline: t.Optional[dt.date] = None


class BudgetItemModel(BaseModel):
    id: t.Optional[str] = None
    description: str
    estimated_cost: float = Field(default=0.0, ge=0)
    actual_cost: float = Field(default=0.0, ge=0)
    paid: bool = False


class EventModel(BaseModel):
    """An event as sent and received over HTTP; id is assigned when missing."""
    id: t.Optional[str] = None
    title: str
    date: dt.date
    time: dt.time
    category: EventCategory = EventCategory.PERSONAL
    location: str = ""
    description: str = ""
    tasks: list[TaskModel] = Field(default_factory=list)
    budget_items: list[BudgetItemModel] = Field(default_factory=list)
    total_budget: float = 0.0
    total_spent: float = 0.0
    priority: Priority = Priority.MEDIUM
    organizer_name: str = ""
    owner_id: str = ""
    source_owner_id: str = ""

    @field_validator("category", mode="before")
    @classmethod
    def _normalize_category(cls, value: t.Any) -> EventCategory:
        return EventCategory.normalize(value)

    @classmethod
    def from_domain(cls, event: Event) -> "EventModel":
        return cls.model_validate(event, from_attributes=True)

    def to_domain(self) -> Event:
        return Event(
            title=self.title,
            date=self.date,
            time=self.time,
            category=self.category,
            location=self.location,
            description=self.description,
            tasks=[Task(**task.model_dump(exclude_none=True)) for task in self.tasks],
            budget_items=[BudgetItem(**item.model_dump(exclude_none=True)) for item in self.budget_items],
            total_budget=self.total_budget,
            total_spent=self.total_spent,
            priority=self.priority,
            organizer_name=self.organizer_name,
            owner_id=self.owner_id,
            source_owner_id=self.source_owner_id,
            **_id_of(self),
        )


class UserModel(BaseModel):
    id: str
    name: str = ""
    email: t.Optional[str] = None
    role: UserRole = UserRole.STUDENT

    def to_domain(self) -> User:
        return User(id=self.id, name=self.name, email=self.email, role=self.role)


class RegistrationModel(BaseModel):
    id: str
    event_id: str
    user_id: str
    status: RegistrationStatus
    created_at: dt.datetime

    @classmethod
    def from_domain(cls, registration: Registration) -> "RegistrationModel":
        return cls.model_validate(registration, from_attributes=True)


# Request/Response Models for API endpoints
class SaveEventRequest(BaseModel):
    """Request model for creating or updating an event."""
    user: UserModel
    event: EventModel


class AddEventsRequest(BaseModel):
    """Request model for adding several events at once (timetable import)."""
    user: UserModel
    events: list[EventModel]


class RegisterEventRequest(BaseModel):
    """Request model for registering for an event.

    Either event_id (a marketplace event) or event (a personal event) is given.
    """
    user: UserModel
    event_id: t.Optional[str] = None
    event: t.Optional[EventModel] = None
    accept_reschedule: bool = False


class RegistrationOutcomeResponse(BaseModel):
    """Response model for a registration attempt."""
    status: str
    message: str
    event: t.Optional[EventModel] = None
    blocked_by: t.Optional[str] = None
    rescheduled: t.Optional[EventModel] = None
    signals: list[str] = Field(default_factory=list)

    @classmethod
    def from_outcome(cls, outcome: RegistrationOutcome, message: str) -> "RegistrationOutcomeResponse":
        return cls(
            status=outcome.status.value,
            message=message,
            event=EventModel.from_domain(outcome.event) if outcome.event else None,
            blocked_by=outcome.blocked_by,
            rescheduled=EventModel.from_domain(outcome.rescheduled) if outcome.rescheduled else None,
            signals=[s.value for s in outcome.signals],
        )


class UpdateAttendanceRequest(BaseModel):
    """Request model for marking a registration attended or cancelled."""
    user: UserModel
    registration_id: str
    status: RegistrationStatus


class BudgetSummaryResponse(BaseModel):
    """Response model for the budget analytics view."""
    total_budget: float
    total_spent: float
    variance: float
    percentage_spent: float
    highest_spending_event: t.Optional[str] = None
    over_budget_events: list[str] = Field(default_factory=list)

    @classmethod
    def from_summary(cls, summary: BudgetSummary) -> "BudgetSummaryResponse":
        highest = summary.highest_spending_event
        return cls(
            total_budget=summary.total_budget,
            total_spent=summary.total_spent,
            variance=summary.variance,
            percentage_spent=summary.percentage_spent,
            highest_spending_event=highest.title if highest else None,
            over_budget_events=[e.title for e in summary.over_budget_events],
        )


class DashboardResponse(BaseModel):
    """Response model for the dashboard view."""
    home_view: str
    total_events: int
    upcoming_events: int
    high_priority: int
    total_budget: float
    total_spent: float

    @classmethod
    def from_stats(cls, stats: DashboardStats, home_view: str) -> "DashboardResponse":
        return cls(home_view=home_view, **asdict(stats))
