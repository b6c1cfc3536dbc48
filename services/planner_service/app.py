"""
FastAPI service for planner operations.

This service exposes the planner core as REST API endpoints: personal
events, marketplace registration with conflict resolution, attendance and
budget analytics. Confirmation of a reschedule travels with the request as
the accept_reschedule flag.
"""
from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException

from planner_server.analytics import dashboard_stats, home_view, summarize_budget
from planner_server.config import load_settings
from planner_server.conflicts import FixedAnswerPrompt
from planner_server.errors import (
    AuthenticationRequired,
    EventNotFound,
    PermissionDenied,
    PlannerError,
    RegistrationNotFound,
)
from planner_server.formatting import describe_outcome
from planner_server.models import User, UserRole
from planner_server.planner import Planner
from services.shared.models import (
    AddEventsRequest,
    BudgetSummaryResponse,
    DashboardResponse,
    EventModel,
    RegisterEventRequest,
    RegistrationModel,
    RegistrationOutcomeResponse,
    SaveEventRequest,
    UpdateAttendanceRequest,
)

logger = logging.getLogger(__name__)

settings = load_settings()

# In-memory schedule; the hosted backend plays this role in production
planner = Planner.from_settings(settings)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Initialize resources on startup and cleanup on shutdown."""
    yield
    # Let in-flight confirmation emails finish
    await planner.resolver.drain()


app = FastAPI(
    title="Planner Service",
    description="REST API for student events, marketplace registration and budgets",
    version="1.0.0",
    lifespan=lifespan,
)


def _http_error(e: PlannerError) -> HTTPException:
    """Map planner failures onto HTTP status codes."""
    if isinstance(e, (EventNotFound, RegistrationNotFound)):
        return HTTPException(status_code=404, detail=str(e))
    if isinstance(e, PermissionDenied):
        return HTTPException(status_code=403, detail=str(e))
    if isinstance(e, AuthenticationRequired):
        return HTTPException(status_code=401, detail=str(e))
    logger.error("Planner error: %s", e)
    return HTTPException(status_code=500, detail=f"Error saving to the planner store: {e}")


@app.get("/health")
async def health_check():
    """Health check endpoint for container orchestration."""
    return {"status": "healthy", "service": "planner-service"}


@app.post("/save-event", response_model=EventModel)
async def save_event(request: SaveEventRequest) -> EventModel:
    """
    Create or update one of the user's events.

    Budget totals are recomputed from the budget items when there are any.
    """
    try:
        saved = planner.save_event(request.user.to_domain(), request.event.to_domain())
    except PlannerError as e:
        raise _http_error(e)
    return EventModel.from_domain(saved)


@app.post("/add-events", response_model=list[EventModel])
async def add_events(request: AddEventsRequest) -> list[EventModel]:
    """Add several events at once, e.g. the result of a timetable import."""
    try:
        saved = planner.add_events(request.user.to_domain(), [e.to_domain() for e in request.events])
    except PlannerError as e:
        raise _http_error(e)
    return [EventModel.from_domain(e) for e in saved]


@app.get("/list-events", response_model=list[EventModel])
async def list_events(user_id: str) -> list[EventModel]:
    """List the user's events in chronological order."""
    return [EventModel.from_domain(e) for e in planner.list_events(User(id=user_id))]


@app.delete("/events/{event_id}")
async def delete_event(event_id: str, user_id: str):
    try:
        planner.delete_event(User(id=user_id), event_id)
    except PlannerError as e:
        raise _http_error(e)
    return {"deleted": event_id}


@app.get("/marketplace", response_model=list[EventModel])
async def marketplace(search: str = "") -> list[EventModel]:
    """List organizer events open for registration, soonest first."""
    return [EventModel.from_domain(e) for e in planner.marketplace(search)]


@app.post("/register-event", response_model=RegistrationOutcomeResponse)
async def register_event(request: RegisterEventRequest) -> RegistrationOutcomeResponse:
    """
    Register for an event and add it to the user's calendar.

    A clash with a class is reported as scheduling_blocked. A clash with
    another event is moved one hour later only when accept_reschedule is set;
    otherwise the outcome is cancelled.
    """
    if request.event is None and request.event_id is None:
        raise HTTPException(status_code=422, detail="Provide either event_id or event")
    try:
        if request.event is not None:
            event = request.event.to_domain()
        else:
            event = planner.find_marketplace_event(request.event_id)
        outcome = await planner.register(
            request.user.to_domain(),
            event,
            prompt=FixedAnswerPrompt(request.accept_reschedule),
        )
    except PlannerError as e:
        raise _http_error(e)
    return RegistrationOutcomeResponse.from_outcome(outcome, describe_outcome(outcome, event))


@app.get("/events/{event_id}/attendees", response_model=list[RegistrationModel])
async def list_attendees(event_id: str, user_id: str, role: UserRole = UserRole.ORGANIZER) -> list[RegistrationModel]:
    """List registrations for an event the acting organizer owns."""
    user = User(id=user_id, role=role)
    try:
        registrations = planner.attendees(user, event_id)
    except PlannerError as e:
        raise _http_error(e)
    return [RegistrationModel.from_domain(r) for r in registrations]


@app.post("/update-attendance", response_model=RegistrationModel)
async def update_attendance(request: UpdateAttendanceRequest) -> RegistrationModel:
    try:
        registration = planner.mark_attendance(
            request.user.to_domain(), request.registration_id, request.status
        )
    except PlannerError as e:
        raise _http_error(e)
    return RegistrationModel.from_domain(registration)


@app.get("/budget-summary", response_model=BudgetSummaryResponse)
async def budget_summary(user_id: str) -> BudgetSummaryResponse:
    """Budget totals, remaining amount and over-budget events."""
    return BudgetSummaryResponse.from_summary(summarize_budget(planner.list_events(User(id=user_id))))


@app.get("/dashboard", response_model=DashboardResponse)
async def dashboard(user_id: str, role: UserRole = UserRole.STUDENT) -> DashboardResponse:
    user = User(id=user_id, role=role)
    stats = dashboard_stats(planner.list_events(user))
    return DashboardResponse.from_stats(stats, home_view(user.role))


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=settings.service_port)
