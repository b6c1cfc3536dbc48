# -*- coding: utf-8 -*-
import typing as t

from fastmcp import FastMCP

from planner_server.analytics import summarize_budget
from planner_server.config import load_settings
from planner_server.conflicts import FixedAnswerPrompt
from planner_server.formatting import describe_outcome, format_budget_summary, format_events
from planner_server.models import Event, Priority, User, UserRole
from planner_server.planner import Planner

mcp = FastMCP("PlannerServer")

# In-memory schedule; the hosted backend plays this role in production
planner = Planner.from_settings(load_settings())


def _user(user_id: str, name: str = "", email: t.Optional[str] = None, role: str = "student") -> User:
    return User(id=user_id, name=name, email=email, role=UserRole(role))


@mcp.tool()
def create_event(
        user_id: str,
        title: str,
        date: str,
        time: str,
        category: str = "Personal",
        location: str = "",
        description: str = "",
        priority: str = "Medium",
        role: str = "student",
        user_name: str = "",
) -> Event:
    """Creates an event on the user's calendar.

    :param user_id: Id of the acting user.
    :param title: Title of the event.
    :param date: Date in YYYY-MM-DD format.
    :param time: Start time in HH:MM (24h) format.
    :param category: Academic, Personal, Social, Work or Organizer; unknown values become Personal.
    :param location: Location of the event (optional).
    :param description: Free text description (optional).
    :param priority: High, Medium or Low.
    :param role: Role of the acting user; only organizers may create Organizer events.
    :param user_name: Display name, used as organizer name for marketplace events.
    :return: The stored Event.
    """
    event = Event(
        title=title,
        date=date,
        time=time,
        category=category,
        location=location,
        description=description,
        priority=Priority(priority),
    )
    return planner.save_event(_user(user_id, user_name, role=role), event)


@mcp.tool()
def list_events(user_id: str) -> list[Event]:
    """Lists the user's events in chronological order.

    :param user_id: Id of the acting user.
    :return: A list of Event objects.
    """
    return planner.list_events(_user(user_id))


@mcp.tool()
def show_events(user_id: str) -> str:
    """Displays the user's events as a formatted table.

    :param user_id: Id of the acting user.
    :return: Formatted table, or a message if the user has no events.
    """
    return format_events(planner.list_events(_user(user_id)))


@mcp.tool()
def list_marketplace_events(search: str = "") -> list[Event]:
    """Lists organizer-posted events open for registration.

    :param search: Optional text matched against title or organizer name.
    :return: Matching marketplace events, soonest first.
    """
    return planner.marketplace(search)


@mcp.tool()
async def register_for_event(
        user_id: str,
        event_id: str,
        email: str = "",
        user_name: str = "",
        accept_reschedule: bool = False,
) -> str:
    """Registers the user for a marketplace event and adds it to their calendar.

    A clash with a class blocks the registration. A clash with any other
    event moves that event one hour later, but only if accept_reschedule is set.

    :param user_id: Id of the acting user.
    :param event_id: Id of the marketplace event.
    :param email: Address for the confirmation email (optional).
    :param user_name: Display name used in the email.
    :param accept_reschedule: Whether a clashing non-class event may be moved.
    :return: A message describing the outcome.
    """
    event = planner.find_marketplace_event(event_id)
    user = _user(user_id, user_name, email or None)
    outcome = await planner.register(user, event, prompt=FixedAnswerPrompt(accept_reschedule))
    return describe_outcome(outcome, event)


@mcp.tool()
def show_budget_summary(user_id: str) -> str:
    """Displays budget totals, remaining amount and over-budget events.

    :param user_id: Id of the acting user.
    :return: Formatted budget summary.
    """
    return format_budget_summary(summarize_budget(planner.list_events(_user(user_id))))


if __name__ == "__main__":
    mcp.run()
