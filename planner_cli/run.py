# -*- coding: utf-8 -*-
import asyncio
import datetime as dt
import typing as t

import click
from rich.panel import Panel
from rich.text import Text

from assistant_server.assistant import ask_assistant, budget_advice, get_openai_client, import_timetable
from assistant_server.timetable import AssistantError
from planner_server.analytics import dashboard_stats, home_view, summarize_budget
from planner_server.config import Settings, load_settings
from planner_server.conflicts import OutcomeStatus, RegistrationOutcome, RegistrationSignal
from planner_server.errors import PlannerError
from planner_server.formatting import describe_outcome, format_budget_summary
from planner_server.models import BudgetItem, Event, EventCategory, Priority, RegistrationStatus, User, UserRole
from planner_server.planner import Planner
from planner_server.store import load_state, save_state
from planner_cli.utils import (
    RichConfirmationPrompt,
    console,
    create_attendees_table,
    create_events_table,
    create_marketplace_table,
    setup_logging,
)


class CliState:
    """What every command needs: settings, the acting user and the planner."""

    def __init__(self, settings: Settings, data_file: str, user: User, assume_yes: bool) -> None:
        self.settings = settings
        self.data_file = data_file
        self.user = user
        events, registrations = load_state(data_file)
        self.planner = Planner.from_settings(
            settings, events, registrations, prompt=RichConfirmationPrompt(assume_yes)
        )

    def save(self) -> None:
        save_state(self.data_file, self.planner.events, self.planner.registrations)


pass_state = click.make_pass_decorator(CliState)


def _fail(message: str) -> t.NoReturn:
    console.print(f"[red]Error:[/red] {message}")
    raise SystemExit(1)


def _own_event_id(state: CliState, prefix: str) -> str:
    """Expand the short id shown in the events table to a full id."""
    matches = [e.id for e in state.planner.list_events(state.user) if e.id.startswith(prefix)]
    return matches[0] if len(matches) == 1 else prefix


def _print_outcome(outcome: RegistrationOutcome, event: Event) -> None:
    message = describe_outcome(outcome, event)
    if outcome.status is OutcomeStatus.SCHEDULING_BLOCKED:
        console.print(Panel(message, title="⛔ Blocked", border_style="red"))
    elif outcome.status is OutcomeStatus.CANCELLED:
        console.print(Panel(message, title="↩️  Cancelled", border_style="yellow"))
    else:
        style = "yellow" if RegistrationSignal.REGISTRATION_WARNING in outcome.signals else "green"
        console.print(Panel(message, title="✅ Registered", border_style=style))


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.option("--data", "data_file", type=click.Path(dir_okay=False), default=None,
              help="JSON state file (default: $PLANNER_DATA_FILE or planner_state.json).")
@click.option("--user-id", envvar="PLANNER_USER_ID", default="local-user", show_default=True,
              help="Id of the acting user.")
@click.option("--name", envvar="PLANNER_USER_NAME", default="", help="Display name of the acting user.")
@click.option("--email", envvar="PLANNER_USER_EMAIL", default=None, help="Email for registration confirmations.")
@click.option("--role", type=click.Choice([r.value for r in UserRole]), envvar="PLANNER_USER_ROLE",
              default=UserRole.STUDENT.value, show_default=True)
@click.option("--yes", "-y", "assume_yes", is_flag=True, help="Accept reschedule offers without asking.")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output.")
@click.pass_context
def main(
        ctx: click.Context,
        data_file: t.Optional[str],
        user_id: str,
        name: str,
        email: t.Optional[str],
        role: str,
        assume_yes: bool,
        verbose: bool,
) -> None:
    """Plan student events, budgets and marketplace registrations."""
    settings = load_settings()
    setup_logging(settings.log_level, verbose)
    user = User(id=user_id, name=name, email=email, role=UserRole(role))
    try:
        ctx.obj = CliState(settings, data_file or settings.data_file, user, assume_yes)
    except ValueError as e:
        _fail(f"Could not read the state file: {e}")


@main.command("add")
@click.argument("title")
@click.option("--date", "date_", required=True, help="Date as YYYY-MM-DD.")
@click.option("--time", "time_", required=True, help="Start time as HH:MM (24h).")
@click.option("--category", type=click.Choice([c.value for c in EventCategory], case_sensitive=False),
              default=EventCategory.PERSONAL.value, show_default=True)
@click.option("--priority", type=click.Choice([p.value for p in Priority]),
              default=Priority.MEDIUM.value, show_default=True)
@click.option("--location", default="")
@click.option("--description", default="")
@click.option("--budget-item", "budget_items", multiple=True, metavar="DESC:ESTIMATE[:ACTUAL]",
              help="Budget line; repeat for several.")
@pass_state
def add_event(
        state: CliState,
        title: str,
        date_: str,
        time_: str,
        category: str,
        priority: str,
        location: str,
        description: str,
        budget_items: tuple[str, ...],
) -> None:
    """Add an event to your calendar."""
    try:
        items = []
        for spec in budget_items:
            desc, _, costs = spec.partition(":")
            estimate, _, actual = costs.partition(":")
            items.append(BudgetItem(desc, float(estimate or 0), float(actual or 0)))
        event = Event(
            title=title,
            date=date_,
            time=time_,
            category=category,
            priority=Priority(priority),
            location=location,
            description=description,
            budget_items=items,
        )
        saved = state.planner.save_event(state.user, event)
    except (ValueError, PlannerError) as e:
        _fail(str(e))
    state.save()
    console.print(f"[green]✓[/green] Saved [bold]{saved.title}[/bold] ({saved.id})")


@main.command("events")
@pass_state
def list_events(state: CliState) -> None:
    """Show your events in chronological order."""
    events = state.planner.list_events(state.user)
    if not events:
        console.print("📅 No events found.")
        return
    console.print(create_events_table(events))


@main.command("delete")
@click.argument("event_id")
@pass_state
def delete_event(state: CliState, event_id: str) -> None:
    """Delete one of your events (the short id from `events` is enough)."""
    try:
        state.planner.delete_event(state.user, _own_event_id(state, event_id))
    except PlannerError as e:
        _fail(str(e))
    state.save()
    console.print(f"[green]✓[/green] Deleted {event_id}")


@main.command("marketplace")
@click.option("--search", "-s", default="", help="Filter by title or organizer.")
@pass_state
def marketplace(state: CliState, search: str) -> None:
    """Browse organizer events open for registration."""
    events = state.planner.marketplace(search)
    if not events:
        console.print("No events found.")
        return
    console.print(create_marketplace_table(events))


@main.command("register")
@click.argument("event_id")
@pass_state
def register(state: CliState, event_id: str) -> None:
    """Register for a marketplace event, resolving schedule conflicts."""

    async def _register() -> RegistrationOutcome:
        event = state.planner.find_marketplace_event(event_id)
        outcome = await state.planner.register(state.user, event)
        _print_outcome(outcome, event)
        # Emails go out in the background; wait before the loop closes
        await state.planner.resolver.drain()
        return outcome

    try:
        outcome = asyncio.run(_register())
    except PlannerError as e:
        _fail(str(e))
    if outcome.committed:
        state.save()


@main.command("attendees")
@click.argument("event_id")
@pass_state
def attendees(state: CliState, event_id: str) -> None:
    """List registrations for one of your marketplace events."""
    try:
        registrations = state.planner.attendees(state.user, event_id)
    except PlannerError as e:
        _fail(str(e))
    console.print(create_attendees_table(registrations))


@main.command("mark")
@click.argument("registration_id")
@click.argument("status", type=click.Choice([s.value for s in RegistrationStatus]))
@pass_state
def mark_attendance(state: CliState, registration_id: str, status: str) -> None:
    """Set a registration to registered, attended or cancelled."""
    try:
        registration = state.planner.mark_attendance(state.user, registration_id, status)
    except PlannerError as e:
        _fail(str(e))
    state.save()
    console.print(f"[green]✓[/green] {registration.id} is now {registration.status.value}")


@main.command("budget")
@pass_state
def budget(state: CliState) -> None:
    """Show budget totals and over-budget events."""
    summary = summarize_budget(state.planner.list_events(state.user))
    console.print(format_budget_summary(summary), markup=False)


@main.command("dashboard")
@pass_state
def dashboard(state: CliState) -> None:
    """Show schedule and budget statistics."""
    stats = dashboard_stats(state.planner.list_events(state.user))
    text = Text()
    text.append("Total events: ", style="white")
    text.append(f"{stats.total_events}\n", style="bold green")
    text.append("Upcoming: ", style="white")
    text.append(f"{stats.upcoming_events}\n", style="bold green")
    text.append("High priority: ", style="white")
    text.append(f"{stats.high_priority}\n", style="bold red")
    text.append("Budget / spent: ", style="white")
    text.append(f"{stats.total_budget:.2f} / {stats.total_spent:.2f}", style="bold yellow")
    console.print(Panel(text, title=f"📊 {home_view(state.user.role).title()}", border_style="green"))


@main.command("import-timetable")
@click.argument("image", type=str)
@click.option("--week-of", default=None, help="Any date (YYYY-MM-DD) in the timetable's week; default today.")
@pass_state
def import_timetable_cmd(state: CliState, image: str, week_of: t.Optional[str]) -> None:
    """Extract classes from a timetable image and add them to your calendar."""
    reference = dt.date.fromisoformat(week_of) if week_of else None
    try:
        with console.status("[bold green]Reading timetable..."):
            events = import_timetable(get_openai_client(), image, reference, model=state.settings.openai_model)
    except (AssistantError, FileNotFoundError, RuntimeError) as e:
        _fail(str(e))

    if not events:
        console.print("No events found in the timetable.")
        return
    console.print(create_events_table(events, title="📷 Extracted events"))
    if not state.planner.resolver.prompt.ask(f"Found {len(events)} events. Add them?"):
        console.print("Nothing added.")
        return
    state.planner.add_events(state.user, events)
    state.save()
    console.print(f"[green]✓[/green] Added {len(events)} event(s)")


@main.command("ask")
@click.argument("question", nargs=-1, required=True)
@pass_state
def ask(state: CliState, question: tuple[str, ...]) -> None:
    """Ask the AI assistant about your schedule, budget or studies."""
    try:
        client = get_openai_client()
    except RuntimeError as e:
        _fail(str(e))
    with console.status("[bold green]Thinking..."):
        answer = ask_assistant(
            client,
            " ".join(question),
            state.user,
            state.planner.list_events(state.user),
            model=state.settings.openai_model,
        )
    console.print(Panel(answer, title="🤖 Assistant", border_style="blue"))


@main.command("advice")
@pass_state
def advice(state: CliState) -> None:
    """Get AI budgeting tips for your events."""
    try:
        client = get_openai_client()
    except RuntimeError as e:
        _fail(str(e))
    with console.status("[bold green]Analyzing your budget..."):
        tips = budget_advice(client, state.planner.list_events(state.user), model=state.settings.openai_model)
    console.print(Panel(tips, title="💡 Budget advice", border_style="blue"))


if __name__ == "__main__":
    main()
