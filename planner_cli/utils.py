"""Display and interaction helpers for the planner CLI."""
import logging
import typing as t

from rich.console import Console
from rich.logging import RichHandler
from rich.prompt import Confirm
from rich.table import Table

from planner_server.analytics import task_progress
from planner_server.models import Event, EventCategory, Registration, format_time

console = Console()

CATEGORY_STYLES = {
    EventCategory.ACADEMIC: "bold blue",
    EventCategory.PERSONAL: "magenta",
    EventCategory.SOCIAL: "green",
    EventCategory.WORK: "yellow",
    EventCategory.ORGANIZER: "bold cyan",
}


class RichConfirmationPrompt:
    """Asks yes/no questions on the terminal; blocks until the user answers."""

    def __init__(self, assume_yes: bool = False) -> None:
        self.assume_yes = assume_yes

    def ask(self, message: str) -> bool:
        if self.assume_yes:
            console.print(f"[dim]{message} (yes)[/dim]")
            return True
        return Confirm.ask(message, console=console, default=False)


def setup_logging(level: str = "INFO", verbose: bool = False) -> None:
    """Send log records through rich so they line up with the CLI output."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True, show_path=False)],
        force=True,
    )


def truncate_title(title: str, max_length: int = 45) -> str:
    """Truncate title to max_length characters, adding ellipsis if needed."""
    if len(title) <= max_length:
        return title
    return title[:max_length-3] + "..."


def create_events_table(events: t.Sequence[Event], title: str = "📅 My Events") -> Table:
    """Create a table of events with category, budget and task progress."""
    table = Table(title=title, show_header=True, header_style="bold magenta")
    table.add_column("Id", style="dim", no_wrap=True)
    table.add_column("Title", style="white")
    table.add_column("Date/Time", style="yellow")
    table.add_column("Category")
    table.add_column("Location")
    table.add_column("Budget", justify="right")
    table.add_column("Spent", justify="right")
    table.add_column("Tasks", justify="right")

    for event in events:
        spent_style = "red" if event.is_over_budget else "green"
        table.add_row(
            event.id[:8],
            truncate_title(event.title),
            f"{event.date.isoformat()} {format_time(event.time)}",
            f"[{CATEGORY_STYLES[event.category]}]{event.category.value}[/]",
            event.location or "—",
            f"{event.total_budget:.2f}",
            f"[{spent_style}]{event.total_spent:.2f}[/]",
            f"{task_progress(event):.0f}%" if event.tasks else "—",
        )
    return table


def create_marketplace_table(events: t.Sequence[Event]) -> Table:
    table = Table(title="🎟️  Marketplace", show_header=True, header_style="bold cyan")
    table.add_column("Id", style="dim", no_wrap=True)
    table.add_column("Title", style="white")
    table.add_column("Organizer")
    table.add_column("Date/Time", style="yellow")
    table.add_column("Location")
    for event in events:
        table.add_row(
            event.id,
            truncate_title(event.title),
            event.organizer_name or "Organizer",
            f"{event.date.isoformat()} {format_time(event.time)}",
            event.location or "TBA",
        )
    return table


def create_attendees_table(registrations: t.Sequence[Registration]) -> Table:
    table = Table(title="👥 Attendees", show_header=True, header_style="bold green")
    table.add_column("Registration", style="dim", no_wrap=True)
    table.add_column("User")
    table.add_column("Status")
    table.add_column("Registered at", style="yellow")
    for registration in registrations:
        table.add_row(
            registration.id,
            registration.user_id,
            registration.status.value,
            registration.created_at.strftime("%Y-%m-%d"),
        )
    return table
