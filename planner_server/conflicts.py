# -*- coding: utf-8 -*-
"""
Conflict detection and single-step rescheduling for event registration.

Registering for (or adding) an event checks the user's schedule for another
event at exactly the same date and time. Academic events never move, so a
clash with one blocks the registration. Any other clashing event may be
pushed back one hour if the user confirms, after which the new event is
committed: marketplace registration, personal calendar entry, then a
confirmation email sent in the background.
"""
from __future__ import annotations

import asyncio
import datetime as dt
import logging
import typing as t
from dataclasses import dataclass, field, replace
from enum import Enum

from .errors import AuthenticationRequired, DuplicateRegistration, StoreError
from .models import Event, EventCategory, User, format_time
from .notifier import Notifier, registration_email
from .store import EventStore, RegistrationStore

logger = logging.getLogger(__name__)


class OutcomeStatus(str, Enum):
    COMMITTED = "committed"
    SCHEDULING_BLOCKED = "scheduling_blocked"
    CANCELLED = "cancelled"


class RegistrationSignal(str, Enum):
    """Non-fatal conditions that accompany a committed outcome."""
    ALREADY_REGISTERED = "already_registered"
    REGISTRATION_WARNING = "registration_warning"


@dataclass
class RegistrationOutcome:
    """Result of one registration attempt."""
    status: OutcomeStatus
    event: t.Optional[Event] = None
    blocked_by: t.Optional[str] = None
    rescheduled: t.Optional[Event] = None
    signals: list[RegistrationSignal] = field(default_factory=list)
    notification: t.Optional[asyncio.Task] = field(default=None, repr=False, compare=False)

    @property
    def committed(self) -> bool:
        return self.status is OutcomeStatus.COMMITTED


class ConfirmationPrompt(t.Protocol):
    def ask(self, message: str) -> bool: ...


class FixedAnswerPrompt:
    """A prompt whose answer is known up front, e.g. a flag on a request."""

    def __init__(self, answer: bool) -> None:
        self.answer = answer
        self.messages: list[str] = []

    def ask(self, message: str) -> bool:
        self.messages.append(message)
        return self.answer


def find_conflict(candidate: Event, snapshot: t.Iterable[Event]) -> t.Optional[Event]:
    """Return the first scheduled event at exactly the candidate's date and time.

    Only identical (date, time) pairs clash; durations are not considered.
    The candidate's own entry (same id) is a repeat registration, not a clash.
    """
    for scheduled in snapshot:
        if scheduled.id == candidate.id:
            continue
        if scheduled.date == candidate.date and scheduled.time == candidate.time:
            return scheduled
    return None


def shift_time(value: dt.time, hours: int = 1) -> dt.time:
    """Move a wall-clock time forward, wrapping past midnight; the date is not tracked."""
    return value.replace(hour=(value.hour + hours) % 24)


def reschedule_message(conflict: Event, new_time: dt.time, candidate: Event) -> str:
    return (
        f'You have a conflict with "{conflict.title}". Would you like to reschedule '
        f'"{conflict.title}" to {format_time(new_time)} and register for "{candidate.title}"?'
    )


class ConflictResolver:
    """Decides and commits the outcome of adding an event to a user's schedule."""

    def __init__(
            self,
            events: EventStore,
            registrations: RegistrationStore,
            prompt: t.Optional[ConfirmationPrompt] = None,
            notifier: t.Optional[Notifier] = None,
    ) -> None:
        self.events = events
        self.registrations = registrations
        self.prompt = prompt
        self.notifier = notifier
        self._pending: set[asyncio.Task] = set()

    async def register(
            self,
            candidate: Event,
            snapshot: t.Sequence[Event],
            user: t.Optional[User],
            prompt: t.Optional[ConfirmationPrompt] = None,
    ) -> RegistrationOutcome:
        """Register the acting user for a candidate event.

        :param candidate: The event being added; it is committed unmodified.
        :param snapshot: The user's scheduled events, read once by the caller.
        :param user: The acting user.
        :param prompt: Overrides the resolver's confirmation prompt for this call.
        :return: The outcome; a notification may still be in flight.
        :raises AuthenticationRequired: If there is no acting user.
        :raises StoreError: If the personal calendar write fails.
        """
        if user is None:
            raise AuthenticationRequired(f"You must be logged in to register for '{candidate.title}'")

        snapshot = tuple(snapshot)
        conflict = find_conflict(candidate, snapshot)
        if conflict is None:
            return self._commit(candidate, user)

        if conflict.category is EventCategory.ACADEMIC:
            logger.info("Registration for '%s' blocked by class '%s'", candidate.title, conflict.title)
            return RegistrationOutcome(status=OutcomeStatus.SCHEDULING_BLOCKED, blocked_by=conflict.title)

        new_time = shift_time(conflict.time, 1)
        prompt = prompt or self.prompt
        if prompt is None:
            raise RuntimeError("A confirmation prompt is required to offer a reschedule")
        if not prompt.ask(reschedule_message(conflict, new_time, candidate)):
            logger.info("Reschedule of '%s' declined", conflict.title)
            return RegistrationOutcome(status=OutcomeStatus.CANCELLED)

        rescheduled = self.events.upsert(replace(conflict, time=new_time))
        logger.info("Moved '%s' to %s", conflict.title, format_time(new_time))
        outcome = self._commit(candidate, user)
        outcome.rescheduled = rescheduled
        return outcome

    def _commit(self, candidate: Event, user: User) -> RegistrationOutcome:
        signals: list[RegistrationSignal] = []

        if candidate.category is EventCategory.ORGANIZER:
            try:
                self.registrations.insert(candidate.id, user.id)
            except DuplicateRegistration:
                logger.info("User %s already registered for '%s'", user.id, candidate.title)
                signals.append(RegistrationSignal.ALREADY_REGISTERED)
            except StoreError as e:
                logger.warning("Registration for '%s' failed, adding to calendar anyway: %s", candidate.title, e)
                signals.append(RegistrationSignal.REGISTRATION_WARNING)

        source_owner_id = candidate.source_owner_id
        if candidate.is_marketplace_event and candidate.owner_id and candidate.owner_id != user.id:
            source_owner_id = candidate.owner_id
        saved = self.events.upsert(replace(candidate, owner_id=user.id, source_owner_id=source_owner_id))

        notification = None
        if user.email:
            notification = self._dispatch_notification(saved, user)

        return RegistrationOutcome(
            status=OutcomeStatus.COMMITTED,
            event=saved,
            signals=signals,
            notification=notification,
        )

    def _dispatch_notification(self, event: Event, user: User) -> t.Optional[asyncio.Task]:
        if self.notifier is None:
            logger.debug("No notifier configured; skipping email for '%s'", event.title)
            return None
        subject, body = registration_email(event)
        task = asyncio.get_running_loop().create_task(self._notify(user, subject, body))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return task

    async def _notify(self, user: User, subject: str, body: str) -> bool:
        try:
            delivered = await self.notifier.send(user.email, subject, body, name=user.name)
        except Exception as e:
            logger.error("Email notification to %s failed: %s", user.email, e)
            return False
        if not delivered:
            logger.error("Email notification to %s was not delivered", user.email)
        return bool(delivered)

    async def drain(self) -> None:
        """Wait for notifications still in flight."""
        if self._pending:
            await asyncio.gather(*list(self._pending))
