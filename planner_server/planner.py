# -*- coding: utf-8 -*-
"""
Planner operations shared by the MCP tools, the REST service and the CLI.

The Planner wires the stores, the conflict resolver and the notifier
together and applies the role rules on top of them.
"""
from __future__ import annotations

import logging
import typing as t
from dataclasses import replace

from .analytics import sort_chronologically
from .config import Settings
from .conflicts import ConfirmationPrompt, ConflictResolver, RegistrationOutcome
from .errors import EventNotFound, PermissionDenied
from .marketplace import list_marketplace_events
from .models import Event, EventCategory, Registration, RegistrationStatus, User, UserRole
from .notifier import EmailNotifier, Notifier
from .store import InMemoryEventStore, InMemoryRegistrationStore

logger = logging.getLogger(__name__)


class Planner:
    def __init__(
            self,
            events: t.Optional[InMemoryEventStore] = None,
            registrations: t.Optional[InMemoryRegistrationStore] = None,
            notifier: t.Optional[Notifier] = None,
            prompt: t.Optional[ConfirmationPrompt] = None,
    ) -> None:
        self.events = events if events is not None else InMemoryEventStore()
        self.registrations = registrations if registrations is not None else InMemoryRegistrationStore()
        self.resolver = ConflictResolver(self.events, self.registrations, prompt=prompt, notifier=notifier)

    @classmethod
    def from_settings(
            cls,
            settings: Settings,
            events: t.Optional[InMemoryEventStore] = None,
            registrations: t.Optional[InMemoryRegistrationStore] = None,
            prompt: t.Optional[ConfirmationPrompt] = None,
    ) -> "Planner":
        """Build a planner with an email notifier when an email API is configured."""
        notifier = None
        if settings.email_api_url:
            notifier = EmailNotifier(settings.email_api_url, timeout=settings.email_timeout)
        else:
            logger.info("EMAIL_API_URL is not set; registration emails are disabled")
        return cls(events, registrations, notifier=notifier, prompt=prompt)

    # -- personal schedule -------------------------------------------------

    def list_events(self, user: User) -> list[Event]:
        return sort_chronologically(self.events.list_by_user(user.id))

    def save_event(self, user: User, event: Event) -> Event:
        """Create or update one of the user's events.

        Only organizers and admins may publish marketplace (Organizer) events.
        A registrant may still edit their own copy of a listing, e.g. to add
        tasks or budget items; it stays a copy.
        """
        existing = self._own_event(user, event.id)
        source_owner_id = existing.source_owner_id if existing is not None else ""
        publishing = event.category is EventCategory.ORGANIZER and not source_owner_id
        if publishing and user.role is UserRole.STUDENT:
            raise PermissionDenied("Only organizers can publish marketplace events")
        organizer_name = event.organizer_name
        if publishing and not organizer_name:
            organizer_name = user.name
        return self.events.upsert(
            replace(event, owner_id=user.id, organizer_name=organizer_name, source_owner_id=source_owner_id)
        )

    def add_events(self, user: User, events: t.Iterable[Event]) -> list[Event]:
        """Bulk insert, e.g. from a timetable import; marketplace categories are demoted."""
        saved = []
        for event in events:
            if event.category is EventCategory.ORGANIZER:
                event = replace(event, category=EventCategory.PERSONAL)
            saved.append(self.events.upsert(replace(event, owner_id=user.id, source_owner_id="")))
        return saved

    def delete_event(self, user: User, event_id: str) -> None:
        self.events.delete(user.id, event_id)

    def _own_event(self, user: User, event_id: str) -> t.Optional[Event]:
        try:
            return self.events.get(user.id, event_id)
        except EventNotFound:
            return None

    async def register(
            self,
            user: t.Optional[User],
            event: Event,
            prompt: t.Optional[ConfirmationPrompt] = None,
    ) -> RegistrationOutcome:
        """Run the conflict resolver against a fresh snapshot of the user's events.

        An Organizer-category candidate is replaced by the published listing
        with the same id. Students cannot bring their own: that would publish it.
        """
        if user is not None and event.category is EventCategory.ORGANIZER:
            event = self._marketplace_candidate(user, event)
        snapshot = tuple(self.events.list_by_user(user.id)) if user is not None else ()
        return await self.resolver.register(event, snapshot, user, prompt=prompt)

    def _marketplace_candidate(self, user: User, event: Event) -> Event:
        try:
            return self.find_marketplace_event(event.id)
        except EventNotFound:
            if user.role is UserRole.STUDENT:
                raise PermissionDenied("Only organizers can publish marketplace events") from None
        return event

    # -- marketplace -------------------------------------------------------

    def marketplace(self, search: str = "") -> list[Event]:
        return list_marketplace_events(self.events.list_all(), search)

    def find_marketplace_event(self, event_id: str) -> Event:
        for event in self.marketplace():
            if event.id == event_id:
                return event
        raise EventNotFound(f"Marketplace event '{event_id}' not found")

    def attendees(self, user: User, event_id: str) -> list[Registration]:
        """Registrations for an event the acting organizer owns (admins see all)."""
        if user.role is UserRole.STUDENT:
            raise PermissionDenied("Only organizers can view attendees")
        if user.role is UserRole.ORGANIZER:
            event = self.events.get(user.id, event_id)
            if not event.is_marketplace_event:
                raise EventNotFound(f"Marketplace event '{event_id}' not found")
        return self.registrations.list_by_event(event_id)

    def mark_attendance(
            self,
            user: User,
            registration_id: str,
            status: t.Union[str, RegistrationStatus],
    ) -> Registration:
        if user.role is UserRole.STUDENT:
            raise PermissionDenied("Only organizers can update attendance")
        return self.registrations.update_status(registration_id, status)
