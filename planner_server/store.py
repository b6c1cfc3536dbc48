# -*- coding: utf-8 -*-
"""
Event and registration stores.

The hosted backend is reached through the two store interfaces below. The
in-memory implementations back the REST service and the tests, and the
JSON state file lets the command line keep a schedule between runs.
"""
from __future__ import annotations

import copy
import logging
import typing as t
from dataclasses import dataclass, field
from pathlib import Path

from pydantic import TypeAdapter

from .errors import DuplicateRegistration, EventNotFound, RegistrationNotFound, StoreError
from .models import Event, Registration, RegistrationStatus

logger = logging.getLogger(__name__)


class EventStore(t.Protocol):
    def list_by_user(self, user_id: str) -> list[Event]: ...

    def upsert(self, event: Event) -> Event: ...


class RegistrationStore(t.Protocol):
    def insert(self, event_id: str, user_id: str) -> Registration: ...


class InMemoryEventStore:
    """Events keyed by (owner id, event id); a user's copy of a marketplace
    event lives beside the organizer's original under the same event id."""

    def __init__(self, events: t.Iterable[Event] = ()) -> None:
        self._events: dict[tuple[str, str], Event] = {}
        for event in events:
            self.upsert(event)

    def list_by_user(self, user_id: str) -> list[Event]:
        """Return copies of the user's events in insertion order."""
        return [copy.deepcopy(e) for (owner, _), e in self._events.items() if owner == user_id]

    def list_all(self) -> list[Event]:
        return [copy.deepcopy(e) for e in self._events.values()]

    def get(self, owner_id: str, event_id: str) -> Event:
        try:
            return copy.deepcopy(self._events[(owner_id, event_id)])
        except KeyError:
            raise EventNotFound(f"Event '{event_id}' not found for user '{owner_id}'") from None

    def upsert(self, event: Event) -> Event:
        """Create or replace an event.

        :param event: The event to store; its owner_id must be set.
        :return: A copy of the stored event.
        :raises StoreError: If the event has no owner.
        """
        if not event.owner_id:
            raise StoreError(f"Event '{event.title}' has no owner")
        stored = copy.deepcopy(event)
        stored.recalculate_totals()
        self._events[(stored.owner_id, stored.id)] = stored
        logger.debug("Upserted event %s for %s", stored.id, stored.owner_id)
        return copy.deepcopy(stored)

    def delete(self, owner_id: str, event_id: str) -> None:
        if self._events.pop((owner_id, event_id), None) is None:
            raise EventNotFound(f"Event '{event_id}' not found for user '{owner_id}'")


class InMemoryRegistrationStore:
    """Registrations with a uniqueness constraint on (event id, user id)."""

    def __init__(self, registrations: t.Iterable[Registration] = ()) -> None:
        self._registrations: dict[str, Registration] = {r.id: copy.deepcopy(r) for r in registrations}

    def insert(self, event_id: str, user_id: str) -> Registration:
        if any(r.event_id == event_id and r.user_id == user_id for r in self._registrations.values()):
            raise DuplicateRegistration(event_id, user_id)
        registration = Registration(event_id=event_id, user_id=user_id)
        self._registrations[registration.id] = registration
        return copy.deepcopy(registration)

    def list_by_event(self, event_id: str) -> list[Registration]:
        return [copy.deepcopy(r) for r in self._registrations.values() if r.event_id == event_id]

    def list_all(self) -> list[Registration]:
        return [copy.deepcopy(r) for r in self._registrations.values()]

    def update_status(self, registration_id: str, status: t.Union[str, RegistrationStatus]) -> Registration:
        """Mark attendance (or cancellation) on a registration."""
        registration = self._registrations.get(registration_id)
        if registration is None:
            raise RegistrationNotFound(f"Registration '{registration_id}' not found")
        registration.status = RegistrationStatus(status)
        return copy.deepcopy(registration)


@dataclass
class PlannerState:
    """Everything the JSON state file holds."""
    events: list[Event] = field(default_factory=list)
    registrations: list[Registration] = field(default_factory=list)


_STATE_ADAPTER = TypeAdapter(PlannerState)


def load_state(path: t.Union[str, Path]) -> tuple[InMemoryEventStore, InMemoryRegistrationStore]:
    """Load both stores from a JSON state file; a missing file gives empty stores.

    :param path: Location of the state file.
    :return: The event store and the registration store.
    """
    path = Path(path)
    if not path.is_file():
        return InMemoryEventStore(), InMemoryRegistrationStore()
    state = _STATE_ADAPTER.validate_json(path.read_bytes())
    logger.debug("Loaded %d event(s) from %s", len(state.events), path)
    return InMemoryEventStore(state.events), InMemoryRegistrationStore(state.registrations)


def save_state(
        path: t.Union[str, Path],
        events: InMemoryEventStore,
        registrations: InMemoryRegistrationStore,
) -> None:
    """Write both stores to a JSON state file."""
    state = PlannerState(events=events.list_all(), registrations=registrations.list_all())
    Path(path).write_bytes(_STATE_ADAPTER.dump_json(state, indent=2))
