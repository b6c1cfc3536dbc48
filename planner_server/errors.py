"""Exceptions raised by the planner stores and services."""


class PlannerError(Exception):
    """Base class for planner failures."""


class StoreError(PlannerError):
    """A store rejected a read or write."""


class DuplicateRegistration(StoreError):
    """The (event, user) pair is already registered."""

    def __init__(self, event_id: str, user_id: str) -> None:
        super().__init__(f"User '{user_id}' is already registered for event '{event_id}'")
        self.event_id = event_id
        self.user_id = user_id


class EventNotFound(StoreError):
    """No event with the given id exists for the owner."""


class RegistrationNotFound(StoreError):
    """No registration with the given id exists."""


class AuthenticationRequired(PlannerError):
    """The operation needs a signed-in user."""


class PermissionDenied(PlannerError):
    """The acting user's role does not allow the operation."""
