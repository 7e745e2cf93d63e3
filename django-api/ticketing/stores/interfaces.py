"""Store interfaces (repository pattern).

Stores must be swappable and return domain models.

Any store has to provide ``commit_admission`` and ``commit_cancellation`` as
single atomic units: the capacity check, the ``sold`` counter change and the
registration row either all apply or none do.
"""

from abc import ABC, abstractmethod
from collections.abc import Iterable
from datetime import datetime

from ticketing.domain import (
    Event,
    EventDraft,
    EventId,
    Registration,
    RegistrationId,
    TicketType,
    TicketTypeDraft,
    TicketTypeId,
    UserId,
)


class EventStore(ABC):
    """Interface for event persistence operations."""

    @abstractmethod
    def create_event(self, owner_id: UserId, draft: EventDraft) -> Event:
        """Persist a new event owned by ``owner_id``."""
        ...

    @abstractmethod
    def update_event(self, event_id: EventId, draft: EventDraft) -> Event | None:
        """Overwrite the editable fields of an event. Return None if it is gone."""
        ...

    @abstractmethod
    def get_event(self, event_id: EventId) -> Event | None:
        """Return an event by ID, or None if not found."""
        ...

    @abstractmethod
    def list_events(self, starting_after: datetime | None = None) -> list[Event]:
        """Return the public catalog ordered by target_date ascending.

        With ``starting_after`` only events whose target_date is later are returned.
        """
        ...

    @abstractmethod
    def list_events_by_owner(self, owner_id: UserId) -> list[Event]:
        """Return an organizer's events ordered by target_date descending."""
        ...

    @abstractmethod
    def get_events(self, event_ids: Iterable[EventId]) -> dict[EventId, Event]:
        """Bulk lookup; unknown ids are simply absent from the result."""
        ...

    @abstractmethod
    def delete_event(self, event_id: EventId) -> bool:
        """Delete an event with its registrations and ticket types.

        Returns False if the event did not exist.
        """
        ...


class TicketTypeStore(ABC):
    """Interface for ticket type persistence operations."""

    @abstractmethod
    def create_ticket_type(self, event_id: EventId, draft: TicketTypeDraft) -> TicketType:
        """Persist a validated draft with sold = 0."""
        ...

    @abstractmethod
    def get_ticket_type(self, ticket_type_id: TicketTypeId) -> TicketType | None:
        """Return a ticket type by ID, or None if not found."""
        ...

    @abstractmethod
    def list_ticket_types(self, event_id: EventId) -> list[TicketType]:
        """Return the ticket types of an event, ordered by created_at ascending."""
        ...

    @abstractmethod
    def list_ticket_types_for_events(self, event_ids: Iterable[EventId]) -> list[TicketType]:
        """Return the ticket types of several events."""
        ...

    @abstractmethod
    def update_ticket_type(
        self, ticket_type_id: TicketTypeId, draft: TicketTypeDraft
    ) -> TicketType | None:
        """Overwrite the configurable fields of a ticket type.

        The write must only apply while ``draft.quantity >= sold``; raises
        CapacityError otherwise. Returns None if the ticket type is gone.
        """
        ...

    @abstractmethod
    def delete_ticket_type(self, ticket_type_id: TicketTypeId) -> bool:
        """Delete a ticket type only while sold == 0.

        Raises TicketTypeInUseError when it has been sold. Returns False if it
        did not exist.
        """
        ...


class RegistrationStore(ABC):
    """Interface for registration persistence and the atomic inventory writes."""

    @abstractmethod
    def get_registration(self, registration_id: RegistrationId) -> Registration | None:
        """Return a registration by ID, or None if not found."""
        ...

    @abstractmethod
    def find_registration(self, user_id: UserId, event_id: EventId) -> Registration | None:
        """Return the user's registration for an event, if any."""
        ...

    @abstractmethod
    def list_registrations_for_event(self, event_id: EventId) -> list[Registration]:
        """Return registrations for an event ordered by registered_at descending."""
        ...

    @abstractmethod
    def list_registrations_for_events(
        self, event_ids: Iterable[EventId]
    ) -> list[Registration]:
        """Registrations across several events, newest first."""
        ...

    @abstractmethod
    def list_registrations_for_user(self, user_id: UserId) -> list[Registration]:
        """Return a user's registrations ordered by registered_at descending."""
        ...

    @abstractmethod
    def count_registrations(self, event_ids: Iterable[EventId]) -> dict[str, int]:
        """Map event id strings to their registration count."""
        ...

    @abstractmethod
    def registration_timestamps(
        self, event_ids: Iterable[EventId], since: datetime
    ) -> list[datetime]:
        """Return registered_at values for the events at or after ``since``."""
        ...

    @abstractmethod
    def commit_admission(
        self,
        user_id: UserId,
        event_id: EventId,
        ticket_type_id: TicketTypeId | None,
    ) -> Registration:
        """Insert a registration and consume one unit of inventory as one unit.

        With a ticket type, increments sold only if sold < quantity at commit
        time, raising SoldOutError otherwise. Raises
        DuplicateRegistrationError if (user, event) is already taken. Nothing
        is written when either error is raised.
        """
        ...

    @abstractmethod
    def commit_cancellation(self, registration_id: RegistrationId) -> Registration:
        """Delete a registration and give its inventory back as one unit.

        Raises RegistrationNotFoundError if it no longer exists.
        """
        ...


class TicketingStore(EventStore, TicketTypeStore, RegistrationStore, ABC):
    """Everything the ticketing services need from a backend."""
