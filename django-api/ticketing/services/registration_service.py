"""Registration admission and cancellation.

This is the only code path that changes a ticket type's ``sold`` counter.
Preconditions are checked here so callers get precise errors; the capacity
decision itself is made by the store at commit time.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta

from django.utils import timezone

from ticketing.domain import (
    Actor,
    Admission,
    Event,
    EventId,
    GeneralAdmission,
    Registration,
    RegistrationId,
    TicketedAdmission,
    TicketTypeId,
    UserId,
)
from ticketing.domain.errors import (
    DuplicateRegistrationError,
    EventNotFoundError,
    PermissionDeniedError,
    RegistrationNotFoundError,
    SoldOutError,
    TicketTypeNotFoundError,
    ValidationError,
)
from ticketing.services.common import parse_id, with_retry
from ticketing.stores.interfaces import TicketingStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RegisteredEvent:
    registration: Registration
    event: Event


@dataclass(frozen=True)
class UserRegistrations:
    upcoming: list[RegisteredEvent]
    past: list[RegisteredEvent]


@dataclass(frozen=True)
class OrganizerAttendees:
    recent: list[RegisteredEvent]
    total_attendees: int
    new_this_week: int
    unique_events: int


class RegistrationService:
    """Admit users to events and reverse admissions."""

    def __init__(self, store: TicketingStore) -> None:
        self._store = store

    def admit_registration(
        self, actor: Actor, event_id: str, ticket_type_id: str | None = None
    ) -> Registration:
        """Register the actor for an event, optionally against a ticket type.

        Safe to call again after a StoreError: every attempt re-runs the
        existence and duplicate checks before committing.

        Raises:
            InvalidIdError: If an id is not a valid UUID.
            EventNotFoundError: If the event does not exist.
            TicketTypeNotFoundError: If the ticket type is missing or belongs
                to another event.
            ValidationError: If the event sells ticket types and none was given.
            DuplicateRegistrationError: If the actor is already registered.
            SoldOutError: If the ticket type had no inventory at commit time.
        """
        eid = parse_id(EventId, event_id, "event")
        admission: Admission
        if ticket_type_id is None:
            admission = GeneralAdmission()
        else:
            admission = TicketedAdmission(parse_id(TicketTypeId, ticket_type_id, "ticket type"))
        return with_retry(lambda: self._admit(actor.user_id, eid, admission))

    def _admit(self, user_id: UserId, event_id: EventId, admission: Admission) -> Registration:
        if self._store.get_event(event_id) is None:
            raise EventNotFoundError(str(event_id))

        match admission:
            case TicketedAdmission(ticket_type_id=tid):
                ticket_type = self._store.get_ticket_type(tid)
                if ticket_type is None or ticket_type.event_id != event_id:
                    raise TicketTypeNotFoundError(str(tid))
                ticket_type_id = tid
            case GeneralAdmission():
                if self._store.list_ticket_types(event_id):
                    raise ValidationError("ticket_type_id", "Please select a ticket type")
                ticket_type_id = None

        if self._store.find_registration(user_id, event_id) is not None:
            raise DuplicateRegistrationError(str(user_id), str(event_id))

        try:
            registration = self._store.commit_admission(user_id, event_id, ticket_type_id)
        except SoldOutError:
            logger.info("Ticket type %s sold out for user %s", ticket_type_id, user_id)
            raise
        except DuplicateRegistrationError:
            logger.info("Concurrent duplicate registration for %s at %s", user_id, event_id)
            raise

        logger.info(
            "Registration %s admitted user %s to event %s (ticket type %s)",
            registration.id,
            user_id,
            event_id,
            ticket_type_id or "general",
        )
        return registration

    def cancel_registration(self, actor: Actor, registration_id: str) -> Registration:
        """Delete a registration and return its seat to the ticket type.

        Allowed for the registered user, the event owner and administrators.

        Raises:
            InvalidIdError, PermissionDeniedError
            RegistrationNotFoundError: If it does not exist or was already cancelled.
        """
        rid = parse_id(RegistrationId, registration_id, "registration")
        registration = self._store.get_registration(rid)
        if registration is None:
            raise RegistrationNotFoundError(registration_id)

        if not (actor.is_admin or actor.user_id == registration.user_id):
            event = self._store.get_event(registration.event_id)
            if event is None or not actor.can_manage(event.created_by):
                raise PermissionDeniedError("cancel this registration")

        cancelled = self._store.commit_cancellation(rid)
        logger.info("Registration %s cancelled by %s", rid, actor.user_id)
        return cancelled

    def list_registrations_for_event(self, actor: Actor, event_id: str) -> list[Registration]:
        """Attendee list for an organizer, newest first.

        Raises:
            InvalidIdError, EventNotFoundError, PermissionDeniedError
        """
        eid = parse_id(EventId, event_id, "event")
        event = with_retry(lambda: self._store.get_event(eid))
        if event is None:
            raise EventNotFoundError(event_id)
        if not actor.can_manage(event.created_by):
            raise PermissionDeniedError("view registrations for this event")
        return with_retry(lambda: self._store.list_registrations_for_event(eid))

    def list_registrations_for_user(
        self, actor: Actor, now: datetime | None = None
    ) -> UserRegistrations:
        """The actor's registrations split into upcoming and past events."""
        now = now or timezone.now()
        registrations = with_retry(
            lambda: self._store.list_registrations_for_user(actor.user_id)
        )
        events = with_retry(
            lambda: self._store.get_events({r.event_id for r in registrations})
        )
        upcoming: list[RegisteredEvent] = []
        past: list[RegisteredEvent] = []
        for registration in registrations:
            event = events.get(registration.event_id)
            if event is None:
                continue
            entry = RegisteredEvent(registration=registration, event=event)
            (upcoming if event.is_upcoming(now) else past).append(entry)
        return UserRegistrations(upcoming=upcoming, past=past)

    def list_organizer_attendees(
        self, actor: Actor, now: datetime | None = None, limit: int = 50
    ) -> OrganizerAttendees:
        """Registrations across every event the actor owns, newest first.

        Totals cover all registrations; ``recent`` holds at most ``limit`` of them.
        """
        now = now or timezone.now()
        events = {
            e.id: e
            for e in with_retry(lambda: self._store.list_events_by_owner(actor.user_id))
        }
        registrations = with_retry(
            lambda: self._store.list_registrations_for_events(events.keys())
        )
        week_ago = now - timedelta(days=7)
        return OrganizerAttendees(
            recent=[
                RegisteredEvent(registration=r, event=events[r.event_id])
                for r in registrations[:limit]
            ],
            total_attendees=len(registrations),
            new_this_week=sum(1 for r in registrations if r.registered_at >= week_ago),
            unique_events=len({r.event_id for r in registrations}),
        )
