"""In-memory implementation of the TicketingStore.

Used by service tests and local tooling. A single re-entrant lock stands in
for the database transaction: every method that reads and then writes holds
it for the whole read-check-write sequence.
"""

import threading
import uuid
from collections.abc import Callable, Iterable
from dataclasses import replace
from datetime import datetime

from django.utils import timezone

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
from ticketing.domain.errors import (
    CapacityError,
    DuplicateRegistrationError,
    EventNotFoundError,
    RegistrationNotFoundError,
    SoldOutError,
    TicketTypeInUseError,
    TicketTypeNotFoundError,
)
from ticketing.domain.value_objects import Capacity, Money
from ticketing.stores.interfaces import TicketingStore


class InMemoryTicketingStore(TicketingStore):
    """Dict-backed store. State lives for the lifetime of the instance."""

    def __init__(self, clock: Callable[[], datetime] = timezone.now) -> None:
        self._clock = clock
        self._lock = threading.RLock()
        self._events: dict[EventId, Event] = {}
        self._ticket_types: dict[TicketTypeId, TicketType] = {}
        self._registrations: dict[RegistrationId, Registration] = {}

    # Events

    def create_event(self, owner_id: UserId, draft: EventDraft) -> Event:
        now = self._clock()
        event = Event(
            id=EventId(uuid.uuid4()),
            title=draft.title,
            description=draft.description,
            location=draft.location,
            target_date=draft.target_date,
            date_display=draft.date_display,
            time_display=draft.time_display,
            created_by=owner_id,
            created_at=now,
            updated_at=now,
        )
        with self._lock:
            self._events[event.id] = event
        return event

    def update_event(self, event_id: EventId, draft: EventDraft) -> Event | None:
        with self._lock:
            event = self._events.get(event_id)
            if event is None:
                return None
            updated = replace(
                event,
                title=draft.title,
                description=draft.description,
                location=draft.location,
                target_date=draft.target_date,
                date_display=draft.date_display,
                time_display=draft.time_display,
                updated_at=self._clock(),
            )
            self._events[event_id] = updated
            return updated

    def get_event(self, event_id: EventId) -> Event | None:
        return self._events.get(event_id)

    def list_events(self, starting_after: datetime | None = None) -> list[Event]:
        with self._lock:
            events = list(self._events.values())
        if starting_after is not None:
            events = [e for e in events if e.target_date > starting_after]
        return sorted(events, key=lambda e: e.target_date)

    def list_events_by_owner(self, owner_id: UserId) -> list[Event]:
        with self._lock:
            events = [e for e in self._events.values() if e.created_by == owner_id]
        return sorted(events, key=lambda e: e.target_date, reverse=True)

    def get_events(self, event_ids: Iterable[EventId]) -> dict[EventId, Event]:
        with self._lock:
            return {i: self._events[i] for i in event_ids if i in self._events}

    def delete_event(self, event_id: EventId) -> bool:
        with self._lock:
            if self._events.pop(event_id, None) is None:
                return False
            self._registrations = {
                k: r for k, r in self._registrations.items() if r.event_id != event_id
            }
            self._ticket_types = {
                k: t for k, t in self._ticket_types.items() if t.event_id != event_id
            }
            return True

    # Ticket types

    def create_ticket_type(self, event_id: EventId, draft: TicketTypeDraft) -> TicketType:
        ticket_type = TicketType(
            id=TicketTypeId(uuid.uuid4()),
            event_id=event_id,
            name=draft.name,
            description=draft.description,
            is_free=draft.is_free,
            price=Money(draft.price),
            quantity=Capacity(draft.quantity),
            sold=Capacity(0),
            created_at=self._clock(),
        )
        with self._lock:
            if event_id not in self._events:
                raise EventNotFoundError(str(event_id))
            self._ticket_types[ticket_type.id] = ticket_type
        return ticket_type

    def get_ticket_type(self, ticket_type_id: TicketTypeId) -> TicketType | None:
        return self._ticket_types.get(ticket_type_id)

    def list_ticket_types(self, event_id: EventId) -> list[TicketType]:
        return self.list_ticket_types_for_events([event_id])

    def list_ticket_types_for_events(self, event_ids: Iterable[EventId]) -> list[TicketType]:
        wanted = set(event_ids)
        with self._lock:
            types = [t for t in self._ticket_types.values() if t.event_id in wanted]
        return sorted(types, key=lambda t: t.created_at)

    def update_ticket_type(
        self, ticket_type_id: TicketTypeId, draft: TicketTypeDraft
    ) -> TicketType | None:
        with self._lock:
            current = self._ticket_types.get(ticket_type_id)
            if current is None:
                return None
            if draft.quantity < current.sold.value:
                raise CapacityError(str(ticket_type_id), current.sold.value, draft.quantity)
            updated = replace(
                current,
                name=draft.name,
                description=draft.description,
                is_free=draft.is_free,
                price=Money(draft.price),
                quantity=Capacity(draft.quantity),
            )
            self._ticket_types[ticket_type_id] = updated
            return updated

    def delete_ticket_type(self, ticket_type_id: TicketTypeId) -> bool:
        with self._lock:
            current = self._ticket_types.get(ticket_type_id)
            if current is None:
                return False
            if current.sold.value > 0:
                raise TicketTypeInUseError(str(ticket_type_id), current.sold.value)
            del self._ticket_types[ticket_type_id]
            return True

    # Registrations

    def get_registration(self, registration_id: RegistrationId) -> Registration | None:
        return self._registrations.get(registration_id)

    def find_registration(self, user_id: UserId, event_id: EventId) -> Registration | None:
        with self._lock:
            for registration in self._registrations.values():
                if registration.user_id == user_id and registration.event_id == event_id:
                    return registration
        return None

    def list_registrations_for_event(self, event_id: EventId) -> list[Registration]:
        with self._lock:
            rows = [r for r in self._registrations.values() if r.event_id == event_id]
        return sorted(rows, key=lambda r: r.registered_at, reverse=True)

    def list_registrations_for_events(
        self, event_ids: Iterable[EventId]
    ) -> list[Registration]:
        wanted = set(event_ids)
        with self._lock:
            rows = [r for r in self._registrations.values() if r.event_id in wanted]
        return sorted(rows, key=lambda r: r.registered_at, reverse=True)

    def list_registrations_for_user(self, user_id: UserId) -> list[Registration]:
        with self._lock:
            rows = [r for r in self._registrations.values() if r.user_id == user_id]
        return sorted(rows, key=lambda r: r.registered_at, reverse=True)

    def count_registrations(self, event_ids: Iterable[EventId]) -> dict[str, int]:
        wanted = set(event_ids)
        counts: dict[str, int] = {}
        with self._lock:
            for registration in self._registrations.values():
                if registration.event_id in wanted:
                    key = str(registration.event_id)
                    counts[key] = counts.get(key, 0) + 1
        return counts

    def registration_timestamps(
        self, event_ids: Iterable[EventId], since: datetime
    ) -> list[datetime]:
        wanted = set(event_ids)
        with self._lock:
            stamps = [
                r.registered_at
                for r in self._registrations.values()
                if r.event_id in wanted and r.registered_at >= since
            ]
        return sorted(stamps)

    def commit_admission(
        self,
        user_id: UserId,
        event_id: EventId,
        ticket_type_id: TicketTypeId | None,
    ) -> Registration:
        with self._lock:
            if event_id not in self._events:
                raise EventNotFoundError(str(event_id))
            if self.find_registration(user_id, event_id) is not None:
                raise DuplicateRegistrationError(str(user_id), str(event_id))
            if ticket_type_id is not None:
                ticket_type = self._ticket_types.get(ticket_type_id)
                if ticket_type is None or ticket_type.event_id != event_id:
                    raise TicketTypeNotFoundError(str(ticket_type_id))
                if ticket_type.is_sold_out:
                    raise SoldOutError(str(ticket_type_id))
                self._ticket_types[ticket_type_id] = replace(
                    ticket_type, sold=Capacity(ticket_type.sold.value + 1)
                )
            registration = Registration(
                id=RegistrationId(uuid.uuid4()),
                user_id=user_id,
                event_id=event_id,
                ticket_type_id=ticket_type_id,
                registered_at=self._clock(),
            )
            self._registrations[registration.id] = registration
            return registration

    def commit_cancellation(self, registration_id: RegistrationId) -> Registration:
        with self._lock:
            registration = self._registrations.pop(registration_id, None)
            if registration is None:
                raise RegistrationNotFoundError(str(registration_id))
            if registration.ticket_type_id is not None:
                ticket_type = self._ticket_types.get(registration.ticket_type_id)
                if ticket_type is not None and ticket_type.sold.value > 0:
                    self._ticket_types[ticket_type.id] = replace(
                        ticket_type, sold=Capacity(ticket_type.sold.value - 1)
                    )
            return registration
