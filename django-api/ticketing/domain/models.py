"""Domain models representing persisted state.

These are pure domain objects with no API input rules.
Django ORM models are in ticketing/models.py (persistence layer).
"""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

from ticketing.domain.value_objects import (
    Capacity,
    EventId,
    Money,
    RegistrationId,
    TicketTypeId,
    UserId,
)


@dataclass(frozen=True)
class Event:
    """Domain representation of an Event."""

    id: EventId
    title: str
    description: str
    location: str
    target_date: datetime
    date_display: str
    time_display: str
    created_by: UserId
    created_at: datetime
    updated_at: datetime

    def is_upcoming(self, now: datetime) -> bool:
        return self.target_date > now


@dataclass(frozen=True)
class TicketType:
    """Domain representation of a TicketType."""

    id: TicketTypeId
    event_id: EventId
    name: str
    description: str
    is_free: bool
    price: Money
    quantity: Capacity
    sold: Capacity
    created_at: datetime

    @property
    def remaining(self) -> int:
        return self.quantity.value - self.sold.value

    @property
    def is_sold_out(self) -> bool:
        return self.sold.value >= self.quantity.value


@dataclass(frozen=True)
class Registration:
    """Domain representation of a Registration (one seat for one user at one event)."""

    id: RegistrationId
    user_id: UserId
    event_id: EventId
    ticket_type_id: TicketTypeId | None
    registered_at: datetime


@dataclass(frozen=True)
class EventDraft:
    """Organizer input for creating or editing an event."""

    title: str
    location: str
    target_date: datetime
    description: str = ""
    date_display: str = ""
    time_display: str = ""


@dataclass(frozen=True)
class TicketTypeDraft:
    """Organizer input for a new ticket type, before validation."""

    name: str
    quantity: int
    description: str = ""
    is_free: bool = True
    price: Decimal = Decimal("0")


@dataclass(frozen=True)
class TicketTypePatch:
    """Partial update for a ticket type. None means "leave unchanged"."""

    name: str | None = None
    description: str | None = None
    is_free: bool | None = None
    price: Decimal | None = None
    quantity: int | None = None


@dataclass(frozen=True)
class Actor:
    """The authenticated caller as reported by the identity provider."""

    user_id: UserId
    is_admin: bool = False

    def can_manage(self, owner_id: UserId) -> bool:
        return self.is_admin or self.user_id == owner_id
