"""Domain primitives that enforce validity at creation time."""

from dataclasses import dataclass
from decimal import Decimal
from typing import Self
from uuid import UUID

MAX_PRICE = Decimal("1000000")
MIN_QUANTITY = 1
MAX_QUANTITY = 100_000


@dataclass(frozen=True)
class _UUIDIdentifier:
    value: UUID

    @classmethod
    def from_string(cls, value: str) -> Self:
        return cls(value=UUID(value))

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class EventId(_UUIDIdentifier):
    """Unique identifier for an Event."""


@dataclass(frozen=True)
class TicketTypeId(_UUIDIdentifier):
    """Unique identifier for a TicketType."""


@dataclass(frozen=True)
class RegistrationId(_UUIDIdentifier):
    """Unique identifier for a Registration."""


@dataclass(frozen=True)
class UserId(_UUIDIdentifier):
    """Stable user identifier issued by the identity provider."""


@dataclass(frozen=True)
class Money:
    """Price representation with validation."""

    amount: Decimal

    def __post_init__(self) -> None:
        if self.amount < 0:
            raise ValueError("Money amount cannot be negative")

    @classmethod
    def zero(cls) -> Self:
        return cls(amount=Decimal("0"))

    def __str__(self) -> str:
        return f"{self.amount:.2f}"


@dataclass(frozen=True)
class Capacity:
    """Non-negative integer representing capacity."""

    value: int

    def __post_init__(self) -> None:
        if self.value < 0:
            raise ValueError("Capacity cannot be negative")


@dataclass(frozen=True)
class TicketedAdmission:
    """Admission against a specific ticket type; consumes one unit of inventory."""

    ticket_type_id: TicketTypeId


@dataclass(frozen=True)
class GeneralAdmission:
    """Admission to an event that has no configured ticket types."""


Admission = TicketedAdmission | GeneralAdmission
