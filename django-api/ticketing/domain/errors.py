"""Domain error codes for the ticketing module."""

from dataclasses import dataclass
from enum import Enum


class ErrorCode(Enum):
    """Domain error codes."""

    VALIDATION_FAILED = "VALIDATION_FAILED"
    INVALID_ID = "INVALID_ID"
    CAPACITY_BELOW_SOLD = "CAPACITY_BELOW_SOLD"
    TICKET_TYPE_IN_USE = "TICKET_TYPE_IN_USE"
    ALREADY_REGISTERED = "ALREADY_REGISTERED"
    SOLD_OUT = "SOLD_OUT"
    EVENT_NOT_FOUND = "EVENT_NOT_FOUND"
    TICKET_TYPE_NOT_FOUND = "TICKET_TYPE_NOT_FOUND"
    REGISTRATION_NOT_FOUND = "REGISTRATION_NOT_FOUND"
    PERMISSION_DENIED = "PERMISSION_DENIED"


@dataclass(frozen=True)
class DomainError(Exception):
    """Base domain error with code and user-safe message."""

    code: ErrorCode
    message: str

    def __str__(self) -> str:
        return f"{self.code.value}: {self.message}"


class ValidationError(DomainError):
    """Raised when a draft fails a field constraint. Names the first failing field."""

    def __init__(self, field: str, message: str) -> None:
        super().__init__(code=ErrorCode.VALIDATION_FAILED, message=message)
        self.field = field


class InvalidIdError(DomainError):
    """Raised when an identifier is not a valid UUID."""

    def __init__(self, kind: str = "resource") -> None:
        super().__init__(
            code=ErrorCode.INVALID_ID,
            message=f"Invalid {kind} ID format",
        )
        self.kind = kind


class CapacityError(DomainError):
    """Raised when a change would drive quantity below the number already sold."""

    def __init__(self, ticket_type_id: str, sold: int, requested: int) -> None:
        super().__init__(
            code=ErrorCode.CAPACITY_BELOW_SOLD,
            message=f"Quantity cannot be lower than the {sold} tickets already sold",
        )
        self.ticket_type_id = ticket_type_id
        self.sold = sold
        self.requested = requested


class TicketTypeInUseError(CapacityError):
    """Raised when deleting a ticket type that already has registrations.

    Deleting asks for a capacity of zero, so ``requested`` is always 0.
    """

    def __init__(self, ticket_type_id: str, sold: int) -> None:
        DomainError.__init__(
            self,
            code=ErrorCode.TICKET_TYPE_IN_USE,
            message="Ticket type has registrations and cannot be deleted",
        )
        self.ticket_type_id = ticket_type_id
        self.sold = sold
        self.requested = 0


class DuplicateRegistrationError(DomainError):
    """Raised when the user already holds a registration for the event."""

    def __init__(self, user_id: str, event_id: str) -> None:
        super().__init__(
            code=ErrorCode.ALREADY_REGISTERED,
            message="You are already registered for this event",
        )
        self.user_id = user_id
        self.event_id = event_id


class SoldOutError(DomainError):
    """Raised when no inventory is left for the ticket type at commit time."""

    def __init__(self, ticket_type_id: str) -> None:
        super().__init__(
            code=ErrorCode.SOLD_OUT,
            message="This ticket type is sold out",
        )
        self.ticket_type_id = ticket_type_id


class NotFoundError(DomainError):
    """Base for referenced entities that do not exist or were deleted."""


class EventNotFoundError(NotFoundError):
    """Raised when an event is not found."""

    def __init__(self, event_id: str) -> None:
        super().__init__(
            code=ErrorCode.EVENT_NOT_FOUND,
            message="Event not found",
        )
        self.event_id = event_id


class TicketTypeNotFoundError(NotFoundError):
    """Raised when a ticket type is not found or belongs to another event."""

    def __init__(self, ticket_type_id: str) -> None:
        super().__init__(
            code=ErrorCode.TICKET_TYPE_NOT_FOUND,
            message="Ticket type is no longer available",
        )
        self.ticket_type_id = ticket_type_id


class RegistrationNotFoundError(NotFoundError):
    """Raised when a registration is not found or was already cancelled."""

    def __init__(self, registration_id: str) -> None:
        super().__init__(
            code=ErrorCode.REGISTRATION_NOT_FOUND,
            message="Registration not found",
        )
        self.registration_id = registration_id


class PermissionDeniedError(DomainError):
    """Raised when the actor is neither the owner nor an administrator."""

    def __init__(self, action: str) -> None:
        super().__init__(
            code=ErrorCode.PERMISSION_DENIED,
            message=f"You are not allowed to {action}",
        )
        self.action = action


class StoreError(Exception):
    """Infrastructure failure talking to the data store.

    Not a DomainError: handlers map it to a generic fault response,
    never to a business-rule one.
    """
