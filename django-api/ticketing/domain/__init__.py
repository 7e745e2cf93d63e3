from ticketing.domain.models import (
    Actor,
    Event,
    EventDraft,
    Registration,
    TicketType,
    TicketTypeDraft,
    TicketTypePatch,
)
from ticketing.domain.value_objects import (
    Admission,
    Capacity,
    EventId,
    GeneralAdmission,
    Money,
    RegistrationId,
    TicketedAdmission,
    TicketTypeId,
    UserId,
)

__all__ = [
    "Actor",
    "Event",
    "EventDraft",
    "Registration",
    "TicketType",
    "TicketTypeDraft",
    "TicketTypePatch",
    "Admission",
    "GeneralAdmission",
    "TicketedAdmission",
    "EventId",
    "TicketTypeId",
    "RegistrationId",
    "UserId",
    "Money",
    "Capacity",
]
