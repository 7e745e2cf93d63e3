"""Ticket type management for event owners."""

import logging

from ticketing.domain import (
    Actor,
    Event,
    EventId,
    TicketType,
    TicketTypeDraft,
    TicketTypeId,
    TicketTypePatch,
)
from ticketing.domain.errors import (
    CapacityError,
    EventNotFoundError,
    PermissionDeniedError,
    TicketTypeNotFoundError,
)
from ticketing.domain.validation import validate_ticket_type
from ticketing.services.common import parse_id, with_retry
from ticketing.stores.interfaces import TicketingStore

logger = logging.getLogger(__name__)


def merge_patch(current: TicketType, patch: TicketTypePatch) -> TicketTypeDraft:
    """Overlay a patch on the stored ticket type, producing a draft to validate.

    Turning ``is_free`` on discards any price, including one sent in the same
    patch. Turning it off without a price keeps the stored price (0).
    """
    is_free = current.is_free if patch.is_free is None else patch.is_free
    price = current.price.amount if patch.price is None else patch.price
    return TicketTypeDraft(
        name=current.name if patch.name is None else patch.name,
        description=current.description if patch.description is None else patch.description,
        is_free=is_free,
        price=0 if is_free else price,
        quantity=current.quantity.value if patch.quantity is None else patch.quantity,
    )


class TicketTypeService:
    """Create, edit and remove the ticket types of an event.

    Never touches ``sold``; that counter belongs to RegistrationService.
    """

    def __init__(self, store: TicketingStore) -> None:
        self._store = store

    def _owned_event(self, actor: Actor, event_id: EventId, action: str) -> Event:
        event = self._store.get_event(event_id)
        if event is None:
            raise EventNotFoundError(str(event_id))
        if not actor.can_manage(event.created_by):
            raise PermissionDeniedError(action)
        return event

    def _get(self, ticket_type_id: TicketTypeId) -> TicketType:
        ticket_type = self._store.get_ticket_type(ticket_type_id)
        if ticket_type is None:
            raise TicketTypeNotFoundError(str(ticket_type_id))
        return ticket_type

    def list_ticket_types(self, event_id: str) -> list[TicketType]:
        """Return the ticket types for an event.

        Raises:
            InvalidIdError: If the event_id is not a valid UUID.
            EventNotFoundError: If the event does not exist.
        """
        eid = parse_id(EventId, event_id, "event")
        if with_retry(lambda: self._store.get_event(eid)) is None:
            raise EventNotFoundError(event_id)
        return with_retry(lambda: self._store.list_ticket_types(eid))

    def get_ticket_type(self, ticket_type_id: str) -> TicketType:
        return self._get(parse_id(TicketTypeId, ticket_type_id, "ticket type"))

    def create_ticket_type(
        self, actor: Actor, event_id: str, draft: TicketTypeDraft
    ) -> TicketType:
        """Add a ticket type to an event with sold = 0.

        Raises:
            InvalidIdError, EventNotFoundError, PermissionDeniedError
            ValidationError: Naming the first field that fails its rule.
        """
        eid = parse_id(EventId, event_id, "event")
        self._owned_event(actor, eid, "manage tickets for this event")
        draft = validate_ticket_type(draft)
        ticket_type = self._store.create_ticket_type(eid, draft)
        logger.info(
            "Ticket type %s (%s, quantity=%d) added to event %s",
            ticket_type.id,
            ticket_type.name,
            draft.quantity,
            eid,
        )
        return ticket_type

    def update_ticket_type(
        self, actor: Actor, ticket_type_id: str, patch: TicketTypePatch
    ) -> TicketType:
        """Apply a partial update and re-validate the merged result.

        Raises:
            InvalidIdError, TicketTypeNotFoundError, PermissionDeniedError
            ValidationError: If the merged ticket type breaks a field rule.
            CapacityError: If quantity would drop below sold.
        """
        tid = parse_id(TicketTypeId, ticket_type_id, "ticket type")
        current = self._get(tid)
        self._owned_event(actor, current.event_id, "manage tickets for this event")
        draft = validate_ticket_type(merge_patch(current, patch))
        if draft.quantity < current.sold.value:
            logger.info(
                "Rejected quantity %d for ticket type %s with %d sold",
                draft.quantity,
                tid,
                current.sold.value,
            )
            raise CapacityError(str(tid), current.sold.value, draft.quantity)
        updated = self._store.update_ticket_type(tid, draft)
        if updated is None:
            raise TicketTypeNotFoundError(ticket_type_id)
        logger.info("Ticket type %s updated by %s", tid, actor.user_id)
        return updated

    def delete_ticket_type(self, actor: Actor, ticket_type_id: str) -> None:
        """Remove a ticket type that has not been sold.

        Raises:
            InvalidIdError, TicketTypeNotFoundError, PermissionDeniedError
            TicketTypeInUseError: If any registration holds this ticket type.
        """
        tid = parse_id(TicketTypeId, ticket_type_id, "ticket type")
        current = self._get(tid)
        self._owned_event(actor, current.event_id, "manage tickets for this event")
        if not self._store.delete_ticket_type(tid):
            raise TicketTypeNotFoundError(ticket_type_id)
        logger.info("Ticket type %s deleted by %s", tid, actor.user_id)
