"""Event service - event lifecycle for organizers.

Services:
- Depend only on interfaces (stores)
- Validate domain invariants
- Perform orchestration and error mapping
- Return domain models or domain errors
"""

import logging
from datetime import datetime

from django.utils import timezone

from ticketing.domain import Actor, Event, EventDraft, EventId
from ticketing.domain.errors import EventNotFoundError, PermissionDeniedError
from ticketing.domain.validation import validate_event
from ticketing.services.common import parse_id, with_retry
from ticketing.stores.interfaces import EventStore

logger = logging.getLogger(__name__)


class EventService:
    """Service for event lifecycle operations."""

    def __init__(self, store: EventStore) -> None:
        self._store = store

    def create_event(self, actor: Actor, draft: EventDraft) -> Event:
        """Create an event owned by the actor.

        Raises:
            ValidationError: If the draft fails a field rule.
        """
        draft = validate_event(draft)
        event = self._store.create_event(actor.user_id, draft)
        logger.info("Event %s created by %s", event.id, actor.user_id)
        return event

    def get_event(self, event_id: str) -> Event:
        """Return an event by ID.

        Raises:
            InvalidIdError: If the event_id is not a valid UUID.
            EventNotFoundError: If the event does not exist.
        """
        eid = parse_id(EventId, event_id, "event")
        event = with_retry(lambda: self._store.get_event(eid))
        if event is None:
            raise EventNotFoundError(event_id)
        return event

    def list_events(self, upcoming_only: bool = False, now: datetime | None = None) -> list[Event]:
        """Public catalog, soonest first. ``upcoming_only`` hides past events."""
        starting_after = (now or timezone.now()) if upcoming_only else None
        return with_retry(lambda: self._store.list_events(starting_after))

    def list_events_for_organizer(self, actor: Actor) -> list[Event]:
        return with_retry(lambda: self._store.list_events_by_owner(actor.user_id))

    def update_event(self, actor: Actor, event_id: str, draft: EventDraft) -> Event:
        """Edit an event. The owner never changes.

        Raises:
            InvalidIdError, EventNotFoundError, PermissionDeniedError, ValidationError
        """
        event = self.get_event(event_id)
        if not actor.can_manage(event.created_by):
            raise PermissionDeniedError("edit this event")
        draft = validate_event(draft)
        updated = self._store.update_event(event.id, draft)
        if updated is None:
            raise EventNotFoundError(event_id)
        logger.info("Event %s updated by %s", event.id, actor.user_id)
        return updated

    def delete_event(self, actor: Actor, event_id: str) -> None:
        """Delete an event together with its ticket types and registrations.

        Raises:
            InvalidIdError, EventNotFoundError, PermissionDeniedError
        """
        event = self.get_event(event_id)
        if not actor.can_manage(event.created_by):
            raise PermissionDeniedError("delete this event")
        if not self._store.delete_event(event.id):
            raise EventNotFoundError(event_id)
        logger.info("Event %s deleted by %s", event.id, actor.user_id)
