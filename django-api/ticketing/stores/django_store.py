"""Django ORM implementation of the TicketingStore.

Inventory changes never read ``sold`` into Python and write it back. They are
conditional UPDATEs (``sold = sold + 1 WHERE sold < quantity``) executed in
the same transaction as the registration insert or delete, so two requests
racing for the last seat serialize on the ticket type row and the loser sees
zero rows updated.
"""

import functools
import logging
from collections.abc import Iterable
from datetime import datetime

from django.db import DatabaseError, IntegrityError, transaction
from django.db.models import Count, F

from ticketing import models as orm
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
    StoreError,
    TicketTypeInUseError,
    TicketTypeNotFoundError,
)
from ticketing.domain.value_objects import Capacity, Money
from ticketing.stores.interfaces import TicketingStore

logger = logging.getLogger(__name__)


def _translate_db_errors(func):
    """Re-raise driver and ORM failures as StoreError; domain errors pass through."""

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except DatabaseError as exc:
            logger.exception("Store call %s failed", func.__name__)
            raise StoreError(f"{func.__name__} failed") from exc

    return wrapper


def _to_event(row: orm.Event) -> Event:
    return Event(
        id=EventId(row.id),
        title=row.title,
        description=row.description,
        location=row.location,
        target_date=row.target_date,
        date_display=row.date_display,
        time_display=row.time_display,
        created_by=UserId(row.created_by),
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


def _to_ticket_type(row: orm.TicketType) -> TicketType:
    return TicketType(
        id=TicketTypeId(row.id),
        event_id=EventId(row.event_id),
        name=row.name,
        description=row.description,
        is_free=row.is_free,
        price=Money(row.price),
        quantity=Capacity(row.quantity),
        sold=Capacity(row.sold),
        created_at=row.created_at,
    )


def _to_registration(row: orm.Registration) -> Registration:
    return Registration(
        id=RegistrationId(row.id),
        user_id=UserId(row.user_id),
        event_id=EventId(row.event_id),
        ticket_type_id=TicketTypeId(row.ticket_type_id) if row.ticket_type_id else None,
        registered_at=row.registered_at,
    )


class DjangoTicketingStore(TicketingStore):
    """PostgreSQL-backed ticketing store using Django ORM."""

    # Events

    @_translate_db_errors
    def create_event(self, owner_id: UserId, draft: EventDraft) -> Event:
        row = orm.Event.objects.create(
            title=draft.title,
            description=draft.description,
            location=draft.location,
            target_date=draft.target_date,
            date_display=draft.date_display,
            time_display=draft.time_display,
            created_by=owner_id.value,
        )
        return _to_event(row)

    @_translate_db_errors
    def update_event(self, event_id: EventId, draft: EventDraft) -> Event | None:
        row = orm.Event.objects.filter(id=event_id.value).first()
        if row is None:
            return None
        row.title = draft.title
        row.description = draft.description
        row.location = draft.location
        row.target_date = draft.target_date
        row.date_display = draft.date_display
        row.time_display = draft.time_display
        row.save(
            update_fields=[
                "title",
                "description",
                "location",
                "target_date",
                "date_display",
                "time_display",
                "updated_at",
            ]
        )
        return _to_event(row)

    @_translate_db_errors
    def get_event(self, event_id: EventId) -> Event | None:
        row = orm.Event.objects.filter(id=event_id.value).first()
        return _to_event(row) if row else None

    @_translate_db_errors
    def list_events(self, starting_after: datetime | None = None) -> list[Event]:
        rows = orm.Event.objects.order_by("target_date")
        if starting_after is not None:
            rows = rows.filter(target_date__gt=starting_after)
        return [_to_event(row) for row in rows]

    @_translate_db_errors
    def list_events_by_owner(self, owner_id: UserId) -> list[Event]:
        rows = orm.Event.objects.filter(created_by=owner_id.value).order_by("-target_date")
        return [_to_event(row) for row in rows]

    @_translate_db_errors
    def get_events(self, event_ids: Iterable[EventId]) -> dict[EventId, Event]:
        ids = [e.value for e in event_ids]
        return {
            EventId(row.id): _to_event(row)
            for row in orm.Event.objects.filter(id__in=ids)
        }

    @_translate_db_errors
    def delete_event(self, event_id: EventId) -> bool:
        with transaction.atomic():
            registrations, _ = orm.Registration.objects.filter(event_id=event_id.value).delete()
            deleted, _ = orm.Event.objects.filter(id=event_id.value).delete()
        if deleted:
            logger.info(
                "Deleted event %s with %d registrations", event_id, registrations
            )
        return bool(deleted)

    # Ticket types

    @_translate_db_errors
    def create_ticket_type(self, event_id: EventId, draft: TicketTypeDraft) -> TicketType:
        try:
            with transaction.atomic():
                if not orm.Event.objects.filter(id=event_id.value).exists():
                    raise EventNotFoundError(str(event_id))
                row = orm.TicketType.objects.create(
                    event_id=event_id.value,
                    name=draft.name,
                    description=draft.description,
                    is_free=draft.is_free,
                    price=draft.price,
                    quantity=draft.quantity,
                    sold=0,
                )
        except IntegrityError as exc:
            # Event deleted between the check and the deferred FK check at commit.
            if not orm.Event.objects.filter(id=event_id.value).exists():
                raise EventNotFoundError(str(event_id)) from exc
            raise
        return _to_ticket_type(row)

    @_translate_db_errors
    def get_ticket_type(self, ticket_type_id: TicketTypeId) -> TicketType | None:
        row = orm.TicketType.objects.filter(id=ticket_type_id.value).first()
        return _to_ticket_type(row) if row else None

    @_translate_db_errors
    def list_ticket_types(self, event_id: EventId) -> list[TicketType]:
        rows = orm.TicketType.objects.filter(event_id=event_id.value).order_by("created_at")
        return [_to_ticket_type(row) for row in rows]

    @_translate_db_errors
    def list_ticket_types_for_events(self, event_ids: Iterable[EventId]) -> list[TicketType]:
        ids = [e.value for e in event_ids]
        rows = orm.TicketType.objects.filter(event_id__in=ids).order_by("created_at")
        return [_to_ticket_type(row) for row in rows]

    @_translate_db_errors
    def update_ticket_type(
        self, ticket_type_id: TicketTypeId, draft: TicketTypeDraft
    ) -> TicketType | None:
        with transaction.atomic():
            row = (
                orm.TicketType.objects.select_for_update()
                .filter(id=ticket_type_id.value)
                .first()
            )
            if row is None:
                return None
            if draft.quantity < row.sold:
                raise CapacityError(str(ticket_type_id), row.sold, draft.quantity)
            row.name = draft.name
            row.description = draft.description
            row.is_free = draft.is_free
            row.price = draft.price
            row.quantity = draft.quantity
            row.save(update_fields=["name", "description", "is_free", "price", "quantity"])
        return _to_ticket_type(row)

    @_translate_db_errors
    def delete_ticket_type(self, ticket_type_id: TicketTypeId) -> bool:
        with transaction.atomic():
            deleted, _ = orm.TicketType.objects.filter(
                id=ticket_type_id.value, sold=0
            ).delete()
            if deleted:
                return True
            row = orm.TicketType.objects.filter(id=ticket_type_id.value).first()
        if row is None:
            return False
        raise TicketTypeInUseError(str(ticket_type_id), row.sold)

    # Registrations

    @_translate_db_errors
    def get_registration(self, registration_id: RegistrationId) -> Registration | None:
        row = orm.Registration.objects.filter(id=registration_id.value).first()
        return _to_registration(row) if row else None

    @_translate_db_errors
    def find_registration(self, user_id: UserId, event_id: EventId) -> Registration | None:
        row = orm.Registration.objects.filter(
            user_id=user_id.value, event_id=event_id.value
        ).first()
        return _to_registration(row) if row else None

    @_translate_db_errors
    def list_registrations_for_event(self, event_id: EventId) -> list[Registration]:
        rows = orm.Registration.objects.filter(event_id=event_id.value).order_by("-registered_at")
        return [_to_registration(row) for row in rows]

    @_translate_db_errors
    def list_registrations_for_events(
        self, event_ids: Iterable[EventId]
    ) -> list[Registration]:
        ids = [e.value for e in event_ids]
        rows = orm.Registration.objects.filter(event_id__in=ids).order_by("-registered_at")
        return [_to_registration(row) for row in rows]

    @_translate_db_errors
    def list_registrations_for_user(self, user_id: UserId) -> list[Registration]:
        rows = orm.Registration.objects.filter(user_id=user_id.value).order_by("-registered_at")
        return [_to_registration(row) for row in rows]

    @_translate_db_errors
    def count_registrations(self, event_ids: Iterable[EventId]) -> dict[str, int]:
        ids = [e.value for e in event_ids]
        rows = (
            orm.Registration.objects.filter(event_id__in=ids)
            .values("event_id")
            .annotate(total=Count("id"))
        )
        return {str(row["event_id"]): row["total"] for row in rows}

    @_translate_db_errors
    def registration_timestamps(
        self, event_ids: Iterable[EventId], since: datetime
    ) -> list[datetime]:
        ids = [e.value for e in event_ids]
        return list(
            orm.Registration.objects.filter(event_id__in=ids, registered_at__gte=since)
            .order_by("registered_at")
            .values_list("registered_at", flat=True)
        )

    @_translate_db_errors
    def commit_admission(
        self,
        user_id: UserId,
        event_id: EventId,
        ticket_type_id: TicketTypeId | None,
    ) -> Registration:
        try:
            with transaction.atomic():
                if ticket_type_id is None:
                    # FK checks are deferred to commit on both supported backends.
                    if not orm.Event.objects.filter(id=event_id.value).exists():
                        raise EventNotFoundError(str(event_id))
                else:
                    updated = orm.TicketType.objects.filter(
                        id=ticket_type_id.value,
                        event_id=event_id.value,
                        sold__lt=F("quantity"),
                    ).update(sold=F("sold") + 1)
                    if not updated:
                        if not orm.TicketType.objects.filter(
                            id=ticket_type_id.value, event_id=event_id.value
                        ).exists():
                            raise TicketTypeNotFoundError(str(ticket_type_id))
                        raise SoldOutError(str(ticket_type_id))
                row = orm.Registration.objects.create(
                    user_id=user_id.value,
                    event_id=event_id.value,
                    ticket_type_id=ticket_type_id.value if ticket_type_id else None,
                )
        except IntegrityError as exc:
            if orm.Registration.objects.filter(
                user_id=user_id.value, event_id=event_id.value
            ).exists():
                raise DuplicateRegistrationError(str(user_id), str(event_id)) from exc
            if not orm.Event.objects.filter(id=event_id.value).exists():
                raise EventNotFoundError(str(event_id)) from exc
            raise
        return _to_registration(row)

    @_translate_db_errors
    def commit_cancellation(self, registration_id: RegistrationId) -> Registration:
        with transaction.atomic():
            row = (
                orm.Registration.objects.select_for_update()
                .filter(id=registration_id.value)
                .first()
            )
            if row is None:
                raise RegistrationNotFoundError(str(registration_id))
            registration = _to_registration(row)
            deleted, _ = orm.Registration.objects.filter(id=row.id).delete()
            if not deleted:
                raise RegistrationNotFoundError(str(registration_id))
            if row.ticket_type_id:
                orm.TicketType.objects.filter(id=row.ticket_type_id, sold__gt=0).update(
                    sold=F("sold") - 1
                )
        return registration
