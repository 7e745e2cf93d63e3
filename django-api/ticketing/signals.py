"""Django signals for cache invalidation.

Any write to an event, its ticket types or its registrations drops the
cached ticket type list for the event and the owner's dashboard once the
write's transaction commits.
"""

from functools import partial

from django.db import transaction
from django.db.models.signals import post_delete, post_save
from django.dispatch import receiver

from ticketing.cache import invalidate_event
from ticketing.models import Event, Registration, TicketType


def _owner_of(event_id):
    return (
        Event.objects.filter(id=event_id).values_list("created_by", flat=True).first()
    )


def _invalidate_on_commit(event_id, owner_id) -> None:
    # Before commit a concurrent reader could refill the cache with old rows.
    transaction.on_commit(partial(invalidate_event, event_id, owner_id))


@receiver([post_save, post_delete], sender=Event)
def invalidate_event_cache(sender, instance, **kwargs):
    """Invalidate caches when an event is saved or deleted."""
    _invalidate_on_commit(instance.id, instance.created_by)


@receiver([post_save, post_delete], sender=TicketType)
def invalidate_ticket_type_cache(sender, instance, **kwargs):
    """Invalidate caches when a ticket type is saved or deleted."""
    _invalidate_on_commit(instance.event_id, _owner_of(instance.event_id))


@receiver([post_save, post_delete], sender=Registration)
def invalidate_registration_cache(sender, instance, **kwargs):
    """Invalidate caches when a registration is created or cancelled."""
    _invalidate_on_commit(instance.event_id, _owner_of(instance.event_id))
