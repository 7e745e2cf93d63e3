"""Cache keys for read-model responses and their invalidation."""

from django.conf import settings
from django.core.cache import cache


def ticket_types_key(event_id) -> str:
    return f"ticketing:events:{event_id}:ticket-types"


def organizer_dashboard_key(owner_id) -> str:
    return f"ticketing:organizers:{owner_id}:dashboard"


def cache_timeout() -> int:
    return getattr(settings, "CACHE_TIMEOUT", 60)


def invalidate_event(event_id, owner_id=None) -> None:
    keys = [ticket_types_key(event_id)]
    if owner_id is not None:
        keys.append(organizer_dashboard_key(owner_id))
    cache.delete_many(keys)
