"""Organizer-facing read model.

Pure reads: nothing here writes to the store, and the numbers may lag the
write path by whatever the view cache holds.
"""

from dataclasses import dataclass
from datetime import datetime, time, timedelta

from django.utils import timezone

from ticketing.domain import Actor, EventId, TicketType
from ticketing.domain.analytics import (
    Bucket,
    EventRanking,
    OrganizerSummary,
    TicketSummary,
    TrendPoint,
    organizer_summary,
    registration_trend,
    sell_through_rate,
    ticket_summary,
    top_events,
)
from ticketing.domain.errors import EventNotFoundError
from ticketing.services.common import parse_id, with_retry
from ticketing.stores.interfaces import TicketingStore


@dataclass(frozen=True)
class TicketTypeStats:
    ticket_type: TicketType
    sell_through: float


@dataclass(frozen=True)
class OrganizerDashboard:
    summary: OrganizerSummary
    tickets: TicketSummary
    top_events: list[EventRanking]
    trend: list[TrendPoint]


class AnalyticsService:
    """Registration counts, sell-through and trends for organizers."""

    def __init__(self, store: TicketingStore) -> None:
        self._store = store

    def registration_count(self, event_id: str) -> int:
        eid = parse_id(EventId, event_id, "event")
        if with_retry(lambda: self._store.get_event(eid)) is None:
            raise EventNotFoundError(event_id)
        counts = with_retry(lambda: self._store.count_registrations([eid]))
        return counts.get(str(eid), 0)

    def ticket_type_stats(self, event_id: str) -> list[TicketTypeStats]:
        eid = parse_id(EventId, event_id, "event")
        if with_retry(lambda: self._store.get_event(eid)) is None:
            raise EventNotFoundError(event_id)
        return [
            TicketTypeStats(ticket_type=t, sell_through=sell_through_rate(t))
            for t in with_retry(lambda: self._store.list_ticket_types(eid))
        ]

    def organizer_dashboard(
        self,
        actor: Actor,
        now: datetime | None = None,
        buckets: int = 7,
        bucket: Bucket = Bucket.DAILY,
    ) -> OrganizerDashboard:
        """Summary, ticket totals, top five events and the registration trend
        across every event the actor owns."""
        now = now or timezone.now()
        events = with_retry(lambda: self._store.list_events_by_owner(actor.user_id))
        event_ids = [e.id for e in events]
        counts = with_retry(lambda: self._store.count_registrations(event_ids))
        ticket_types = with_retry(
            lambda: self._store.list_ticket_types_for_events(event_ids)
        )

        today = timezone.localdate(now)
        width = 1 if bucket is Bucket.DAILY else 7
        window_start = today - timedelta(days=width * buckets - 1)
        since = timezone.make_aware(datetime.combine(window_start, time.min))
        stamps = with_retry(lambda: self._store.registration_timestamps(event_ids, since))

        return OrganizerDashboard(
            summary=organizer_summary(events, counts, now),
            tickets=ticket_summary(ticket_types),
            top_events=top_events(events, counts),
            trend=registration_trend(
                (timezone.localtime(ts) for ts in stamps),
                today,
                buckets=buckets,
                bucket=bucket,
            ),
        )
