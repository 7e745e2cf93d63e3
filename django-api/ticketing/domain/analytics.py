"""Read-model projections over ticket types and registrations.

Everything here is a pure function of its inputs: no store access, no
caching, nothing that feeds back into admission or cancellation.
"""

import math
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from decimal import Decimal
from enum import Enum

from ticketing.domain.models import Event, TicketType


class Bucket(Enum):
    DAILY = "daily"
    WEEKLY = "weekly"


@dataclass(frozen=True)
class TrendPoint:
    start: date
    count: int


@dataclass(frozen=True)
class OrganizerSummary:
    total_events: int
    total_registrations: int
    upcoming_events: int
    avg_registrations: int


@dataclass(frozen=True)
class TicketSummary:
    total_capacity: int
    total_sold: int
    revenue: Decimal
    free_types: int
    paid_types: int


@dataclass(frozen=True)
class EventRanking:
    event_id: str
    title: str
    registrations: int


def sell_through_rate(ticket_type: TicketType) -> float:
    """Fraction of the configured quantity already sold (0 when quantity is 0)."""
    if ticket_type.quantity.value == 0:
        return 0.0
    return ticket_type.sold.value / ticket_type.quantity.value


def ticket_summary(ticket_types: Iterable[TicketType]) -> TicketSummary:
    total_capacity = 0
    total_sold = 0
    revenue = Decimal("0")
    free_types = 0
    paid_types = 0
    for ticket_type in ticket_types:
        total_capacity += ticket_type.quantity.value
        total_sold += ticket_type.sold.value
        revenue += ticket_type.price.amount * ticket_type.sold.value
        if ticket_type.is_free:
            free_types += 1
        else:
            paid_types += 1
    return TicketSummary(
        total_capacity=total_capacity,
        total_sold=total_sold,
        revenue=revenue,
        free_types=free_types,
        paid_types=paid_types,
    )


def organizer_summary(
    events: Sequence[Event], registration_counts: dict[str, int], now: datetime
) -> OrganizerSummary:
    """Totals across every event an organizer owns.

    ``registration_counts`` maps event id strings to their registration count;
    events missing from the map count as zero.
    """
    total_registrations = sum(registration_counts.get(str(e.id), 0) for e in events)
    total_events = len(events)
    return OrganizerSummary(
        total_events=total_events,
        total_registrations=total_registrations,
        upcoming_events=sum(1 for e in events if e.is_upcoming(now)),
        avg_registrations=(
            math.floor(total_registrations / total_events + 0.5) if total_events else 0
        ),
    )


def top_events(
    events: Sequence[Event], registration_counts: dict[str, int], limit: int = 5
) -> list[EventRanking]:
    rankings = [
        EventRanking(
            event_id=str(e.id),
            title=e.title,
            registrations=registration_counts.get(str(e.id), 0),
        )
        for e in events
    ]
    rankings.sort(key=lambda r: r.registrations, reverse=True)
    return rankings[:limit]


def registration_trend(
    timestamps: Iterable[datetime],
    today: date,
    buckets: int = 7,
    bucket: Bucket = Bucket.DAILY,
) -> list[TrendPoint]:
    """Count registrations per bucket over a trailing window ending ``today``.

    Buckets are returned oldest first. The last bucket always contains
    ``today``; timestamps outside the window are ignored.
    """
    if buckets < 1:
        raise ValueError("buckets must be at least 1")
    width = 1 if bucket is Bucket.DAILY else 7
    window_start = today - timedelta(days=width * buckets - 1)
    counts = [0] * buckets
    for ts in timestamps:
        day = ts.date()
        if day < window_start or day > today:
            continue
        counts[(day - window_start).days // width] += 1
    return [
        TrendPoint(start=window_start + timedelta(days=width * i), count=count)
        for i, count in enumerate(counts)
    ]
