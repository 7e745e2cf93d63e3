"""Unit tests for the read-model projections.

Run with: pytest tests/test_analytics.py -v
"""

import uuid
from datetime import date, datetime, timedelta, timezone
from decimal import Decimal

from ticketing.domain import (
    Capacity,
    Event,
    EventId,
    Money,
    TicketType,
    TicketTypeId,
    UserId,
)
from ticketing.domain.analytics import (
    Bucket,
    organizer_summary,
    registration_trend,
    sell_through_rate,
    ticket_summary,
    top_events,
)

NOW = datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc)
OWNER = UserId(uuid.uuid4())


def _event(title: str, days_ahead: int) -> Event:
    return Event(
        id=EventId(uuid.uuid4()),
        title=title,
        description="",
        location="Hall",
        target_date=NOW + timedelta(days=days_ahead),
        date_display="",
        time_display="",
        created_by=OWNER,
        created_at=NOW,
        updated_at=NOW,
    )


def _ticket_type(quantity: int, sold: int, price: str = "0", is_free: bool = True) -> TicketType:
    return TicketType(
        id=TicketTypeId(uuid.uuid4()),
        event_id=EventId(uuid.uuid4()),
        name="GA",
        description="",
        is_free=is_free,
        price=Money(Decimal(price)),
        quantity=Capacity(quantity),
        sold=Capacity(sold),
        created_at=NOW,
    )


class TestSellThrough:
    def test_ratio_of_sold_to_quantity(self):
        assert sell_through_rate(_ticket_type(quantity=4, sold=1)) == 0.25

    def test_zero_quantity_is_zero(self):
        assert sell_through_rate(_ticket_type(quantity=0, sold=0)) == 0.0


class TestTicketSummary:
    def test_totals_and_revenue(self):
        summary = ticket_summary(
            [
                _ticket_type(quantity=10, sold=4),
                _ticket_type(quantity=5, sold=2, price="150.00", is_free=False),
            ]
        )
        assert summary.total_capacity == 15
        assert summary.total_sold == 6
        assert summary.revenue == Decimal("300.00")
        assert summary.free_types == 1
        assert summary.paid_types == 1


class TestOrganizerSummary:
    def test_counts_and_rounded_average(self):
        past = _event("Past", -3)
        upcoming = _event("Upcoming", 3)
        counts = {str(past.id): 2, str(upcoming.id): 3}
        summary = organizer_summary([past, upcoming], counts, NOW)
        assert summary.total_events == 2
        assert summary.total_registrations == 5
        assert summary.upcoming_events == 1
        assert summary.avg_registrations == 3

    def test_no_events(self):
        summary = organizer_summary([], {}, NOW)
        assert summary.total_events == 0
        assert summary.avg_registrations == 0


class TestTopEvents:
    def test_ranked_by_registrations_and_limited(self):
        events = [_event(f"E{i}", 1) for i in range(7)]
        counts = {str(e.id): i for i, e in enumerate(events)}
        ranked = top_events(events, counts)
        assert len(ranked) == 5
        assert [r.registrations for r in ranked] == [6, 5, 4, 3, 2]


class TestRegistrationTrend:
    def test_daily_buckets_end_today(self):
        today = date(2026, 10, 19)
        stamps = [
            datetime(2026, 10, 19, 9, tzinfo=timezone.utc),
            datetime(2026, 10, 19, 18, tzinfo=timezone.utc),
            datetime(2026, 10, 13, 8, tzinfo=timezone.utc),
            datetime(2026, 10, 12, 8, tzinfo=timezone.utc),
        ]
        trend = registration_trend(stamps, today, buckets=7)
        assert len(trend) == 7
        assert trend[0].start == date(2026, 10, 13)
        assert trend[-1].start == today
        assert [p.count for p in trend] == [1, 0, 0, 0, 0, 0, 2]

    def test_weekly_buckets(self):
        today = date(2026, 10, 19)
        stamps = [
            datetime(2026, 10, 18, tzinfo=timezone.utc),
            datetime(2026, 10, 10, tzinfo=timezone.utc),
        ]
        trend = registration_trend(stamps, today, buckets=2, bucket=Bucket.WEEKLY)
        assert [p.start for p in trend] == [date(2026, 10, 6), date(2026, 10, 13)]
        assert [p.count for p in trend] == [1, 1]

    def test_empty_window(self):
        trend = registration_trend([], date(2026, 10, 19), buckets=14)
        assert len(trend) == 14
        assert all(p.count == 0 for p in trend)
