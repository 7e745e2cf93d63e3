"""Pytest configuration and shared fixtures."""

import uuid
from datetime import timedelta

import pytest
from django.utils import timezone
from rest_framework.test import APIClient

from ticketing.domain import Actor, EventDraft, TicketTypeDraft, UserId
from ticketing.services.analytics_service import AnalyticsService
from ticketing.services.event_service import EventService
from ticketing.services.registration_service import RegistrationService
from ticketing.services.ticket_type_service import TicketTypeService
from ticketing.stores.memory_store import InMemoryTicketingStore


def make_actor(is_admin: bool = False) -> Actor:
    return Actor(user_id=UserId(uuid.uuid4()), is_admin=is_admin)


def make_event_draft(days_ahead: int = 10, title: str = "Launch Night") -> EventDraft:
    return EventDraft(
        title=title,
        location="Gulshan, Dhaka",
        target_date=timezone.now() + timedelta(days=days_ahead),
        description="Doors at seven",
        date_display="Friday",
        time_display="7:00 PM",
    )


@pytest.fixture
def api_client() -> APIClient:
    return APIClient()


@pytest.fixture(autouse=True)
def clear_cache():
    from django.core.cache import cache
    cache.clear()
    yield
    cache.clear()


@pytest.fixture
def organizer() -> Actor:
    return make_actor()


@pytest.fixture
def admin() -> Actor:
    return make_actor(is_admin=True)


@pytest.fixture
def user_a() -> Actor:
    return make_actor()


@pytest.fixture
def user_b() -> Actor:
    return make_actor()


@pytest.fixture
def user_c() -> Actor:
    return make_actor()


@pytest.fixture
def memory_store() -> InMemoryTicketingStore:
    return InMemoryTicketingStore()


@pytest.fixture
def event_service(memory_store) -> EventService:
    return EventService(memory_store)


@pytest.fixture
def ticket_type_service(memory_store) -> TicketTypeService:
    return TicketTypeService(memory_store)


@pytest.fixture
def registration_service(memory_store) -> RegistrationService:
    return RegistrationService(memory_store)


@pytest.fixture
def analytics_service(memory_store) -> AnalyticsService:
    return AnalyticsService(memory_store)


@pytest.fixture
def event(event_service, organizer):
    return event_service.create_event(organizer, make_event_draft())


@pytest.fixture
def general_ticket(ticket_type_service, organizer, event):
    """Scenario A setup: a free "General" ticket type with two seats."""
    return ticket_type_service.create_ticket_type(
        organizer,
        str(event.id),
        TicketTypeDraft(name="General", quantity=2, is_free=True),
    )
