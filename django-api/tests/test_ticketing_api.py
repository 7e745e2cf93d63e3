"""Integration tests for the ticketing HTTP API.

These exercise the full stack: gateway identity headers, views, services and
the Django store against the test database.
Run with: pytest tests/test_ticketing_api.py -v
"""

import uuid
from datetime import timedelta
from unittest import mock

import pytest
from django.utils import timezone
from rest_framework.test import APIClient

from ticketing import models as orm
from ticketing.domain.errors import StoreError
from ticketing.stores.django_store import DjangoTicketingStore


def as_user(client: APIClient, user_id: str, role: str | None = None) -> APIClient:
    headers = {"HTTP_X_USER_ID": user_id}
    if role:
        headers["HTTP_X_USER_ROLE"] = role
    client.credentials(**headers)
    return client


@pytest.fixture
def organizer_id() -> str:
    return str(uuid.uuid4())


@pytest.fixture
def organizer_client(organizer_id) -> APIClient:
    return as_user(APIClient(), organizer_id)


@pytest.fixture
def attendee_client() -> APIClient:
    return as_user(APIClient(), str(uuid.uuid4()))


def event_payload(days_ahead: int = 10, **overrides) -> dict:
    payload = {
        "title": "Launch Night",
        "location": "Gulshan, Dhaka",
        "target_date": (timezone.now() + timedelta(days=days_ahead)).isoformat(),
        "description": "Doors at seven",
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def api_event(organizer_client) -> dict:
    response = organizer_client.post("/api/events", event_payload(), format="json")
    assert response.status_code == 201
    return response.json()


@pytest.fixture
def api_ticket(organizer_client, api_event) -> dict:
    response = organizer_client.post(
        f"/api/events/{api_event['id']}/ticket-types",
        {"name": "General", "quantity": 2, "is_free": True},
        format="json",
    )
    assert response.status_code == 201
    return response.json()


def register(client: APIClient, event_id: str, ticket_type_id: str | None = None):
    body = {"ticket_type_id": ticket_type_id} if ticket_type_id else {}
    return client.post(f"/api/events/{event_id}/registrations", body, format="json")


@pytest.mark.django_db
class TestIdentity:
    """Requests are identified by gateway headers."""

    def test_missing_identity_is_unauthorized(self, api_client: APIClient):
        response = api_client.get("/api/organizers/me/events")
        assert response.status_code == 401

    def test_malformed_identity_is_unauthorized(self, api_client: APIClient):
        response = as_user(api_client, "not-a-uuid").get("/api/events")
        assert response.status_code == 401

    def test_event_detail_is_public(self, api_client: APIClient, api_event):
        response = api_client.get(f"/api/events/{api_event['id']}")
        assert response.status_code == 200
        assert response.json()["title"] == "Launch Night"


@pytest.mark.django_db
class TestEvents:
    """Tests for /api/events and /api/events/{id}"""

    def test_create_sets_owner_from_identity(self, api_event, organizer_id):
        assert api_event["created_by"] == organizer_id

    def test_create_rejects_blank_title(self, organizer_client):
        response = organizer_client.post("/api/events", event_payload(title="  "), format="json")
        assert response.status_code == 400
        assert response.json()["error"]["field"] == "title"

    def test_create_rejects_missing_date(self, organizer_client):
        payload = event_payload()
        del payload["target_date"]
        response = organizer_client.post("/api/events", payload, format="json")
        assert response.status_code == 400
        assert response.json()["error"] == {
            "code": "VALIDATION_FAILED",
            "message": mock.ANY,
            "field": "target_date",
        }

    def test_organizer_list_only_own_events(self, organizer_client, attendee_client, api_event):
        attendee_client.post("/api/events", event_payload(title="Mine"), format="json")
        response = organizer_client.get("/api/organizers/me/events")
        assert [e["id"] for e in response.json()] == [api_event["id"]]

    def test_catalog_lists_every_organizer_soonest_first(
        self, api_client, attendee_client, api_event
    ):
        later = attendee_client.post(
            "/api/events", event_payload(days_ahead=20, title="Later"), format="json"
        ).json()
        sooner = attendee_client.post(
            "/api/events", event_payload(days_ahead=2, title="Sooner"), format="json"
        ).json()

        response = api_client.get("/api/events")
        assert response.status_code == 200
        assert [e["id"] for e in response.json()] == [
            sooner["id"],
            api_event["id"],
            later["id"],
        ]

    def test_catalog_upcoming_hides_past_events(self, api_client, organizer_client, api_event):
        organizer_client.post(
            "/api/events", event_payload(days_ahead=-3, title="Last week"), format="json"
        )
        response = api_client.get("/api/events?upcoming=true")
        assert [e["id"] for e in response.json()] == [api_event["id"]]

    def test_create_still_requires_identity(self, api_client):
        response = api_client.post("/api/events", event_payload(), format="json")
        assert response.status_code == 401

    def test_get_unknown_event(self, organizer_client):
        response = organizer_client.get(f"/api/events/{uuid.uuid4()}")
        assert response.status_code == 404
        assert response.json()["error"]["code"] == "EVENT_NOT_FOUND"

    def test_get_malformed_id(self, organizer_client):
        response = organizer_client.get("/api/events/abc")
        assert response.status_code == 400
        assert response.json()["error"]["code"] == "INVALID_ID"

    def test_patch_partial_update(self, organizer_client, api_event):
        response = organizer_client.patch(
            f"/api/events/{api_event['id']}", {"location": "Banani"}, format="json"
        )
        assert response.status_code == 200
        assert response.json()["location"] == "Banani"
        assert response.json()["title"] == "Launch Night"

    def test_patch_by_stranger_forbidden(self, attendee_client, api_event):
        response = attendee_client.patch(
            f"/api/events/{api_event['id']}", {"title": "Mine now"}, format="json"
        )
        assert response.status_code == 403
        assert response.json()["error"]["code"] == "PERMISSION_DENIED"

    def test_admin_can_delete_any_event(self, api_event):
        admin = as_user(APIClient(), str(uuid.uuid4()), role="admin")
        response = admin.delete(f"/api/events/{api_event['id']}")
        assert response.status_code == 204
        assert not orm.Event.objects.filter(id=api_event["id"]).exists()


@pytest.mark.django_db
class TestTicketTypes:
    """Tests for ticket type management endpoints."""

    def test_create_free_ticket_ignores_price(self, organizer_client, api_event):
        response = organizer_client.post(
            f"/api/events/{api_event['id']}/ticket-types",
            {"name": "Free", "quantity": 10, "is_free": True, "price": "99.00"},
            format="json",
        )
        assert response.status_code == 201
        body = response.json()
        assert body["price"] == "0.00"
        assert body["sold"] == 0
        assert body["remaining"] == 10

    def test_create_rejects_quantity_over_limit(self, organizer_client, api_event):
        response = organizer_client.post(
            f"/api/events/{api_event['id']}/ticket-types",
            {"name": "GA", "quantity": 100_001},
            format="json",
        )
        assert response.status_code == 400
        assert response.json()["error"]["field"] == "quantity"

    def test_create_by_stranger_forbidden(self, attendee_client, api_event):
        response = attendee_client.post(
            f"/api/events/{api_event['id']}/ticket-types",
            {"name": "GA", "quantity": 5},
            format="json",
        )
        assert response.status_code == 403

    def test_list_is_public(self, api_client, api_event, api_ticket):
        response = api_client.get(f"/api/events/{api_event['id']}/ticket-types")
        assert response.status_code == 200
        assert [t["id"] for t in response.json()] == [api_ticket["id"]]

    def test_list_reflects_new_sales(
        self, api_client, attendee_client, api_event, api_ticket, django_capture_on_commit_callbacks
    ):
        url = f"/api/events/{api_event['id']}/ticket-types"
        assert api_client.get(url).json()[0]["sold"] == 0

        with django_capture_on_commit_callbacks(execute=True):
            register(attendee_client, api_event["id"], api_ticket["id"])
        assert api_client.get(url).json()[0]["sold"] == 1

    def test_list_cache_shared_across_id_spellings(
        self, api_client, attendee_client, api_event, api_ticket, django_capture_on_commit_callbacks
    ):
        url = f"/api/events/{api_event['id'].upper()}/ticket-types"
        assert api_client.get(url).json()[0]["sold"] == 0

        with django_capture_on_commit_callbacks(execute=True):
            register(attendee_client, api_event["id"], api_ticket["id"])
        assert api_client.get(url).json()[0]["sold"] == 1

    def test_patch_quantity_below_sold_conflicts(
        self, organizer_client, attendee_client, api_event, api_ticket
    ):
        register(attendee_client, api_event["id"], api_ticket["id"])
        register(as_user(APIClient(), str(uuid.uuid4())), api_event["id"], api_ticket["id"])

        response = organizer_client.patch(
            f"/api/ticket-types/{api_ticket['id']}", {"quantity": 1}, format="json"
        )
        assert response.status_code == 409
        assert response.json()["error"]["code"] == "CAPACITY_BELOW_SOLD"
        assert orm.TicketType.objects.get(id=api_ticket["id"]).quantity == 2

    def test_patch_to_paid(self, organizer_client, api_ticket):
        response = organizer_client.patch(
            f"/api/ticket-types/{api_ticket['id']}",
            {"is_free": False, "price": "25.00"},
            format="json",
        )
        assert response.status_code == 200
        assert response.json()["price"] == "25.00"

    def test_delete_sold_ticket_type_conflicts(
        self, organizer_client, attendee_client, api_event, api_ticket
    ):
        register(attendee_client, api_event["id"], api_ticket["id"])
        response = organizer_client.delete(f"/api/ticket-types/{api_ticket['id']}")
        assert response.status_code == 409
        assert response.json()["error"]["code"] == "TICKET_TYPE_IN_USE"

    def test_delete_unsold_ticket_type(self, organizer_client, api_ticket):
        response = organizer_client.delete(f"/api/ticket-types/{api_ticket['id']}")
        assert response.status_code == 204


@pytest.mark.django_db
class TestRegistrations:
    """Tests for admission and cancellation endpoints."""

    def test_admission_until_sold_out(self, api_event, api_ticket):
        clients = [as_user(APIClient(), str(uuid.uuid4())) for _ in range(3)]

        assert register(clients[0], api_event["id"], api_ticket["id"]).status_code == 201
        assert register(clients[1], api_event["id"], api_ticket["id"]).status_code == 201
        response = register(clients[2], api_event["id"], api_ticket["id"])

        assert response.status_code == 409
        assert response.json()["error"]["code"] == "SOLD_OUT"
        assert orm.TicketType.objects.get(id=api_ticket["id"]).sold == 2
        assert orm.Registration.objects.filter(event_id=api_event["id"]).count() == 2

    def test_duplicate_registration_conflicts(self, attendee_client, api_event, api_ticket):
        register(attendee_client, api_event["id"], api_ticket["id"])
        response = register(attendee_client, api_event["id"], api_ticket["id"])
        assert response.status_code == 409
        assert response.json()["error"]["code"] == "ALREADY_REGISTERED"

    def test_ticket_type_required_when_event_sells_them(
        self, attendee_client, api_event, api_ticket
    ):
        response = register(attendee_client, api_event["id"])
        assert response.status_code == 400
        assert response.json()["error"]["field"] == "ticket_type_id"

    def test_general_admission(self, attendee_client, api_event):
        response = register(attendee_client, api_event["id"])
        assert response.status_code == 201
        assert response.json()["ticket_type_id"] is None

    def test_cancel_then_cancel_again(self, attendee_client, api_event, api_ticket):
        registration = register(attendee_client, api_event["id"], api_ticket["id"]).json()

        first = attendee_client.delete(f"/api/registrations/{registration['id']}")
        second = attendee_client.delete(f"/api/registrations/{registration['id']}")

        assert first.status_code == 204
        assert second.status_code == 404
        assert second.json()["error"]["code"] == "REGISTRATION_NOT_FOUND"
        assert orm.TicketType.objects.get(id=api_ticket["id"]).sold == 0

    def test_cancel_someone_elses_registration_forbidden(
        self, attendee_client, api_event, api_ticket
    ):
        registration = register(attendee_client, api_event["id"], api_ticket["id"]).json()
        stranger = as_user(APIClient(), str(uuid.uuid4()))
        response = stranger.delete(f"/api/registrations/{registration['id']}")
        assert response.status_code == 403

    def test_attendee_list_for_owner_only(
        self, organizer_client, attendee_client, api_event, api_ticket
    ):
        register(attendee_client, api_event["id"], api_ticket["id"])
        owner_view = organizer_client.get(f"/api/events/{api_event['id']}/registrations")
        attendee_view = attendee_client.get(f"/api/events/{api_event['id']}/registrations")

        assert owner_view.status_code == 200
        assert len(owner_view.json()) == 1
        assert attendee_view.status_code == 403

    def test_my_registrations(self, organizer_client, attendee_client, api_event):
        past = organizer_client.post(
            "/api/events", event_payload(days_ahead=-1, title="Yesterday"), format="json"
        ).json()
        register(attendee_client, api_event["id"])
        register(attendee_client, past["id"])

        body = attendee_client.get("/api/me/registrations").json()
        assert [r["event"]["id"] for r in body["upcoming"]] == [api_event["id"]]
        assert [r["event"]["id"] for r in body["past"]] == [past["id"]]

    def test_store_outage_is_service_unavailable(self, attendee_client, api_event, settings):
        settings.TICKETING_STORE_RETRIES = 0
        with mock.patch.object(
            DjangoTicketingStore, "get_event", side_effect=StoreError("down")
        ):
            response = register(attendee_client, api_event["id"])
        assert response.status_code == 503
        assert response.json()["error"]["code"] == "SERVICE_UNAVAILABLE"


@pytest.mark.django_db
class TestExportAndStats:
    """Tests for CSV export and organizer analytics."""

    def test_csv_export(self, organizer_client, attendee_client, api_event, api_ticket):
        registration = register(attendee_client, api_event["id"], api_ticket["id"]).json()

        response = organizer_client.get(f"/api/events/{api_event['id']}/registrations.csv")
        assert response.status_code == 200
        assert response["Content-Type"].startswith("text/csv")
        lines = response.content.decode().splitlines()
        assert lines[0] == "Registration ID,User ID,Ticket Type,Registered At"
        assert lines[1].startswith(f"{registration['id']},{registration['user_id']},General,")

    def test_csv_export_forbidden_for_attendee(self, attendee_client, api_event):
        response = attendee_client.get(f"/api/events/{api_event['id']}/registrations.csv")
        assert response.status_code == 403

    def test_event_stats(self, organizer_client, attendee_client, api_event, api_ticket):
        register(attendee_client, api_event["id"], api_ticket["id"])
        body = organizer_client.get(f"/api/events/{api_event['id']}/stats").json()
        assert body["registrations"] == 1
        assert body["ticket_types"][0]["sell_through"] == 0.5

    def test_organizer_dashboard(self, organizer_client, attendee_client, api_event, api_ticket):
        register(attendee_client, api_event["id"], api_ticket["id"])

        response = organizer_client.get("/api/organizers/me/stats")
        assert response.status_code == 200
        body = response.json()
        assert body["summary"]["total_events"] == 1
        assert body["summary"]["total_registrations"] == 1
        assert body["tickets"]["total_sold"] == 1
        assert len(body["trend"]) == 7
        assert body["top_events"][0]["event_id"] == api_event["id"]

    def test_dashboard_weekly_window(self, organizer_client, api_event):
        response = organizer_client.get("/api/organizers/me/stats?buckets=14&bucket=weekly")
        assert response.status_code == 200
        assert len(response.json()["trend"]) == 14

    def test_dashboard_rejects_unknown_window(self, organizer_client):
        response = organizer_client.get("/api/organizers/me/stats?buckets=3")
        assert response.status_code == 400
        assert response.json()["error"]["field"] == "buckets"

    def test_dashboard_refreshes_after_registration(
        self, organizer_client, attendee_client, api_event, django_capture_on_commit_callbacks
    ):
        before = organizer_client.get("/api/organizers/me/stats").json()
        with django_capture_on_commit_callbacks(execute=True):
            register(attendee_client, api_event["id"])
        after = organizer_client.get("/api/organizers/me/stats").json()
        assert before["summary"]["total_registrations"] == 0
        assert after["summary"]["total_registrations"] == 1


@pytest.mark.django_db
class TestOrganizerAttendees:
    """Tests for /api/organizers/me/registrations"""

    def test_feed_across_own_events(self, organizer_client, attendee_client, api_event, api_ticket):
        second = organizer_client.post(
            "/api/events", event_payload(days_ahead=30, title="Encore"), format="json"
        ).json()
        first_reg = register(attendee_client, api_event["id"], api_ticket["id"]).json()
        second_reg = register(attendee_client, second["id"]).json()

        response = organizer_client.get("/api/organizers/me/registrations")
        assert response.status_code == 200
        body = response.json()
        assert body["total_attendees"] == 2
        assert body["new_this_week"] == 2
        assert body["unique_events"] == 2
        assert [r["registration"]["id"] for r in body["recent"]] == [
            second_reg["id"],
            first_reg["id"],
        ]
        assert body["recent"][0]["event"]["title"] == "Encore"

    def test_feed_excludes_other_organizers(self, organizer_client, attendee_client, api_event):
        other = attendee_client.post("/api/events", event_payload(), format="json").json()
        register(as_user(APIClient(), str(uuid.uuid4())), other["id"])

        body = organizer_client.get("/api/organizers/me/registrations").json()
        assert body["total_attendees"] == 0
        assert body["recent"] == []

    def test_feed_limit_keeps_totals(self, organizer_client, api_event):
        for _ in range(3):
            register(as_user(APIClient(), str(uuid.uuid4())), api_event["id"])

        body = organizer_client.get("/api/organizers/me/registrations?limit=1").json()
        assert len(body["recent"]) == 1
        assert body["total_attendees"] == 3

    @pytest.mark.parametrize("limit", ["0", "201", "many"])
    def test_feed_rejects_bad_limit(self, organizer_client, limit):
        response = organizer_client.get(f"/api/organizers/me/registrations?limit={limit}")
        assert response.status_code == 400
        assert response.json()["error"]["field"] == "limit"
