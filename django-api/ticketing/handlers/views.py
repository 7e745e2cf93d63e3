"""HTTP handlers (views) - handle HTTP concerns only.

Handlers:
- Parse requests and validate input format
- Call services for business logic
- Map domain errors to HTTP responses
- Never contain business logic
- Never expose internal error details
"""

import logging

from django.core.cache import cache
from django.http import HttpResponse
from rest_framework import status
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from ticketing.cache import cache_timeout, organizer_dashboard_key, ticket_types_key
from ticketing.domain import Actor, EventId
from ticketing.domain.analytics import Bucket
from ticketing.domain.errors import (
    CapacityError,
    DomainError,
    DuplicateRegistrationError,
    InvalidIdError,
    NotFoundError,
    PermissionDeniedError,
    SoldOutError,
    StoreError,
    TicketTypeInUseError,
    ValidationError,
)
from ticketing.exports import write_registrations_csv
from ticketing.handlers.serializers import (
    EventInputSerializer,
    EventSerializer,
    OrganizerAttendeesSerializer,
    OrganizerDashboardSerializer,
    RegisteredEventSerializer,
    RegistrationInputSerializer,
    RegistrationSerializer,
    TicketTypeInputSerializer,
    TicketTypePatchSerializer,
    TicketTypeSerializer,
    TicketTypeStatsSerializer,
)
from ticketing.services.analytics_service import AnalyticsService
from ticketing.services.common import parse_id
from ticketing.services.event_service import EventService
from ticketing.services.registration_service import RegistrationService
from ticketing.services.ticket_type_service import TicketTypeService
from ticketing.stores.django_store import DjangoTicketingStore
from ticketing.stores.interfaces import TicketingStore

logger = logging.getLogger(__name__)

ERROR_STATUS: list[tuple[type[DomainError], int]] = [
    (ValidationError, status.HTTP_400_BAD_REQUEST),
    (InvalidIdError, status.HTTP_400_BAD_REQUEST),
    (PermissionDeniedError, status.HTTP_403_FORBIDDEN),
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (DuplicateRegistrationError, status.HTTP_409_CONFLICT),
    (SoldOutError, status.HTTP_409_CONFLICT),
    (CapacityError, status.HTTP_409_CONFLICT),
    (TicketTypeInUseError, status.HTTP_409_CONFLICT),
]


def error_response(exc: DomainError) -> Response:
    body = {"code": exc.code.value, "message": exc.message}
    if isinstance(exc, ValidationError):
        body["field"] = exc.field
    for error_type, status_code in ERROR_STATUS:
        if isinstance(exc, error_type):
            return Response({"error": body}, status=status_code)
    return Response({"error": body}, status=status.HTTP_400_BAD_REQUEST)


def invalid_input_response(serializer) -> Response:
    field, messages = next(iter(serializer.errors.items()))
    message = messages[0] if isinstance(messages, list) and messages else "Invalid value"
    return Response(
        {"error": {"code": "VALIDATION_FAILED", "message": str(message), "field": field}},
        status=status.HTTP_400_BAD_REQUEST,
    )


class TicketingAPIView(APIView):
    """Base view: builds services on a store and maps domain errors."""

    store_class: type[TicketingStore] = DjangoTicketingStore
    permission_classes = [IsAuthenticated]

    def get_store(self) -> TicketingStore:
        return self.store_class()

    @property
    def actor(self) -> Actor:
        return self.request.user.actor

    def handle_exception(self, exc):
        if isinstance(exc, DomainError):
            return error_response(exc)
        if isinstance(exc, StoreError):
            logger.error("Store unavailable for %s %s", self.request.method, self.request.path)
            return Response(
                {"error": {"code": "SERVICE_UNAVAILABLE", "message": "Please try again shortly"}},
                status=status.HTTP_503_SERVICE_UNAVAILABLE,
            )
        return super().handle_exception(exc)


class EventListView(TicketingAPIView):
    """Handler for GET/POST /api/events?upcoming=true"""

    def get_permissions(self):
        if self.request.method == "GET":
            return [AllowAny()]
        return super().get_permissions()

    def get(self, request: Request) -> Response:
        upcoming_only = request.query_params.get("upcoming", "").lower() in ("1", "true")
        events = EventService(self.get_store()).list_events(upcoming_only=upcoming_only)
        return Response(EventSerializer(events, many=True).data)

    def post(self, request: Request) -> Response:
        serializer = EventInputSerializer(data=request.data)
        if not serializer.is_valid():
            return invalid_input_response(serializer)
        event = EventService(self.get_store()).create_event(self.actor, serializer.to_draft())
        return Response(EventSerializer(event).data, status=status.HTTP_201_CREATED)


class EventDetailView(TicketingAPIView):
    """Handler for GET/PATCH/DELETE /api/events/{event_id}"""

    def get_permissions(self):
        if self.request.method == "GET":
            return [AllowAny()]
        return super().get_permissions()

    def get(self, request: Request, event_id: str) -> Response:
        event = EventService(self.get_store()).get_event(event_id)
        return Response(EventSerializer(event).data)

    def patch(self, request: Request, event_id: str) -> Response:
        service = EventService(self.get_store())
        current = service.get_event(event_id)
        serializer = EventInputSerializer(
            data={**EventSerializer(current).data, **request.data}
        )
        if not serializer.is_valid():
            return invalid_input_response(serializer)
        event = service.update_event(self.actor, event_id, serializer.to_draft())
        return Response(EventSerializer(event).data)

    def delete(self, request: Request, event_id: str) -> Response:
        EventService(self.get_store()).delete_event(self.actor, event_id)
        return Response(status=status.HTTP_204_NO_CONTENT)


class TicketTypeListView(TicketingAPIView):
    """Handler for GET/POST /api/events/{event_id}/ticket-types"""

    def get_permissions(self):
        if self.request.method == "GET":
            return [AllowAny()]
        return super().get_permissions()

    def get(self, request: Request, event_id: str) -> Response:
        key = ticket_types_key(parse_id(EventId, event_id, "event"))
        data = cache.get(key)
        if data is None:
            ticket_types = TicketTypeService(self.get_store()).list_ticket_types(event_id)
            data = TicketTypeSerializer(ticket_types, many=True).data
            cache.set(key, data, cache_timeout())
        return Response(data)

    def post(self, request: Request, event_id: str) -> Response:
        serializer = TicketTypeInputSerializer(data=request.data)
        if not serializer.is_valid():
            return invalid_input_response(serializer)
        ticket_type = TicketTypeService(self.get_store()).create_ticket_type(
            self.actor, event_id, serializer.to_draft()
        )
        return Response(TicketTypeSerializer(ticket_type).data, status=status.HTTP_201_CREATED)


class TicketTypeDetailView(TicketingAPIView):
    """Handler for PATCH/DELETE /api/ticket-types/{ticket_type_id}"""

    def patch(self, request: Request, ticket_type_id: str) -> Response:
        serializer = TicketTypePatchSerializer(data=request.data)
        if not serializer.is_valid():
            return invalid_input_response(serializer)
        ticket_type = TicketTypeService(self.get_store()).update_ticket_type(
            self.actor, ticket_type_id, serializer.to_patch()
        )
        return Response(TicketTypeSerializer(ticket_type).data)

    def delete(self, request: Request, ticket_type_id: str) -> Response:
        TicketTypeService(self.get_store()).delete_ticket_type(self.actor, ticket_type_id)
        return Response(status=status.HTTP_204_NO_CONTENT)


class EventRegistrationListView(TicketingAPIView):
    """Handler for GET/POST /api/events/{event_id}/registrations"""

    def get(self, request: Request, event_id: str) -> Response:
        registrations = RegistrationService(self.get_store()).list_registrations_for_event(
            self.actor, event_id
        )
        return Response(RegistrationSerializer(registrations, many=True).data)

    def post(self, request: Request, event_id: str) -> Response:
        serializer = RegistrationInputSerializer(data=request.data)
        if not serializer.is_valid():
            return invalid_input_response(serializer)
        registration = RegistrationService(self.get_store()).admit_registration(
            self.actor, event_id, serializer.validated_data["ticket_type_id"]
        )
        return Response(RegistrationSerializer(registration).data, status=status.HTTP_201_CREATED)


class EventRegistrationExportView(TicketingAPIView):
    """Handler for GET /api/events/{event_id}/registrations.csv"""

    def get(self, request: Request, event_id: str) -> HttpResponse:
        store = self.get_store()
        registrations = RegistrationService(store).list_registrations_for_event(
            self.actor, event_id
        )
        names = {t.id: t.name for t in TicketTypeService(store).list_ticket_types(event_id)}
        response = HttpResponse(content_type="text/csv")
        response["Content-Disposition"] = f'attachment; filename="{event_id}-registrations.csv"'
        write_registrations_csv(response, registrations, names)
        return response


class RegistrationDetailView(TicketingAPIView):
    """Handler for DELETE /api/registrations/{registration_id}"""

    def delete(self, request: Request, registration_id: str) -> Response:
        RegistrationService(self.get_store()).cancel_registration(self.actor, registration_id)
        return Response(status=status.HTTP_204_NO_CONTENT)


class MyRegistrationListView(TicketingAPIView):
    """Handler for GET /api/me/registrations"""

    def get(self, request: Request) -> Response:
        result = RegistrationService(self.get_store()).list_registrations_for_user(self.actor)
        return Response(
            {
                "upcoming": RegisteredEventSerializer(result.upcoming, many=True).data,
                "past": RegisteredEventSerializer(result.past, many=True).data,
            }
        )


class EventStatsView(TicketingAPIView):
    """Handler for GET /api/events/{event_id}/stats"""

    def get(self, request: Request, event_id: str) -> Response:
        store = self.get_store()
        event = EventService(store).get_event(event_id)
        if not self.actor.can_manage(event.created_by):
            raise PermissionDeniedError("view stats for this event")
        analytics = AnalyticsService(store)
        return Response(
            {
                "registrations": analytics.registration_count(event_id),
                "ticket_types": TicketTypeStatsSerializer(
                    analytics.ticket_type_stats(event_id), many=True
                ).data,
            }
        )


class OrganizerStatsView(TicketingAPIView):
    """Handler for GET /api/organizers/me/stats?buckets=7&bucket=daily"""

    def get(self, request: Request) -> Response:
        try:
            buckets = int(request.query_params.get("buckets", 7))
            bucket = Bucket(request.query_params.get("bucket", Bucket.DAILY.value))
        except ValueError:
            raise ValidationError("buckets", "Unsupported trend window") from None
        if buckets not in (7, 14):
            raise ValidationError("buckets", "Unsupported trend window")

        # One cache entry per organizer holds every trend variant, so a single
        # delete invalidates all of them.
        key = organizer_dashboard_key(self.actor.user_id)
        variant = f"{bucket.value}:{buckets}"
        cached = cache.get(key) or {}
        data = cached.get(variant)
        if data is None:
            dashboard = AnalyticsService(self.get_store()).organizer_dashboard(
                self.actor, buckets=buckets, bucket=bucket
            )
            data = OrganizerDashboardSerializer(dashboard).data
            cached[variant] = data
            cache.set(key, cached, cache_timeout())
        return Response(data)


class OrganizerEventListView(TicketingAPIView):
    """Handler for GET /api/organizers/me/events"""

    def get(self, request: Request) -> Response:
        events = EventService(self.get_store()).list_events_for_organizer(self.actor)
        return Response(EventSerializer(events, many=True).data)


class OrganizerRegistrationListView(TicketingAPIView):
    """Handler for GET /api/organizers/me/registrations?limit=50"""

    def get(self, request: Request) -> Response:
        try:
            limit = int(request.query_params.get("limit", 50))
        except ValueError:
            raise ValidationError("limit", "Limit must be a number") from None
        if not 1 <= limit <= 200:
            raise ValidationError("limit", "Limit must be between 1 and 200")
        attendees = RegistrationService(self.get_store()).list_organizer_attendees(
            self.actor, limit=limit
        )
        return Response(OrganizerAttendeesSerializer(attendees).data)
