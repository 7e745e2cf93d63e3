from django.urls import path

from ticketing.handlers import (
    EventDetailView,
    EventListView,
    EventRegistrationExportView,
    EventRegistrationListView,
    EventStatsView,
    MyRegistrationListView,
    OrganizerEventListView,
    OrganizerRegistrationListView,
    OrganizerStatsView,
    RegistrationDetailView,
    TicketTypeDetailView,
    TicketTypeListView,
)

urlpatterns = [
    path("events", EventListView.as_view(), name="event-list"),
    path("events/<str:event_id>", EventDetailView.as_view(), name="event-detail"),
    path(
        "events/<str:event_id>/ticket-types",
        TicketTypeListView.as_view(),
        name="ticket-type-list",
    ),
    path(
        "events/<str:event_id>/registrations",
        EventRegistrationListView.as_view(),
        name="event-registration-list",
    ),
    path(
        "events/<str:event_id>/registrations.csv",
        EventRegistrationExportView.as_view(),
        name="event-registration-export",
    ),
    path("events/<str:event_id>/stats", EventStatsView.as_view(), name="event-stats"),
    path(
        "ticket-types/<str:ticket_type_id>",
        TicketTypeDetailView.as_view(),
        name="ticket-type-detail",
    ),
    path(
        "registrations/<str:registration_id>",
        RegistrationDetailView.as_view(),
        name="registration-detail",
    ),
    path("me/registrations", MyRegistrationListView.as_view(), name="my-registrations"),
    path("organizers/me/events", OrganizerEventListView.as_view(), name="organizer-events"),
    path(
        "organizers/me/registrations",
        OrganizerRegistrationListView.as_view(),
        name="organizer-registrations",
    ),
    path("organizers/me/stats", OrganizerStatsView.as_view(), name="organizer-stats"),
]
