from ticketing.handlers.views import (
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

__all__ = [
    "EventDetailView",
    "EventListView",
    "EventRegistrationExportView",
    "EventRegistrationListView",
    "EventStatsView",
    "MyRegistrationListView",
    "OrganizerEventListView",
    "OrganizerRegistrationListView",
    "OrganizerStatsView",
    "RegistrationDetailView",
    "TicketTypeDetailView",
    "TicketTypeListView",
]
