"""CSV export of an event's attendee list."""

import csv
from collections.abc import Iterable, Mapping
from typing import TextIO

from ticketing.domain import Registration, TicketTypeId

HEADERS = ["Registration ID", "User ID", "Ticket Type", "Registered At"]


def write_registrations_csv(
    stream: TextIO,
    registrations: Iterable[Registration],
    ticket_type_names: Mapping[TicketTypeId, str],
) -> int:
    """Write one row per registration and return the number of rows written."""
    writer = csv.writer(stream)
    writer.writerow(HEADERS)
    rows = 0
    for registration in registrations:
        if registration.ticket_type_id is None:
            ticket_type = "General admission"
        else:
            ticket_type = ticket_type_names.get(registration.ticket_type_id, "")
        writer.writerow(
            [
                str(registration.id),
                str(registration.user_id),
                ticket_type,
                registration.registered_at.isoformat(),
            ]
        )
        rows += 1
    return rows
